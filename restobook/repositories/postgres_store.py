import logging
from typing import List, Optional

import psycopg2.extras

from restobook.core.config import Settings
from restobook.core.db import get_connection
from restobook.core.errors import StoreError
from restobook.repositories.store import KeyValueStore

logger = logging.getLogger(__name__)


class PostgresStore(KeyValueStore):
    """Collection stored as rows of ``kv_entries`` (see scripts/schema.sql)."""

    def __init__(self, settings: Settings, collection_id: int, max_key_size: int, max_value_size: int):
        super().__init__(collection_id, max_key_size, max_value_size)
        self.settings = settings
        self._register_collection()

    def _register_collection(self) -> None:
        conn = get_connection(self.settings)
        with conn.cursor() as cur:
            cur.execute(
                """
                INSERT INTO kv_collections (id, max_key_size, max_value_size)
                VALUES (%s, %s, %s)
                ON CONFLICT (id) DO NOTHING
                """,
                (self.collection_id, self.max_key_size, self.max_value_size),
            )
            cur.execute(
                "SELECT max_key_size, max_value_size FROM kv_collections WHERE id = %s",
                (self.collection_id,),
            )
            row = cur.fetchone()
        conn.close()
        if row["max_key_size"] != self.max_key_size or row["max_value_size"] != self.max_value_size:
            raise StoreError(
                f"Collection {self.collection_id} was created with bounds "
                f"({row['max_key_size']}, {row['max_value_size']}) and cannot be reopened with "
                f"({self.max_key_size}, {self.max_value_size})."
            )
        logger.info(f"Opened collection {self.collection_id} on {self.settings.db_host}:{self.settings.db_port}")

    def get(self, key: str) -> Optional[dict]:
        conn = get_connection(self.settings)
        with conn.cursor() as cur:
            cur.execute(
                "SELECT value FROM kv_entries WHERE collection_id = %s AND key = %s",
                (self.collection_id, key),
            )
            row = cur.fetchone()
        conn.close()
        return row["value"] if row else None

    def put(self, key: str, value: dict) -> Optional[dict]:
        self.check_bounds(key, value)
        conn = get_connection(self.settings)
        with conn.cursor() as cur:
            cur.execute(
                "SELECT value FROM kv_entries WHERE collection_id = %s AND key = %s",
                (self.collection_id, key),
            )
            previous = cur.fetchone()
            cur.execute(
                """
                INSERT INTO kv_entries (collection_id, key, value)
                VALUES (%s, %s, %s)
                ON CONFLICT (collection_id, key) DO UPDATE SET value = EXCLUDED.value
                """,
                (self.collection_id, key, psycopg2.extras.Json(value)),
            )
        conn.close()
        return previous["value"] if previous else None

    def remove(self, key: str) -> Optional[dict]:
        conn = get_connection(self.settings)
        with conn.cursor() as cur:
            cur.execute(
                "DELETE FROM kv_entries WHERE collection_id = %s AND key = %s RETURNING value",
                (self.collection_id, key),
            )
            row = cur.fetchone()
        conn.close()
        return row["value"] if row else None

    def values(self) -> List[dict]:
        conn = get_connection(self.settings)
        with conn.cursor() as cur:
            cur.execute(
                "SELECT value FROM kv_entries WHERE collection_id = %s ORDER BY key",
                (self.collection_id,),
            )
            rows = cur.fetchall()
        conn.close()
        return [row["value"] for row in rows]
