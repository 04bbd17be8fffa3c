import os

import psycopg2

from restobook.core.config import Settings

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
SCHEMA_PATH = os.path.join(BASE_DIR, "schema.sql")


def run_migration():
    settings = Settings.from_env()
    conn = psycopg2.connect(
        host=settings.db_host,
        port=settings.db_port,
        dbname=settings.db_name,
        user=settings.db_user,
        password=settings.db_password,
    )
    conn.autocommit = True
    with conn.cursor() as cur:
        with open(SCHEMA_PATH, "r", encoding="utf-8") as schema_file:
            cur.execute(schema_file.read())
    conn.close()
    print("Schema applied.")


if __name__ == "__main__":
    run_migration()
