import os
from dataclasses import dataclass

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
ENV_PATH = os.path.join(os.path.dirname(BASE_DIR), ".env")


def load_env(path: str = ENV_PATH) -> None:
    """Load key=value pairs from a .env file into os.environ if not already set."""
    if not os.path.exists(path):
        return
    with open(path, "r", encoding="utf-8") as file:
        for line in file:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, value = line.split("=", 1)
            os.environ.setdefault(key.strip(), value.strip())


@dataclass
class Settings:
    store_backend: str = "memory"
    db_host: str = "localhost"
    db_port: int = 5432
    db_name: str = "restobook"
    db_user: str = "postgres"
    db_password: str = "postgres"
    restaurants_collection_id: int = 0
    reservations_collection_id: int = 1
    store_max_key_size: int = 44
    store_max_value_size: int = 1024
    server_port: int = 8000
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        load_env()
        return cls(
            store_backend=os.environ.get("STORE_BACKEND", "memory").lower(),
            db_host=os.environ.get("DB_HOST", "localhost"),
            db_port=int(os.environ.get("DB_PORT", "5432")),
            db_name=os.environ.get("DB_NAME", "restobook"),
            db_user=os.environ.get("DB_USER", "postgres"),
            db_password=os.environ.get("DB_PASSWORD", "postgres"),
            restaurants_collection_id=int(os.environ.get("RESTAURANTS_COLLECTION_ID", "0")),
            reservations_collection_id=int(os.environ.get("RESERVATIONS_COLLECTION_ID", "1")),
            store_max_key_size=int(os.environ.get("STORE_MAX_KEY_SIZE", "44")),
            store_max_value_size=int(os.environ.get("STORE_MAX_VALUE_SIZE", "1024")),
            server_port=int(os.environ.get("SERVER_PORT", "8000")),
            log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        )
