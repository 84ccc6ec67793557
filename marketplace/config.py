# marketplace/config.py
"""Process-wide settings read from the environment (and `.env`)."""
import os
from dataclasses import dataclass
from pathlib import Path
from dotenv import load_dotenv

DEFAULT_FIXTURE_DIR = Path(__file__).resolve().parent / "fixture"


def normalize_database_url(url: str) -> str:
    # SQLAlchemy 2.x doesn't accept 'postgres://'
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+psycopg2://", 1)
    return url


@dataclass(frozen=True)
class Settings:
    database_url: str
    redis_url: str = "redis://localhost:6379/0"
    cache_key_prefix: str = "estate:ids:"
    db_pool_size: int = 5
    db_max_overflow: int = 10
    refill_workers: int = 4
    fixture_dir: Path = DEFAULT_FIXTURE_DIR

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()
        database_url = os.getenv("POSTGRES_URL")
        if not database_url:
            raise RuntimeError("POSTGRES_URL not set")
        return cls(
            database_url=normalize_database_url(database_url),
            redis_url=os.getenv("REDIS_URL", cls.redis_url),
            cache_key_prefix=os.getenv("CACHE_KEY_PREFIX", cls.cache_key_prefix),
            db_pool_size=int(os.getenv("DB_POOL_SIZE", cls.db_pool_size)),
            db_max_overflow=int(os.getenv("DB_MAX_OVERFLOW", cls.db_max_overflow)),
            refill_workers=int(os.getenv("REFILL_WORKERS", cls.refill_workers)),
            fixture_dir=Path(os.getenv("FIXTURE_DIR", str(DEFAULT_FIXTURE_DIR))),
        )
