# marketplace/db.py
"""Database engine and session utilities.

The engine and session factory are built once by `create_app()` and kept on
`app.state`; request handlers get a session through the `get_db` dependency.
"""
from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

from .geometry import sqlite_polygon_contains

Base = declarative_base()


def make_engine(url: str, pool_size: int = 5, max_overflow: int = 10) -> Engine:
    if url.startswith("sqlite"):
        # an in-memory database must be one connection shared by all threads
        in_memory = url in ("sqlite://", "sqlite:///:memory:")
        engine = create_engine(
            url,
            connect_args={"check_same_thread": False, "timeout": 30},
            poolclass=StaticPool if in_memory else None,
        )
        configure_sqlite(engine, lock_on_begin=not in_memory)
        return engine
    # tuned pool settings for cloud DB
    return create_engine(
        url,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_pre_ping=True
    )


def configure_sqlite(engine: Engine, lock_on_begin: bool = False) -> None:
    """Register `polygon_contains` on every new SQLite connection.

    With `lock_on_begin` each transaction starts with BEGIN IMMEDIATE, which
    is the closest SQLite gets to SELECT ... FOR UPDATE: writers queue on the
    database lock instead of failing on upgrade.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, _record):
        dbapi_connection.create_function("polygon_contains", 3, sqlite_polygon_contains, deterministic=True)
        if lock_on_begin:
            dbapi_connection.isolation_level = None

    if lock_on_begin:
        @event.listens_for(engine, "begin")
        def _on_begin(conn):
            conn.exec_driver_sql("BEGIN IMMEDIATE")


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


def get_db(request: Request):
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
