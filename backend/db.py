# db.py
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine


def make_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create the engine for the session store.

    SQLite is only used locally and in tests; FastAPI runs sync routes in a
    thread pool, so the same-thread check has to go.
    """
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(database_url, echo=echo, connect_args=connect_args)


def init_db(engine: Engine) -> None:
    """
    Called on app startup to create tables if they don't exist.
    """
    # Import models here so SQLModel knows about them
    import models  # noqa: F401

    SQLModel.metadata.create_all(engine)


def ping(engine: Engine) -> None:
    """Round-trip to the database; raises on failure."""
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
