from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker


DEFAULT_SQLITE_URL = "sqlite:///./sites/harness/harness.sqlite3"


def make_engine(db_url: str = DEFAULT_SQLITE_URL) -> Engine:
    if db_url.startswith("sqlite:"):
        return create_engine(
            db_url, future=True, connect_args={"check_same_thread": False}
        )
    return create_engine(db_url, future=True)


def make_session_factory(engine: Engine):
    return sessionmaker(
        bind=engine, autoflush=False, autocommit=False, future=True
    )


def describe_connection(engine: Engine) -> dict[str, Any]:
    """Builds the connection descriptor written to the platform settings."""
    url = engine.url
    return {
        "driver": url.drivername,
        "database": url.database,
        "host": url.host,
        "port": url.port,
        "username": url.username,
        "password": url.password,
        "url": url.render_as_string(hide_password=False),
    }
