"""Platform base class for applications backed by an SQLAlchemy store."""

from pathlib import Path
from typing import Any, Sequence

from sqlalchemy.engine import Engine

from integration_harness.environment.abstract import Platform
from integration_harness.persistence import dump
from integration_harness.persistence.db import describe_connection, make_engine


class SqlPlatform(Platform):
    """Implements the storage side of ``Platform`` on top of an engine.

    Subclasses supply the application-specific parts: installation,
    migrations, configuration import and account management.
    """

    def __init__(self, database_url: str):
        """Initialize the platform with a database URL.

        Args:
            database_url: SQLAlchemy connection string of the platform store.
        """
        self.database_url = database_url
        self.engine = make_engine(database_url)

    def database_engine(self) -> Engine:
        return self.engine

    def connection_info(self) -> dict[str, Any]:
        return describe_connection(self.engine)

    def load_dump(self, path: Path) -> None:
        dump.load_dump(self.engine, path)

    def dump_database(self, schema_only: Sequence[str], insert_count: int) -> str:
        return dump.dump_database(
            self.engine, schema_only=schema_only, insert_count=insert_count
        )
