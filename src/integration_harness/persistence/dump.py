"""Reference database dump codec used for bootstrap snapshots.

A dump is a JSON document holding, per table, the DDL needed to recreate it
and its rows split into insert batches. Tables matching a schema-only pattern
keep their DDL but lose their rows, which keeps volatile data (caches,
sessions, logs) out of the snapshot.

Rows are read and written at the driver level so that column values round
trip exactly as the database stores them.
"""

import base64
import fnmatch
import gzip
import json
from pathlib import Path
from typing import Any, Sequence, Union

from sqlalchemy import MetaData, text
from sqlalchemy.engine import Engine
from sqlalchemy.schema import CreateIndex, CreateTable

from integration_harness.errors import DumpFormatError
from integration_harness.observability.logging import get_logger

logger = get_logger(__name__)

DUMP_FORMAT = "integration-harness-dump"
DUMP_VERSION = 1

VOLATILE_TABLES: tuple[str, ...] = (
    "cache*",
    "sessions",
    "diagnostic_log",
    "scheduled_job_log",
)


def is_schema_only(table_name: str, patterns: Sequence[str]) -> bool:
    """Checks whether a table's rows are excluded from the dump."""
    return any(fnmatch.fnmatchcase(table_name, pattern) for pattern in patterns)


def _encode_value(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return {"$b64": base64.b64encode(bytes(value)).decode("ascii")}
    return value


def _decode_value(value: Any) -> Any:
    if isinstance(value, dict) and "$b64" in value:
        return base64.b64decode(value["$b64"])
    return value


def dump_database(
    engine: Engine,
    *,
    schema_only: Sequence[str] = VOLATILE_TABLES,
    insert_count: int = 1000,
) -> str:
    """Serializes every table of a database.

    Args:
        engine: The database to dump.
        schema_only: Glob patterns of tables whose rows are left out.
        insert_count: Maximum rows per insert batch.

    Returns:
        The dump document as a JSON string.
    """
    if insert_count < 1:
        raise ValueError("insert_count must be at least 1")

    metadata = MetaData()
    metadata.reflect(bind=engine)
    preparer = engine.dialect.identifier_preparer

    tables = []
    with engine.connect() as conn:
        for table in metadata.sorted_tables:
            entry: dict[str, Any] = {
                "name": table.name,
                "ddl": str(CreateTable(table).compile(dialect=engine.dialect)).strip(),
                "indexes": [
                    str(CreateIndex(index).compile(dialect=engine.dialect)).strip()
                    for index in table.indexes
                ],
                "columns": [column.name for column in table.columns],
                "batches": [],
            }
            if not is_schema_only(table.name, schema_only):
                column_list = ", ".join(preparer.quote(c) for c in entry["columns"])
                result = conn.exec_driver_sql(
                    f"SELECT {column_list} FROM {preparer.quote(table.name)}"
                )
                while True:
                    rows = result.fetchmany(insert_count)
                    if not rows:
                        break
                    entry["batches"].append(
                        [[_encode_value(v) for v in row] for row in rows]
                    )
            tables.append(entry)

    logger.info(
        "Database dumped",
        extra={
            "extra_fields": {
                "tables": len(tables),
                "schema_only": [
                    t["name"] for t in tables if is_schema_only(t["name"], schema_only)
                ],
                "insert_count": insert_count,
            }
        },
    )
    return json.dumps(
        {"format": DUMP_FORMAT, "version": DUMP_VERSION, "tables": tables},
        default=str,
    )


def read_dump(path: Union[str, Path]) -> dict[str, Any]:
    """Reads a dump document, transparently decompressing ``.gz`` files."""
    path = Path(path)
    opener = gzip.open if path.suffix == ".gz" else open
    try:
        with opener(path, "rt", encoding="utf-8") as f:
            document = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError, gzip.BadGzipFile) as e:
        raise DumpFormatError(f"Unreadable dump {path}: {e}") from e

    if not isinstance(document, dict) or document.get("format") != DUMP_FORMAT:
        raise DumpFormatError(f"{path} is not an {DUMP_FORMAT} document")
    if document.get("version") != DUMP_VERSION:
        raise DumpFormatError(
            f"Unsupported dump version {document.get('version')!r} in {path}"
        )
    return document


def load_dump(engine: Engine, path: Union[str, Path]) -> list[str]:
    """Recreates the tables and rows of a dump in an empty database.

    Args:
        engine: The target database.
        path: The dump file (optionally gzip-compressed).

    Returns:
        The names of the tables that were created.
    """
    document = read_dump(path)
    preparer = engine.dialect.identifier_preparer

    created = []
    with engine.begin() as conn:
        for table in document["tables"]:
            conn.exec_driver_sql(table["ddl"])
            for index_ddl in table.get("indexes", []):
                conn.exec_driver_sql(index_ddl)

            columns = table["columns"]
            if table["batches"]:
                insert = text(
                    f"INSERT INTO {preparer.quote(table['name'])} "
                    f"({', '.join(preparer.quote(c) for c in columns)}) "
                    f"VALUES ({', '.join(f':p{i}' for i in range(len(columns)))})"
                )
                for batch in table["batches"]:
                    conn.execute(
                        insert,
                        [
                            {f"p{i}": _decode_value(v) for i, v in enumerate(row)}
                            for row in batch
                        ],
                    )
            created.append(table["name"])

    logger.info(
        "Database dump loaded",
        extra={"extra_fields": {"path": str(path), "tables": len(created)}},
    )
    return created
