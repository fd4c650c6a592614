"""CLI tool for inspecting and maintaining the integration harness."""

import os
from pathlib import Path
from typing import Optional

import typer
from sqlalchemy.exc import SQLAlchemyError
from typing_extensions import Annotated

from integration_harness.bootstrap.cache import describe_snapshot
from integration_harness.config import HarnessConfig
from integration_harness.diagnostics.collector import DiagnosticCollector
from integration_harness.observability.logging import setup_logging
from integration_harness.persistence.db import make_engine
from integration_harness.persistence.dump import VOLATILE_TABLES, dump_database
from integration_harness.utils import atomic_write_text


app = typer.Typer(help="Integration harness management CLI")
snapshot_app = typer.Typer(help="Inspect and build bootstrap snapshots")
diagnostics_app = typer.Typer(help="Inspect the platform diagnostic log")

app.add_typer(snapshot_app, name="snapshot")
app.add_typer(diagnostics_app, name="diagnostics")


def get_config() -> HarnessConfig:
    return HarnessConfig.from_env()


def get_db_url(db_url: Optional[str]) -> str:
    url = db_url or os.environ.get("DATABASE_URL")
    if not url:
        typer.echo("Error: pass --db-url or set DATABASE_URL", err=True)
        raise typer.Exit(code=2)
    return url


@app.callback()
def main(
    log_level: Annotated[
        Optional[str], typer.Option(help="Log level (defaults to HARNESS_LOG_LEVEL)")
    ] = None,
):
    """Integration harness management CLI."""
    setup_logging(log_level)


@snapshot_app.command("path")
def snapshot_path():
    """Prints the fast snapshot path for the current revision."""
    descriptor = describe_snapshot(get_config().fast_snapshot_path)
    if descriptor is None:
        typer.echo("FAST_SNAPSHOT_PATH is not set.")
        return

    status = "present" if descriptor.exists else "missing"
    typer.echo(f"{descriptor.path} ({status})")


@snapshot_app.command("dump")
def snapshot_dump(
    output: Annotated[Path, typer.Option(help="Where to write the snapshot")],
    db_url: Annotated[
        Optional[str], typer.Option(help="Database URL (defaults to DATABASE_URL)")
    ] = None,
    schema_only: Annotated[
        Optional[list[str]],
        typer.Option(help="Table pattern to dump without rows; repeatable"),
    ] = None,
):
    """Writes a snapshot of a database with volatile tables emptied."""
    config = get_config()
    url = get_db_url(db_url)
    try:
        contents = dump_database(
            make_engine(url),
            schema_only=tuple(schema_only) if schema_only else VOLATILE_TABLES,
            insert_count=config.insert_count,
        )
    except SQLAlchemyError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    atomic_write_text(output, contents)
    typer.echo(f"Snapshot written: {output}")


@diagnostics_app.command("scan")
def diagnostics_scan(
    db_url: Annotated[
        Optional[str], typer.Option(help="Database URL (defaults to DATABASE_URL)")
    ] = None,
    ignore: Annotated[
        Optional[list[str]],
        typer.Option(help="Message prefix to ignore; repeatable"),
    ] = None,
):
    """Lists diagnostic log entries that would fail a test."""
    collector = DiagnosticCollector(get_config(), make_engine(get_db_url(db_url)))
    try:
        findings = collector.scan(ignore or [])
    except SQLAlchemyError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    if not findings:
        typer.echo("No findings.")
        return

    for finding in findings:
        typer.echo(str(finding))
    typer.echo(f"{len(findings)} finding(s).", err=True)
    raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
