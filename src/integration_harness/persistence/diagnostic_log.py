"""Read-only access to the platform's diagnostic log."""

from sqlalchemy import func, or_, select
from sqlalchemy.engine import Engine

from integration_harness.models.diagnostics import LogRow
from integration_harness.models.enums import Severity
from integration_harness.persistence.db import make_session_factory
from integration_harness.persistence.models import DiagnosticLogEntry


RUNTIME_ERROR_CHANNEL = "runtime"


class DiagnosticLogQuery:
    """Selects the diagnostic log rows that may indicate a regression.

    A row qualifies when it is more severe than a warning, or when it was
    logged on the runtime-error channel regardless of severity. Rows are
    grouped by message and variables so a repeated message is reported once.
    """

    def __init__(
        self,
        engine: Engine,
        *,
        severity_threshold: int = Severity.WARNING,
        runtime_channel: str = RUNTIME_ERROR_CHANNEL,
    ):
        self.engine = engine
        self.SessionLocal = make_session_factory(engine)
        self.severity_threshold = int(severity_threshold)
        self.runtime_channel = runtime_channel

    def _statement(self):
        entry = DiagnosticLogEntry
        return (
            select(
                entry.message,
                entry.variables,
                func.min(entry.severity).label("severity"),
                func.min(entry.type).label("type"),
            )
            .where(
                or_(
                    entry.severity < self.severity_threshold,
                    entry.type == self.runtime_channel,
                )
            )
            .group_by(entry.message, entry.variables)
            .order_by(func.min(entry.id))
        )

    def count(self) -> int:
        with self.SessionLocal() as session:
            stmt = select(func.count()).select_from(self._statement().subquery())
            return session.execute(stmt).scalar_one()

    def fetch(self) -> list[LogRow]:
        with self.SessionLocal() as session:
            rows = session.execute(self._statement()).all()
            return [
                LogRow(
                    message=row.message,
                    variables=row.variables,
                    severity=row.severity,
                    type=row.type,
                )
                for row in rows
            ]
