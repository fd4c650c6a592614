"""SQLAlchemy models for the platform tables the harness reads.

The harness never owns the platform schema; it only maps the diagnostic log
so that it can be queried, and so that tests can create it.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class DiagnosticLogEntry(Base):
    """Represents one row of the platform's structured diagnostic log.

    Attributes:
        id: Auto-incrementing row identifier.
        type: The channel that logged the message (e.g. 'runtime', 'cron').
        message: The message template, possibly containing placeholders.
        variables: JSON-serialized placeholder values, or NULL.
        severity: RFC 5424 severity (0 = emergency, 7 = debug).
        location: The URL or command that was being served.
        timestamp: When the row was written.
    """

    __tablename__ = "diagnostic_log"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    type: Mapped[str] = mapped_column(String(64), index=True)
    message: Mapped[str] = mapped_column(Text)
    variables: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    severity: Mapped[int] = mapped_column(Integer, index=True)
    location: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    timestamp: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
