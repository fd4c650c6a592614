"""Data models for the platform settings handshake.

Settings are written by the harness before a dump is loaded so that the
dump's bootstrap code can read them immediately.
"""

from pathlib import Path
from typing import Any

from pydantic import Field

from integration_harness.models.base import ModelBase, SettingKey


class SettingEntry(ModelBase):
    """A single value to persist into the platform settings.

    Attributes:
        value: The value to write.
        required: Whether a missing value is an error.
    """

    value: Any = None
    required: bool = True


class SettingsWriteResult(ModelBase):
    """The result of one versioned settings write.

    Attributes:
        path: The settings file that was written.
        version: The settings version after the write.
        written: Keys that were written, in order.
        skipped: Optional keys without a value that were left out.
    """

    path: Path
    version: int = Field(..., ge=1)
    written: list[SettingKey] = Field(default_factory=list)
    skipped: list[SettingKey] = Field(default_factory=list)
