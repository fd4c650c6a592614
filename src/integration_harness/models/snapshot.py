"""Data models describing bootstrap snapshots and bootstrap results.

This module defines the schema for the cached bootstrap artifact and for the
summary produced once the environment has been stood up.
"""

from pathlib import Path
from typing import Optional

from pydantic import Field

from integration_harness.models.base import ModelBase
from integration_harness.models.enums import InstallSource
from integration_harness.models.reconciliation import ReconciliationOutcome


REVISION_PLACEHOLDER = "COMMIT-HASH"
UNKNOWN_REVISION = "unknown-hash"


class SnapshotDescriptor(ModelBase):
    """Represents the fast bootstrap snapshot for the current process.

    Attributes:
        template: The raw path template the location was derived from.
        path: The resolved snapshot location.
        revision: The revision substituted into the template, if any.
        exists: Whether the snapshot file existed when it was resolved.
    """

    template: str = Field(
        ..., description="The raw path template the location was derived from."
    )
    path: Path = Field(..., description="The resolved snapshot location.")
    revision: Optional[str] = Field(
        default=None,
        description="The revision substituted into the template, if any.",
    )
    exists: bool = Field(
        default=False,
        description="Whether the snapshot file existed when it was resolved.",
    )

    @property
    def revision_resolved(self) -> bool:
        return self.revision is not None and self.revision != UNKNOWN_REVISION


class BootstrapResult(ModelBase):
    """The outcome of standing up the shared environment.

    Attributes:
        descriptor: The fast snapshot descriptor, if one was configured.
        source: Where the environment was loaded from.
        dump_path: The dump file that was loaded, if any.
        outcome: The reconciliation outcome.
        snapshot_written: Whether a new fast snapshot was generated.
    """

    descriptor: Optional[SnapshotDescriptor] = None
    source: InstallSource
    dump_path: Optional[Path] = None
    outcome: ReconciliationOutcome
    snapshot_written: bool = False
