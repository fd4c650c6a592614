from typing import Optional

from pydantic import Field

from integration_harness.models.base import ModelBase


class ReconciliationOutcome(ModelBase):
    """Result of bringing a loaded snapshot up to date.

    Attributes:
        update_check_skipped: Whether the update checks were disabled.
        pending_migrations: Whether migrations or post-update tasks were pending.
        pending_config_changes: Whether unprocessed configuration existed.
        import_errors: Errors reported by the configuration import, in order.
        admin_password: The password the administrative account was reset to.
    """

    update_check_skipped: bool = False
    pending_migrations: bool = False
    pending_config_changes: bool = False
    import_errors: list[str] = Field(default_factory=list)
    admin_password: Optional[str] = Field(default=None, repr=False)

    @property
    def is_fatal(self) -> bool:
        return any(error for error in self.import_errors)
