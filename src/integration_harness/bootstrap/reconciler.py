"""Environment reconciliation.

Brings a freshly loaded snapshot up to the code base's expectations by
running pending migrations and importing pending configuration.
"""

from integration_harness.config import HarnessConfig
from integration_harness.environment.abstract import HarnessFixture, Platform
from integration_harness.errors import ConfigurationImportError
from integration_harness.models.reconciliation import ReconciliationOutcome
from integration_harness.observability.logging import get_logger
from integration_harness.utils import generate_password

logger = get_logger(__name__)


class EnvironmentReconciler:
    """Owns every mutation of environment state after the snapshot loads.

    The work is split into ``apply_updates`` and ``finalize`` so that a
    caller can persist a snapshot of the updated-but-not-yet-customized
    environment in between. ``reconcile`` runs both.
    """

    def __init__(self, config: HarnessConfig, platform: Platform):
        self.config = config
        self.platform = platform

    def apply_updates(self, fixture: HarnessFixture) -> ReconciliationOutcome:
        """Runs pending migrations and configuration imports.

        Args:
            fixture: The suite supplying the pre-reconcile and post-migration hooks.

        Returns:
            What was pending and what the import reported.

        Raises:
            ConfigurationImportError: If the configuration import reported errors.
        """
        fixture.pre_reconcile(self.platform)

        if self.config.skip_update_check:
            logger.info("Update check skipped")
            return ReconciliationOutcome(update_check_skipped=True)

        outcome = ReconciliationOutcome()

        pending = self.platform.pending_updates()
        pending_post = self.platform.pending_post_updates()
        if pending or pending_post:
            outcome.pending_migrations = True
            logger.info(
                "Running pending updates",
                extra={
                    "extra_fields": {
                        "updates": pending,
                        "post_updates": pending_post,
                    }
                },
            )
            self.platform.run_updates(clear_cache=False)
            self.platform.rebuild_caches()

        if self.platform.has_unprocessed_config_changes():
            outcome.pending_config_changes = True
            logger.info("Importing configuration changes")
            outcome.import_errors = list(self.platform.import_config())
            if outcome.is_fatal:
                logger.error(
                    "Configuration import failed",
                    extra={"extra_fields": {"errors": outcome.import_errors}},
                )
                raise ConfigurationImportError(outcome.import_errors, outcome)
            self.platform.rebuild_caches()
            fixture.post_migration_step(self.platform)

        return outcome

    def finalize(
        self, fixture: HarnessFixture, outcome: ReconciliationOutcome
    ) -> ReconciliationOutcome:
        """Applies suite customizations and resets the admin credentials."""
        fixture.post_reconcile(self.platform)

        password = generate_password()
        self.platform.reset_admin_password(password)
        outcome.admin_password = password
        return outcome

    def reconcile(self, fixture: HarnessFixture) -> ReconciliationOutcome:
        return self.finalize(fixture, self.apply_updates(fixture))
