"""Once-per-process orchestration of the bootstrap pipeline."""

from typing import Optional

from integration_harness.bootstrap.cache import SnapshotCache
from integration_harness.bootstrap.reconciler import EnvironmentReconciler
from integration_harness.config import HarnessConfig
from integration_harness.environment.abstract import HarnessFixture, Platform
from integration_harness.models.enums import InstallSource
from integration_harness.models.snapshot import BootstrapResult
from integration_harness.observability.logging import get_logger

logger = get_logger(__name__)


class BootstrapSession:
    """Stands up the shared environment exactly once.

    Order: profile check, additional settings, snapshot selection and load,
    updates, snapshot generation, suite customization, admin reset.
    """

    def __init__(
        self,
        config: HarnessConfig,
        platform: Platform,
        *,
        cache: Optional[SnapshotCache] = None,
        reconciler: Optional[EnvironmentReconciler] = None,
    ):
        self.config = config
        self.platform = platform
        self.cache = cache or SnapshotCache(config, platform)
        self.reconciler = reconciler or EnvironmentReconciler(config, platform)
        self.result: Optional[BootstrapResult] = None

    def bootstrap(self, fixture: HarnessFixture, profile: str) -> BootstrapResult:
        """Bootstraps on the first call and returns the cached result after.

        Args:
            fixture: The suite supplying the bootstrap callbacks.
            profile: The installation profile the suite runs against.

        Returns:
            A summary of how the environment was stood up.
        """
        if self.result is not None:
            return self.result

        fixture.check_profile(profile)
        self.cache.prepare_settings(fixture)

        descriptor = self.cache.resolve_snapshot_source()
        source, dump_path = self.cache.install(fixture, profile)

        outcome = self.reconciler.apply_updates(fixture)

        snapshot_written = False
        if source is not InstallSource.CACHED:
            snapshot_written = self.cache.persist_snapshot() is not None

        outcome = self.reconciler.finalize(fixture, outcome)

        self.result = BootstrapResult(
            descriptor=descriptor,
            source=source,
            dump_path=dump_path,
            outcome=outcome,
            snapshot_written=snapshot_written,
        )
        logger.info(
            "Environment ready",
            extra={
                "extra_fields": {
                    "source": source.value,
                    "snapshot_written": snapshot_written,
                    "pending_migrations": outcome.pending_migrations,
                    "pending_config_changes": outcome.pending_config_changes,
                }
            },
        )
        return self.result
