"""Bootstrap snapshot cache.

Decides where the shared environment is loaded from, in order of preference:

1. the fast snapshot for the current revision (``FAST_SNAPSHOT_PATH``),
2. the dump the suite ships with its code base,
3. the platform's own installer.

When a fast snapshot path is configured but missing, the first successful
bootstrap writes it so later runs on the same revision can skip straight to
step 1.
"""

import subprocess
from pathlib import Path
from typing import Callable, Optional

from integration_harness.bootstrap.settings import SettingsFile
from integration_harness.config import HarnessConfig
from integration_harness.environment.abstract import HarnessFixture, Platform
from integration_harness.models.enums import InstallSource
from integration_harness.models.settings import SettingEntry, SettingsWriteResult
from integration_harness.models.snapshot import (
    REVISION_PLACEHOLDER,
    UNKNOWN_REVISION,
    SnapshotDescriptor,
)
from integration_harness.observability.logging import get_logger
from integration_harness.persistence.dump import VOLATILE_TABLES
from integration_harness.utils import atomic_write_text, generate_hash_salt

logger = get_logger(__name__)


def resolve_revision(cwd: Optional[Path] = None) -> str:
    """Returns the short revision of the checked-out code.

    Falls back to ``unknown-hash`` when git is missing, the directory is not
    a repository, or the command fails for any other reason.
    """
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],
            capture_output=True,
            text=True,
            timeout=30,
            cwd=cwd,
            check=True,
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.warning(
            f"Could not resolve revision, using '{UNKNOWN_REVISION}': {e}"
        )
        return UNKNOWN_REVISION
    return result.stdout.strip() or UNKNOWN_REVISION


def describe_snapshot(
    template: Optional[str],
    revision_resolver: Callable[[], str] = resolve_revision,
) -> Optional[SnapshotDescriptor]:
    """Resolves a snapshot path template into a descriptor.

    The revision is only looked up when the template contains the
    placeholder.
    """
    if not template:
        return None

    revision = None
    resolved = template
    if REVISION_PLACEHOLDER in template:
        revision = revision_resolver() or UNKNOWN_REVISION
        resolved = template.replace(REVISION_PLACEHOLDER, revision)

    path = Path(resolved)
    return SnapshotDescriptor(
        template=template, path=path, revision=revision, exists=path.is_file()
    )


class SnapshotCache:
    """Owns the decision of which snapshot bootstraps the environment."""

    def __init__(
        self,
        config: HarnessConfig,
        platform: Platform,
        *,
        settings: Optional[SettingsFile] = None,
        revision_resolver: Callable[[], str] = resolve_revision,
    ):
        self.config = config
        self.platform = platform
        self.settings = settings or SettingsFile(config.settings_file)
        self._revision_resolver = revision_resolver
        self._descriptor: Optional[SnapshotDescriptor] = None
        self._resolved = False

    def resolve_snapshot_source(self) -> Optional[SnapshotDescriptor]:
        """Resolves the fast snapshot location, once per cache instance.

        Returns:
            The descriptor, or None when no fast snapshot path is configured.
        """
        if not self._resolved:
            self._descriptor = self._resolve()
            self._resolved = True
        return self._descriptor

    def _resolve(self) -> Optional[SnapshotDescriptor]:
        descriptor = describe_snapshot(
            self.config.fast_snapshot_path, self._revision_resolver
        )
        if descriptor is None:
            return None

        logger.info(
            "Fast snapshot resolved",
            extra={
                "extra_fields": {
                    "path": str(descriptor.path),
                    "revision": descriptor.revision,
                    "exists": descriptor.exists,
                }
            },
        )
        return descriptor

    def prepare_settings(self, fixture: HarnessFixture) -> Optional[SettingsWriteResult]:
        """Writes the suite's additional settings, if it has any."""
        additional = fixture.get_additional_settings()
        if not additional:
            return None
        result = self.settings.write(additional)
        self.platform.reload_settings(result)
        return result

    def write_install_settings(self, fixture: HarnessFixture) -> SettingsWriteResult:
        """Writes the settings a dump's bootstrap code reads on load.

        The installer normally generates these; when loading a dump it does
        not run, so they are written here instead.
        """
        entries = {
            "settings.hash_salt": SettingEntry(value=generate_hash_salt()),
            "settings.config_sync_directory": SettingEntry(
                value=fixture.get_config_sync_path()
            ),
            "databases.default": SettingEntry(value=self.platform.connection_info()),
        }
        result = self.settings.write(entries)
        self.platform.reload_settings(result)
        return result

    def install(
        self, fixture: HarnessFixture, profile: str
    ) -> tuple[InstallSource, Optional[Path]]:
        """Stands up the environment from the best available source.

        Args:
            fixture: The suite supplying the dump path and settings.
            profile: The installation profile for a from-scratch install.

        Returns:
            The source used and the dump path that was loaded, if any.
        """
        descriptor = self.resolve_snapshot_source()
        if descriptor is not None and descriptor.exists:
            source, dump_path = InstallSource.CACHED, descriptor.path
        else:
            stored_dump = fixture.get_database_dump_path()
            if stored_dump is None:
                logger.info(
                    "No dump available, installing from scratch",
                    extra={"extra_fields": {"profile": profile}},
                )
                self.platform.install_from_scratch(profile)
                return InstallSource.FROM_SCRATCH, None
            source, dump_path = InstallSource.SOURCE_DUMP, Path(stored_dump)

        self.write_install_settings(fixture)
        self.config.temp_files_directory.mkdir(parents=True, exist_ok=True)

        logger.info(
            "Loading dump",
            extra={"extra_fields": {"source": source.value, "path": str(dump_path)}},
        )
        self.platform.load_dump(dump_path)
        return source, dump_path

    def needs_snapshot(self) -> bool:
        descriptor = self.resolve_snapshot_source()
        return descriptor is not None and not descriptor.exists

    def persist_snapshot(self) -> Optional[Path]:
        """Writes the fast snapshot if it was configured but missing.

        Volatile tables are dumped without rows. Only call this once the
        environment has been reconciled successfully.

        Returns:
            The snapshot path if one was written, otherwise None.
        """
        if not self.needs_snapshot():
            return None

        descriptor = self.resolve_snapshot_source()
        contents = self.platform.dump_database(
            schema_only=VOLATILE_TABLES, insert_count=self.config.insert_count
        )
        atomic_write_text(descriptor.path, contents)
        logger.info(
            "Fast snapshot written",
            extra={
                "extra_fields": {
                    "path": str(descriptor.path),
                    "insert_count": self.config.insert_count,
                }
            },
        )
        return descriptor.path
