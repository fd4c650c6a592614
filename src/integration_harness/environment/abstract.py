"""Abstract contracts between the harness and its collaborators.

``Platform`` is the application under test as the harness sees it: an
installer, a dump loader, a migration runner and a configuration importer.
``HarnessFixture`` is the set of callbacks a concrete test suite supplies to
tailor the bootstrap to its site.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional, Sequence

from sqlalchemy.engine import Engine

from integration_harness.models.settings import SettingEntry, SettingsWriteResult


class Platform(ABC):
    """Interface to the application platform under test."""

    @abstractmethod
    def install_from_scratch(self, profile: str) -> None:
        """Runs the platform's own installer for the given profile.

        Args:
            profile: The installation profile to install.
        """
        pass  # pragma: no cover

    @abstractmethod
    def connection_info(self) -> dict[str, Any]:
        """Describes the active database connection.

        Returns:
            A mapping suitable for the platform's database settings.
        """
        pass  # pragma: no cover

    @abstractmethod
    def reload_settings(self, result: SettingsWriteResult) -> None:
        """Makes freshly written settings visible to the running platform.

        Args:
            result: The settings write that just happened.
        """
        pass  # pragma: no cover

    @abstractmethod
    def load_dump(self, path: Path) -> None:
        """Loads a database dump into the empty store.

        Args:
            path: The dump file; may be gzip-compressed.
        """
        pass  # pragma: no cover

    @abstractmethod
    def dump_database(self, schema_only: Sequence[str], insert_count: int) -> str:
        """Serializes the current store.

        Args:
            schema_only: Table patterns to dump without rows.
            insert_count: Rows per insert batch.

        Returns:
            The dump contents.
        """
        pass  # pragma: no cover

    @abstractmethod
    def pending_updates(self) -> list[str]:
        """Lists schema and data migrations that have not run yet."""
        pass  # pragma: no cover

    @abstractmethod
    def pending_post_updates(self) -> list[str]:
        """Lists structured post-update tasks that have not run yet."""
        pass  # pragma: no cover

    @abstractmethod
    def run_updates(self, *, clear_cache: bool = True) -> None:
        """Runs every pending migration non-interactively.

        Args:
            clear_cache: Whether the runner clears caches when done.
        """
        pass  # pragma: no cover

    @abstractmethod
    def rebuild_caches(self) -> None:
        """Forces a full rebuild of the platform's internal caches."""
        pass  # pragma: no cover

    @abstractmethod
    def has_unprocessed_config_changes(self) -> bool:
        """Checks whether the sync directory differs from active configuration."""
        pass  # pragma: no cover

    @abstractmethod
    def import_config(self) -> list[str]:
        """Imports the configuration from the sync directory.

        Returns:
            The errors reported by the import; empty on success.
        """
        pass  # pragma: no cover

    @abstractmethod
    def reset_admin_password(self, password: str) -> None:
        """Sets the administrative account's password.

        Args:
            password: The new plain-text password.
        """
        pass  # pragma: no cover

    @abstractmethod
    def database_engine(self) -> Engine:
        """Returns an engine bound to the platform's store."""
        pass  # pragma: no cover


class HarnessFixture(ABC):
    """Callbacks a concrete suite implements to drive the bootstrap."""

    @abstractmethod
    def check_profile(self, profile: str) -> None:
        """Checks that the profile is the one this suite expects.

        Raises:
            RuntimeError: If the profile is not the expected profile.
        """
        pass  # pragma: no cover

    @abstractmethod
    def get_config_sync_path(self) -> str:
        """Returns the configuration sync directory to write to the settings."""
        pass  # pragma: no cover

    @abstractmethod
    def get_database_dump_path(self) -> Optional[str]:
        """Returns the dump stored alongside the code base.

        Returns:
            The dump path, or None to fall back to a from-scratch install.
        """
        pass  # pragma: no cover

    @abstractmethod
    def get_additional_settings(self) -> dict[str, SettingEntry]:
        """Returns extra settings written before the platform boots.

        Keys are dotted paths into the settings document, for example
        ``settings.encrypted_file_path``.
        """
        pass  # pragma: no cover

    @abstractmethod
    def pre_reconcile(self, platform: Platform) -> None:
        """Runs before update detection, e.g. to create what updates need."""
        pass  # pragma: no cover

    @abstractmethod
    def post_reconcile(self, platform: Platform) -> None:
        """Runs after updates and configuration import, e.g. to set config."""
        pass  # pragma: no cover

    @abstractmethod
    def post_migration_step(self, platform: Platform) -> None:
        """Runs deployment follow-ups after a configuration import."""
        pass  # pragma: no cover

    @abstractmethod
    def get_ignored_prefixes(self) -> list[str]:
        """Returns diagnostic log message prefixes that are not failures.

        Each entry is matched literally against the start of a rendered
        message; regex metacharacters carry no special meaning.
        """
        pass  # pragma: no cover
