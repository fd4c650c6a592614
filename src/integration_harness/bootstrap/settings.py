"""Versioned settings file shared with the platform under test.

The file is YAML::

    version: 2
    settings:
      settings.hash_salt: {value: ..., required: true}
      databases.default: {value: {...}, required: true}

Each write merges into what is already there and bumps ``version``, so the
platform can tell whether it has seen the latest values.
"""

from pathlib import Path
from typing import Any, Mapping

import yaml

from integration_harness.errors import SettingsError
from integration_harness.models.settings import SettingEntry, SettingsWriteResult
from integration_harness.observability.logging import get_logger
from integration_harness.utils import atomic_write_text

logger = get_logger(__name__)


class SettingsFile:
    """Reads and writes the harness-managed platform settings."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {"version": 0, "settings": {}}
        with self.path.open("r", encoding="utf-8") as f:
            document = yaml.safe_load(f) or {}
        document.setdefault("version", 0)
        document.setdefault("settings", {})
        return document

    def values(self) -> dict[str, Any]:
        """Returns the current value of every key."""
        return {
            key: entry.get("value")
            for key, entry in self.read()["settings"].items()
        }

    def write(self, entries: Mapping[str, SettingEntry]) -> SettingsWriteResult:
        """Merges entries into the settings file.

        Args:
            entries: Settings keyed by dotted path.

        Returns:
            What was written and the new version.

        Raises:
            SettingsError: If a required entry has no value.
        """
        missing = [
            key for key, entry in entries.items()
            if entry.required and entry.value is None
        ]
        if missing:
            raise SettingsError(
                f"Required settings have no value: {', '.join(missing)}"
            )

        document = self.read()
        written, skipped = [], []
        for key, entry in entries.items():
            if entry.value is None:
                skipped.append(key)
                continue
            document["settings"][key] = entry.model_dump(mode="json")
            written.append(key)

        document["version"] = int(document["version"]) + 1
        atomic_write_text(
            self.path, yaml.safe_dump(document, sort_keys=True, default_flow_style=False)
        )

        logger.info(
            "Settings written",
            extra={
                "extra_fields": {
                    "path": str(self.path),
                    "version": document["version"],
                    "keys": written,
                }
            },
        )
        return SettingsWriteResult(
            path=self.path,
            version=document["version"],
            written=written,
            skipped=skipped,
        )
