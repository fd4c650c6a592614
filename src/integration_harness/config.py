"""Process-wide harness configuration.

All environment switches are read once, here, and the resulting
``HarnessConfig`` is passed to every component so that behaviour cannot
change halfway through a run.
"""

import os
import uuid
from pathlib import Path
from typing import Mapping, Optional

from pydantic import BaseModel, Field


DEFAULT_TEST_FILTER = ".*"
LOCAL_INSERT_COUNT = 1000
CI_INSERT_COUNT = 100000

_TRUTHY = {"1", "true", "yes", "on"}


def env_flag(environ: Mapping[str, str], name: str) -> bool:
    """Interprets an environment variable as a boolean switch."""
    return environ.get(name, "").strip().lower() in _TRUTHY


class HarnessConfig(BaseModel):
    """Configuration resolved once at process start.

    Attributes:
        fast_snapshot_path: Path template for the cached snapshot; may contain
            the revision placeholder.
        skip_update_check: Skip migration and configuration checks.
        ci: Running under continuous integration.
        test_filter: Regex selecting which combined tests run.
        site_directory: Where the platform settings file lives.
        temp_files_directory: Scratch directory the dump expects to exist.
        browser_output_directory: Where failure screenshots are written.
        base_url: Public base URL used to build screenshot links.
        browser_output_url_path: URL path under which screenshots are served.
        run_id: Identifier shared by every artifact of this process.
    """

    fast_snapshot_path: Optional[str] = None
    skip_update_check: bool = False
    ci: bool = False
    test_filter: str = DEFAULT_TEST_FILTER
    site_directory: Path = Path("./sites/harness")
    temp_files_directory: Path = Path("./sites/harness/files/tmp")
    browser_output_directory: Path = Path("./sites/harness/browser_output")
    base_url: str = "http://localhost"
    browser_output_url_path: str = "sites/harness/browser_output"
    run_id: str = Field(default_factory=lambda: uuid.uuid4().hex[:8])

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "HarnessConfig":
        """Builds the configuration from environment variables.

        Args:
            environ: Mapping to read from. Defaults to ``os.environ``.

        Returns:
            A fully resolved HarnessConfig.
        """
        env = os.environ if environ is None else environ
        site_directory = Path(env.get("HARNESS_SITE_DIR", "./sites/harness"))

        values = {
            "fast_snapshot_path": env.get("FAST_SNAPSHOT_PATH") or None,
            "skip_update_check": env_flag(env, "SKIP_UPDATE_CHECK"),
            "ci": env_flag(env, "CI"),
            "test_filter": env.get("TEST_FILTER") or DEFAULT_TEST_FILTER,
            "site_directory": site_directory,
            "temp_files_directory": Path(
                env.get("HARNESS_TEMP_DIR", site_directory / "files" / "tmp")
            ),
            "browser_output_directory": Path(
                env.get(
                    "HARNESS_BROWSER_OUTPUT_DIR", site_directory / "browser_output"
                )
            ),
            "base_url": env.get("HARNESS_BASE_URL", "http://localhost").rstrip("/"),
            "browser_output_url_path": env.get(
                "HARNESS_BROWSER_OUTPUT_URL_PATH", "sites/harness/browser_output"
            ).strip("/"),
        }
        if env.get("HARNESS_RUN_ID"):
            values["run_id"] = env["HARNESS_RUN_ID"]
        return cls(**values)

    @property
    def insert_count(self) -> int:
        """Rows per insert batch when writing a snapshot dump."""
        return CI_INSERT_COUNT if self.ci else LOCAL_INSERT_COUNT

    @property
    def settings_file(self) -> Path:
        return self.site_directory / "settings.harness.yml"
