"""Screenshot capture for failing browser-driven tests."""

from pathlib import Path

from playwright.sync_api import Page

from integration_harness.config import HarnessConfig
from integration_harness.models.diagnostics import ScreenshotArtifact
from integration_harness.observability.logging import get_logger
from integration_harness.utils import append_line, atomic_write_text

logger = get_logger(__name__)

CAPTURE_VIEWPORT = {"width": 1024, "height": 2048}
DEFAULT_VIEWPORT = {"width": 1024, "height": 768}

COUNTER_FILE = ".counter"
INDEX_FILE = ".htmloutput"


class ScreenshotRecorder:
    """Writes failure screenshots and keeps the run-wide index of them.

    File names are ``<Suite>-ERROR-<counter>-<run_id>.jpg``. The counter is
    persisted next to the screenshots so numbering keeps increasing across
    suites, and every screenshot's URL is appended to the index file.
    """

    def __init__(self, config: HarnessConfig):
        self.config = config
        self.output_directory = Path(config.browser_output_directory)
        self.counter_file = self.output_directory / COUNTER_FILE
        self.index_file = self.output_directory / INDEX_FILE

    def current_counter(self) -> int:
        if not self.counter_file.exists():
            return 1
        raw = self.counter_file.read_text(encoding="utf-8").strip()
        return int(raw) if raw.isdigit() else 1

    def url_for(self, filename: str) -> str:
        return "/".join(
            part for part in (
                self.config.base_url,
                self.config.browser_output_url_path,
                filename,
            ) if part
        )

    def capture(self, page: Page, suite_name: str) -> ScreenshotArtifact:
        """Captures the page at a tall viewport and records it.

        Args:
            page: The browser page the test was driving.
            suite_name: The suite class name, used in the file name.

        Returns:
            The captured artifact.
        """
        counter = self.current_counter()
        filename = f"{suite_name}-ERROR-{counter}-{self.config.run_id}.jpg"
        path = self.output_directory / filename
        self.output_directory.mkdir(parents=True, exist_ok=True)

        page.set_viewport_size(CAPTURE_VIEWPORT)
        try:
            page.screenshot(path=str(path), type="jpeg")
        finally:
            page.set_viewport_size(DEFAULT_VIEWPORT)

        atomic_write_text(self.counter_file, str(counter + 1))
        url = self.url_for(filename)
        append_line(self.index_file, url)

        logger.info(
            "Failure screenshot captured",
            extra={"extra_fields": {"suite": suite_name, "path": str(path), "url": url}},
        )
        return ScreenshotArtifact(path=path, url=url, counter=counter)
