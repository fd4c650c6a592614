"""Post-test diagnostic collection.

Runs after every test, whatever its outcome. A failing browser test gets a
screenshot first; then the diagnostic log is scanned and any row not covered
by the suite's ignore prefixes fails the test.
"""

from typing import Optional, Sequence

from playwright.sync_api import Page
from sqlalchemy.engine import Engine

from integration_harness.config import HarnessConfig
from integration_harness.diagnostics.formatter import format_row
from integration_harness.diagnostics.ignore import IgnorePatternMatcher
from integration_harness.diagnostics.screenshots import ScreenshotRecorder
from integration_harness.environment.abstract import HarnessFixture
from integration_harness.errors import DiagnosticFindingsError
from integration_harness.models.diagnostics import LogFinding, ScreenshotArtifact
from integration_harness.models.enums import TestStatus
from integration_harness.observability.logging import get_logger
from integration_harness.persistence.diagnostic_log import DiagnosticLogQuery

logger = get_logger(__name__)


class DiagnosticCollector:
    """Turns diagnostic log entries and browser failures into evidence."""

    def __init__(
        self,
        config: HarnessConfig,
        engine: Engine,
        *,
        query: Optional[DiagnosticLogQuery] = None,
        screenshots: Optional[ScreenshotRecorder] = None,
    ):
        self.config = config
        self.query = query or DiagnosticLogQuery(engine)
        self.screenshots = screenshots or ScreenshotRecorder(config)

    def capture_failure(
        self, suite_name: str, status: TestStatus, page: Optional[Page]
    ) -> Optional[ScreenshotArtifact]:
        """Captures a screenshot for a failed browser-driven test."""
        if page is None or not status.captures_evidence:
            return None
        return self.screenshots.capture(page, suite_name)

    def scan(self, ignored_prefixes: Sequence[str]) -> list[LogFinding]:
        """Returns every qualifying log row that no ignore prefix covers."""
        if not self.query.count():
            return []

        matcher = IgnorePatternMatcher(ignored_prefixes)
        findings = []
        for row in self.query.fetch():
            message = format_row(row)
            if matcher.matches(message):
                continue
            findings.append(
                LogFinding(message=message, severity=row.severity, type=row.type)
            )
        return findings

    def collect(
        self,
        suite: HarnessFixture,
        status: TestStatus,
        page: Optional[Page] = None,
    ) -> Optional[ScreenshotArtifact]:
        """Runs the full post-test check for one test method.

        Args:
            suite: The suite instance that just ran a test.
            status: The recorded outcome of that test.
            page: The browser page, when the suite is browser-driven.

        Returns:
            The screenshot captured for a failure, if any.

        Raises:
            DiagnosticFindingsError: If unsuppressed log entries exist.
        """
        suite_name = type(suite).__name__
        artifact = self.capture_failure(suite_name, status, page)

        findings = self.scan(suite.get_ignored_prefixes())
        if findings:
            logger.error(
                "Diagnostic log findings",
                extra={
                    "extra_fields": {
                        "suite": suite_name,
                        "findings": [f.message for f in findings],
                    }
                },
            )
            raise DiagnosticFindingsError(suite_name, findings)
        return artifact
