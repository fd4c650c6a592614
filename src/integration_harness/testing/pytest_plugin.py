"""pytest plugin wiring the harness into the test run.

Enable it from the top-level conftest::

    pytest_plugins = ["integration_harness.testing.pytest_plugin"]

and provide the platform under test::

    @pytest.fixture(scope="session")
    def harness_platform():
        return MyPlatform(os.environ["DATABASE_URL"])

Browser-driven suites also override ``harness_page`` to return a Playwright
page; failures of those suites then get a screenshot.
"""

from typing import Optional

import pytest

from integration_harness.bootstrap.session import BootstrapSession
from integration_harness.config import HarnessConfig
from integration_harness.diagnostics.collector import DiagnosticCollector
from integration_harness.environment.abstract import Platform
from integration_harness.errors import ConfigurationImportError
from integration_harness.models.enums import TestStatus
from integration_harness.models.snapshot import BootstrapResult
from integration_harness.observability.logging import get_logger
from integration_harness.testing.case import HarnessTestCase

logger = get_logger(__name__)

runtime_key = pytest.StashKey["HarnessRuntime"]()
status_key = pytest.StashKey[TestStatus]()


class HarnessRuntime:
    """Process-wide harness state: one config, one environment, one collector."""

    def __init__(self, config: HarnessConfig):
        self.config = config
        self.session: Optional[BootstrapSession] = None
        self.collector: Optional[DiagnosticCollector] = None
        self.failure: Optional[BaseException] = None

    def ensure_environment(
        self, platform: Platform, suite: HarnessTestCase
    ) -> BootstrapResult:
        """Bootstraps on first use; later calls reuse or re-raise the outcome."""
        if self.failure is not None:
            raise self.failure

        if self.session is None:
            self.session = BootstrapSession(self.config, platform)
            self.collector = DiagnosticCollector(
                self.config, platform.database_engine()
            )
        elif self.session.platform is not platform:
            logger.warning(
                "Ignoring a second platform instance; the environment is "
                "bootstrapped once per process"
            )

        try:
            return self.session.bootstrap(suite, suite.profile)
        except Exception as e:
            self.failure = e
            raise


def status_from_report(report: pytest.TestReport, call: pytest.CallInfo) -> TestStatus:
    if report.passed:
        return TestStatus.PASSED
    if report.skipped:
        return TestStatus.SKIPPED
    if (
        report.when == "call"
        and call.excinfo is not None
        and call.excinfo.errisinstance(AssertionError)
    ):
        return TestStatus.FAILURE
    return TestStatus.ERROR


def pytest_configure(config: pytest.Config):
    config.stash[runtime_key] = HarnessRuntime(HarnessConfig.from_env())


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item: pytest.Item, call: pytest.CallInfo):
    outcome = yield
    report = outcome.get_result()
    if report.when in ("setup", "call"):
        item.stash[status_key] = status_from_report(report, call)


@pytest.fixture(scope="session")
def harness_config(pytestconfig: pytest.Config) -> HarnessConfig:
    return pytestconfig.stash[runtime_key].config


@pytest.fixture(scope="session")
def harness_platform() -> Platform:
    pytest.fail(
        "Define a 'harness_platform' fixture returning the Platform under test",
        pytrace=False,
    )


@pytest.fixture
def harness_page():
    return None


@pytest.fixture(autouse=True)
def _harness_environment(request: pytest.FixtureRequest):
    suite = request.instance
    if not isinstance(suite, HarnessTestCase):
        yield
        return

    runtime: HarnessRuntime = request.config.stash[runtime_key]
    platform = request.getfixturevalue("harness_platform")
    page = request.getfixturevalue("harness_page")

    try:
        result = runtime.ensure_environment(platform, suite)
    except ConfigurationImportError as e:
        pytest.exit(str(e), returncode=pytest.ExitCode.TESTS_FAILED)

    suite.harness = runtime
    suite.platform = platform
    suite.page = page
    suite.bootstrap = result

    yield

    try:
        suite.tear_down()
    finally:
        status = request.node.stash.get(status_key, TestStatus.PASSED)
        runtime.collector.collect(suite, status, page)
