from unittest.mock import MagicMock

import pytest

from integration_harness.models.enums import TestStatus
from integration_harness.testing.pytest_plugin import HarnessRuntime, status_from_report


CONFTEST = """
import pytest

from fake_platform import FakePlatform

pytest_plugins = ["integration_harness.testing.pytest_plugin"]


@pytest.fixture(scope="session")
def harness_platform(tmp_path_factory):
    database = tmp_path_factory.mktemp("db") / "site.sqlite3"
    platform = FakePlatform("sqlite:///" + str(database))
    platform.config_changes = {config_changes}
    platform.import_errors = {import_errors}
    return platform
"""

SUITE = """
from integration_harness.testing.case import CombinedTestCase, HarnessTestCase

RAN = []


class SiteSuite(HarnessTestCase):
    def check_profile(self, profile):
        if profile != "standard":
            raise RuntimeError(profile)

    def get_config_sync_path(self):
        return "../config/sync"
"""


@pytest.fixture
def harness_env(pytester, monkeypatch):
    for name in ("FAST_SNAPSHOT_PATH", "SKIP_UPDATE_CHECK", "CI", "TEST_FILTER"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("HARNESS_SITE_DIR", str(pytester.path / "site"))
    monkeypatch.setenv("HARNESS_BROWSER_OUTPUT_DIR", str(pytester.path / "browser_output"))
    monkeypatch.setenv("HARNESS_RUN_ID", "run1")

    def _write(tests, config_changes=False, import_errors=()):
        pytester.makeconftest(
            CONFTEST.format(config_changes=config_changes, import_errors=list(import_errors))
        )
        pytester.makepyfile(test_suite=SUITE + tests)

    return _write


class TestStatusFromReport:
    def make_report(self, outcome, when="call"):
        report = MagicMock()
        report.passed = outcome == "passed"
        report.skipped = outcome == "skipped"
        report.when = when
        return report

    def make_call(self, exc_type=None):
        call = MagicMock()
        if exc_type is None:
            call.excinfo = None
        else:
            call.excinfo.errisinstance.side_effect = lambda t: issubclass(exc_type, t)
        return call

    def test_passed(self):
        assert status_from_report(self.make_report("passed"), self.make_call()) == TestStatus.PASSED

    def test_skipped(self):
        assert status_from_report(self.make_report("skipped"), self.make_call()) == TestStatus.SKIPPED

    def test_assertion_is_failure(self):
        status = status_from_report(self.make_report("failed"), self.make_call(AssertionError))
        assert status == TestStatus.FAILURE

    def test_other_exception_is_error(self):
        status = status_from_report(self.make_report("failed"), self.make_call(KeyError))
        assert status == TestStatus.ERROR

    def test_setup_failure_is_error(self):
        status = status_from_report(
            self.make_report("failed", when="setup"), self.make_call(AssertionError)
        )
        assert status == TestStatus.ERROR


class TestHarnessRuntime:
    def test_failure_is_cached(self, make_config):
        runtime = HarnessRuntime(make_config())
        platform = MagicMock()
        suite = MagicMock(profile="standard")
        suite.check_profile.side_effect = RuntimeError("wrong profile")

        with pytest.raises(RuntimeError, match="wrong profile"):
            runtime.ensure_environment(platform, suite)
        with pytest.raises(RuntimeError, match="wrong profile"):
            runtime.ensure_environment(platform, suite)

        suite.check_profile.assert_called_once()


class TestPlugin:
    def test_combined_methods_run_in_order(self, pytester, harness_env):
        harness_env("""
class TestCheckout(CombinedTestCase, SiteSuite):
    def do_test_guest(self):
        RAN.append("guest")

    def do_test_coupon(self):
        RAN.append("coupon")

    def helper(self):
        RAN.append("helper")


def test_order():
    assert RAN == ["guest", "coupon"]
""")
        pytester.runpytest().assert_outcomes(passed=2)

    def test_filter_runs_subset(self, pytester, harness_env, monkeypatch):
        monkeypatch.setenv("TEST_FILTER", "coupon")
        harness_env("""
class TestCheckout(CombinedTestCase, SiteSuite):
    def do_test_guest(self):
        RAN.append("guest")

    def do_test_coupon(self):
        RAN.append("coupon")


def test_order():
    assert RAN == ["coupon"]
""")
        pytester.runpytest().assert_outcomes(passed=2)

    def test_filter_matching_nothing_fails(self, pytester, harness_env, monkeypatch):
        monkeypatch.setenv("TEST_FILTER", "nomatch")
        harness_env("""
class TestCheckout(CombinedTestCase, SiteSuite):
    def do_test_guest(self):
        pass
""")
        result = pytester.runpytest()
        result.assert_outcomes(failed=1)
        result.stdout.fnmatch_lines(
            ['*No tests run from TestCheckout as no methods begin with "do_test..."'
             " and match the pattern: nomatch*"]
        )

    def test_environment_bootstrapped_once(self, pytester, harness_env):
        harness_env("""
class TestFirst(SiteSuite):
    def test_password(self):
        assert self.admin_password == self.platform.admin_password


class TestSecond(SiteSuite):
    def test_shared(self):
        assert self.platform.call_names().count("install_from_scratch") == 1
        assert self.bootstrap.source.value == "from_scratch"
""")
        pytester.runpytest().assert_outcomes(passed=2)

    def test_log_findings_fail_after_teardown(self, pytester, harness_env):
        harness_env("""
class TestLogs(SiteSuite):
    def tear_down(self):
        RAN.append("tear_down")

    def test_logs_error(self):
        self.platform.log("Undefined index: %key", variables='{"%key": "sku"}')


def test_teardown_ran_first():
    assert RAN == ["tear_down"]
""")
        result = pytester.runpytest()
        result.assert_outcomes(passed=2, errors=1)
        result.stdout.fnmatch_lines(
            [
                "*Errors found in the diagnostic log*",
                "*1. [[]runtime[]] Undefined index: sku*",
            ]
        )

    def test_ignored_prefix_suppresses_finding(self, pytester, harness_env):
        harness_env("""
class TestLogs(SiteSuite):
    def get_ignored_prefixes(self):
        return ["Deprecated function: each("]

    def test_logs_deprecation(self):
        self.platform.log("Deprecated function: each() is deprecated")
""")
        pytester.runpytest().assert_outcomes(passed=1)

    def test_config_import_errors_abort_run(self, pytester, harness_env):
        harness_env(
            """
class TestSite(SiteSuite):
    def test_never_runs(self):
        pass
""",
            config_changes=True,
            import_errors=["Missing dependency: views"],
        )
        result = pytester.runpytest()
        assert result.ret == pytest.ExitCode.TESTS_FAILED
        result.stdout.fnmatch_lines(["*There were errors importing the configuration.*"])

    def test_browser_failure_captures_screenshot(self, pytester, harness_env):
        harness_env("""
import pytest
from unittest.mock import MagicMock


@pytest.fixture
def harness_page():
    page = MagicMock()
    page.screenshot.side_effect = lambda path, type: open(path, "wb").close()
    return page


class TestBrowser(SiteSuite):
    def test_fails(self):
        assert False, "checkout button missing"
""")
        result = pytester.runpytest()
        result.assert_outcomes(failed=1)

        output = pytester.path / "browser_output"
        assert (output / "TestBrowser-ERROR-1-run1.jpg").is_file()
        index = (output / ".htmloutput").read_text().splitlines()
        assert index == [
            "http://localhost/sites/harness/browser_output/TestBrowser-ERROR-1-run1.jpg"
        ]
