import logging

import pytest

from fake_platform import FakePlatform, RecordingFixture
from integration_harness.config import HarnessConfig

pytest_plugins = ["integration_harness.testing.pytest_plugin", "pytester"]


@pytest.fixture
def make_config(tmp_path):
    def _make(**overrides):
        values = {
            "site_directory": tmp_path / "site",
            "temp_files_directory": tmp_path / "site" / "files" / "tmp",
            "browser_output_directory": tmp_path / "browser_output",
            "base_url": "http://harness.test",
            "run_id": "run1",
        }
        values.update(overrides)
        return HarnessConfig(**values)

    return _make


@pytest.fixture
def fake_platform(tmp_path):
    return FakePlatform(f"sqlite:///{tmp_path / 'site.sqlite3'}")


@pytest.fixture
def suite_fixture():
    return RecordingFixture()


@pytest.fixture(autouse=True)
def _reset_harness_logger():
    yield
    logger = logging.getLogger("integration_harness")
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
