"""Enumeration definitions for the integration harness.

This module contains the Enum classes shared by the bootstrap, execution and
diagnostics layers so that statuses and sources are spelled consistently.
"""

from enum import Enum, IntEnum


class InstallSource(str, Enum):
    """Defines where the bootstrapped environment came from.

    Attributes:
        CACHED: The fast snapshot for the current revision was loaded.
        SOURCE_DUMP: The suite's own (possibly compressed) dump was loaded.
        FROM_SCRATCH: The platform's installer ran without any dump.
    """

    CACHED = "cached"
    SOURCE_DUMP = "source_dump"
    FROM_SCRATCH = "from_scratch"


class TestStatus(str, Enum):
    """Defines the recorded outcome of a single test method.

    Attributes:
        PASSED: The test completed without failures.
        SKIPPED: The test was skipped.
        INCOMPLETE: The test did not reach a verdict.
        WARNING: The test passed but raised a warning condition.
        FAILURE: An assertion failed.
        ERROR: The test raised an unexpected exception.
    """

    __test__ = False

    PASSED = "passed"
    SKIPPED = "skipped"
    INCOMPLETE = "incomplete"
    WARNING = "warning"
    FAILURE = "failure"
    ERROR = "error"

    @property
    def captures_evidence(self) -> bool:
        return self in (TestStatus.ERROR, TestStatus.WARNING, TestStatus.FAILURE)


class Severity(IntEnum):
    """RFC 5424 severity levels used by the platform's diagnostic log."""

    EMERGENCY = 0
    ALERT = 1
    CRITICAL = 2
    ERROR = 3
    WARNING = 4
    NOTICE = 5
    INFO = 6
    DEBUG = 7
