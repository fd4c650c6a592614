"""Exceptions raised by the integration harness.

Every fatal condition the harness detects is raised once as one of these;
failures from platform collaborators propagate unwrapped.
"""

from typing import Optional, Sequence

from integration_harness.models.diagnostics import LogFinding
from integration_harness.models.reconciliation import ReconciliationOutcome


class HarnessError(RuntimeError):
    """Base class for all harness failures."""


class SettingsError(HarnessError):
    """A required settings entry had no value."""


class DumpFormatError(HarnessError):
    """A snapshot dump could not be decoded."""


class ConfigurationImportError(HarnessError):
    """The configuration import reported errors.

    Attributes:
        errors: The individual import errors, in the order reported.
        outcome: The reconciliation outcome at the time of failure.
    """

    HEADLINE = "There were errors importing the configuration."

    def __init__(
        self,
        errors: Sequence[str],
        outcome: Optional[ReconciliationOutcome] = None,
    ):
        self.errors = list(errors)
        self.outcome = outcome
        super().__init__("\n".join([self.HEADLINE, *self.errors]))


class NoTestsSelectedError(HarnessError):
    """No method matched both the naming convention and the filter."""

    def __init__(self, suite: str, prefix: str, pattern: str):
        self.suite = suite
        self.prefix = prefix
        self.pattern = pattern
        super().__init__(
            f'No tests run from {suite} as no methods begin with "{prefix}..." '
            f"and match the pattern: {pattern}"
        )


class InvalidTestFilterError(HarnessError):
    """The test filter is not a valid regular expression."""

    def __init__(self, suite: str, pattern: str, reason: str):
        self.suite = suite
        self.pattern = pattern
        super().__init__(
            f"No tests run from {suite} as the pattern is not a valid regular "
            f"expression ({reason}): {pattern}"
        )


class DiagnosticFindingsError(HarnessError):
    """Unsuppressed entries were found in the diagnostic log."""

    def __init__(self, suite: str, findings: Sequence[LogFinding]):
        self.suite = suite
        self.findings = list(findings)
        listing = "\n".join(
            f"  {i}. {finding}" for i, finding in enumerate(self.findings, 1)
        )
        super().__init__(
            "Errors found in the diagnostic log. If they are expected add a "
            f"prefix for them to {suite}.get_ignored_prefixes()\n\n{listing}"
        )
