"""Runs a suite's combined test methods inside one shared environment.

A suite declares many logical test cases as methods whose names start with a
fixed prefix (``do_test`` by default). Instead of each one paying for its own
bootstrap, a single real test runs all of them in declaration order. Set
``TEST_FILTER`` to a regex to run only some of them, e.g.::

    TEST_FILTER=redeemed pytest tests/test_fulfillment.py -k run_all_tests
"""

import re
from typing import Any, Iterator, Optional

from integration_harness.config import DEFAULT_TEST_FILTER
from integration_harness.errors import InvalidTestFilterError, NoTestsSelectedError
from integration_harness.models.selection import SelectionCandidate, TestSelection
from integration_harness.observability.logging import get_logger

logger = get_logger(__name__)

DEFAULT_PREFIX = "do_test"


def normalize_method_name(name: str) -> str:
    """Folds case and drops underscores so do_test_a and doTestA compare equal."""
    return name.replace("_", "").lower()


def iter_declared_methods(suite: Any) -> Iterator[str]:
    """Yields the suite's method names in declaration order.

    Methods of the concrete class come first, then those it inherits.
    """
    seen = set()
    for klass in type(suite).__mro__:
        if klass is object:
            continue
        for name, member in vars(klass).items():
            if name in seen or name.startswith("__"):
                continue
            seen.add(name)
            if isinstance(member, (staticmethod, classmethod)) or (
                callable(member) and not isinstance(member, type)
            ):
                yield name


def select_tests(
    suite: Any, pattern: Optional[str] = None, prefix: Optional[str] = None
) -> TestSelection:
    """Evaluates every method of a suite against the convention and filter.

    Args:
        suite: The test suite instance.
        pattern: Regex searched for in each method name. Defaults to match-all.
        prefix: Naming convention marker. Defaults to the suite's
            ``combined_test_prefix`` attribute or ``do_test``.

    Returns:
        The selection, including methods that were not chosen.
    """
    pattern = pattern or DEFAULT_TEST_FILTER
    prefix = prefix or getattr(suite, "combined_test_prefix", DEFAULT_PREFIX)
    try:
        compiled = re.compile(pattern)
    except re.error as e:
        raise InvalidTestFilterError(type(suite).__name__, pattern, str(e)) from e
    folded_prefix = normalize_method_name(prefix)

    candidates = []
    for name in iter_declared_methods(suite):
        matches_convention = normalize_method_name(name).startswith(folded_prefix)
        candidates.append(
            SelectionCandidate(
                name=name,
                matches_convention=matches_convention,
                matches_filter=bool(compiled.search(name)),
            )
        )
    return TestSelection(
        suite=type(suite).__name__, pattern=pattern, candidates=candidates
    )


def run_selected(
    suite: Any, pattern: Optional[str] = None, prefix: Optional[str] = None
) -> TestSelection:
    """Runs the selected methods of a suite sequentially.

    Raises:
        InvalidTestFilterError: If the pattern does not compile.
        NoTestsSelectedError: If no method matched both the prefix and pattern.
    """
    selection = select_tests(suite, pattern, prefix)
    chosen = selection.selected
    if not chosen:
        raise NoTestsSelectedError(
            selection.suite,
            prefix or getattr(suite, "combined_test_prefix", DEFAULT_PREFIX),
            selection.pattern,
        )

    for name in chosen:
        logger.info(
            f"Running {selection.suite}.{name}",
            extra={"extra_fields": {"suite": selection.suite, "method": name}},
        )
        getattr(suite, name)()
    return selection
