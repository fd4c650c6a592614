from pydantic import Field

from integration_harness.models.base import MethodName, ModelBase, SuiteName


class SelectionCandidate(ModelBase):
    """A single method considered for combined execution.

    Attributes:
        name: The method name.
        matches_convention: Whether the name starts with the suite prefix.
        matches_filter: Whether the name satisfies the filter pattern.
    """

    name: MethodName
    matches_convention: bool
    matches_filter: bool

    @property
    def selected(self) -> bool:
        return self.matches_convention and self.matches_filter


class TestSelection(ModelBase):
    """The subset of a suite's methods chosen for one run.

    Attributes:
        suite: The suite class name.
        pattern: The filter pattern that was applied.
        candidates: Every method considered, in declaration order.
    """

    __test__ = False

    suite: SuiteName
    pattern: str
    candidates: list[SelectionCandidate] = Field(default_factory=list)

    @property
    def selected(self) -> list[MethodName]:
        return [c.name for c in self.candidates if c.selected]
