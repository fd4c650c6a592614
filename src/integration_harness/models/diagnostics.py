"""Data models for diagnostic log scanning.

This module defines the ignore rules a suite declares and the findings the
collector reports when a log row is not covered by any of them.
"""

from pathlib import Path
from typing import Optional

from pydantic import Field

from integration_harness.models.base import ModelBase


class IgnoreRuleSet(ModelBase):
    """Literal message prefixes that are not treated as findings.

    Attributes:
        prefixes: Ordered prefixes; each is matched literally at the start of
            a rendered message.
    """

    prefixes: tuple[str, ...] = Field(
        default_factory=tuple,
        description="Ordered literal prefixes matched at the start of a message.",
    )


class LogRow(ModelBase):
    """A raw, grouped row read from the diagnostic log.

    Attributes:
        message: The message template with placeholders.
        variables: The serialized placeholder values, if any.
        severity: The most severe level recorded for this message.
        type: The channel that logged the message.
    """

    message: str
    variables: Optional[str] = None
    severity: int
    type: str


class LogFinding(ModelBase):
    """A diagnostic log row that no ignore rule suppressed.

    Attributes:
        message: The rendered, plain-text and truncated message.
        severity: The row's severity.
        type: The channel that logged the message.
    """

    message: str = Field(..., description="Rendered plain-text message.")
    severity: int = Field(..., description="RFC 5424 severity of the row.")
    type: str = Field(..., description="The channel that logged the message.")

    def __str__(self) -> str:
        return f"[{self.type}] {self.message}"


class ScreenshotArtifact(ModelBase):
    """Evidence captured for a failing browser test.

    Attributes:
        path: Where the screenshot was written.
        url: The public URL recorded in the output index.
        counter: The sequence number embedded in the file name.
    """

    path: Path
    url: str
    counter: int
