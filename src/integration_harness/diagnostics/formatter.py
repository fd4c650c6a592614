"""Rendering of diagnostic log rows to bounded plain text.

Log rows store a message template and a JSON object of placeholder values,
e.g. ``{"%type": "Warning", "@message": "Undefined index"}``. Placeholders
follow the platform's conventions:

- ``@name``: value inserted HTML-escaped,
- ``%name``: value inserted HTML-escaped and emphasized,
- ``:name``: URL value inserted HTML-escaped.

The rendered text has tags stripped and entities decoded, then is truncated
on a word boundary so reports stay readable.
"""

import html
import json
import re
from typing import Optional

from integration_harness.models.diagnostics import LogRow


MAX_MESSAGE_LENGTH = 256
ELLIPSIS = "…"

_TAG_RE = re.compile(r"<[^>]*>")
_PLACEHOLDER_PREFIXES = ("@", "%", ":")


def substitute_variables(message: str, variables: Optional[str]) -> str:
    """Replaces placeholders in a message template with their values."""
    if not variables:
        return message
    try:
        values = json.loads(variables)
    except ValueError:
        return message
    if not isinstance(values, dict):
        return message

    # Longest keys first so '@name' never clobbers '@name_long'.
    for key in sorted(values, key=len, reverse=True):
        if not key.startswith(_PLACEHOLDER_PREFIXES):
            continue
        value = values[key]
        text = html.escape("" if value is None else str(value))
        if key.startswith("%"):
            text = f'<em class="placeholder">{text}</em>'
        message = message.replace(key, text)
    return message


def strip_tags(text: str) -> str:
    return _TAG_RE.sub("", text)


def truncate(
    text: str,
    max_length: int = MAX_MESSAGE_LENGTH,
    *,
    wordsafe: bool = True,
    add_ellipsis: bool = True,
    min_wordsafe_length: int = 1,
) -> str:
    """Shortens text to at most ``max_length`` characters.

    Args:
        text: The text to shorten.
        max_length: Maximum length of the result, ellipsis included.
        wordsafe: Cut at the last word boundary that fits.
        add_ellipsis: Append an ellipsis when the text was cut.
        min_wordsafe_length: Shortest prefix a word-safe cut may leave.

    Returns:
        The text unchanged if it already fits, otherwise the shortened text.
    """
    if len(text) <= max_length:
        return text

    ellipsis = ""
    if add_ellipsis:
        ellipsis = ELLIPSIS[:max_length]
        max_length = max(max_length - len(ellipsis), 0)

    cut = text[:max_length]
    if wordsafe and max_length >= min_wordsafe_length:
        match = re.match(
            r"(.{%d,%d})\W" % (min_wordsafe_length, max_length), text, re.DOTALL
        )
        if match:
            cut = match.group(1)

    if add_ellipsis:
        cut = cut.rstrip() + ellipsis
    return cut


def format_row(row: LogRow, max_length: int = MAX_MESSAGE_LENGTH) -> str:
    """Renders a log row to bounded plain text."""
    rendered = substitute_variables(row.message, row.variables)
    return truncate(html.unescape(strip_tags(rendered)), max_length)
