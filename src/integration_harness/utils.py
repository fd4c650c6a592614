"""Utility functions for the integration harness.

This module provides shared helpers used across the harness, such as secret
generation and crash-safe file writes.
"""

import base64
import os
import secrets
import string
import tempfile
from pathlib import Path
from typing import Union


HASH_SALT_BYTES = 55
PASSWORD_ALPHABET = string.ascii_lowercase + string.digits


def generate_hash_salt(length: int = HASH_SALT_BYTES) -> str:
    """Generates a random salt for a fresh installation.

    Args:
        length: Number of random bytes before encoding.

    Returns:
        The bytes encoded as URL-safe base64 without padding.
    """
    raw = secrets.token_bytes(length)
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def generate_password(length: int = 8) -> str:
    """Generates a random lowercase alphanumeric password."""
    return "".join(secrets.choice(PASSWORD_ALPHABET) for _ in range(length))


def atomic_write_text(path: Union[str, Path], text: str) -> Path:
    """Writes a file so readers never observe a partial write.

    The content goes to a temporary file in the target directory which then
    replaces the target in a single rename.

    Args:
        path: Destination file.
        text: Content to write.

    Returns:
        The destination path.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    return path


def append_line(path: Union[str, Path], line: str) -> None:
    """Appends a single line to a text file, creating it if needed."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("a", encoding="utf-8") as f:
        f.write(line + "\n")
