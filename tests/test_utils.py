import os
from unittest.mock import patch

import pytest

from integration_harness.utils import (
    PASSWORD_ALPHABET,
    append_line,
    atomic_write_text,
    generate_hash_salt,
    generate_password,
)


class TestUtils:
    def test_hash_salt_is_urlsafe_and_unique(self):
        salt = generate_hash_salt()
        assert "=" not in salt and "+" not in salt and "/" not in salt
        assert len(salt) == 74
        assert generate_hash_salt() != salt

    def test_password_alphabet(self):
        password = generate_password()
        assert len(password) == 8
        assert set(password) <= set(PASSWORD_ALPHABET)
        assert len(generate_password(12)) == 12

    def test_atomic_write_creates_parents(self, tmp_path):
        target = tmp_path / "a" / "b" / "file.json"
        assert atomic_write_text(target, "{}") == target
        assert target.read_text() == "{}"

    def test_atomic_write_replaces_existing(self, tmp_path):
        target = tmp_path / "file.txt"
        target.write_text("old")
        atomic_write_text(target, "new")
        assert target.read_text() == "new"
        assert os.listdir(tmp_path) == ["file.txt"]

    def test_atomic_write_failure_keeps_original(self, tmp_path):
        target = tmp_path / "file.txt"
        target.write_text("old")

        with patch("integration_harness.utils.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(OSError, match="disk full"):
                atomic_write_text(target, "new")

        assert target.read_text() == "old"
        assert os.listdir(tmp_path) == ["file.txt"]

    def test_append_line(self, tmp_path):
        index = tmp_path / "out" / ".htmloutput"
        append_line(index, "http://a/1.jpg")
        append_line(index, "http://a/2.jpg")
        assert index.read_text() == "http://a/1.jpg\nhttp://a/2.jpg\n"
