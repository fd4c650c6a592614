import pytest
import yaml

from integration_harness.bootstrap.settings import SettingsFile
from integration_harness.errors import SettingsError
from integration_harness.models.settings import SettingEntry


class TestSettingsFile:
    def test_missing_file_reads_empty(self, tmp_path):
        settings = SettingsFile(tmp_path / "settings.harness.yml")
        assert settings.read() == {"version": 0, "settings": {}}
        assert settings.values() == {}

    def test_write_creates_versioned_document(self, tmp_path):
        path = tmp_path / "site" / "settings.harness.yml"
        result = SettingsFile(path).write(
            {"settings.hash_salt": SettingEntry(value="salt")}
        )

        assert result.version == 1
        assert result.written == ["settings.hash_salt"]
        document = yaml.safe_load(path.read_text())
        assert document == {
            "version": 1,
            "settings": {"settings.hash_salt": {"value": "salt", "required": True}},
        }

    def test_writes_merge_and_bump_version(self, tmp_path):
        settings = SettingsFile(tmp_path / "settings.harness.yml")
        settings.write({"a": SettingEntry(value=1)})
        result = settings.write({"b": SettingEntry(value={"host": "db"})})

        assert result.version == 2
        assert settings.values() == {"a": 1, "b": {"host": "db"}}

    def test_required_without_value_raises(self, tmp_path):
        settings = SettingsFile(tmp_path / "settings.harness.yml")
        with pytest.raises(SettingsError, match="databases.default"):
            settings.write({"databases.default": SettingEntry()})
        assert not settings.path.exists()

    def test_optional_without_value_skipped(self, tmp_path):
        settings = SettingsFile(tmp_path / "settings.harness.yml")
        result = settings.write(
            {
                "settings.file_private_path": SettingEntry(required=False),
                "settings.trusted_host": SettingEntry(value="^harness\\.test$"),
            }
        )
        assert result.skipped == ["settings.file_private_path"]
        assert result.written == ["settings.trusted_host"]
        assert "settings.file_private_path" not in settings.values()
