"""Unit tests for olock.config_loader module."""

import pytest
import yaml

from src.olock.config_loader import MergeConfigLoader
from src.olock.errors import MergeConfigError, MergeConfigFilesystemError
from src.olock.models import MergeConfig


class TestMergeConfigLoaderLoad:
    """Test cases for MergeConfigLoader.load() method."""

    def test_load_valid_config_with_all_fields(self, tmp_path):
        config_file = tmp_path / "merge.yaml"
        config_file.write_text(
            """
hash_key: "#hash"
old_hash_key: "#old_hash"
uuid_key: "#uuid"
copy_inputs: false
recalculate_hashes: false
"""
        )

        result = MergeConfigLoader.load(str(config_file))

        assert result == MergeConfig(
            hash_key="#hash",
            old_hash_key="#old_hash",
            uuid_key="#uuid",
            copy_inputs=False,
            recalculate_hashes=False,
        )

    def test_missing_fields_use_defaults(self, tmp_path):
        config_file = tmp_path / "merge.yaml"
        config_file.write_text("copy_inputs: false\n")

        result = MergeConfigLoader.load(str(config_file))

        assert result.copy_inputs is False
        assert result.hash_key == MergeConfig().hash_key
        assert result.recalculate_hashes is True

    def test_empty_file_yields_defaults(self, tmp_path):
        config_file = tmp_path / "merge.yaml"
        config_file.write_text("")

        assert MergeConfigLoader.load(str(config_file)) == MergeConfig()

    def test_missing_file_raises_filesystem_error(self, tmp_path):
        with pytest.raises(MergeConfigFilesystemError) as exc_info:
            MergeConfigLoader.load(str(tmp_path / "missing.yaml"))

        assert exc_info.value.operation == 'read'
        assert "not found" in str(exc_info.value)

    def test_invalid_yaml_raises_config_error(self, tmp_path):
        config_file = tmp_path / "merge.yaml"
        config_file.write_text("hash_key: [unclosed\n")

        with pytest.raises(MergeConfigError, match="Invalid YAML syntax"):
            MergeConfigLoader.load(str(config_file))

    def test_non_dictionary_raises_config_error(self, tmp_path):
        config_file = tmp_path / "merge.yaml"
        config_file.write_text("- a\n- b\n")

        with pytest.raises(MergeConfigError, match="got list"):
            MergeConfigLoader.load(str(config_file))


class TestMergeConfigLoaderFromDict:
    """Test cases for MergeConfigLoader.from_dict() validation."""

    def test_unknown_field_rejected(self):
        with pytest.raises(MergeConfigError, match="Unknown fields: hash"):
            MergeConfigLoader.from_dict({"hash": "#hash"})

    def test_non_string_key_rejected(self):
        with pytest.raises(MergeConfigError) as exc_info:
            MergeConfigLoader.from_dict({"hash_key": 42})

        assert exc_info.value.config_field == "hash_key"

    def test_empty_key_rejected(self):
        with pytest.raises(MergeConfigError) as exc_info:
            MergeConfigLoader.from_dict({"uuid_key": "  "})

        assert exc_info.value.config_field == "uuid_key"

    def test_non_boolean_flag_rejected(self):
        with pytest.raises(MergeConfigError) as exc_info:
            MergeConfigLoader.from_dict({"copy_inputs": "yes please"})

        assert exc_info.value.config_field == "copy_inputs"

    def test_duplicate_reserved_keys_rejected(self):
        with pytest.raises(MergeConfigError, match="must be distinct"):
            MergeConfigLoader.from_dict({"hash_key": "#h", "old_hash_key": "#h"})


class TestMergeConfigLoaderSave:
    """Test cases for MergeConfigLoader.save() method."""

    def test_save_writes_all_fields(self, tmp_path):
        config_file = tmp_path / "nested" / "merge.yaml"
        config = MergeConfig(hash_key="#hash", copy_inputs=False)

        MergeConfigLoader.save(str(config_file), config)

        written = yaml.safe_load(config_file.read_text())
        assert written == {
            'hash_key': '#hash',
            'old_hash_key': config.old_hash_key,
            'uuid_key': config.uuid_key,
            'copy_inputs': False,
            'recalculate_hashes': True,
        }

    def test_saved_file_loads_back(self, tmp_path):
        config_file = tmp_path / "merge.yaml"
        config = MergeConfig(uuid_key="#id", recalculate_hashes=False)

        MergeConfigLoader.save(str(config_file), config)

        assert MergeConfigLoader.load(str(config_file)) == config

    def test_unwritable_directory_raises_filesystem_error(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")

        with pytest.raises(MergeConfigFilesystemError) as exc_info:
            MergeConfigLoader.save(str(blocker / "merge.yaml"), MergeConfig())

        assert exc_info.value.operation == 'create_directory'
