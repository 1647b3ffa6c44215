"""
Tests for loading the dict2anki JSON config.
"""

import json
import logging
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from config_loader import Config, ConfigError, default_config_path, load_config


def write_config(tmp_path, data) -> Path:
    path = tmp_path / "config.json"
    path.write_text(json.dumps(data), encoding='utf-8')
    return path


class TestLoadConfig:
    def test_reads_api_key_and_deck(self, tmp_path):
        config = load_config(write_config(tmp_path, {"apiKey": "K", "deckName": "English"}))
        assert config.api_key == "K"
        assert config.deck_name == "English"

    def test_missing_deck_name_is_empty_string(self, tmp_path):
        config = load_config(write_config(tmp_path, {"apiKey": "K"}))
        assert config.api_key == "K"
        assert config.deck_name == ""

    def test_missing_api_key_is_empty_string(self, tmp_path):
        config = load_config(write_config(tmp_path, {"deckName": "English"}))
        assert config.api_key == ""
        assert config.deck_name == "English"

    def test_empty_object_uses_defaults(self, tmp_path):
        config = load_config(write_config(tmp_path, {}))
        assert config == Config()
        assert config.anki_connect_url == "http://localhost:8765"
        assert config.model_name == "Basic"

    def test_optional_keys_override_defaults(self, tmp_path):
        config = load_config(write_config(tmp_path, {
            "ankiConnectUrl": "http://127.0.0.1:9999",
            "ankiConnectVersion": 5,
            "modelName": "Basic (and reversed card)",
            "timeout": 2.5,
        }))
        assert config.anki_connect_url == "http://127.0.0.1:9999"
        assert config.anki_connect_version == 5
        assert config.model_name == "Basic (and reversed card)"
        assert config.timeout == 2.5

    def test_unknown_keys_are_ignored(self, tmp_path):
        config = load_config(write_config(tmp_path, {"apiKey": "K", "colour": "blue"}))
        assert config.api_key == "K"

    def test_accepts_string_path(self, tmp_path):
        path = write_config(tmp_path, {"apiKey": "K"})
        assert load_config(str(path)).api_key == "K"

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(ConfigError):
            load_config(tmp_path / "nope.json")

    def test_invalid_json_raises(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{apiKey: K", encoding='utf-8')
        with pytest.raises(ConfigError):
            load_config(path)

    def test_non_object_raises(self, tmp_path):
        with pytest.raises(ConfigError):
            load_config(write_config(tmp_path, ["K", "English"]))

    @pytest.mark.parametrize("data", [
        {"apiKey": None},
        {"deckName": 3},
        {"ankiConnectVersion": "6"},
        {"timeout": True},
        {"timeout": 0},
        {"timeout": -1},
    ])
    def test_wrong_types_raise(self, tmp_path, data):
        with pytest.raises(ConfigError):
            load_config(write_config(tmp_path, data))


class TestDefaultConfigPath:
    def test_under_user_config_dir(self, tmp_path):
        with patch("config_loader.Path.home", return_value=tmp_path):
            assert default_config_path() == tmp_path / ".config" / "dict2anki" / "config.json"

    def test_no_home_raises(self):
        with patch("config_loader.Path.home", side_effect=RuntimeError("no home")):
            with pytest.raises(ConfigError):
                default_config_path()

    def test_load_config_uses_default_path(self, tmp_path):
        config_dir = tmp_path / ".config" / "dict2anki"
        config_dir.mkdir(parents=True)
        write_config(config_dir, {"apiKey": "K", "deckName": "English"})
        with patch("config_loader.Path.home", return_value=tmp_path):
            config = load_config()
        assert config.deck_name == "English"


class TestMissingFieldsAreSilent:
    def test_no_warning_for_missing_fields(self, tmp_path, caplog):
        with caplog.at_level(logging.WARNING):
            config = load_config(write_config(tmp_path, {}))
        assert config.api_key == ""
        assert caplog.records == []
