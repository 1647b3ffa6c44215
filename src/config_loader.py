"""
Configuration loader for dict2anki.
Reads the per-user JSON config holding the Merriam-Webster API key,
the target deck and the AnkiConnect connection parameters.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

logger = logging.getLogger(__name__)

CONFIG_DIR_NAME = "dict2anki"
CONFIG_FILE_NAME = "config.json"


class ConfigError(Exception):
    """Exception raised when the config file cannot be located, read or decoded."""
    pass


@dataclass(frozen=True)
class Config:
    api_key: str = ""
    deck_name: str = ""
    anki_connect_url: str = "http://localhost:8765"
    anki_connect_version: int = 6
    model_name: str = "Basic"
    front_field: str = "Front"
    back_field: str = "Back"
    timeout: float = 10


# JSON key -> (attribute, expected type)
_FIELDS = {
    "apiKey": ("api_key", str),
    "deckName": ("deck_name", str),
    "ankiConnectUrl": ("anki_connect_url", str),
    "ankiConnectVersion": ("anki_connect_version", int),
    "modelName": ("model_name", str),
    "frontField": ("front_field", str),
    "backField": ("back_field", str),
    "timeout": ("timeout", (int, float)),
}


def default_config_path() -> Path:
    """Return ~/.config/dict2anki/config.json."""
    try:
        home = Path.home()
    except (KeyError, RuntimeError) as e:
        raise ConfigError(f"Could not determine home directory: {e}") from e
    return home / ".config" / CONFIG_DIR_NAME / CONFIG_FILE_NAME


def config_from_dict(data: Dict[str, Any]) -> Config:
    """
    Build a Config from a decoded JSON object.

    Missing keys keep their defaults, so an absent apiKey or deckName
    becomes an empty string. Present keys must have the right type.
    Unknown keys are ignored.
    """
    values = {}
    for key, (attr, expected) in _FIELDS.items():
        if key not in data:
            continue
        value = data[key]
        # bool is an int subclass, but never a valid version or timeout
        if isinstance(value, bool) or not isinstance(value, expected):
            raise ConfigError(f"Invalid value for '{key}': {value!r}")
        if key == "timeout" and value <= 0:
            raise ConfigError(f"Invalid value for '{key}': {value!r} (must be positive)")
        values[attr] = value
    return Config(**values)


def load_config(path: Optional[Union[str, Path]] = None) -> Config:
    """
    Load configuration from a JSON file.

    Args:
        path: Config file location (default: ~/.config/dict2anki/config.json)

    Returns:
        Config instance

    Raises:
        ConfigError: if the file cannot be opened or decoded
    """
    config_path = Path(path) if path is not None else default_config_path()
    logger.debug("Loading config from %s", config_path)

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigError(f"Could not open {config_path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Could not parse {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a JSON object in {config_path}")

    config = config_from_dict(data)
    if not config.api_key:
        logger.debug("No apiKey set in %s", config_path)
    if not config.deck_name:
        logger.debug("No deckName set in %s", config_path)
    return config
