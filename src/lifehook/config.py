"""
Configuration file loading for lifehook declarations.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""

import json
from pathlib import Path
from typing import Any

import yaml

from lifehook.exception import ConfigurationError


def load_config_file(config_file: str) -> dict[str, Any]:
    """Load a YAML or JSON configuration file.

    :param config_file: Path to a .yaml, .yml or .json file
    :return: Parsed top-level mapping (empty for an empty file)
    :raises ConfigurationError: If the file is missing, malformed or not a mapping
    """
    config_path = Path(config_file).expanduser()

    file_ext = config_path.suffix.lower()
    if file_ext not in (".yaml", ".yml", ".json"):
        raise ConfigurationError(
            f"Config file must have .yaml, .yml or .json extension, got '{file_ext}': {config_path}"
        )

    try:
        content = config_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Failed to read config file {config_path}: {e}") from e

    try:
        if file_ext == ".json":
            data = json.loads(content) if content.strip() else None
        else:
            data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in config file {config_path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in config file {config_path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {config_path} must contain a mapping at top level")
    return data
