"""Module for common utility functions used across accelerator stacks.

This module provides helpers for loading configuration files and for building
deterministic construct identifiers from configuration names.
"""

import json
import re
from pathlib import Path
from typing import Any

_WORD_PATTERN = re.compile(r"[A-Z]+(?![a-z])|[A-Z]?[a-z]+|[0-9]+")


def pascal_case(value: str) -> str:
    """Convert an arbitrary configuration name to PascalCase.

    Word boundaries are non-alphanumeric characters and lower-to-upper case
    transitions, so ``"shared-services"``, ``"shared_services"`` and
    ``"sharedServices"`` all become ``"SharedServices"``.

    Args:
        value: Name to convert.

    Returns:
        The PascalCase form of the name.
    """
    words = _WORD_PATTERN.findall(value)
    return "".join(word[:1].upper() + word[1:].lower() for word in words)


def load_json_config(file_path: str, base_path: Path) -> dict[str, Any]:
    """Load JSON configuration from file relative to the base path.

    Args:
        file_path: Path to the JSON configuration file.
        base_path: Base directory to resolve the file path against.

    Returns:
        Dictionary containing the loaded JSON configuration.

    Raises:
        FileNotFoundError: If the configuration file does not exist.
        json.JSONDecodeError: If the file contains invalid JSON.
    """
    config_path = base_path / file_path
    with open(config_path) as f:
        return json.load(f)
