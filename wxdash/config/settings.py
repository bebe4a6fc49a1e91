"""Configuration utilities for wxdash."""

import os
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .constants import (
    ENV_VAR_DEFINITIONS,
    STORAGE_DIR_NAME,
    WIDGETS_OVERRIDE_FILENAME,
    WXDASH_CONFIG_DIR,
)


def get_storage_dir() -> Path:
    """Get the layout storage directory, respecting WXDASH_STORAGE_DIR.

    Tests point WXDASH_STORAGE_DIR at a temp directory so they never
    touch the real saved layouts.
    """
    override = os.environ.get("WXDASH_STORAGE_DIR")
    if override:
        return Path(override)

    return WXDASH_CONFIG_DIR / STORAGE_DIR_NAME


def get_registry_overrides_path() -> Path:
    """Get the path of the optional widget override file."""
    override = os.environ.get("WXDASH_WIDGETS_FILE")
    if override:
        return Path(override)
    return WXDASH_CONFIG_DIR / WIDGETS_OVERRIDE_FILENAME


def validate_env_var(name: str, value: Optional[str]) -> Tuple[bool, Optional[str]]:
    """Validate a single environment variable value.

    Args:
        name: The environment variable name.
        value: The current value (or None if not set).

    Returns:
        Tuple of (is_valid, error_message).
    """
    if name not in ENV_VAR_DEFINITIONS:
        return True, None  # Unknown vars are always valid

    valid_values = ENV_VAR_DEFINITIONS[name].get("valid_values")
    if value is None or valid_values is None:
        return True, None

    if value.upper() not in [v.upper() for v in valid_values]:
        return False, f"Invalid value '{value}' for {name}. Valid values: {valid_values}"

    return True, None


def validate_all_env_vars() -> List[str]:
    """Validate all wxdash environment variables.

    Returns:
        List of error messages (empty if all valid).
    """
    errors = []
    for name in ENV_VAR_DEFINITIONS:
        is_valid, error = validate_env_var(name, os.environ.get(name))
        if not is_valid and error:
            errors.append(error)
    return errors


def get_env_var(name: str, validate: bool = True) -> Optional[str]:
    """Get an environment variable with optional validation.

    Raises:
        ValueError: If validate=True and the value is invalid.
    """
    value = os.environ.get(name)

    if validate and value is not None:
        is_valid, error = validate_env_var(name, value)
        if not is_valid:
            raise ValueError(error)

    if value is None and name in ENV_VAR_DEFINITIONS:
        return ENV_VAR_DEFINITIONS[name].get("default")

    return value


def get_env_info() -> Dict[str, Dict]:
    """Describe every wxdash environment variable and its current state."""
    info = {}
    for name, definition in ENV_VAR_DEFINITIONS.items():
        value = os.environ.get(name)
        is_valid, _ = validate_env_var(name, value)
        info[name] = {
            "description": definition.get("description", ""),
            "value": value,
            "is_set": value is not None,
            "valid": is_valid,
            "default": definition.get("default"),
        }
    return info
