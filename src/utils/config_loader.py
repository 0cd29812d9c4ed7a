"""
Configuration loading - YAML overrides applied to dataclass defaults.

YAML files contain only the values that differ from the dataclass defaults.
"""

from dataclasses import fields, is_dataclass, replace
from pathlib import Path
from typing import Any, cast

import yaml


def _merge_config(base: Any, overrides: dict[str, Any]) -> Any:
    """
    Recursively merge dictionary overrides into a dataclass.

    Args:
        base: Base dataclass with defaults
        overrides: Dictionary of overrides (typically from YAML)

    Returns:
        New dataclass instance with overrides applied

    Raises:
        TypeError: If an override names a field the dataclass does not have
    """
    if not is_dataclass(base):
        raise TypeError(f"base must be a dataclass, got {type(base)}")

    if not overrides:
        return base

    known = {field.name for field in fields(base)}
    unknown = sorted(set(overrides) - known)
    if unknown:
        raise TypeError(f"Unknown {type(base).__name__} keys: {unknown}")

    kwargs = {}
    for field_name, override_value in overrides.items():
        current_value = getattr(base, field_name)

        # Recursively merge if both are dataclasses
        if is_dataclass(current_value) and isinstance(override_value, dict):
            kwargs[field_name] = _merge_config(current_value, override_value)
        else:
            kwargs[field_name] = override_value

    return cast(Any, replace(base, **kwargs))  # type: ignore[type-var]


def _load_yaml(path: Path) -> dict[str, Any]:
    """Load YAML file and return as dict."""
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        data = yaml.safe_load(f)

    return data or {}
