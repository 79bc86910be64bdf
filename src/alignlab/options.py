# Copyright (c) Syntropy Systems
"""Typed access to method option mappings."""
from __future__ import annotations

from typing import TYPE_CHECKING

from typing_extensions import TypeAlias

from alignlab.errors import ConfigError

if TYPE_CHECKING:
    from collections.abc import Mapping

OptionValue: TypeAlias = "str | int | float | bool | None"
MethodOptions: TypeAlias = "Mapping[str, OptionValue]"

AUTO = "auto"


def parse_value(value: str) -> OptionValue:
    """Parse a command-line option value.

    - true/false -> bool
    - 123 -> int
    - 1.5 -> float
    - other -> str
    """
    lowered = value.lower()
    if lowered in ("true", "false"):
        return lowered == "true"

    # Try numeric parsing
    try:
        if "." in value or "e" in lowered:
            return float(value)
        return int(value)
    except ValueError:
        return value


def parse_assignments(assignments: list[str]) -> dict[str, OptionValue]:
    """Parse key=value strings into an options dict."""
    options: dict[str, OptionValue] = {}
    for assignment in assignments:
        if "=" not in assignment:
            msg = f"Invalid option format: '{assignment}' (expected key=value)"
            raise ConfigError(msg)
        key, value = assignment.split("=", 1)
        options[key.strip().lstrip("-")] = parse_value(value)
    return options


def _missing(method: str, key: str) -> ConfigError:
    return ConfigError(f"{method}: missing option '{key}'")


def get_str(options: MethodOptions, key: str, method: str) -> str:
    value = options.get(key)
    if value is None or value == "":
        raise _missing(method, key)
    return str(value)


def get_float(options: MethodOptions, key: str, method: str) -> float:
    value = options.get(key)
    if value is None:
        raise _missing(method, key)
    if isinstance(value, bool):
        msg = f"{method}: option '{key}' must be a number, got {value!r}"
        raise ConfigError(msg)
    try:
        return float(value)
    except ValueError as e:
        msg = f"{method}: option '{key}' must be a number, got {value!r}"
        raise ConfigError(msg) from e


def get_int(options: MethodOptions, key: str, method: str) -> int:
    value = get_float(options, key, method)
    if value != int(value) or value < 0:
        msg = f"{method}: option '{key}' must be a non-negative integer, got {value!r}"
        raise ConfigError(msg)
    return int(value)


def get_bool(options: MethodOptions, key: str, method: str, default: bool = False) -> bool:
    value = options.get(key)
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true"
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    msg = f"{method}: option '{key}' must be true or false, got {value!r}"
    raise ConfigError(msg)


def get_float_or_auto(options: MethodOptions, key: str, method: str) -> float | None:
    """Return the numeric value, or None when the option is 'auto'."""
    if options.get(key) == AUTO:
        return None
    return get_float(options, key, method)
