"""
Environment variable parsing and process-wide defaults for lifehook.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""

import os
import re
from datetime import timedelta


def _get_bool_env(key: str, default: bool) -> bool:
    """Get boolean environment variable.

    :param key: Environment variable name
    :param default: Default value if not set
    :return: Boolean value
    """
    value = os.getenv(key, str(default)).lower()
    return value in ("true", "1", "yes", "on")


def parse_duration(duration: str | int | float | timedelta) -> timedelta:
    """Parse duration like '500ms', '30s', '10m', '1h', '2d' or a number of seconds.

    :param duration: Duration string, number of seconds or timedelta
    :return: Parsed timedelta object
    :raises ValueError: If the duration cannot be parsed
    """
    if isinstance(duration, timedelta):
        return duration
    if isinstance(duration, bool):
        raise ValueError(f"Invalid duration: {duration!r}")
    if isinstance(duration, (int, float)):
        return timedelta(seconds=duration)

    match = re.match(r"^(\d+(?:\.\d+)?)(ms|s|m|h|d)?$", str(duration).strip().lower())
    if not match:
        raise ValueError(f"Invalid duration: {duration!r}")

    value, unit = float(match.group(1)), match.group(2)

    match unit:
        case "ms":
            return timedelta(milliseconds=value)
        case "s" | None:
            return timedelta(seconds=value)
        case "m":
            return timedelta(minutes=value)
        case "h":
            return timedelta(hours=value)
        case "d":
            return timedelta(days=value)
        case _:
            raise ValueError(f"Invalid duration unit: {unit!r}")


def _get_duration_env(key: str, default: str) -> timedelta:
    """Get a positive duration environment variable, falling back to the default otherwise.

    :param key: Environment variable name
    :param default: Default duration string
    :return: Parsed timedelta object
    """
    try:
        value = parse_duration(os.getenv(key, default))
    except ValueError:
        return parse_duration(default)
    if value <= timedelta(0):
        return parse_duration(default)
    return value


"""lifehook Settings"""
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
ENABLE_JSON_LOGS = _get_bool_env("ENABLE_JSON_LOGS", True)
HTTP_HOOK_METHOD = os.getenv("HTTP_HOOK_METHOD", "POST").strip().upper() or "POST"
HTTP_HOOK_TIMEOUT = _get_duration_env("HTTP_HOOK_TIMEOUT", "20s")
