"""
Plugin module exports and the default registration table.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""

from lifehook.plugins.base import LifecycleHook
from lifehook.plugins.http import HttpHook
from lifehook.plugins.registry import HookSet, PluginLoader, PluginRegistry


def default_registry() -> PluginRegistry:
    """Return a new registry with the built-in plugins registered."""
    registry = PluginRegistry()
    registry.register("http", HttpHook.from_file)
    return registry


__all__ = [
    "HookSet",
    "HttpHook",
    "LifecycleHook",
    "PluginLoader",
    "PluginRegistry",
    "default_registry",
]
