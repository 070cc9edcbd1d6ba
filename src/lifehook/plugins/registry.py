"""
Explicit plugin registration table and the loader that builds prepared hooks.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""

import logging
from typing import Callable, Iterable

from lifehook.config import load_config_file
from lifehook.exception import ConfigurationError
from lifehook.plugins.base import LifecycleHook

logger = logging.getLogger(__name__)

PluginFactory = Callable[[str], LifecycleHook]


class PluginRegistry:
    """Maps plugin names to factories creating an empty hook for a config file."""

    def __init__(self) -> None:
        self._factories: dict[str, PluginFactory] = {}

    def register(self, name: str, factory: PluginFactory) -> PluginFactory:
        """Register a plugin factory.

        :param name: Plugin name, the top-level key of its declarations
        :param factory: Callable taking the declaring config file path
        :return: The factory, unchanged
        :raises ConfigurationError: If the name is already registered
        """
        if name in self._factories:
            raise ConfigurationError(f"Plugin '{name}' is already registered")
        self._factories[name] = factory
        return factory

    def plugin(self, name: str) -> Callable[[PluginFactory], PluginFactory]:
        """Decorator form of :meth:`register`.

        :param name: Plugin name
        :return: Decorator function
        """

        def wrapper(factory: PluginFactory) -> PluginFactory:
            return self.register(name, factory)

        return wrapper

    def create(self, name: str, config_file: str) -> LifecycleHook:
        """Create an empty hook for a declaration found in ``config_file``."""
        try:
            factory = self._factories[name]
        except KeyError as e:
            raise ConfigurationError(f"Unknown plugin '{name}'") from e
        return factory(config_file)

    def names(self) -> list[str]:
        """Return registered plugin names."""
        return list(self._factories)

    def __contains__(self, name: object) -> bool:
        return name in self._factories


class HookSet:
    """Forwards supervisor lifecycle events to every loaded hook."""

    def __init__(self, hooks: dict[str, LifecycleHook]) -> None:
        self.hooks = hooks

    def spawned(self, instance_id: str, label: str) -> None:
        """Dispatch a service start to all hooks."""
        for hook in self.hooks.values():
            hook.spawned(instance_id, label)

    def stopped(self, instance_id: str, label: str, failure: BaseException | None = None) -> None:
        """Dispatch a service stop to all hooks."""
        for hook in self.hooks.values():
            hook.stopped(instance_id, label, failure)

    def close(self) -> None:
        """Close hooks that hold resources."""
        for hook in self.hooks.values():
            close = getattr(hook, "close", None)
            if close is not None:
                close()


class PluginLoader:
    """Reads declarations from config files, merges them per plugin and prepares them."""

    def __init__(self, registry: PluginRegistry) -> None:
        self.registry = registry

    def load(self, config_files: Iterable[str]) -> HookSet:
        """Build prepared hooks from configuration files.

        Declarations sharing a plugin name are merged in file order. Every
        hook is prepared only after all merges are done.

        :param config_files: Paths to YAML or JSON configuration files
        :return: Hook set of prepared hooks keyed by plugin name
        :raises ConfigurationError: On unreadable files, invalid or conflicting declarations
        """
        hooks: dict[str, LifecycleHook] = {}
        for config_file in config_files:
            data = load_config_file(config_file)
            for name, declaration in data.items():
                if name not in self.registry:
                    logger.debug(f"Skipping non-plugin key '{name}' in {config_file}")
                    continue

                hook = self.registry.create(name, config_file)
                hook.load(declaration)
                if name in hooks:
                    logger.debug(f"Merging '{name}' declaration from {config_file}")
                    hooks[name].merge_from(hook)
                else:
                    hooks[name] = hook

        for name, hook in hooks.items():
            hook.prepare()
            logger.info(f"Plugin '{name}' ready")
        return HookSet(hooks)
