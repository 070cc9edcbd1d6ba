"""
Lifecycle hook protocol implemented by every plugin.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class LifecycleHook(Protocol):
    """Protocol for hooks the supervisor notifies on service lifecycle events."""

    def load(self, declaration: dict[str, Any]) -> None:
        """Populate the hook from one parsed declaration.

        :param declaration: Mapping parsed from a configuration file
        """

    def merge_from(self, other: Any) -> None:
        """Absorb a sibling declaration of the same plugin.

        :param other: Hook of the same type built from another declaration
        """

    def prepare(self) -> None:
        """Derive runtime state once all declarations are merged."""

    def spawned(self, instance_id: str, label: str) -> Any:
        """Handle a service start.

        :param instance_id: Identifier of the started instance
        :param label: Service label
        """

    def stopped(self, instance_id: str, label: str, failure: BaseException | None = None) -> Any:
        """Handle a service stop.

        :param instance_id: Identifier of the stopped instance
        :param label: Service label
        :param failure: Reason the service stopped, None for a clean stop
        """
