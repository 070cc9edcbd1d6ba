"""
Notification parameters and body rendering for lifecycle events.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""

import socket
from datetime import datetime
from typing import Any

from lifehook.template.engine import TemplateEngine

SPAWNED = "spawned"
STOPPED = "stopped"
ACTIONS = (SPAWNED, STOPPED)

DEFAULT_BODY_TEMPLATE = (
    "Service {{ label }} {{ action }}\n"
    "Instance: {{ id }}\n"
    "{% if error %}Error: {{ error }}\n{% endif %}"
    "Host: {{ hostname }}\n"
    "Time: {{ time }}\n"
)


def build_params(
    action: str,
    instance_id: str,
    label: str,
    failure: BaseException | None,
    source: str,
    engine: TemplateEngine,
) -> tuple[str, dict[str, Any]]:
    """Build the template parameters for an event and render the notification body.

    :param action: Event kind, "spawned" or "stopped"
    :param instance_id: Identifier of the service instance
    :param label: Service label
    :param failure: Reason the service stopped, None for a clean stop or a spawn
    :param source: Body template source
    :param engine: Template engine used to render the body
    :return: Rendered body and the parameter mapping
    :raises TemplateRenderError: If the body template fails to parse or execute
    """
    if action not in ACTIONS:
        raise ValueError(f"Unknown lifecycle action: {action!r}")

    params = {
        "action": action,
        "id": str(instance_id),
        "label": label,
        "error": (str(failure) or type(failure).__name__) if failure is not None else "",
        "hostname": socket.gethostname(),
        "time": datetime.now().isoformat(),
    }
    body = engine.render(source, params)
    return body, params
