"""
Template module exports for rendering notification bodies and URLs.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""

from lifehook.template.engine import TemplateEngine
from lifehook.template.params import DEFAULT_BODY_TEMPLATE, SPAWNED, STOPPED, build_params
from lifehook.template.settings import TemplateSettings

__all__ = [
    "DEFAULT_BODY_TEMPLATE",
    "SPAWNED",
    "STOPPED",
    "TemplateEngine",
    "TemplateSettings",
    "build_params",
]
