"""
Template sub-configuration shared by hooks that render a notification body.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""

import os
from dataclasses import dataclass

from lifehook.exception import ConfigurationError, ConflictingConfiguration, TemplateParseError
from lifehook.template.engine import TemplateEngine


@dataclass
class TemplateSettings:
    """Body template declaration: an inline source or a path to a template file."""

    template: str = ""
    template_file: str = ""

    def resolve_path(self, work_dir: str) -> None:
        """Make a relative template file path relative to the declaring config directory."""
        if self.template_file and not os.path.isabs(self.template_file):
            self.template_file = os.path.normpath(
                os.path.join(work_dir, os.path.expanduser(self.template_file))
            )

    def merge_from(self, other: "TemplateSettings") -> None:
        """Absorb another declaration; both sides must agree where both are set.

        :param other: Template settings of the merged declaration
        :raises ConflictingConfiguration: If template or template file differ
        """
        if not self.template_file:
            self.template_file = other.template_file
        if other.template_file and self.template_file != other.template_file:
            raise ConflictingConfiguration("templateFile", self.template_file, other.template_file)

        if not self.template:
            self.template = other.template
        if other.template and self.template != other.template:
            raise ConflictingConfiguration("template", self.template, other.template)

    def load_source(self, default: str) -> str:
        """Return the body template source, reading the template file if one is set.

        :param default: Source used when neither template nor template file is set
        :raises ConfigurationError: If both are set or the file cannot be read
        """
        if self.template and self.template_file:
            raise ConfigurationError("template and templateFile are mutually exclusive")
        if self.template_file:
            try:
                return TemplateEngine.read(self.template_file)
            except TemplateParseError as e:
                raise ConfigurationError(str(e)) from e
        return self.template or default
