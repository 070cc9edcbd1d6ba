"""
Hook error taxonomy and exception-translating decorators.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""

from functools import wraps
from typing import Any, Callable

import jinja2
import requests


class HookException(Exception):
    """Base class for lifehook errors."""

    phase = "hook"


class ConfigurationError(HookException):
    """Invalid or inconsistent plugin configuration. Fatal at load time."""

    phase = "config"


class ConflictingConfiguration(ConfigurationError):
    """Two merged declarations disagree on a singular field."""

    def __init__(self, field: str, current: Any, incoming: Any):
        super().__init__(f"conflicting {field}: {current!r} != {incoming!r}")
        self.field = field
        self.current = current
        self.incoming = incoming


class TemplateRenderError(HookException):
    """Template could not be rendered."""

    phase = "template"


class TemplateParseError(TemplateRenderError):
    """Template source is malformed or could not be loaded."""

    phase = "template-parse"


class TemplateExecError(TemplateRenderError):
    """Template failed while executing against its parameters."""

    phase = "template-exec"


class RequestConstructionError(HookException):
    """Method, URL and body do not form a valid HTTP request."""

    phase = "request"


class TransportError(HookException):
    """Network failure or timeout while sending a request."""

    phase = "transport"

    def __init__(self, message: str, timed_out: bool = False):
        super().__init__(message)
        self.timed_out = timed_out


def handle_template_exception(func) -> Callable[..., Any]:
    """Decorator to translate Jinja2 exceptions into template errors."""

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except TemplateRenderError:
            raise
        except jinja2.TemplateSyntaxError as e:
            raise TemplateParseError(f"line {e.lineno}: {e.message}") from e
        except jinja2.TemplateNotFound as e:
            raise TemplateParseError(f"template not found: {e.name}") from e
        except jinja2.UndefinedError as e:
            raise TemplateExecError(f"undefined value: {e.message}") from e
        except Exception as e:
            raise TemplateExecError(f"unexpected error when running {func.__name__}: {e}") from e

    return wrapper


def handle_transport_exception(func) -> Callable[..., Any]:
    """Decorator to translate requests exceptions into request or transport errors."""

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except HookException:
            raise
        except (
            requests.exceptions.MissingSchema,
            requests.exceptions.InvalidSchema,
            requests.exceptions.InvalidURL,
            requests.exceptions.InvalidHeader,
        ) as e:
            raise RequestConstructionError(f"invalid request: {e}") from e
        except requests.Timeout as e:
            raise TransportError(f"request timed out: {e}", timed_out=True) from e
        except requests.RequestException as e:
            raise TransportError(f"request failed: {e}") from e
        except ValueError as e:
            # headers or body that http.client cannot encode, e.g. UnicodeEncodeError
            raise RequestConstructionError(f"invalid request: {e}") from e

    return wrapper
