"""
HTTP webhook hook: templated URL and body, bounded send, fire-and-forget delivery.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""

import logging
import os
import re
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from datetime import timedelta
from typing import Any

import requests

from lifehook.exception import (
    ConfigurationError,
    ConflictingConfiguration,
    HookException,
    TransportError,
    handle_transport_exception,
)
from lifehook.settings import HTTP_HOOK_METHOD, HTTP_HOOK_TIMEOUT, parse_duration
from lifehook.template import (
    DEFAULT_BODY_TEMPLATE,
    SPAWNED,
    STOPPED,
    TemplateEngine,
    TemplateSettings,
    build_params,
)

logger = logging.getLogger(__name__)

DECLARATION_KEYS = ("url", "method", "headers", "services", "timeout", "template", "templateFile")
DRAIN_CHUNK_SIZE = 1024
MAX_WORKERS = 4

_TOKEN = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")


def _get_str(declaration: dict[str, Any], key: str) -> str:
    """Read an optional string field from a declaration."""
    value = declaration.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ConfigurationError(f"'{key}' must be a string, got {type(value).__name__}")
    return value


def _check_header(name: str, value: str) -> None:
    """Reject a static header that cannot be sent on the wire."""
    if not _TOKEN.match(name):
        raise ConfigurationError(f"Invalid header name {name!r}")
    if "\r" in value or "\n" in value:
        raise ConfigurationError(f"Header {name!r} must not contain line breaks")
    try:
        value.encode("latin-1")
    except UnicodeEncodeError as e:
        raise ConfigurationError(f"Header {name!r} must be latin-1 encodable: {e}") from e


def _check_deadline(deadline: float, message: str) -> None:
    if time.monotonic() >= deadline:
        raise TransportError(message, timed_out=True)


class HttpHook:
    """Sends an HTTP request for lifecycle events of the configured services."""

    def __init__(self, work_dir: str = ".", name: str = "http") -> None:
        """Initialize an empty HTTP hook.

        :param work_dir: Directory of the configuration file that declared the hook
        :param name: Plugin name used in log records
        """
        self.name = name
        self.work_dir = work_dir
        self.url = ""
        self.method = ""
        self.headers: dict[str, str] | None = None
        self.services: list[str] = []
        self.timeout = timedelta(0)
        self.template = TemplateSettings()

        self.services_set: frozenset[str] = frozenset()
        self.logger = logger
        self.engine: TemplateEngine | None = None
        self.session: requests.Session | None = None
        self._executor: ThreadPoolExecutor | None = None
        self._body_source = ""
        self._prepared = False

    @classmethod
    def from_file(cls, config_file: str) -> "HttpHook":
        """Create an empty hook bound to the directory of its configuration file."""
        return cls(work_dir=os.path.dirname(os.path.abspath(config_file)))

    def load(self, declaration: dict[str, Any]) -> None:
        """Populate the hook from one parsed declaration.

        :param declaration: Mapping parsed from a configuration file
        :raises ConfigurationError: If a field has the wrong type or value
        """
        if not isinstance(declaration, dict):
            raise ConfigurationError(f"'{self.name}' declaration must be a mapping")

        for key in declaration:
            if key not in DECLARATION_KEYS:
                logger.warning(f"Ignoring unknown key '{key}' in '{self.name}' declaration")

        self.url = _get_str(declaration, "url")
        self.method = _get_str(declaration, "method").strip().upper()

        headers = declaration.get("headers")
        if headers is not None:
            if not isinstance(headers, dict):
                raise ConfigurationError("'headers' must be a mapping of strings")
            self.headers = {str(key): str(value) for key, value in headers.items()}
            for key, value in self.headers.items():
                _check_header(key, value)

        services = declaration.get("services")
        if services is not None:
            if not isinstance(services, list):
                raise ConfigurationError("'services' must be a list of service labels")
            self.services = [str(service) for service in services]

        timeout = declaration.get("timeout")
        if timeout is not None:
            try:
                self.timeout = parse_duration(timeout)
            except ValueError as e:
                raise ConfigurationError(f"'timeout': {e}") from e
            if self.timeout < timedelta(0):
                raise ConfigurationError(f"'timeout' must not be negative, got {timeout!r}")

        self.template = TemplateSettings(
            template=_get_str(declaration, "template"),
            template_file=_get_str(declaration, "templateFile"),
        )

    def merge_from(self, other: "HttpHook") -> None:
        """Absorb a sibling declaration of the same plugin.

        Singular fields must agree wherever both sides set them. Headers are
        merged key by key with ``other`` overwriting, services are concatenated.

        :param other: Hook built from another declaration
        :raises ConflictingConfiguration: If a singular field differs
        """
        if self._prepared:
            raise ConfigurationError(f"'{self.name}' hook is already prepared")
        if not isinstance(other, HttpHook):
            raise ConfigurationError(f"Cannot merge {type(other).__name__} into '{self.name}' hook")

        if not self.url:
            self.url = other.url
        if other.url and self.url != other.url:
            raise ConflictingConfiguration("url", self.url, other.url)

        if not self.method:
            self.method = other.method
        if other.method and self.method != other.method:
            raise ConflictingConfiguration("method", self.method, other.method)

        if not self.timeout:
            self.timeout = other.timeout
        if other.timeout and self.timeout != other.timeout:
            raise ConflictingConfiguration("timeout", self.timeout, other.timeout)

        self.template.resolve_path(self.work_dir)
        other.template.resolve_path(other.work_dir)
        self.template.merge_from(other.template)

        if self.headers is None:
            self.headers = {}
        for key, value in (other.headers or {}).items():
            self.headers[key] = value

        self.services.extend(other.services)

    def prepare(self) -> None:
        """Apply defaults and derive runtime state. The hook is read-only afterwards.

        :raises ConfigurationError: If the merged configuration is incomplete or invalid
        """
        if self._prepared:
            raise ConfigurationError(f"'{self.name}' hook is already prepared")
        if not self.url:
            raise ConfigurationError(f"'{self.name}' hook requires a url")

        self.method = self.method or HTTP_HOOK_METHOD
        if not _TOKEN.match(self.method):
            raise ConfigurationError(f"Invalid HTTP method {self.method!r}")
        if not self.timeout:
            self.timeout = HTTP_HOOK_TIMEOUT

        self.headers = dict(self.headers or {})
        self.services_set = frozenset(self.services)
        self.template.resolve_path(self.work_dir)
        self._body_source = self.template.load_source(DEFAULT_BODY_TEMPLATE)
        self.logger = logging.getLogger(f"{__name__}.{self.name}")
        self.engine = TemplateEngine()
        self.session = requests.Session()
        self._executor = ThreadPoolExecutor(max_workers=MAX_WORKERS, thread_name_prefix=f"lifehook-{self.name}")
        self._prepared = True

        if not self.services_set:
            self.logger.warning(f"'{self.name}' hook listens to no services")
        self.logger.info(
            f"Prepared '{self.name}' hook: {self.method} {self.url} "
            f"for services {sorted(self.services_set)}, timeout {self.timeout.total_seconds()}s"
        )

    def spawned(self, instance_id: str, label: str) -> HookException | None:
        """Notify that a service instance started.

        :param instance_id: Identifier of the started instance
        :param label: Service label
        :return: The error that dropped the notification, if any
        """
        if label not in self.services_set:
            return None
        return self._handle(SPAWNED, instance_id, label, None)

    def stopped(
        self, instance_id: str, label: str, failure: BaseException | None = None
    ) -> HookException | None:
        """Notify that a service instance stopped.

        :param instance_id: Identifier of the stopped instance
        :param label: Service label
        :param failure: Reason the service stopped, None for a clean stop
        :return: The error that dropped the notification, if any
        """
        if label not in self.services_set:
            return None
        return self._handle(STOPPED, instance_id, label, failure)

    def notify(
        self, action: str, instance_id: str, label: str, failure: BaseException | None = None
    ) -> None:
        """Render and send one notification, raising on any failure.

        :raises HookException: If rendering or sending fails
        """
        if not self._prepared:
            raise ConfigurationError(f"'{self.name}' hook is not prepared")
        body, params = build_params(action, instance_id, label, failure, self._body_source, self.engine)
        self.dispatch(body, params)

    def send(self, body: str, params: dict[str, Any]) -> HookException | None:
        """Send a rendered body, logging and returning the error instead of raising."""
        return self._contain(params.get("action"), params.get("label"), self.dispatch, body, params)

    def dispatch(self, body: str, params: dict[str, Any]) -> None:
        """Render the URL and send the request within the configured timeout.

        :param body: Rendered notification body, sent as is
        :param params: Template parameters for the URL
        :raises HookException: If the URL cannot be rendered or the request fails
        """
        self.logger.info(body.strip(), extra={"plugin": self.name, "action": params.get("action")})
        url = self.engine.render(self.url, params)
        self._request(url, body)

    @handle_transport_exception
    def _request(self, url: str, body: str) -> None:
        """Send one request, waiting no longer than the timeout for the whole exchange.

        The exchange runs on a worker thread so a server that trickles its
        headers or body cannot hold the caller past the deadline. A worker
        that outlives the deadline closes its response on its next read.
        """
        request = requests.Request(self.method, url, headers=self.headers, data=body.encode("utf-8"))
        prepared = self.session.prepare_request(request)
        settings = self.session.merge_environment_settings(prepared.url, {}, True, None, None)

        timeout = self.timeout.total_seconds()
        deadline = time.monotonic() + timeout
        future = self._executor.submit(self._exchange, prepared, settings, deadline)
        try:
            status_code = future.result(timeout=max(deadline - time.monotonic(), 0))
        except FutureTimeoutError as e:
            future.cancel()
            raise TransportError(f"timed out after {timeout}s waiting for {url}", timed_out=True) from e

        self.logger.debug(f"{self.method} {url} answered with HTTP {status_code}")

    def _exchange(self, prepared: requests.PreparedRequest, settings: dict[str, Any], deadline: float) -> int:
        """Send a prepared request and drain the response so the connection can be reused."""
        url = prepared.url
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise TransportError(f"timed out before sending to {url}", timed_out=True)

        response = self.session.send(prepared, timeout=(remaining, remaining), **settings)
        try:
            _check_deadline(deadline, f"timed out waiting for response headers from {url}")
            for _ in response.iter_content(chunk_size=DRAIN_CHUNK_SIZE):
                _check_deadline(deadline, f"timed out while reading response from {url}")
        except requests.RequestException as e:
            raise TransportError(
                f"failed reading response from {url}: {e}",
                timed_out=time.monotonic() >= deadline,
            ) from e
        finally:
            response.close()
        return response.status_code

    def _handle(
        self, action: str, instance_id: str, label: str, failure: BaseException | None
    ) -> HookException | None:
        """Hook boundary: contain every failure of one notification."""
        return self._contain(action, label, self.notify, action, instance_id, label, failure)

    def _contain(self, action: str | None, label: str | None, func, *args: Any) -> HookException | None:
        """Run ``func`` and return the error that dropped the notification, if any."""
        try:
            func(*args)
        except HookException as e:
            self._log_failure(e, action, label)
            return e
        except Exception as e:
            self.logger.exception(
                f"Unexpected error in '{self.name}' hook for {label} {action}: {e}",
                extra={"plugin": self.name, "action": action, "label": label},
            )
            return HookException(str(e))
        return None

    def _log_failure(self, error: HookException, action: str | None, label: str | None) -> None:
        """Log a dropped notification with the phase that failed."""
        if isinstance(error, TransportError) and error.timed_out:
            reason = "timed out"
        else:
            reason = f"failed in {error.phase} phase"
        self.logger.error(
            f"Notification for {label} {action} {reason}: {error}",
            extra={"plugin": self.name, "phase": error.phase, "action": action, "label": label},
        )

    def close(self) -> None:
        """Release pooled connections and abandon workers still waiting on slow servers."""
        if self._executor is not None:
            self._executor.shutdown(wait=False, cancel_futures=True)
        if self.session is not None:
            self.session.close()
