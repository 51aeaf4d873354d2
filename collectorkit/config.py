"""Reading a collector configuration and deriving service ports and a liveness probe."""

from __future__ import annotations

import dataclasses
import logging
import re
from collections.abc import Mapping
from typing import Any

import yaml

# imported for its side effect: it registers the jaeger and otlp parsers
from . import protocols as _protocols  # noqa: F401
from .receiver import ServicePort, parser_for

logger = logging.getLogger(__name__)

_DEFAULT_HEALTH_CHECK_PATH = "/"
_DEFAULT_HEALTH_CHECK_PORT = 13133
_INTEGER = re.compile(r"[+-]?[0-9]+")


class ConfigError(Exception):
    """Base class for errors in a collector configuration."""

    default_message = "invalid collector configuration"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class InvalidYAMLError(ConfigError):
    """The configuration is not valid YAML holding a mapping."""

    default_message = "couldn't parse the opentelemetry-collector configuration"


class NoReceiversError(ConfigError):
    """The configuration has no receivers."""

    default_message = "no receivers available as part of the configuration"


class ReceiversNotAMapError(ConfigError):
    """The receivers property is not a mapping."""

    default_message = "receivers property in the configuration doesn't contain valid receivers"


class NoServiceError(ConfigError):
    """The configuration has no service section."""

    default_message = "no service available as part of the configuration"


class ServiceNotAMapError(ConfigError):
    """The service property is not a mapping."""

    default_message = "service property in the configuration doesn't contain valid services"


class NoServiceExtensionsError(ConfigError):
    """The service section lists no extensions."""

    default_message = "service property in the configuration doesn't contain extensions"


class ServiceExtensionsNotAListError(ConfigError):
    """The service extensions property is not a list."""

    default_message = (
        "service extensions property in the configuration does not contain valid extensions"
    )


class NoServiceHealthCheckError(ConfigError):
    """No health_check extension is enabled in the service section."""

    default_message = "no healthcheck extension available in service extension configuration"


class NoExtensionsError(ConfigError):
    """The configuration has no extensions section."""

    default_message = "no extensions available as part of the configuration"


class ExtensionsNotAMapError(ConfigError):
    """The extensions property is not a mapping."""

    default_message = (
        "extensions property in the configuration doesn't contain valid extensions"
    )


class NoHealthCheckExtensionError(ConfigError):
    """The enabled health_check extension is not configured."""

    default_message = (
        "extensions property in the configuration does not contain "
        "the expected health_check extension"
    )


@dataclasses.dataclass(frozen=True)
class HTTPGetProbe:
    """An HTTP GET liveness probe; ``port`` is a number or a named port."""

    path: str
    port: int | str
    host: str = ""


def config_from_string(config_str: str) -> dict[Any, Any]:
    """Parse a YAML configuration into a mapping; raise InvalidYAMLError if that fails."""
    try:
        loaded = yaml.safe_load(config_str)
    except yaml.YAMLError as exc:
        raise InvalidYAMLError() from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise InvalidYAMLError()
    return loaded


def config_to_receiver_ports(config: Mapping[Any, Any]) -> list[ServicePort]:
    """Return the service ports that the configured receivers need.

    A receiver whose parser fails is logged and skipped.
    """
    if "receivers" not in config:
        raise NoReceiversError()
    receivers = config["receivers"]
    if not isinstance(receivers, Mapping):
        raise ReceiversNotAMapError()

    ports: list[ServicePort] = []
    for key, value in receivers.items():
        if not isinstance(value, Mapping):
            logger.info("receiver %s doesn't seem to be a map of properties", key)
            value = {}
        name = str(key)
        parser = parser_for(name, value)
        try:
            ports.extend(parser.ports())
        except Exception:
            logger.exception("parser for '%s' has returned an error", name)
    return ports


def config_to_container_probe(config: Mapping[Any, Any]) -> HTTPGetProbe:
    """Build a liveness probe from the configured health_check extension."""
    if "service" not in config:
        raise NoServiceError()
    service = config["service"]
    if not isinstance(service, Mapping):
        raise ServiceNotAMapError()

    if "extensions" not in service:
        raise NoServiceExtensionsError()
    service_extensions = service["extensions"]
    if not isinstance(service_extensions, list):
        raise ServiceExtensionsNotAListError()

    health_checks = [
        ext
        for ext in service_extensions
        if isinstance(ext, str) and ext.startswith("health_check")
    ]
    if not health_checks:
        raise NoServiceHealthCheckError()

    if "extensions" not in config:
        raise NoExtensionsError()
    extensions = config["extensions"]
    if not isinstance(extensions, Mapping):
        raise ExtensionsNotAMapError()

    # with several health_check extensions enabled, the first configured one wins
    for health_check in health_checks:
        if health_check in extensions:
            return _probe_from_extension(extensions[health_check])

    raise NoHealthCheckExtensionError()


def _probe_from_extension(extension: Any) -> HTTPGetProbe:
    if not isinstance(extension, Mapping):
        return HTTPGetProbe(path=_DEFAULT_HEALTH_CHECK_PATH, port=_DEFAULT_HEALTH_CHECK_PORT)
    return HTTPGetProbe(path=_path_from(extension), port=_port_from(extension))


def _path_from(extension: Mapping[Any, Any]) -> str:
    path = extension.get("path")
    return path if isinstance(path, str) else _DEFAULT_HEALTH_CHECK_PATH


def _port_from(extension: Mapping[Any, Any]) -> int | str:
    endpoint = extension.get("endpoint")
    if not isinstance(endpoint, str):
        return _DEFAULT_HEALTH_CHECK_PORT
    components = endpoint.split(":")
    if len(components) != 2:
        return _DEFAULT_HEALTH_CHECK_PORT
    port = components[1]
    return int(port) if _INTEGER.fullmatch(port) else port