"""Receiver parsers for multi-protocol receivers: Jaeger and OTLP."""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from typing import Any, NamedTuple

from .receiver import (
    Protocol,
    ReceiverParser,
    ServicePort,
    port_name,
    register,
    single_port_from_config_endpoint,
)

_JAEGER_GRPC_PORT = 14250
_JAEGER_THRIFT_HTTP_PORT = 14268
_JAEGER_THRIFT_COMPACT_PORT = 6831
_JAEGER_THRIFT_BINARY_PORT = 6832

_OTLP_GRPC_PORT = 4317
_OTLP_HTTP_LEGACY_PORT = 55681
_OTLP_HTTP_PORT = 4318

_GRPC = "grpc"
_HTTP = "http"


class _JaegerProtocol(NamedTuple):
    name: str
    default_port: int
    transport: Protocol
    app_protocol: str | None


_JAEGER_PROTOCOLS = (
    _JaegerProtocol("grpc", _JAEGER_GRPC_PORT, Protocol.TCP, "grpc"),
    _JaegerProtocol("thrift_http", _JAEGER_THRIFT_HTTP_PORT, Protocol.TCP, "http"),
    _JaegerProtocol("thrift_compact", _JAEGER_THRIFT_COMPACT_PORT, Protocol.UDP, None),
    _JaegerProtocol("thrift_binary", _JAEGER_THRIFT_BINARY_PORT, Protocol.UDP, None),
)


def _protocols_section(config: Mapping[Any, Any]) -> Mapping[Any, Any]:
    protocols = config.get("protocols") if isinstance(config, Mapping) else None
    return protocols if isinstance(protocols, Mapping) else {}


@dataclasses.dataclass
class JaegerReceiverParser(ReceiverParser):
    """Parser for Jaeger receivers; ``config`` holds the ``protocols`` section."""

    name: str
    config: Mapping[Any, Any]

    parser_name = "__jaeger"

    def ports(self) -> list[ServicePort]:
        ports: list[ServicePort] = []
        for protocol in _JAEGER_PROTOCOLS:
            if protocol.name not in self.config:
                continue
            name_with_protocol = f"{self.name}-{protocol.name}"
            settings = self.config[protocol.name]

            port = None
            if isinstance(settings, Mapping):
                port = single_port_from_config_endpoint(name_with_protocol, settings)
            if port is None:
                port = ServicePort(
                    name=port_name(name_with_protocol, protocol.default_port),
                    port=protocol.default_port,
                )

            port = dataclasses.replace(port, protocol=protocol.transport)
            if protocol.app_protocol:
                port = dataclasses.replace(port, app_protocol=protocol.app_protocol)
            ports.append(port)
        return ports


@dataclasses.dataclass
class OTLPReceiverParser(ReceiverParser):
    """Parser for OTLP receivers; ``config`` holds the ``protocols`` section."""

    name: str
    config: Mapping[Any, Any]

    parser_name = "__otlp"

    def _default_ports(self, protocol: str) -> list[ServicePort]:
        if protocol == _GRPC:
            return [
                ServicePort(
                    name=port_name(f"{self.name}-grpc", _OTLP_GRPC_PORT),
                    port=_OTLP_GRPC_PORT,
                    target_port=_OTLP_GRPC_PORT,
                    app_protocol=_GRPC,
                )
            ]
        return [
            ServicePort(
                name=port_name(f"{self.name}-http", _OTLP_HTTP_PORT),
                port=_OTLP_HTTP_PORT,
                target_port=_OTLP_HTTP_PORT,
                app_protocol=_HTTP,
            ),
            # the legacy port targets the official one
            ServicePort(
                name=port_name(f"{self.name}-http-legacy", _OTLP_HTTP_LEGACY_PORT),
                port=_OTLP_HTTP_LEGACY_PORT,
                target_port=_OTLP_HTTP_PORT,
                app_protocol=_HTTP,
            ),
        ]

    def ports(self) -> list[ServicePort]:
        ports: list[ServicePort] = []
        for protocol in (_GRPC, _HTTP):
            if protocol not in self.config:
                continue
            name_with_protocol = f"{self.name}-{protocol}"
            settings = self.config[protocol]

            port = None
            if isinstance(settings, Mapping):
                port = single_port_from_config_endpoint(name_with_protocol, settings)

            if port is None:
                ports.extend(self._default_ports(protocol))
            else:
                ports.append(
                    dataclasses.replace(port, protocol=Protocol.TCP, app_protocol=protocol)
                )
        return ports


def new_jaeger_receiver_parser(name: str, config: Mapping[Any, Any]) -> ReceiverParser:
    """Build a parser for Jaeger receivers."""
    return JaegerReceiverParser(name=name, config=_protocols_section(config))


def new_otlp_receiver_parser(name: str, config: Mapping[Any, Any]) -> ReceiverParser:
    """Build a parser for OTLP receivers."""
    return OTLPReceiverParser(name=name, config=_protocols_section(config))


register("jaeger", new_jaeger_receiver_parser)
register("otlp", new_otlp_receiver_parser)