"""Receiver parsers that work out the service ports a collector receiver needs."""

from __future__ import annotations

import dataclasses
import enum
import logging
import re
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from typing import Any

logger = logging.getLogger(__name__)

# DNS_LABEL constraints for service port names.
_DNS_LABEL = re.compile(r"(([A-Za-z0-9][-A-Za-z0-9_.]*)?[A-Za-z0-9])?")
_PORT_IN_ENDPOINT = re.compile(r":[0-9]+")
_MAX_PORT_NAME_LENGTH = 63
_INT32_MAX = 2**31 - 1

_ENDPOINT_KEY = "endpoint"
_LISTEN_ADDRESS_KEY = "listen_address"


class Protocol(str, enum.Enum):
    """Transport protocol of a service port."""

    TCP = "TCP"
    UDP = "UDP"
    SCTP = "SCTP"


@dataclasses.dataclass(frozen=True)
class ServicePort:
    """A port that a service exposes for a receiver."""

    name: str
    port: int
    protocol: Protocol | None = None
    app_protocol: str | None = None
    target_port: int | None = None


class ReceiverParser(ABC):
    """Works out the service ports for one receiver's configuration."""

    parser_name: str

    @abstractmethod
    def ports(self) -> list[ServicePort]:
        """Return the service ports parsed from the receiver's configuration."""


Builder = Callable[[str, Mapping[Any, Any]], ReceiverParser]

_registry: dict[str, Builder] = {}


def builder_for(name: str) -> Builder:
    """Return the parser builder for a receiver name, falling back to the generic one."""
    return _registry.get(receiver_type(name), new_generic_receiver_parser)


def parser_for(name: str, config: Mapping[Any, Any]) -> ReceiverParser:
    """Return a new parser for the given receiver name and configuration."""
    return builder_for(name)(name, config)


def register(name: str, builder: Builder) -> None:
    """Add a parser builder to the known builders."""
    _registry[name] = builder


def is_registered(name: str) -> bool:
    """Tell whether a parser is registered under the given name."""
    return name in _registry


def _address_from_config(name: str, key: str, config: Mapping[Any, Any]) -> Any:
    if key not in config:
        logger.debug("%s receiver doesn't have an %s", name, key)
        return None
    return config[key]


def single_port_from_config_endpoint(name: str, config: Mapping[Any, Any]) -> ServicePort | None:
    """Build a service port from the endpoint in a receiver's configuration, if any."""
    endpoint: Any = None
    if name == "syslog":
        # syslog keeps its listen address one level down, in the udp or tcp section
        udp = config.get("udp")
        tcp = config.get("tcp")
        section = udp if udp is not None else tcp
        if isinstance(section, Mapping):
            endpoint = _address_from_config(name, _LISTEN_ADDRESS_KEY, section)
    elif name in ("tcplog", "udplog"):
        endpoint = _address_from_config(name, _LISTEN_ADDRESS_KEY, config)
    elif name == "kubeletstats":
        # a scraper: nothing to expose
        return None
    else:
        endpoint = _address_from_config(name, _ENDPOINT_KEY, config)

    if not isinstance(endpoint, str):
        logger.info("receiver's endpoint isn't a string")
        return None

    try:
        port = port_from_endpoint(endpoint)
    except ValueError:
        logger.info("couldn't parse the endpoint's port", extra={"endpoint": endpoint})
        return None

    return ServicePort(name=port_name(name, port), port=port)


def port_name(receiver_name: str, port: int) -> str:
    """Return a DNS-label port name for a receiver, or a name built from the port."""
    if len(receiver_name.encode("utf-8")) > _MAX_PORT_NAME_LENGTH:
        return f"port-{port}"

    candidate = receiver_name.replace("/", "-").replace("_", "-")
    if not _DNS_LABEL.fullmatch(candidate):
        return f"port-{port}"

    return candidate


def port_from_endpoint(endpoint: str) -> int:
    """Extract the port from an endpoint such as ``0.0.0.0:1234``.

    Raises ValueError when there is no usable port.
    """
    port = 0
    match = _PORT_IN_ENDPOINT.search(endpoint)
    if match:
        port = int(match.group().replace(":", ""))
        if port > _INT32_MAX:
            raise ValueError(f"port {port} out of range")

    if port == 0:
        raise ValueError("Port should not be empty")

    return port


def receiver_type(name: str) -> str:
    """Return the receiver type from a name like ``myreceiver/custom``."""
    return name.split("/", 1)[0]


@dataclasses.dataclass
class GenericReceiver(ReceiverParser):
    """Parser for receivers with a single endpoint and an optional default port."""

    name: str
    config: Mapping[Any, Any]
    default_port: int = 0
    default_protocol: Protocol | None = None
    default_app_protocol: str | None = None
    parser_name: str = "__generic"

    def ports(self) -> list[ServicePort]:
        port = single_port_from_config_endpoint(self.name, self.config)
        if port is not None:
            return [
                dataclasses.replace(
                    port,
                    protocol=self.default_protocol,
                    app_protocol=self.default_app_protocol,
                )
            ]

        if self.default_port > 0:
            return [
                ServicePort(
                    name=port_name(self.name, self.default_port),
                    port=self.default_port,
                    protocol=self.default_protocol,
                    app_protocol=self.default_app_protocol,
                )
            ]

        return []


def new_generic_receiver_parser(name: str, config: Mapping[Any, Any]) -> ReceiverParser:
    """Build a parser for generic receivers."""
    return GenericReceiver(name=name, config=config)


def new_awsxray_receiver_parser(name: str, config: Mapping[Any, Any]) -> ReceiverParser:
    """Build a parser for AWS X-Ray receivers."""
    return GenericReceiver(name=name, config=config, default_port=2000, parser_name="__awsxray")


def new_carbon_receiver_parser(name: str, config: Mapping[Any, Any]) -> ReceiverParser:
    """Build a parser for Carbon receivers."""
    return GenericReceiver(name=name, config=config, default_port=2003, parser_name="__carbon")


def new_collectd_receiver_parser(name: str, config: Mapping[Any, Any]) -> ReceiverParser:
    """Build a parser for Collectd receivers."""
    return GenericReceiver(name=name, config=config, default_port=8081, parser_name="__collectd")


def new_fluent_forward_receiver_parser(name: str, config: Mapping[Any, Any]) -> ReceiverParser:
    """Build a parser for FluentForward receivers."""
    return GenericReceiver(
        name=name, config=config, default_port=8006, parser_name="__fluentforward"
    )


def new_influxdb_receiver_parser(name: str, config: Mapping[Any, Any]) -> ReceiverParser:
    """Build a parser for InfluxDB receivers."""
    return GenericReceiver(name=name, config=config, default_port=8086, parser_name="__influxdb")


def new_opencensus_receiver_parser(name: str, config: Mapping[Any, Any]) -> ReceiverParser:
    """Build a parser for OpenCensus receivers."""
    return GenericReceiver(
        name=name, config=config, default_port=55678, parser_name="__opencensus"
    )


def new_sapm_receiver_parser(name: str, config: Mapping[Any, Any]) -> ReceiverParser:
    """Build a parser for SAPM receivers."""
    return GenericReceiver(name=name, config=config, default_port=7276, parser_name="__sapm")


def new_signalfx_receiver_parser(name: str, config: Mapping[Any, Any]) -> ReceiverParser:
    """Build a parser for SignalFx receivers."""
    return GenericReceiver(name=name, config=config, default_port=9943, parser_name="__signalfx")


def new_splunk_hec_receiver_parser(name: str, config: Mapping[Any, Any]) -> ReceiverParser:
    """Build a parser for Splunk HEC receivers."""
    return GenericReceiver(
        name=name, config=config, default_port=8088, parser_name="__splunk_hec"
    )


def new_statsd_receiver_parser(name: str, config: Mapping[Any, Any]) -> ReceiverParser:
    """Build a parser for StatsD receivers."""
    return GenericReceiver(name=name, config=config, default_port=8125, parser_name="__statsd")


def new_wavefront_receiver_parser(name: str, config: Mapping[Any, Any]) -> ReceiverParser:
    """Build a parser for Wavefront receivers."""
    return GenericReceiver(
        name=name, config=config, default_port=2003, parser_name="__wavefront"
    )


def new_zipkin_scribe_receiver_parser(name: str, config: Mapping[Any, Any]) -> ReceiverParser:
    """Build a parser for Zipkin Scribe receivers."""
    return GenericReceiver(
        name=name, config=config, default_port=9410, parser_name="__zipkinscribe"
    )


def new_zipkin_receiver_parser(name: str, config: Mapping[Any, Any]) -> ReceiverParser:
    """Build a parser for Zipkin receivers."""
    return GenericReceiver(
        name=name,
        config=config,
        default_port=9411,
        default_protocol=Protocol.TCP,
        default_app_protocol="http",
        parser_name="__zipkin",
    )


register("awsxray", new_awsxray_receiver_parser)
register("carbon", new_carbon_receiver_parser)
register("collectd", new_collectd_receiver_parser)
register("fluentforward", new_fluent_forward_receiver_parser)
register("influxdb", new_influxdb_receiver_parser)
register("opencensus", new_opencensus_receiver_parser)
register("sapm", new_sapm_receiver_parser)
register("signalfx", new_signalfx_receiver_parser)
register("splunk_hec", new_splunk_hec_receiver_parser)
register("statsd", new_statsd_receiver_parser)
register("wavefront", new_wavefront_receiver_parser)
register("zipkin-scribe", new_zipkin_scribe_receiver_parser)
register("zipkin", new_zipkin_receiver_parser)