from collectorkit.protocols import (
    JaegerReceiverParser,
    OTLPReceiverParser,
    new_jaeger_receiver_parser,
    new_otlp_receiver_parser,
)
from collectorkit.receiver import Protocol, is_registered, parser_for


def test_jaeger_self_registers():
    assert is_registered("jaeger")


def test_jaeger_is_found_by_name():
    parser = parser_for("jaeger", {})
    assert parser.parser_name == "__jaeger"
    assert isinstance(parser, JaegerReceiverParser)


def test_jaeger_minimal_configuration():
    parser = new_jaeger_receiver_parser("jaeger", {"protocols": {"grpc": {}}})
    ports = parser.ports()
    assert len(ports) == 1
    assert ports[0].port == 14250
    assert ports[0].protocol == Protocol.TCP
    assert ports[0].app_protocol == "grpc"


def test_jaeger_ports_overridden():
    parser = new_jaeger_receiver_parser(
        "jaeger", {"protocols": {"grpc": {"endpoint": "0.0.0.0:1234"}}}
    )
    ports = parser.ports()
    assert len(ports) == 1
    assert ports[0].port == 1234
    assert ports[0].protocol == Protocol.TCP
    assert ports[0].name == "jaeger-grpc"


def test_jaeger_expose_default_ports():
    parser = new_jaeger_receiver_parser(
        "jaeger",
        {
            "protocols": {
                "grpc": {},
                "thrift_http": {},
                "thrift_compact": {},
                "thrift_binary": {},
            }
        },
    )
    expected = {
        "jaeger-grpc": (14250, Protocol.TCP),
        "jaeger-thrift-http": (14268, Protocol.TCP),
        "jaeger-thrift-compact": (6831, Protocol.UDP),
        "jaeger-thrift-binary": (6832, Protocol.UDP),
    }
    ports = parser.ports()
    assert len(ports) == 4
    assert {p.name: (p.port, p.protocol) for p in ports} == expected


def test_jaeger_udp_protocols_have_no_app_protocol():
    parser = new_jaeger_receiver_parser(
        "jaeger", {"protocols": {"thrift_compact": None, "thrift_http": None}}
    )
    by_name = {p.name: p for p in parser.ports()}
    assert by_name["jaeger-thrift-compact"].app_protocol is None
    assert by_name["jaeger-thrift-http"].app_protocol == "http"


def test_jaeger_without_protocols_has_no_ports():
    assert new_jaeger_receiver_parser("jaeger", {}).ports() == []
    assert new_jaeger_receiver_parser("jaeger", {"protocols": "bad"}).ports() == []


def test_otlp_self_registers():
    assert is_registered("otlp")


def test_otlp_is_found_by_name():
    parser = parser_for("otlp", {})
    assert parser.parser_name == "__otlp"
    assert isinstance(parser, OTLPReceiverParser)


def test_otlp_ports_overridden():
    parser = new_otlp_receiver_parser(
        "otlp",
        {
            "protocols": {
                "grpc": {"endpoint": "0.0.0.0:1234"},
                "http": {"endpoint": "0.0.0.0:1235"},
            }
        },
    )
    ports = parser.ports()
    assert {p.name: p.port for p in ports} == {"otlp-grpc": 1234, "otlp-http": 1235}
    assert all(p.protocol == Protocol.TCP for p in ports)
    assert {p.name: p.app_protocol for p in ports} == {
        "otlp-grpc": "grpc",
        "otlp-http": "http",
    }


def test_otlp_expose_default_ports():
    parser = new_otlp_receiver_parser("otlp", {"protocols": {"grpc": {}, "http": {}}})
    ports = parser.ports()
    assert {p.name: p.port for p in ports} == {
        "otlp-grpc": 4317,
        "otlp-http": 4318,
        "otlp-http-legacy": 55681,
    }


def test_otlp_legacy_port_targets_official_port():
    parser = new_otlp_receiver_parser("otlp", {"protocols": {"http": None}})
    by_name = {p.name: p for p in parser.ports()}
    assert by_name["otlp-http"].target_port == 4318
    assert by_name["otlp-http-legacy"].target_port == 4318
    assert by_name["otlp-http-legacy"].app_protocol == "http"


def test_otlp_without_protocols_has_no_ports():
    assert new_otlp_receiver_parser("otlp", {}).ports() == []