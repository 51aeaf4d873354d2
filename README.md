# collectorkit

A library for reading an OpenTelemetry Collector configuration and deriving
from it what a Kubernetes deployment of the collector needs:

- the **service ports** each receiver listens on (`collectorkit.config`,
  `collectorkit.receiver`, `collectorkit.protocols`),
- an **HTTP liveness probe** taken from the `health_check` extension
  (`collectorkit.config`),
- the **annotations** for the collector and its pods, including a SHA-256 of
  the configuration text (`collectorkit.annotations`).

## Installation

```
pip install collectorkit
```

## Reading a configuration

`collectorkit.config.config_from_string` parses YAML text into a dictionary.
Empty text gives an empty dictionary; text that is not valid YAML, or whose
top level is not a mapping, raises `InvalidYAMLError`.

## Receiver ports

```python
from collectorkit.config import config_from_string, config_to_receiver_ports

config = config_from_string("""
receivers:
  otlp:
    protocols:
      grpc:
      http:
  zipkin:
  examplereceiver/settings:
    endpoint: 0.0.0.0:12346
""")

for port in config_to_receiver_ports(config):
    print(port.name, port.port, port.protocol, port.app_protocol)
```

Each result is a `collectorkit.receiver.ServicePort` with the fields `name`,
`port`, `protocol` (a `Protocol` member such as `Protocol.TCP`, or `None`),
`app_protocol` and `target_port`.

A configuration without a `receivers` key raises `NoReceiversError`; a
`receivers` value that is not a mapping raises `ReceiversNotAMapError`.

Well-known receivers get their default ports when no endpoint is configured:
`otlp` and `jaeger` (one port per configured protocol), and `zipkin`,
`opencensus`, `carbon`, `collectd`, `sapm`, `signalfx`, `wavefront`,
`zipkin-scribe`, `fluentforward`, `statsd`, `influxdb`, `splunk_hec` and
`awsxray`. Any other receiver falls back to the generic parser, which reads
the port from its `endpoint` (or from `listen_address` for `syslog`, `tcplog`
and `udplog`) and gives no port when there is none. `kubeletstats` is a
scraper and exposes no port.

Port names are the receiver name with `/` and `_` turned into `-` (for
example `otlp/2` with gRPC becomes `otlp-2-grpc`); a name that is longer than
63 characters or not a valid DNS label becomes `port-<number>`.

A receiver whose parser raises is logged and skipped; the others still
contribute their ports. Custom parsers can be added with
`collectorkit.receiver.register(name, builder)`, where `builder` takes a
receiver name and its configuration and returns a `ReceiverParser`.
`collectorkit.receiver.parser_for` picks the parser for a receiver name such
as `otlp/2` by the part before the slash, and `is_registered` tells whether a
name has a parser.

## Liveness probe

```python
from collectorkit.config import config_from_string, config_to_container_probe

probe = config_to_container_probe(config_from_string("""
extensions:
  health_check:
    endpoint: localhost:1234
    path: /checkit
service:
  extensions: [health_check]
"""))
print(probe.path, probe.port)   # /checkit 1234
```

The probe is an `HTTPGetProbe` with `path`, `port` and `host`. The path
defaults to `/` and the port to `13133`; a port in the endpoint that is not a
number is kept as a named port string. When several `health_check…`
extensions are enabled in the service, the first one that is configured is
used.

When the configuration has no usable health check, a subclass of
`collectorkit.config.ConfigError` is raised that names what is missing:
`NoServiceError`, `ServiceNotAMapError`, `NoServiceExtensionsError`,
`ServiceExtensionsNotAListError`, `NoServiceHealthCheckError`,
`NoExtensionsError`, `ExtensionsNotAMapError` or
`NoHealthCheckExtensionError`.

## Annotations

```python
from collectorkit.annotations import annotations, pod_annotations, config_sha256

config_text = "receivers:\n  zipkin:\n"
meta = annotations({"prometheus.io/port": "1234"}, config_text)
pods = pod_annotations({"team": "observability"}, config_text)
```

`annotations` starts from the Prometheus scrape annotations
(`prometheus.io/scrape: "true"`, `prometheus.io/port: "8888"`,
`prometheus.io/path: "/metrics"`), lets the given annotations override them,
and always sets `opentelemetry-operator-config/sha256` to `config_sha256` of
the configuration text. `pod_annotations` does the same for the given pod
annotations, without the Prometheus defaults. Both return new dictionaries
and leave their input untouched.

## What this package does not do

It only computes values from a configuration. It does not build complete
Kubernetes objects (deployments, daemon sets, services, autoscalers), does
not talk to a cluster, and has no command-line program.

## Running the tests

```
pip install "collectorkit[test]"
pytest
```