"""Annotations for the collector's workload and pod template."""

from __future__ import annotations

import hashlib
from collections.abc import Mapping

CONFIG_SHA_ANNOTATION = "opentelemetry-operator-config/sha256"

_DEFAULT_ANNOTATIONS = {
    "prometheus.io/scrape": "true",
    "prometheus.io/port": "8888",
    "prometheus.io/path": "/metrics",
}


def config_sha256(config: str) -> str:
    """Return the hex SHA-256 digest of a configuration."""
    return hashlib.sha256(config.encode("utf-8")).hexdigest()


def annotations(user_annotations: Mapping[str, str] | None, config: str) -> dict[str, str]:
    """Return workload annotations: Prometheus defaults, user overrides, config digest."""
    result = dict(_DEFAULT_ANNOTATIONS)
    result.update(user_annotations or {})
    result[CONFIG_SHA_ANNOTATION] = config_sha256(config)
    return result


def pod_annotations(
    user_pod_annotations: Mapping[str, str] | None, config: str
) -> dict[str, str]:
    """Return pod annotations: the user's ones plus the config digest."""
    result = dict(user_pod_annotations or {})
    result[CONFIG_SHA_ANNOTATION] = config_sha256(config)
    return result