"""Telemetry configuration helpers."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Any, Dict

from pydantic import BaseModel, Field

from .logger import init_logging
from .metrics import init_metrics
from .tracer import init_tracing

_TRUTHY = {"1", "true", "yes", "on"}


def _env_flag(*names: str) -> bool | None:
    for name in names:
        value = os.getenv(name)
        if value is not None:
            return value.strip().lower() in _TRUTHY
    return None


def _signal_endpoint(signal: str) -> str | None:
    explicit = os.getenv(f"OTEL_EXPORTER_OTLP_{signal.upper()}_ENDPOINT")
    if explicit:
        return explicit
    base = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
    if not base:
        return None
    return f"{base.rstrip('/')}/v1/{signal}"


class TelemetryConfig(BaseModel):
    """Which OpenTelemetry exporters the engine should wire up."""

    enable_tracing: bool = False
    enable_metrics: bool = False
    enable_logging: bool = False
    otlp_traces_endpoint: str | None = None
    otlp_metrics_endpoint: str | None = None
    otlp_logs_endpoint: str | None = None
    service_name: str = "armada"
    service_namespace: str = "game"
    resource_attributes: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_env(cls, **overrides: Any) -> "TelemetryConfig":
        """Build a config from `ARMADA_*` and standard `OTEL_*` variables."""

        data: Dict[str, Any] = cls().model_dump()

        flags = {
            "enable_tracing": ("ARMADA_ENABLE_TRACING", "OTEL_TRACES_ENABLED"),
            "enable_metrics": ("ARMADA_ENABLE_METRICS", "OTEL_METRICS_ENABLED"),
            "enable_logging": ("ARMADA_ENABLE_LOGGING", "OTEL_LOGS_ENABLED"),
        }
        for key, names in flags.items():
            flag = _env_flag(*names)
            if flag is not None:
                data[key] = flag

        signals = {"traces": "enable_tracing", "metrics": "enable_metrics", "logs": "enable_logging"}
        for signal, flag_key in signals.items():
            endpoint = _signal_endpoint(signal)
            if endpoint:
                data[f"otlp_{signal}_endpoint"] = endpoint
                # An explicit endpoint switches the matching exporter on.
                data[flag_key] = True

        if os.getenv("OTEL_SERVICE_NAME"):
            data["service_name"] = os.environ["OTEL_SERVICE_NAME"]
        if os.getenv("OTEL_SERVICE_NAMESPACE"):
            data["service_namespace"] = os.environ["OTEL_SERVICE_NAMESPACE"]

        resource_env = os.getenv("OTEL_RESOURCE_ATTRIBUTES", "")
        attrs = dict(data["resource_attributes"])
        for part in resource_env.split(","):
            key, sep, value = part.partition("=")
            if sep:
                attrs[key.strip()] = value.strip()
        data["resource_attributes"] = attrs

        data.update(overrides)
        return cls(**data)


@lru_cache(maxsize=1)
def load_telemetry_config() -> TelemetryConfig:
    """Load and cache telemetry config from the environment."""

    return TelemetryConfig.from_env()


def init_telemetry(config: TelemetryConfig | None = None) -> TelemetryConfig:
    """Initialise the enabled telemetry subsystems."""

    resolved = config or load_telemetry_config()

    if resolved.enable_tracing:
        init_tracing(resolved)
    if resolved.enable_metrics:
        init_metrics(resolved)
    if resolved.enable_logging:
        init_logging(resolved)
    return resolved
