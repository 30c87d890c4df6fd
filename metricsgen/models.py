"""
Configuration data model for the mock metrics server.

Each served URI owns an ordered list of versions. A version is selected when
all of its query parameter patterns match the incoming request, and its metric
description decides how the synthetic value is produced.

Everything here is built once at startup and never mutated afterwards.
"""

import enum
import logging
import re
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PrivateAttr,
    TypeAdapter,
    ValidationError,
    ValidationInfo,
    field_validator,
    model_validator,
)

logger = logging.getLogger(__name__)

# Returned for metric types the generator does not know about
DEFAULT_VALUE = 21.7639


class ConfigError(Exception):
    """Raised when the configuration cannot be used to start serving."""


class MetricKind(enum.Enum):
    COUNTER = "counter"
    GAUGE = "gauge"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, name: str) -> "MetricKind":
        for kind in (cls.COUNTER, cls.GAUGE):
            if kind.value == name:
                return kind
        return cls.UNKNOWN


class Provider(enum.Enum):
    PROMETHEUS = "Prometheus"

    @classmethod
    def parse(cls, name: str) -> "Provider":
        for provider in cls:
            if provider.value == name:
                return provider
        raise ValueError(f"unknown provider: {name}")


class MetricModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    kind: MetricKind
    type_name: str = Field(default="", alias="type")
    rate: float = 0.0
    shift: float = 0.0
    multiplier: float = 0.0
    alpha: float = 0.0
    beta: float = 0.0

    @model_validator(mode="before")
    @classmethod
    def derive_kind(cls, data: Any) -> Any:
        if isinstance(data, dict) and "kind" not in data:
            data = dict(data)
            type_name = data.get("type", data.get("type_name"))
            data["kind"] = MetricKind.parse("" if type_name is None else str(type_name))
        return data

    @field_validator("type_name", mode="before")
    @classmethod
    def type_as_string(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("rate", "shift", "multiplier", "alpha", "beta", mode="before")
    @classmethod
    def missing_number_is_zero(cls, value: Any) -> Any:
        return 0.0 if value is None else value

    @model_validator(mode="after")
    def check_gauge_shape(self) -> "MetricModel":
        if not self.usable:
            logger.warning(f"Gauge metric has non-positive alpha/beta ({self.alpha}, {self.beta}), "
                           f"requests for it will get {DEFAULT_VALUE}")
        return self

    @property
    def usable(self) -> bool:
        if self.kind is MetricKind.GAUGE:
            return self.alpha > 0 and self.beta > 0
        return True


class QueryConstraint(BaseModel):
    """A query parameter name and the regex its value has to contain."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(min_length=1)
    pattern: str = Field(default="", alias="value")

    _compiled: Optional[re.Pattern] = PrivateAttr(default=None)

    @field_validator("name", "pattern", mode="before")
    @classmethod
    def as_string(cls, value: Any) -> Any:
        if value is None:
            return ""
        if isinstance(value, (int, float)):
            return str(value)
        return value

    def model_post_init(self, __context: Any) -> None:
        try:
            self._compiled = re.compile(self.pattern)
        except re.error as e:
            # Kept so the version is disqualified per request instead of failing startup
            logger.warning(f"Invalid pattern {self.pattern!r} for query param {self.name}: {e}")

    @property
    def compiled(self) -> Optional[re.Pattern]:
        return self._compiled

    @classmethod
    def build(cls, name: str, pattern: str) -> "QueryConstraint":
        return cls(name=name, pattern=pattern)


class Variant(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    metric: MetricModel = Field(default_factory=lambda: MetricModel(kind=MetricKind.UNKNOWN))
    constraints: tuple[QueryConstraint, ...] = Field(default=(), alias="params")

    @field_validator("metric", "constraints", mode="before")
    @classmethod
    def missing_is_default(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return {} if info.field_name == "metric" else ()
        return value


class EndpointConfig(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    uri: str = Field(min_length=1)
    provider: Provider
    variants: tuple[Variant, ...] = Field(default=(), alias="versions")
    headers: tuple[tuple[str, str], ...] = ()

    @field_validator("provider", mode="before")
    @classmethod
    def known_provider(cls, value: Any) -> Provider:
        if isinstance(value, Provider):
            return value
        return Provider.parse("" if value is None else str(value))

    @field_validator("variants", mode="before")
    @classmethod
    def no_versions(cls, value: Any) -> Any:
        return () if value is None else value

    @field_validator("headers", mode="before")
    @classmethod
    def header_pairs(cls, value: Any) -> Any:
        if value is None:
            return ()
        if isinstance(value, dict):
            return tuple((str(k), "" if v is None else str(v)) for k, v in value.items())
        return value

    def header_map(self) -> dict:
        return dict(self.headers)


_ENDPOINTS = TypeAdapter(tuple[EndpointConfig, ...])


def load_endpoints(document: Any) -> tuple:
    """Build endpoint configs from a decoded YAML document.

    Raises ConfigError on malformed input or duplicate URIs.
    """
    if document is None:
        document = []
    if not isinstance(document, list):
        raise ConfigError(f"Invalid config: expected a list of URI configs, got {type(document).__name__}")
    try:
        endpoints = _ENDPOINTS.validate_python(document)
    except ValidationError as e:
        raise ConfigError(f"Invalid config: {e}") from e

    seen = set()
    for endpoint in endpoints:
        if endpoint.uri in seen:
            logger.error(f"Duplicate uri in config: {endpoint.uri} (known: {sorted(seen)})")
            raise ConfigError("URIs are not unique")
        seen.add(endpoint.uri)
    return endpoints
