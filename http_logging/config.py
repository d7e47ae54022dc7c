"""Configuration for the request logging middleware."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, FrozenSet, Iterable, Mapping

from .censor import normalize_keys
from .exceptions import ConfigurationError
from .formatters import (
    json_req,
    json_resp,
    pr_req,
    pr_resp,
    structured_req,
    structured_resp,
)
from .selector import compile_selector


Transform = Callable[[Any], Any]
RequestFormatter = Callable[[Any], Any]
ResponseFormatter = Callable[[Any, Any], Any]

DIRECTIONS = ("inbound", "outbound")
FORMATS = ("simple", "structured", "json")
DEFAULT_CENSOR_KEYS = ("password", "token", "secret", "authorization")


def _identity(value: Any) -> Any:
    return value


@dataclass(frozen=True)
class LoggingConfig:
    """Immutable hooks and censor keys bound to one logging pipeline."""

    txfm_req: Transform = _identity
    format_req: RequestFormatter = pr_req
    txfm_resp: Transform = _identity
    format_resp: ResponseFormatter = pr_resp
    censor_keys: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        object.__setattr__(self, "censor_keys", normalize_keys(self.censor_keys))

    def with_overrides(self, **kwargs: Any) -> "LoggingConfig":
        return replace(self, **kwargs)


# --------------------- selector transforms ---------------------
_INBOUND_REQ_SELECTOR = compile_selector(
    [
        "request-method",
        "uri",
        "params",
        "remote-addr",
        {"headers": ["host", "request-trace"]},
    ]
)

_OUTBOUND_REQ_SELECTOR = compile_selector(
    [
        "method",
        "url",
        "query-params",
        "form-params",
        {"headers": "request-trace"},
    ]
)

_RESP_SELECTOR = compile_selector(["status", "request-time", {"headers": "Location"}])


def txfm_inbound_req(request: Any) -> Dict[Any, Any]:
    """A basic transformation for requests this service receives.

    Keeps request-method, uri, params, remote-addr and the host and
    request-trace headers.
    """

    return _INBOUND_REQ_SELECTOR.select(request) or {}


def txfm_outbound_req(request: Any) -> Dict[Any, Any]:
    """A basic transformation for requests this service makes to other services.

    Keeps method, url, query-params, form-params and the request-trace header.
    """

    return _OUTBOUND_REQ_SELECTOR.select(request) or {}


def txfm_resp(response: Any) -> Dict[Any, Any]:
    """Keep status, request-time and the Location header of a response."""

    return _RESP_SELECTOR.select(response) or {}


# --------------------- presets ---------------------
SIMPLE_INBOUND_CONFIG = LoggingConfig(
    txfm_req=txfm_inbound_req,
    format_req=pr_req,
    txfm_resp=txfm_resp,
    format_resp=pr_resp,
)

SIMPLE_OUTBOUND_CONFIG = LoggingConfig(
    txfm_req=txfm_outbound_req,
    format_req=pr_req,
    txfm_resp=txfm_resp,
    format_resp=pr_resp,
)

STRUCTURED_INBOUND_CONFIG = LoggingConfig(
    txfm_req=txfm_inbound_req,
    format_req=structured_req,
    txfm_resp=txfm_resp,
    format_resp=structured_resp,
)

STRUCTURED_OUTBOUND_CONFIG = LoggingConfig(
    txfm_req=txfm_outbound_req,
    format_req=structured_req,
    txfm_resp=txfm_resp,
    format_resp=structured_resp,
)

JSON_INBOUND_CONFIG = STRUCTURED_INBOUND_CONFIG.with_overrides(
    format_req=json_req, format_resp=json_resp
)

JSON_OUTBOUND_CONFIG = STRUCTURED_OUTBOUND_CONFIG.with_overrides(
    format_req=json_req, format_resp=json_resp
)

_PRESETS: Mapping[tuple[str, str], LoggingConfig] = {
    ("inbound", "simple"): SIMPLE_INBOUND_CONFIG,
    ("outbound", "simple"): SIMPLE_OUTBOUND_CONFIG,
    ("inbound", "structured"): STRUCTURED_INBOUND_CONFIG,
    ("outbound", "structured"): STRUCTURED_OUTBOUND_CONFIG,
    ("inbound", "json"): JSON_INBOUND_CONFIG,
    ("outbound", "json"): JSON_OUTBOUND_CONFIG,
}


# --------------------- environment settings ---------------------
def _comma_tuple(value: str | None, *, default: tuple[str, ...]) -> tuple[str, ...]:
    """Convert a comma-separated string to a tuple."""

    if value is None:
        return default

    return tuple(filter(None, (part.strip() for part in value.split(","))))


def _bool_env(value: str | None, default: bool) -> bool:
    """Convert a string to a boolean."""

    if value is None:
        return default

    return value.lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class MiddlewareSettings:
    """Runtime settings for mounting the middleware on an application."""

    direction: str
    format: str
    censor_keys: tuple[str, ...]
    trace_enabled: bool
    trace_header: str
    timing_enabled: bool
    logger_name: str
    exclude_routes: tuple[str, ...]

    def with_overrides(self, **kwargs: Any) -> "MiddlewareSettings":
        return replace(self, **kwargs)


def load_settings(env: Mapping[str, str] | None = None) -> MiddlewareSettings:
    source = os.environ if env is None else env

    return MiddlewareSettings(
        direction=source.get("HTTP_LOG_DIRECTION", "inbound").strip().lower(),
        format=source.get("HTTP_LOG_FORMAT", "simple").strip().lower(),
        censor_keys=_comma_tuple(
            source.get("HTTP_LOG_CENSOR_KEYS"), default=DEFAULT_CENSOR_KEYS
        ),
        trace_enabled=_bool_env(source.get("HTTP_LOG_TRACE_ENABLED"), True),
        trace_header=source.get("HTTP_LOG_TRACE_HEADER", "request-trace").strip().lower(),
        timing_enabled=_bool_env(source.get("HTTP_LOG_TIMING_ENABLED"), True),
        logger_name=source.get("HTTP_LOG_LOGGER_NAME", "http_logging.requests"),
        exclude_routes=_comma_tuple(source.get("HTTP_LOG_EXCLUDE_ROUTES"), default=()),
    )


def preset(direction: str, format: str) -> LoggingConfig:
    """Return the preset config for a direction/format pair."""

    try:
        return _PRESETS[(direction, format)]
    except KeyError:
        raise ConfigurationError(
            f"Unknown logging preset direction={direction!r} format={format!r}; "
            f"expected direction in {DIRECTIONS} and format in {FORMATS}"
        ) from None


def build_config(
    settings: MiddlewareSettings, *, censor_keys: Iterable[str] | None = None
) -> LoggingConfig:
    """Build the pipeline config described by ``settings``."""

    if not settings.trace_header:
        raise ConfigurationError("HTTP_LOG_TRACE_HEADER must not be empty")

    keys = settings.censor_keys if censor_keys is None else tuple(censor_keys)
    return preset(settings.direction, settings.format).with_overrides(
        censor_keys=frozenset(keys)
    )


__all__ = [
    "DEFAULT_CENSOR_KEYS",
    "JSON_INBOUND_CONFIG",
    "JSON_OUTBOUND_CONFIG",
    "LoggingConfig",
    "MiddlewareSettings",
    "SIMPLE_INBOUND_CONFIG",
    "SIMPLE_OUTBOUND_CONFIG",
    "STRUCTURED_INBOUND_CONFIG",
    "STRUCTURED_OUTBOUND_CONFIG",
    "build_config",
    "load_settings",
    "preset",
    "txfm_inbound_req",
    "txfm_outbound_req",
    "txfm_resp",
]
