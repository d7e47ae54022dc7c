"""Public API for the HTTP request logging middleware."""

from __future__ import annotations

from .censor import REDACTION_MARKER, censor
from .config import (
    JSON_INBOUND_CONFIG,
    JSON_OUTBOUND_CONFIG,
    SIMPLE_INBOUND_CONFIG,
    SIMPLE_OUTBOUND_CONFIG,
    STRUCTURED_INBOUND_CONFIG,
    STRUCTURED_OUTBOUND_CONFIG,
    LoggingConfig,
    MiddlewareSettings,
    build_config,
    load_settings,
    txfm_inbound_req,
    txfm_outbound_req,
    txfm_resp,
)
from .exceptions import ConfigurationError, HttpLoggingError
from .formatters import (
    LogEvent,
    json_req,
    json_resp,
    pr_req,
    pr_resp,
    structured_req,
    structured_resp,
)
from .middleware import INFO, stdlib_emitter, wrap_logging
from .selector import compile_selector, deep_select_keys, selecting
from .timing import REQUEST_TIME_FIELD, wrap_request_timing
from .trace import DEFAULT_TRACE_KEYSEQ, extend_trace, wrap_trace_request

__all__ = [
    "ConfigurationError",
    "DEFAULT_TRACE_KEYSEQ",
    "HttpLoggingError",
    "INFO",
    "JSON_INBOUND_CONFIG",
    "JSON_OUTBOUND_CONFIG",
    "LogEvent",
    "LoggingConfig",
    "MiddlewareSettings",
    "REDACTION_MARKER",
    "REQUEST_TIME_FIELD",
    "SIMPLE_INBOUND_CONFIG",
    "SIMPLE_OUTBOUND_CONFIG",
    "STRUCTURED_INBOUND_CONFIG",
    "STRUCTURED_OUTBOUND_CONFIG",
    "build_config",
    "censor",
    "compile_selector",
    "deep_select_keys",
    "extend_trace",
    "json_req",
    "json_resp",
    "load_settings",
    "pr_req",
    "pr_resp",
    "selecting",
    "stdlib_emitter",
    "structured_req",
    "structured_resp",
    "txfm_inbound_req",
    "txfm_outbound_req",
    "txfm_resp",
    "wrap_logging",
    "wrap_request_timing",
    "wrap_trace_request",
]
