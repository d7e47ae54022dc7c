"""Tests for pipeline configs, presets and environment settings."""

from __future__ import annotations

import dataclasses

import pytest

from http_logging.config import (
    DEFAULT_CENSOR_KEYS,
    JSON_INBOUND_CONFIG,
    SIMPLE_INBOUND_CONFIG,
    SIMPLE_OUTBOUND_CONFIG,
    STRUCTURED_INBOUND_CONFIG,
    STRUCTURED_OUTBOUND_CONFIG,
    LoggingConfig,
    build_config,
    load_settings,
    preset,
    txfm_inbound_req,
    txfm_outbound_req,
    txfm_resp,
)
from http_logging.exceptions import ConfigurationError, HttpLoggingError
from http_logging.formatters import json_req, pr_req, pr_resp, structured_req, structured_resp


def test_default_config_uses_identity_and_readable_formatters():
    config = LoggingConfig()

    record = {"a": 1}
    assert config.txfm_req(record) is record
    assert config.txfm_resp(record) is record
    assert config.format_req is pr_req
    assert config.format_resp is pr_resp
    assert config.censor_keys == frozenset()


def test_censor_keys_are_normalized_and_config_is_frozen():
    config = LoggingConfig(censor_keys={"aBc", "PASSWORD"})

    assert config.censor_keys == frozenset({"abc", "password"})
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.censor_keys = frozenset()  # type: ignore[misc]


def test_with_overrides_returns_normalized_copy():
    config = SIMPLE_INBOUND_CONFIG.with_overrides(censor_keys=["Token"])

    assert config.censor_keys == frozenset({"token"})
    assert SIMPLE_INBOUND_CONFIG.censor_keys == frozenset()
    assert config.txfm_req is SIMPLE_INBOUND_CONFIG.txfm_req


def test_presets_differ_only_in_selectors_and_formatters():
    assert SIMPLE_INBOUND_CONFIG.txfm_req is txfm_inbound_req
    assert SIMPLE_OUTBOUND_CONFIG.txfm_req is txfm_outbound_req
    assert STRUCTURED_INBOUND_CONFIG.format_req is structured_req
    assert STRUCTURED_OUTBOUND_CONFIG.format_resp is structured_resp
    assert JSON_INBOUND_CONFIG.format_req is json_req
    for config in (SIMPLE_INBOUND_CONFIG, STRUCTURED_OUTBOUND_CONFIG, JSON_INBOUND_CONFIG):
        assert config.txfm_resp is txfm_resp


def test_inbound_request_transform():
    request = {
        "request-method": "get",
        "uri": "/orders",
        "params": {"page": "2"},
        "remote-addr": "10.0.0.1",
        "body": {"card": "4111"},
        "headers": {"host": "api.local", "request-trace": "ab12", "cookie": "s=1"},
    }

    assert txfm_inbound_req(request) == {
        "request-method": "get",
        "uri": "/orders",
        "params": {"page": "2"},
        "remote-addr": "10.0.0.1",
        "headers": {"host": "api.local", "request-trace": "ab12"},
    }


def test_outbound_request_transform():
    request = {
        "method": "post",
        "url": "http://billing/charge",
        "form-params": {"amount": "10"},
        "headers": {"request-trace": "ab12.cd34", "authorization": "Bearer x"},
    }

    assert txfm_outbound_req(request) == {
        "method": "post",
        "url": "http://billing/charge",
        "form-params": {"amount": "10"},
        "headers": {"request-trace": "ab12.cd34"},
    }


def test_response_transform():
    response = {
        "status": 302,
        "request-time": 12.5,
        "headers": {"Location": "/elsewhere", "Set-Cookie": "s=1"},
        "body": "redirecting",
    }

    assert txfm_resp(response) == {
        "status": 302,
        "request-time": 12.5,
        "headers": {"Location": "/elsewhere"},
    }
    assert txfm_resp({}) == {}


def test_load_settings_defaults():
    settings = load_settings({})

    assert settings.direction == "inbound"
    assert settings.format == "simple"
    assert settings.censor_keys == DEFAULT_CENSOR_KEYS
    assert settings.trace_enabled is True
    assert settings.trace_header == "request-trace"
    assert settings.timing_enabled is True
    assert settings.logger_name == "http_logging.requests"
    assert settings.exclude_routes == ()


def test_load_settings_from_environment():
    settings = load_settings(
        {
            "HTTP_LOG_DIRECTION": "Outbound",
            "HTTP_LOG_FORMAT": "JSON",
            "HTTP_LOG_CENSOR_KEYS": "ssn, card ,",
            "HTTP_LOG_TRACE_ENABLED": "off",
            "HTTP_LOG_TRACE_HEADER": "X-Trace",
            "HTTP_LOG_TIMING_ENABLED": "0",
            "HTTP_LOG_LOGGER_NAME": "svc.http",
            "HTTP_LOG_EXCLUDE_ROUTES": "/health,/metrics",
        }
    )

    assert settings.direction == "outbound"
    assert settings.format == "json"
    assert settings.censor_keys == ("ssn", "card")
    assert settings.trace_enabled is False
    assert settings.trace_header == "x-trace"
    assert settings.timing_enabled is False
    assert settings.logger_name == "svc.http"
    assert settings.exclude_routes == ("/health", "/metrics")


def test_empty_censor_keys_variable_disables_censoring():
    assert load_settings({"HTTP_LOG_CENSOR_KEYS": ""}).censor_keys == ()


def test_load_settings_reads_process_environment(monkeypatch):
    monkeypatch.setenv("HTTP_LOG_FORMAT", "structured")

    assert load_settings().format == "structured"


def test_build_config_selects_preset_and_censor_keys():
    settings = load_settings({"HTTP_LOG_FORMAT": "structured", "HTTP_LOG_CENSOR_KEYS": "Card"})

    config = build_config(settings)

    assert config.format_req is structured_req
    assert config.txfm_req is txfm_inbound_req
    assert config.censor_keys == frozenset({"card"})
    assert build_config(settings, censor_keys=["PIN"]).censor_keys == frozenset({"pin"})


@pytest.mark.parametrize(
    "overrides",
    [{"direction": "sideways"}, {"format": "xml"}, {"trace_header": ""}],
)
def test_build_config_rejects_invalid_settings(overrides):
    settings = load_settings({}).with_overrides(**overrides)

    with pytest.raises(ConfigurationError):
        build_config(settings)


def test_preset_lookup():
    assert preset("outbound", "simple") is SIMPLE_OUTBOUND_CONFIG
    with pytest.raises(HttpLoggingError):
        preset("inbound", "yaml")


def test_preset_transforms_are_named_documented_functions():
    for transform in (txfm_inbound_req, txfm_outbound_req, txfm_resp):
        assert transform.__name__ == transform.__qualname__
        assert transform.__doc__
    assert txfm_inbound_req(None) == {}
