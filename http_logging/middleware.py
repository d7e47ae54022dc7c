"""Request/response logging middleware."""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Optional, Protocol

from .censor import censor
from .config import LoggingConfig, Transform


LOGGER = logging.getLogger("http_logging.middleware")

INFO = "INFO"

_LEVEL_NUMERIC = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

Handler = Callable[[Any], Any]


class Emitter(Protocol):
    """Anything accepting a severity and a formatted message."""

    def __call__(self, level: str, message: Any) -> None:
        ...


def stdlib_emitter(logger: logging.Logger) -> Emitter:
    """Adapt a standard library logger to the emitter contract.

    Text messages are logged verbatim. Structured messages are logged with
    their ``event`` as the message and the full payload under the ``http``
    record attribute.
    """

    def _emit(level: str, message: Any) -> None:
        numeric = _LEVEL_NUMERIC.get(str(level).upper(), logging.INFO)
        if isinstance(message, Mapping):
            logger.log(numeric, "%s", message.get("event", "http"), extra={"http": dict(message)})
        else:
            logger.log(numeric, "%s", message)

    return _emit


def _observe(stage: str, fn: Callable[..., Any], *args: Any) -> tuple[bool, Any]:
    """Run a logging side channel, reporting rather than raising failures."""

    try:
        return True, fn(*args)
    except Exception:
        LOGGER.exception("Request logging failed during %s", stage)
        return False, None


def wrap_logging(
    handler: Handler,
    logger: Emitter,
    config: Optional[LoggingConfig] = None,
) -> Handler:
    """Middleware that logs at the start of the request and the end of the response.

    ``config.txfm_req``    transforms the request before it is formatted.
                           Useful for selecting the fields worth logging.
    ``config.format_req``  formats the request. Default: ``pr_req``.
    ``config.txfm_resp``   transforms the response before it is formatted.
    ``config.format_resp`` formats the response. Receives both the request and
                           response. Default: ``pr_resp``.
    ``config.censor_keys`` case-insensitive key fragments whose values are
                           replaced after transformation.

    The handler always receives the original request and its response is
    returned unchanged. A ``None`` response logs no finish event. Handler
    exceptions propagate; failures while logging never do.
    """

    config = config or LoggingConfig()
    censor_keys = config.censor_keys

    def _view(transform: Transform, record: Any) -> Any:
        return censor(transform(record), censor_keys)

    def _log_request(request: Any) -> tuple[bool, Any]:
        ok, req_view = _observe("request transform", _view, config.txfm_req, request)
        if not ok:
            return False, None

        ok, message = _observe("request format", config.format_req, req_view)
        if ok:
            _observe("request emit", logger, INFO, message)
        return True, req_view

    def _log_response(req_view: Any, response: Any) -> None:
        ok, resp_view = _observe("response transform", _view, config.txfm_resp, response)
        if not ok:
            return

        ok, message = _observe("response format", config.format_resp, req_view, resp_view)
        if ok:
            _observe("response emit", logger, INFO, message)

    def _logged(request: Any) -> Any:
        has_view, req_view = _log_request(request)

        response = handler(request)

        # No response means nothing to report
        if response is not None and has_view:
            _log_response(req_view, response)

        return response

    return _logged


__all__ = ["Emitter", "INFO", "stdlib_emitter", "wrap_logging"]
