"""Flask/WSGI integration for the request logging middleware."""

from __future__ import annotations

import itertools
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from flask import Flask
from werkzeug.wrappers import Request
from werkzeug.wsgi import ClosingIterator

from .config import LoggingConfig, MiddlewareSettings, build_config, load_settings
from .middleware import Emitter, stdlib_emitter, wrap_logging
from .timing import wrap_request_timing
from .trace import get_in, wrap_trace_request


WSGIApp = Callable[[Dict[str, Any], Callable[..., Any]], Iterable[bytes]]
Handler = Callable[[Any], Any]


def _environ_key(header: str) -> str:
    return "HTTP_" + header.upper().replace("-", "_")


def _client_ip(request: Request) -> str | None:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.remote_addr


def request_record(environ: Dict[str, Any]) -> Dict[str, Any]:
    """Build a request record from a WSGI environ without reading the body."""

    request = Request(environ)
    params = {
        key: values[0] if len(values) == 1 else values
        for key, values in request.args.lists()
    }

    return {
        "request-method": request.method.lower(),
        "uri": request.path,
        "query-string": request.query_string.decode("latin-1") or None,
        "params": params,
        "remote-addr": _client_ip(request),
        "scheme": request.scheme,
        "server-name": environ.get("SERVER_NAME"),
        "headers": {name.lower(): value for name, value in request.headers.items()},
    }


def _response_record(status: str, headers: List[Tuple[str, str]]) -> Dict[str, Any]:
    code, _, _reason = status.partition(" ")
    try:
        status_code: Any = int(code)
    except ValueError:
        status_code = status

    return {"status": status_code, "headers": dict(headers)}


def _prime_body(body: Iterable[bytes]) -> Iterable[bytes]:
    """Pull the first chunk so apps that call start_response lazily report a status.

    The chunk is chained back in front of the rest and ``close()`` still
    reaches the original iterable.
    """

    close = getattr(body, "close", None)
    callbacks = [close] if callable(close) else []
    iterator = iter(body)

    try:
        first = next(iterator)
    except StopIteration:
        return body
    except BaseException:
        for callback in callbacks:
            callback()
        raise

    return ClosingIterator(itertools.chain((first,), iterator), callbacks)


class RequestLoggingMiddleware:
    """WSGI middleware logging every request through ``wrap_logging``.

    Requests are traced before logging and timed inside it, so the finish
    event carries the extended trace id and the handler duration.
    """

    def __init__(
        self,
        wsgi_app: WSGIApp,
        logger: Emitter,
        config: Optional[LoggingConfig] = None,
        *,
        trace: bool = True,
        timing: bool = True,
        trace_header: str = "request-trace",
        exclude_routes: Iterable[str] = (),
    ) -> None:
        self.wsgi_app = wsgi_app
        self.logger = logger
        self.config = config or LoggingConfig()
        self.trace = trace
        self.timing = timing
        self.trace_header = trace_header.lower()
        self.exclude_routes = tuple(exclude_routes)

    def _should_log_route(self, path: str) -> bool:
        return not any(path.startswith(prefix) for prefix in self.exclude_routes)

    def _chain(self, application: Handler) -> Handler:
        handler = application
        if self.timing:
            handler = wrap_request_timing(handler)
        handler = wrap_logging(handler, self.logger, self.config)
        if self.trace:
            handler = wrap_trace_request(handler, keyseq=("headers", self.trace_header))
        return handler

    def __call__(self, environ: Dict[str, Any], start_response: Callable[..., Any]) -> Iterable[bytes]:
        if not self._should_log_route(environ.get("PATH_INFO", "")):
            return self.wsgi_app(environ, start_response)

        captured: Dict[str, Any] = {}

        def _application(record: Dict[str, Any]) -> Dict[str, Any]:
            trace_id = get_in(record, ("headers", self.trace_header))
            if self.trace and trace_id:
                environ[_environ_key(self.trace_header)] = trace_id

            def _start_response(status: str, headers: List[Tuple[str, str]], exc_info: Any = None):
                headers = list(headers)
                if self.trace and trace_id and not any(
                    name.lower() == self.trace_header for name, _ in headers
                ):
                    headers.append((self.trace_header, trace_id))
                captured["response"] = _response_record(status, headers)
                return start_response(status, headers, exc_info)

            body = self.wsgi_app(environ, _start_response)
            if "response" not in captured:
                body = _prime_body(body)
            captured["body"] = body
            # An empty body from an app that never started a response has no status
            return captured.get("response", {})

        self._chain(_application)(request_record(environ))
        return captured["body"]


def init_app(
    app: Flask,
    *,
    logger: Optional[Emitter] = None,
    config: Optional[LoggingConfig] = None,
    settings: Optional[MiddlewareSettings] = None,
) -> RequestLoggingMiddleware:
    """Install request logging on a Flask application."""

    settings = settings or load_settings()
    config = config or build_config(settings)
    emitter = logger or stdlib_emitter(logging.getLogger(settings.logger_name))

    middleware = RequestLoggingMiddleware(
        app.wsgi_app,
        emitter,
        config,
        trace=settings.trace_enabled,
        timing=settings.timing_enabled,
        trace_header=settings.trace_header,
        exclude_routes=settings.exclude_routes,
    )
    app.wsgi_app = middleware  # type: ignore[method-assign]
    app.extensions["http_logging"] = middleware

    return middleware


__all__ = ["RequestLoggingMiddleware", "init_app", "request_record"]
