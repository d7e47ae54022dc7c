"""Fixtures for http_logging unit tests."""

from __future__ import annotations

from typing import Any, List, Tuple

import pytest
from flask import Flask, jsonify, redirect, request


class RecordingEmitter:
    """Emitter double capturing every (level, message) pair."""

    def __init__(self) -> None:
        self.records: List[Tuple[str, Any]] = []

    def __call__(self, level: str, message: Any) -> None:
        self.records.append((level, message))

    @property
    def messages(self) -> List[Any]:
        return [message for _level, message in self.records]

    @property
    def last(self) -> Any:
        return self.records[-1][1] if self.records else None


def pytest_collection_modifyitems(config, items):  # pragma: no cover - Pytest hook
    """Tag every test in this directory with the `http_logging` marker."""

    for item in items:
        item.add_marker(pytest.mark.http_logging)


@pytest.fixture
def recorder() -> RecordingEmitter:
    return RecordingEmitter()


@pytest.fixture
def echo_handler():
    """Handler returning a fixed response while remembering its request."""

    seen: List[Any] = []

    def _handler(req):
        seen.append(req)
        return {"status": 200, "headers": {}, "body": {"ok": True}}

    _handler.seen = seen  # type: ignore[attr-defined]
    return _handler


@pytest.fixture
def flask_app() -> Flask:
    """Minimal Flask app exercising traces, redirects and errors."""

    app = Flask(__name__)
    app.config["TESTING"] = True

    @app.get("/hello")
    def hello():
        return jsonify(trace=request.headers.get("Request-Trace"), name=request.args.get("name"))

    @app.get("/moved")
    def moved():
        return redirect("/hello")

    @app.get("/health")
    def health():
        return jsonify(status="ok")

    @app.get("/boom")
    def boom():
        raise RuntimeError("boom")

    return app
