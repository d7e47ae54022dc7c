"""Request and response formatters.

Every mode provides a request formatter taking the (selected, censored)
request and a response formatter taking the request and response, so modes
can be swapped freely in a ``LoggingConfig``.
"""

from __future__ import annotations

import json
import re
from enum import Enum
from typing import Any, Dict, Mapping

from .walk import is_branch, rebuild


LOG_DOMAIN = "http.ring.logging"

_KEYWORD_RE = re.compile(r"^[A-Za-z*+!_?<>=][A-Za-z0-9*+!_?<>=.\-/]*$")


class LogEvent(str, Enum):
    """Lifecycle events emitted by the logging middleware."""

    STARTED = "request/started"
    FINISHED = "request/finished"


# --------------------- human readable ---------------------
MAX_RENDER_DEPTH = 64


class _Elided:
    """Stands in for structure nested deeper than ``MAX_RENDER_DEPTH``."""

    def __repr__(self) -> str:
        return "..."

    __str__ = __repr__


ELIDED = _Elided()


def _elide(_key: Any, item: Any, depth: int, _keyed: bool) -> tuple[bool, Any]:
    if depth > MAX_RENDER_DEPTH and is_branch(item):
        return True, ELIDED
    return False, None


def prune(value: Any) -> Any:
    """Copy ``value``, replacing containers deeper than ``MAX_RENDER_DEPTH`` with ``...``."""

    return rebuild(value, _elide)


def pr_str(value: Any) -> str:
    """Render a record in compact data notation, e.g. ``{:status 200, :uri "/"}``.

    The rendering is for reading, not for round-tripping. It is lossy:
    identifier-like string keys render as keywords, so the header key
    ``"Location"`` prints as ``:Location``, and structure nested deeper than
    ``MAX_RENDER_DEPTH`` prints as ``...``.
    """

    return _render(prune(value))


def _render(value: Any) -> str:
    if value is None:
        return "nil"
    if value is ELIDED:
        return "..."
    if isinstance(value, Enum):
        return _render(value.value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, Mapping):
        entries = ", ".join(
            f"{_render_key(key)} {_render(item)}" for key, item in value.items()
        )
        return "{" + entries + "}"
    if isinstance(value, (list, tuple)):
        return "[" + " ".join(_render(item) for item in value) + "]"
    if isinstance(value, (set, frozenset)):
        return "#{" + " ".join(sorted(_render(item) for item in value)) + "}"
    if isinstance(value, bytes):
        return _render(value.decode("utf-8", "replace"))
    return _render(str(value))


def _render_key(key: Any) -> str:
    if isinstance(key, str) and _KEYWORD_RE.match(key):
        return f":{key}"
    return _render(key)


def pr_req(request: Any) -> str:
    """A basic request format."""

    return f"Starting {pr_str(request)}"


def pr_resp(request: Any, response: Any) -> str:
    """A basic response format, rendering both the request and response."""

    return f"Finished {pr_str(request)} {pr_str(response)}"


# --------------------- structured ---------------------
def structured_req(request: Any) -> Dict[str, Any]:
    """Flat started event for machine-readable log pipelines."""

    return {
        "domain": LOG_DOMAIN,
        "event": LogEvent.STARTED.value,
        "request": request,
    }


def structured_resp(request: Any, response: Any) -> Dict[str, Any]:
    """Flat finished event for machine-readable log pipelines."""

    return {
        "domain": LOG_DOMAIN,
        "event": LogEvent.FINISHED.value,
        "request": request,
        "response": response,
    }


# --------------------- json ---------------------
def _to_json(payload: Mapping[str, Any]) -> str:
    return json.dumps(prune(payload), ensure_ascii=False, default=str)


def json_req(request: Any) -> str:
    return _to_json(structured_req(request))


def json_resp(request: Any, response: Any) -> str:
    return _to_json(structured_resp(request, response))


__all__ = [
    "ELIDED",
    "LOG_DOMAIN",
    "LogEvent",
    "MAX_RENDER_DEPTH",
    "json_req",
    "json_resp",
    "pr_req",
    "pr_resp",
    "pr_str",
    "prune",
    "structured_req",
    "structured_resp",
]
