"""Request trace identifiers propagated between services."""

from __future__ import annotations

import random
import string
from typing import Any, Callable, Mapping, Optional, Sequence


TRACE_ALPHABET = string.digits + string.ascii_lowercase
TRACE_ID_LENGTH = 4
TRACE_SEPARATOR = "."
DEFAULT_TRACE_KEYSEQ: tuple[Any, ...] = ("headers", "request-trace")

Handler = Callable[[Any], Any]

_RANDOM = random.Random()


def new_trace_id(
    length: int = TRACE_ID_LENGTH,
    alphabet: str = TRACE_ALPHABET,
    rng: random.Random | None = None,
) -> str:
    """Draw a short identifier uniformly from ``alphabet``."""

    source = rng or _RANDOM
    return "".join(source.choices(alphabet, k=max(1, length)))


def extend_trace(
    prior: Optional[str],
    *,
    length: int = TRACE_ID_LENGTH,
    alphabet: str = TRACE_ALPHABET,
    rng: random.Random | None = None,
) -> str:
    """Append a fresh id to ``prior`` so that '6d3d' becomes '6d3d.ef66'."""

    next_id = new_trace_id(length, alphabet, rng)
    if prior:
        return f"{prior}{TRACE_SEPARATOR}{next_id}"
    return next_id


def get_in(record: Any, keyseq: Sequence[Any], default: Any = None) -> Any:
    """Return the value at ``keyseq`` inside nested mappings, or ``default``."""

    current = record
    for key in keyseq:
        if not isinstance(current, Mapping) or key not in current:
            return default
        current = current[key]
    return current


def assoc_in(record: Any, keyseq: Sequence[Any], value: Any) -> dict[Any, Any]:
    """Return a copy of ``record`` with ``value`` stored at ``keyseq``.

    Only the mappings along the path are copied; missing or non-mapping
    intermediate values are replaced with fresh dicts.
    """

    if not keyseq:
        raise ValueError("keyseq must name at least one key")

    updated = dict(record) if isinstance(record, Mapping) else {}
    head, *rest = keyseq

    if rest:
        updated[head] = assoc_in(updated.get(head), rest, value)
    else:
        updated[head] = value

    return updated


def wrap_trace_request(
    handler: Handler,
    *,
    keyseq: Sequence[Any] = DEFAULT_TRACE_KEYSEQ,
    length: int = TRACE_ID_LENGTH,
    alphabet: str = TRACE_ALPHABET,
    rng: random.Random | None = None,
) -> Handler:
    """Middleware that adds or extends a trace id in the request at ``keyseq``.

    The recommended usage is to pass traces from one service to another, so
    that a log aggregator can follow requests between the services. It
    extends the request, so it must run before ``wrap_logging``. The response
    is returned untouched.
    """

    keyseq = tuple(keyseq)
    if not keyseq:
        raise ValueError("keyseq must name at least one key")

    def _traced(request: Any) -> Any:
        prior = get_in(request, keyseq)
        trace = extend_trace(
            str(prior) if prior else None,
            length=length,
            alphabet=alphabet,
            rng=rng,
        )
        return handler(assoc_in(request, keyseq, trace))

    return _traced


__all__ = [
    "DEFAULT_TRACE_KEYSEQ",
    "TRACE_ALPHABET",
    "TRACE_ID_LENGTH",
    "assoc_in",
    "extend_trace",
    "get_in",
    "new_trace_id",
    "wrap_trace_request",
]
