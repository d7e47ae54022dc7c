"""Request timing middleware."""

from __future__ import annotations

import time
from typing import Any, Callable, Mapping


REQUEST_TIME_FIELD = "request-time"

Handler = Callable[[Any], Any]
Clock = Callable[[], float]


def _elapsed_ms(start: float, clock: Clock) -> float:
    return round((clock() - start) * 1000.0, 3)


def wrap_request_timing(
    handler: Handler,
    *,
    field: str = REQUEST_TIME_FIELD,
    clock: Clock = time.perf_counter,
) -> Handler:
    """Middleware that puts the total handler time, in milliseconds, on the response.

    It extends the response, so it must run inside ``wrap_logging`` for the
    duration to appear in the finish event. ``None`` and non-mapping
    responses pass through unmodified.
    """

    def _timed(request: Any) -> Any:
        start = clock()
        response = handler(request)
        if response is None:
            return None

        elapsed = _elapsed_ms(start, clock)
        if not isinstance(response, Mapping):
            return response

        return {**response, field: elapsed}

    return _timed


__all__ = ["REQUEST_TIME_FIELD", "wrap_request_timing"]
