"""Key-based redaction of nested records."""

from __future__ import annotations

from typing import Any, Iterable

from .walk import rebuild


REDACTION_MARKER = "█"


def _normalize_key(key: Any) -> str:
    return str(key).lower()


def normalize_keys(keys: Iterable[str] | None) -> frozenset[str]:
    """Lower-case a collection of sensitive key fragments."""

    if not keys:
        return frozenset()

    if isinstance(keys, str):
        keys = (keys,)

    return frozenset(_normalize_key(key) for key in keys if key)


def is_sensitive(key: Any, sensitive: Iterable[str]) -> bool:
    """Return True when ``key`` contains any of the sensitive fragments."""

    normalized = _normalize_key(key)
    return any(fragment in normalized for fragment in sensitive)


def censor(record: Any, sensitive: Iterable[str] | None) -> Any:
    """Return a copy of ``record`` with sensitive values replaced by the marker.

    Every mapping reachable from ``record`` is walked, including mappings held
    in lists and tuples, at any depth. Matching is a case-insensitive
    substring test against the key, so ``"token"`` censors ``access_token``
    and ``X-Token``. Keys themselves are never altered and the input is never
    mutated.
    """

    fragments = normalize_keys(sensitive)
    return _censor(record, fragments)


def _censor(value: Any, fragments: frozenset[str]) -> Any:
    if not fragments:
        return rebuild(value, _keep)

    def _redact(key: Any, _item: Any, _depth: int, keyed: bool) -> tuple[bool, Any]:
        if keyed and is_sensitive(key, fragments):
            return True, REDACTION_MARKER
        return False, None

    return rebuild(value, _redact)


def _keep(_key: Any, _item: Any, _depth: int, _keyed: bool) -> tuple[bool, Any]:
    return False, None


__all__ = ["REDACTION_MARKER", "censor", "is_sensitive", "normalize_keys"]
