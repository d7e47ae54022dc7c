"""Declarative field selection for requests and responses.

A selector spec describes which fields of a record to keep, with arbitrary
nesting. Missing fields are silently omitted, never an error::

    deep_select_keys(
        {
            "method": "get",
            "url": "http://google.com",
            "query-params": {"a": "some", "password": "safe"},
            "headers": {"Authentication": "safe"},
        },
        ["method", "url", "form-params", {"query-params": ["a", "b"]}],
    )
    # => {"method": "get", "url": "http://google.com", "query-params": {"a": "some"}}

Raw specs are compiled into a closed set of selector variants before they
are evaluated, so the recursion only ever dispatches on known shapes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Union


Key = Union[str, int]
Selection = Optional[Dict[Any, Any]]


class Selector(ABC):
    """Base class of the compiled selector variants."""

    @abstractmethod
    def select(self, source: Any) -> Selection:
        """Return the selection from ``source``, or ``None`` when absent."""


@dataclass(frozen=True)
class EmptySelector(Selector):
    """Selects nothing. Unrecognized spec shapes compile to this."""

    def select(self, source: Any) -> Selection:
        return None


@dataclass(frozen=True)
class KeySelector(Selector):
    """Selects a single key when it holds a value."""

    key: Key

    def select(self, source: Any) -> Selection:
        if not isinstance(source, Mapping):
            return None

        value = source.get(self.key)
        if value is None:
            return None

        return {self.key: value}


@dataclass(frozen=True)
class SequenceSelector(Selector):
    """Merges the selections of every child, in order."""

    children: Tuple[Selector, ...]

    def select(self, source: Any) -> Selection:
        merged: Dict[Any, Any] = {}

        for child in self.children:
            selected = child.select(source)
            if selected:
                merged.update(selected)

        return merged


@dataclass(frozen=True)
class MappingSelector(Selector):
    """Descends into nested values, keeping keys whose selection is non-empty."""

    entries: Tuple[Tuple[Key, Selector], ...]

    def select(self, source: Any) -> Selection:
        nested_source = source if isinstance(source, Mapping) else {}
        selected: Dict[Any, Any] = {}

        for key, child in self.entries:
            value = child.select(nested_source.get(key))
            if value:
                selected[key] = value

        return selected


_EMPTY = EmptySelector()


def _is_key(spec: Any) -> bool:
    # bool is an int subclass but never a sensible key
    return isinstance(spec, (str, int)) and not isinstance(spec, bool)


def compile_selector(spec: Any) -> Selector:
    """Compile a raw selector spec into its tagged variant.

    Atoms are tested first, then mappings, then ordered sequences, since
    strings and mappings are themselves iterable. Anything else selects
    nothing.
    """

    if isinstance(spec, Selector):
        return spec

    if _is_key(spec):
        return KeySelector(spec)

    if isinstance(spec, Mapping):
        return MappingSelector(
            tuple(
                (key, compile_selector(child))
                for key, child in spec.items()
                if _is_key(key)
            )
        )

    if isinstance(spec, (list, tuple)):
        return SequenceSelector(tuple(compile_selector(child) for child in spec))

    return _EMPTY


def deep_select_keys(source: Any, spec: Any) -> Selection:
    """Behaves like selecting keys from a dict, but with arbitrary nesting.

    Returns ``None`` when a single-key spec has nothing to contribute, and a
    (possibly empty) dict otherwise.
    """

    return compile_selector(spec).select(source)


def selecting(spec: Any) -> Callable[[Any], Dict[Any, Any]]:
    """Build a record transform that keeps only the fields named by ``spec``."""

    selector = compile_selector(spec)

    def _transform(record: Any) -> Dict[Any, Any]:
        return selector.select(record) or {}

    return _transform


__all__ = [
    "EmptySelector",
    "KeySelector",
    "MappingSelector",
    "SequenceSelector",
    "Selector",
    "compile_selector",
    "deep_select_keys",
    "selecting",
]
