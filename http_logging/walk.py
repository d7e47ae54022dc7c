"""Iterative copying of nested records."""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterator, List, Mapping, Tuple, Union


# visit(key, item, depth, keyed) -> (replaced, replacement)
Visit = Callable[[Any, Any, int, bool], Tuple[bool, Any]]
Branch = Union[Dict[Any, Any], List[Any]]


def is_branch(value: Any) -> bool:
    """Return True for the container types a walk descends into."""

    return isinstance(value, (Mapping, list, tuple))


def _entries(value: Any) -> Iterator[Tuple[Any, Any]]:
    if isinstance(value, Mapping):
        return iter(value.items())
    return iter(enumerate(value))


def _empty(value: Any) -> Branch:
    return {} if isinstance(value, Mapping) else []


def _store(dest: Branch, key: Any, value: Any) -> Any:
    if isinstance(dest, dict):
        dest[key] = value
        return key
    dest.append(value)
    return len(dest) - 1


def rebuild(value: Any, visit: Visit) -> Any:
    """Return a copy of ``value`` in which ``visit`` may replace any nested item.

    ``visit`` receives the item's key (its index inside sequences), the item,
    its depth (children of the root are at depth 1) and whether the key came
    from a mapping. Items it does not replace are copied, descending into
    mappings, lists and tuples. The walk keeps an explicit stack, so depth is
    bounded only by memory. Mappings come back as dicts, sequence types are
    preserved and the input is never mutated.
    """

    if not is_branch(value):
        return value

    holder: Dict[str, Any] = {}
    stack = [(_entries(value), value, _empty(value), holder, "root", 1)]

    while stack:
        entries, source, dest, parent, slot, depth = stack[-1]
        keyed = isinstance(source, Mapping)

        for key, item in entries:
            replaced, replacement = visit(key, item, depth, keyed)
            if replaced:
                _store(dest, key, replacement)
            elif is_branch(item):
                child_slot = _store(dest, key, None)
                stack.append((_entries(item), item, _empty(item), dest, child_slot, depth + 1))
                break
            else:
                _store(dest, key, item)
        else:
            stack.pop()
            parent[slot] = tuple(dest) if isinstance(source, tuple) else dest

    return holder["root"]


__all__ = ["is_branch", "rebuild"]
