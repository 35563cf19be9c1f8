"""
Path codec.

Converts between nested trees and flat ``{dotted.path: leaf}`` mappings, and
addresses values inside a tree by dotted or colon-delimited path.
"""

from collections.abc import Mapping, Sequence
from typing import Any

from stratum.config.sentinels import MISSING

SEPARATOR = "."


def normalize_path(path: str) -> str:
    """Normalize ``a:b:c`` to ``a.b.c``."""
    return path.replace(":", SEPARATOR)


def split_path(path: str) -> list[str]:
    """Split a dotted or colon path into its segments."""
    return normalize_path(path).split(SEPARATOR)


def flatten(tree: Mapping[str, Any], prefix: str = "") -> dict[str, Any]:
    """
    Flatten a nested mapping into ``{dotted.path: leaf}``.

    Lists are terminal leaves; they are not recursed into element by element.
    Empty mappings are kept as leaves so their keys survive a round trip.

    Args:
        tree: Nested mapping to flatten
        prefix: Path prefix for every produced key

    Returns:
        Flat mapping of path to leaf, in tree order
    """
    flat: dict[str, Any] = {}
    for key, value in tree.items():
        path = f"{prefix}{SEPARATOR}{key}" if prefix else str(key)
        if isinstance(value, Mapping) and value:
            flat.update(flatten(value, path))
        else:
            flat[path] = value
    return flat


def unflatten(mapping: Mapping[str, Any]) -> dict[str, Any]:
    """
    Build a nested dict from a (possibly partially) flat mapping.

    Dotted keys are split at any depth, so ``{"a.b": 1, "c": {"d.e": 2}}``
    becomes ``{"a": {"b": 1}, "c": {"d": {"e": 2}}}``.
    """
    tree: dict[str, Any] = {}
    for path, leaf in flatten(mapping).items():
        set_path(tree, path, leaf)
    return tree


def get_path(tree: Any, path: str) -> Any:
    """
    Look up ``path`` inside ``tree``.

    Mappings are walked by key and sequences by integer segment. Non-string
    keys (``8080: web`` in YAML) match their text form, as in ``flatten``.

    Returns:
        The value found, or MISSING when any segment is absent
    """
    if not path:
        return MISSING

    current = tree
    for part in split_path(path):
        if isinstance(current, Mapping):
            if part in current:
                current = current[part]
                continue
            current = next((item for key, item in current.items() if str(key) == part), MISSING)
            if current is MISSING:
                return MISSING
        elif isinstance(current, Sequence) and not isinstance(current, str) and part.isdigit():
            index = int(part)
            if index >= len(current):
                return MISSING
            current = current[index]
        else:
            return MISSING
    return current


def set_path(tree: dict[str, Any], path: str, value: Any) -> None:
    """Write ``value`` at ``path``, replacing non-dict intermediates with dicts."""
    parts = split_path(path)
    current = tree
    for part in parts[:-1]:
        child = current.get(part)
        if not isinstance(child, dict):
            child = {}
            current[part] = child
        current = child
    current[parts[-1]] = value
