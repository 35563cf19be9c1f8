"""Deep merge of nested definition trees."""

from collections.abc import Mapping
from typing import Any

from stratum.config.sentinels import UNDEFINED


def copy_tree(value: Any) -> Any:
    """Copy mappings and lists structurally; other values are shared as-is."""
    if isinstance(value, Mapping):
        return {key: copy_tree(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [copy_tree(item) for item in value]
    return value


def deep_merge(target: dict[str, Any], source: Mapping[str, Any]) -> dict[str, Any]:
    """
    Recursively merge ``source`` into ``target`` in place.

    Nested mappings merge key by key. Scalars and lists replace the existing
    value wholesale and are copied, so later mutation of ``source`` is not
    seen by ``target``. Keys missing from ``source`` are never removed.

    Returns:
        ``target``, for chaining
    """
    for key, value in source.items():
        if value is UNDEFINED and key in target:
            continue
        existing = target.get(key)
        if isinstance(existing, dict) and isinstance(value, Mapping):
            deep_merge(existing, value)
        else:
            target[key] = copy_tree(value)
    return target
