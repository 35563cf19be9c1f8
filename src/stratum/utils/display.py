"""
Text rendering of configuration trees using Rich.

Used by ``ConfigStore.render``/``ConfigStore.print`` and the CLI.
"""

import io
from collections.abc import Mapping
from typing import Any

from rich.console import Console
from rich.pretty import Pretty

from stratum.config.paths import flatten, unflatten
from stratum.config.sentinels import UNDEFINED
from stratum.config.substitution import has_placeholder, to_text


def _is_unresolved(value: Any) -> bool:
    """True for UNDEFINED values and values still holding a placeholder."""
    if value is UNDEFINED:
        return True
    return has_placeholder(value if isinstance(value, str) else to_text(value))


def _select(tree: Mapping[str, Any], sort: bool, debug: bool) -> dict[str, Any]:
    leaves = flatten(tree)
    keys = sorted(leaves) if sort else list(leaves)
    return {key: leaves[key] for key in keys if not debug or _is_unresolved(leaves[key])}


def render_tree(
    config: Mapping[str, Any],
    data: Mapping[str, Any],
    flat: bool = False,
    sort: bool = False,
    debug: bool = False,
    width: int = 120,
) -> str:
    """
    Render definition (``config``) and resolved (``data``) trees side by side.

    Args:
        config: Raw definition tree
        data: Resolved tree
        flat: Show dotted keys instead of nested mappings
        sort: Sort keys alphabetically
        debug: Only keep UNDEFINED values and values with placeholders
        width: Console width used for wrapping

    Returns:
        Plain text, without color codes
    """
    view = {"config": _select(config, sort, debug), "data": _select(data, sort, debug)}
    view = flatten(view) if flat else unflatten(view)

    console = Console(file=io.StringIO(), record=True, width=width, color_system=None)
    console.print(Pretty(view, expand_all=not flat))
    return console.export_text()
