"""
Configuration store.

Owns the raw definition tree and the resolved tree, and reruns a full
resolution pass after every mutating call.
"""

from collections.abc import Mapping
from typing import Any

from rich.console import Console

from stratum.config.dictionary import Dictionary
from stratum.config.merge import copy_tree, deep_merge
from stratum.config.paths import flatten, get_path, normalize_path, set_path, unflatten
from stratum.config.sentinels import MISSING, UNDEFINED
from stratum.config.substitution import DEFAULT_MAX_DEPTH, Substitutor
from stratum.utils.display import render_tree


class ConfigStore:
    """
    Layered configuration with placeholder substitution.

    Usage::

        store = ConfigStore({"app": {"name": "api", "url": "https://${self:app.name}.local"}})
        store.merge(parse_env(os.environ, pick=["APP__NAME"]))
        store.resolve({"sm": secrets})
        store.get("app.url")

    Args:
        data: Optional nested (or flat) mapping to seed the definition tree
        dictionary: Optional namespaces to register (see ``resolve``)
        max_depth: Maximum substitution passes per value
        strict: Raise instead of returning partially resolved text on cycles
    """

    def __init__(
        self,
        data: Mapping[str, Any] | None = None,
        dictionary: Mapping[str, Any] | None = None,
        *,
        max_depth: int = DEFAULT_MAX_DEPTH,
        strict: bool = False,
    ):
        self._definition: dict[str, Any] = {}
        self._resolved: dict[str, Any] = {}
        self._dictionary = Dictionary(self._definition)
        self._dictionary.update(dictionary)
        self._substitutor = Substitutor(self._dictionary, max_depth=max_depth, strict=strict)
        self.merge(data)

    def get(self, path: str | None = None, default: Any = None) -> Any:
        """
        Get a resolved value by dot or colon path.

        With no path the whole resolved tree is returned. Values are live
        references: mutating a returned dict or list is visible to later calls
        until the next resolution pass.

        Args:
            path: Key in ``dot.notation`` or ``colon:notation``
            default: Returned when the path is missing or resolved to UNDEFINED
        """
        if not path:
            return self._resolved
        value = get_path(self._resolved, normalize_path(path))
        if value is MISSING or value is UNDEFINED:
            return default
        return value

    def set(self, path: str, value: Any) -> "ConfigStore":
        """Set a definition value at ``path`` and resolve the whole tree."""
        set_path(self._definition, normalize_path(path), copy_tree(value))
        return self.resolve()

    def merge(self, data: Mapping[str, Any] | None) -> "ConfigStore":
        """Deep merge ``data`` (nested or flat) into the definition and resolve."""
        if data is None:
            return self
        deep_merge(self._definition, unflatten(data))
        return self.resolve()

    def resolve(self, dictionary: Mapping[str, Any] | None = None) -> "ConfigStore":
        """
        Register namespaces and re-resolve the entire definition tree.

        Namespaces accumulate across calls. ``self`` is reserved for the
        definition tree.

        Raises:
            ReservedNamespaceError: If ``dictionary`` contains ``self``; the
                dictionary and resolved tree are left untouched.
        """
        self._dictionary.update(dictionary)
        self._resolved = self._substitutor.resolve_tree(self._definition)
        return self

    def render(self, flat: bool = False, sort: bool = False, debug: bool = False) -> str:
        """
        Render the definition and resolved trees as text.

        Args:
            flat: Show dotted keys instead of nested mappings
            sort: Sort keys alphabetically
            debug: Only show keys that are UNDEFINED or still hold a placeholder
        """
        return render_tree(self._definition, self._resolved, flat=flat, sort=sort, debug=debug)

    def print(
        self,
        flat: bool = False,
        sort: bool = False,
        debug: bool = False,
        console: Console | None = None,
    ) -> str:
        """Print the rendered trees to ``console`` and return the text."""
        text = self.render(flat=flat, sort=sort, debug=debug)
        (console or Console()).print(text, markup=False, highlight=False, soft_wrap=True)
        return text

    @staticmethod
    def flatten(tree: Mapping[str, Any]) -> dict[str, Any]:
        return flatten(tree)

    @staticmethod
    def unflatten(mapping: Mapping[str, Any]) -> dict[str, Any]:
        return unflatten(mapping)
