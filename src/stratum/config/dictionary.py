"""
Namespace dictionary used by the substitution engine.

Maps namespace names to lookup sources. The reserved ``self`` namespace is
bound by identity to the store's definition tree, so self-references always
see the latest raw definitions.
"""

from collections.abc import Iterator, Mapping
from typing import Any

from stratum.config.merge import deep_merge
from stratum.exceptions import ReservedNamespaceError
from stratum.utils.logging import get_logger

logger = get_logger("stratum.config.dictionary")

RESERVED_NAMESPACE = "self"


class Dictionary:
    """Namespace registry with a live ``self`` binding."""

    def __init__(self, definition: dict[str, Any]):
        self._namespaces: dict[str, Any] = {RESERVED_NAMESPACE: definition}

    def update(self, namespaces: Mapping[str, Any] | None) -> None:
        """
        Merge additional namespaces into the registry.

        Later calls augment earlier ones: nested mappings merge, so registering
        ``{"sm": {"a": {"x": 1}}}`` then ``{"sm": {"a": {"y": 2}}}`` keeps both.

        Raises:
            ReservedNamespaceError: If ``namespaces`` contains ``self``. Nothing
                is merged in that case.
        """
        if not namespaces:
            return
        if RESERVED_NAMESPACE in namespaces:
            raise ReservedNamespaceError(RESERVED_NAMESPACE)

        logger.debug(f"Merging namespaces: {sorted(namespaces)}")
        deep_merge(self._namespaces, namespaces)

    def get(self, namespace: str, default: Any = None) -> Any:
        return self._namespaces.get(namespace, default)

    @property
    def definition(self) -> dict[str, Any]:
        """The live definition tree bound to ``self``."""
        return self._namespaces[RESERVED_NAMESPACE]

    def __getitem__(self, namespace: str) -> Any:
        return self._namespaces[namespace]

    def __contains__(self, namespace: object) -> bool:
        return namespace in self._namespaces

    def __iter__(self) -> Iterator[str]:
        return iter(self._namespaces)

    def __len__(self) -> int:
        return len(self._namespaces)
