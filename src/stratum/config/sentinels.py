"""Sentinel values shared by the path codec, merger and substitution engine."""

from typing import Any


class _Sentinel:
    """A named singleton that is falsy and prints as its name."""

    __slots__ = ("_name",)

    def __init__(self, name: str):
        self._name = name

    def __repr__(self) -> str:
        return self._name

    def __str__(self) -> str:
        return self._name

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> "_Sentinel":
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> "_Sentinel":
        return self

    def __reduce__(self) -> str:
        return self._name


# A lookup found nothing at the requested path. Never stored in a tree.
MISSING = _Sentinel("MISSING")

# A placeholder resolved to nothing. Stored in the resolved tree and
# rendered as the text "undefined" when interpolated into a string.
UNDEFINED = _Sentinel("UNDEFINED")
