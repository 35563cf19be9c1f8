"""
Placeholder substitution engine.

Grammar::

    ${namespace:keypath[, default]...}    value lookup
    @{namespace:keypath[, arg]...}        function call

Placeholders are evaluated inside out. Each pass substitutes every innermost
span (one that contains no other placeholder) from left to right, and the
result is scanned again until nothing matches or ``max_depth`` passes have
run. Text that does not match the grammar is left alone.
"""

import json
import re
from collections.abc import Mapping
from typing import Any

from stratum.config.dictionary import Dictionary
from stratum.config.merge import copy_tree
from stratum.config.paths import flatten, get_path, set_path
from stratum.config.sentinels import MISSING, UNDEFINED
from stratum.exceptions import ResolutionDepthError
from stratum.utils.logging import get_logger

logger = get_logger("stratum.config.substitution")

DEFAULT_MAX_DEPTH = 10

# sigil, namespace (up to the first colon), body without nested placeholders
PLACEHOLDER_PATTERN = re.compile(r"([$@])\{([^{}:$@]*):((?:(?![$@]\{)[^{}])*)\}")

QUOTED_PATTERN = re.compile(r"""^(['"])(.*)\1$""", re.DOTALL)

LITERAL_TOKENS: dict[str, Any] = {
    "undefined": UNDEFINED,
    "null": None,
    "true": True,
    "false": False,
}


def has_placeholder(value: Any) -> bool:
    """Return True if ``value`` is a string containing a placeholder."""
    return isinstance(value, str) and PLACEHOLDER_PATTERN.search(value) is not None


def coerce_literal(original: Any, resolved: Any) -> Any:
    """
    Convert a substituted string into its typed value.

    Only applies when ``resolved`` is a string that differs from ``original``.
    The exact tokens ``undefined``, ``null``, ``true`` and ``false`` become
    UNDEFINED, None, True and False. Anything else loses one matching pair of
    outer quotes, so a default written as ``'true'`` stays the text ``true``.
    """
    if not isinstance(resolved, str) or resolved == original:
        return resolved
    if resolved in LITERAL_TOKENS:
        return LITERAL_TOKENS[resolved]
    match = QUOTED_PATTERN.match(resolved)
    return match.group(2) if match else resolved


def to_text(value: Any) -> str:
    """Text form of a substitution result embedded in a larger string."""
    if isinstance(value, str):
        return value
    if value is UNDEFINED:
        return "undefined"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (Mapping, list, tuple)):
        return json.dumps(value, default=str)
    return str(value)


class Substitutor:
    """
    Resolves placeholders against a namespace Dictionary.

    Args:
        dictionary: Namespace registry; its ``self`` entry is the definition tree
        max_depth: Maximum substitution passes per value
        strict: Raise ResolutionDepthError instead of returning partially
            substituted text when ``max_depth`` is exceeded
    """

    def __init__(self, dictionary: Dictionary, max_depth: int = DEFAULT_MAX_DEPTH, strict: bool = False):
        self._dictionary = dictionary
        self.max_depth = max_depth
        self.strict = strict
        # Per-pass state for containers reached through lookups
        self._containers: dict[tuple, tuple[Any, Any]] | None = None
        self._active: set[int] = set()

    def resolve_tree(self, definition: Mapping[str, Any]) -> dict[str, Any]:
        """Materialize every leaf of ``definition`` into a new tree."""
        leaves = flatten(definition)
        logger.debug(f"Resolving {len(leaves)} leaves")

        self._containers = {}
        try:
            resolved: dict[str, Any] = {}
            for path, leaf in leaves.items():
                set_path(resolved, path, self.resolve_value(leaf))
            return resolved
        finally:
            self._containers = None

    def resolve_value(self, value: Any, depth: int = 0) -> Any:
        """
        Materialize a single value.

        Strings are substituted and coerced. Mappings and lists are rebuilt with
        each element resolved at the same depth. Other values pass through.
        """
        if isinstance(value, str):
            return coerce_literal(value, self.substitute(value, depth))
        if isinstance(value, Mapping):
            return {key: self.resolve_value(item, depth) for key, item in value.items()}
        if isinstance(value, (list, tuple)):
            return [self.resolve_value(item, depth) for item in value]
        return value

    def substitute(self, value: Any, depth: int = 0) -> Any:
        """
        Substitute placeholders in ``value`` from the inside out.

        A string that is exactly one placeholder may resolve to a non-string
        (bool, number, None, UNDEFINED, mapping or list), which is returned
        as-is. Otherwise every result is embedded as text and the new string is
        substituted again.
        """
        if not isinstance(value, str):
            return value

        matches = list(PLACEHOLDER_PATTERN.finditer(value))
        if not matches:
            return value

        depth += 1
        if depth > self.max_depth:
            if self.strict:
                raise ResolutionDepthError(value, self.max_depth)
            logger.debug(f"Depth limit {self.max_depth} reached, leaving partially resolved: {value}")
            return value

        if len(matches) == 1 and matches[0].group(0) == value:
            result = self._evaluate(matches[0], depth)
            # Lookup results are already fully substituted
            if not isinstance(result, str) or matches[0].group(1) == "$":
                return result
            return self.substitute(result, depth)

        parts = []
        position = 0
        for match in matches:
            parts.append(value[position : match.start()])
            parts.append(to_text(self._evaluate(match, depth)))
            position = match.end()
        parts.append(value[position:])

        return self.substitute("".join(parts), depth)

    def _evaluate(self, match: re.Match, depth: int) -> Any:
        """Evaluate one innermost placeholder."""
        sigil, namespace, body = match.groups()
        keypath, *extras = [token.strip() for token in body.split(",")]
        namespace = namespace.strip()

        if sigil == "@":
            return self._call(namespace, keypath, extras, depth)
        return self._lookup(namespace, keypath, extras, depth)

    def _lookup(self, namespace: str, keypath: str, defaults: list[str], depth: int) -> Any:
        """
        Resolve a ``${...}`` placeholder.

        A value found in the namespace wins unless it is itself a placeholder
        that resolves to nothing. Otherwise the first default that is neither
        empty nor ``undefined`` is used, else UNDEFINED.
        """
        value = get_path(self._dictionary.get(namespace), keypath)

        if has_placeholder(value):
            substituted = self.substitute(value, depth)
            if coerce_literal(value, substituted) is not UNDEFINED:
                return substituted
            value = MISSING

        if value is MISSING or value is UNDEFINED:
            return next((token for token in defaults if token and token != "undefined"), UNDEFINED)

        if isinstance(value, (Mapping, list, tuple)):
            return self._resolve_container(value, depth, f"${{{namespace}:{keypath}}}")
        return value

    def _resolve_container(self, container: Any, depth: int, reference: str) -> Any:
        """
        Resolve a mapping or list reached through a lookup.

        Results are reused within a pass for the same depth and the same set of
        containers being resolved further up. A container that refers back to
        one of those is returned as an unresolved copy, or raises
        ResolutionDepthError in strict mode.
        """
        if self._containers is None:
            self._containers = {}
            try:
                return self._resolve_container(container, depth, reference)
            finally:
                self._containers = None

        if id(container) in self._active:
            if self.strict:
                raise ResolutionDepthError(reference, self.max_depth)
            logger.debug(f"Circular container reference left unresolved: {reference}")
            return copy_tree(container)

        key = (id(container), depth, frozenset(self._active))
        if key not in self._containers:
            self._active.add(id(container))
            try:
                # Holding the container keeps its id stable for the pass
                self._containers[key] = (container, self.resolve_value(container, depth))
            finally:
                self._active.discard(id(container))
        return self._containers[key][1]

    def _call(self, namespace: str, keypath: str, args: list[str], depth: int) -> Any:
        """Resolve a ``@{...}`` placeholder by calling the registered function."""
        function = self._dictionary.get(namespace)
        if not callable(function):
            logger.debug(f"No function registered for namespace '{namespace}'")
            return UNDEFINED

        values = [self._resolve_argument(token, depth) for token in (keypath, *args)]
        return function(*values)

    def _resolve_argument(self, token: str, depth: int) -> Any:
        """Resolve a function argument as a path into ``self``, else keep it literal."""
        value = get_path(self._dictionary.definition, token)
        if value is MISSING:
            return token
        return self.resolve_value(value, depth)
