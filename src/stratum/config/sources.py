"""
Source readers.

Turn environment variables, command line arguments and files into plain
nested dicts ready for ``ConfigStore.merge``. Readers take their inputs
explicitly and never touch process state on their own.
"""

import importlib.util
import json
import re
from collections.abc import Iterable, Mapping
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from stratum.config.paths import unflatten
from stratum.exceptions import ConfigurationError, UnsupportedFormatError
from stratum.utils.logging import get_logger

logger = get_logger("stratum.config.sources")

DEFAULT_DELIMITER = "__"

# Leading characters that are not part of an argument name, e.g. "--"
_ARG_PREFIX = re.compile(r"^[^a-zA-Z]*")


class SourceFormat(str, Enum):
    """File formats understood by ``parse_file``."""

    JSON = "json"
    YAML = "yaml"
    PYTHON = "python"

    @classmethod
    def from_path(cls, path: str | Path) -> "SourceFormat":
        """
        Pick the format from a file extension.

        Raises:
            UnsupportedFormatError: If the extension is not recognized
        """
        suffix = Path(path).suffix.lower()
        if suffix == ".json":
            return cls.JSON
        if suffix in (".yml", ".yaml"):
            return cls.YAML
        if suffix == ".py":
            return cls.PYTHON
        raise UnsupportedFormatError(str(path))


def parse_env(
    environ: Mapping[str, str],
    pick: Iterable[str] | None = None,
    delim: str = DEFAULT_DELIMITER,
    lowercase: bool = False,
) -> dict[str, Any]:
    """
    Parse environment variables into a nested dict.

    ``delim`` marks nesting, so ``test__me__nested`` becomes
    ``{"test": {"me": {"nested": ...}}}``.

    Args:
        environ: Variable name to value mapping (e.g. ``os.environ``)
        pick: Only these variable names (default: all). Names not present in
            ``environ`` are skipped.
        delim: Nesting delimiter (default: ``__``)
        lowercase: Lowercase the resulting keys (``FOO__BAR`` -> ``foo.bar``)

    Returns:
        Nested dict of string values
    """
    names = list(pick) if pick is not None else list(environ)
    flat: dict[str, Any] = {}
    for name in names:
        if name not in environ:
            continue
        key = name.replace(delim, ".")
        if lowercase:
            key = key.lower()
        flat[key] = environ[name]
    return unflatten(flat)


def parse_args(
    argv: Iterable[str],
    pick: Iterable[str] | None = None,
    delim: str = DEFAULT_DELIMITER,
) -> dict[str, Any]:
    """
    Parse ``key=value`` command line tokens into a nested dict.

    A token without ``=`` sets its key to ``"true"``. Leading non-alphabetic
    characters are dropped from keys, so ``--debug`` is ``debug``.

    Args:
        argv: Argument tokens, without the program name
        pick: Only these keys, compared after prefix stripping (default: all)
        delim: Nesting delimiter (default: ``__``)

    Returns:
        Nested dict of string values
    """
    allowed = set(pick) if pick is not None else None
    flat: dict[str, Any] = {}
    for token in argv:
        key, separator, value = token.partition("=")
        key = _ARG_PREFIX.sub("", key)
        if not key:
            continue
        if allowed is not None and key not in allowed:
            continue
        flat[key.replace(delim, ".")] = value.strip() if separator else "true"
    return unflatten(flat)


def parse_file(path: str | Path, allow_code: bool = False) -> dict[str, Any]:
    """
    Parse a configuration file into a nested dict.

    JSON and YAML are always supported. Python files are executed only when
    ``allow_code`` is set; they must define a mapping named ``CONFIG``.

    Args:
        path: File path
        allow_code: Permit executing ``.py`` sources

    Raises:
        UnsupportedFormatError: Unknown extension, or a Python file without
            ``allow_code``
        ConfigurationError: The file cannot be parsed or is not a mapping
        FileNotFoundError: The file does not exist
    """
    path = Path(path)
    source_format = SourceFormat.from_path(path)

    if not path.is_file():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    logger.debug(f"Loading {source_format.value} source: {path}")

    if source_format is SourceFormat.JSON:
        data = _load_json(path)
    elif source_format is SourceFormat.YAML:
        data = _load_yaml(path)
    else:
        if not allow_code:
            raise UnsupportedFormatError(
                str(path), f"Code sources are disabled, pass allow_code=True to load {path}"
            )
        data = _load_python(path)

    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ConfigurationError(
            f"Configuration must be a mapping, got {type(data).__name__}: {path}",
            details={"path": str(path)},
        )
    return dict(data)


def _load_json(path: Path) -> Any:
    with open(path, encoding="utf-8") as f:
        try:
            return json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(
                f"Error parsing {path.name} at line {e.lineno}, column {e.colno}:\n  {e.msg}\n  File: {path}",
                details={"path": str(path), "line": e.lineno, "column": e.colno},
            ) from e


def _load_yaml(path: Path) -> Any:
    with open(path, encoding="utf-8") as f:
        try:
            return yaml.safe_load(f)
        except yaml.YAMLError as e:
            mark = getattr(e, "problem_mark", None)
            if mark is not None:
                raise ConfigurationError(
                    f"Error parsing {path.name} at line {mark.line + 1}, column {mark.column + 1}:\n"
                    f"  {e}\n"
                    f"  File: {path}\n"
                    f"  Suggestion: Check YAML syntax, ensure proper indentation and quotes",
                    details={"path": str(path), "line": mark.line + 1, "column": mark.column + 1},
                ) from e
            raise ConfigurationError(f"Error parsing {path.name}: {e}\n  File: {path}", details={"path": str(path)}) from e


def _load_python(path: Path) -> Any:
    spec = importlib.util.spec_from_file_location(f"stratum_source_{path.stem}", path)
    if spec is None or spec.loader is None:
        raise ConfigurationError(f"Cannot import configuration module: {path}", details={"path": str(path)})
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    if not hasattr(module, "CONFIG"):
        raise ConfigurationError(f"Configuration module defines no CONFIG mapping: {path}", details={"path": str(path)})
    return module.CONFIG
