"""
Layered configuration loading.

Builds a ConfigStore from files, then the environment, then command line
arguments. Later layers override earlier ones.
"""

from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from stratum.config.sources import DEFAULT_DELIMITER, parse_args, parse_env, parse_file
from stratum.config.store import ConfigStore
from stratum.config.substitution import DEFAULT_MAX_DEPTH
from stratum.utils.logging import get_logger

logger = get_logger("stratum.config.loader")


def load_config(
    *paths: str | Path,
    environ: Mapping[str, str] | None = None,
    argv: Iterable[str] | None = None,
    env_pick: Iterable[str] | None = None,
    arg_pick: Iterable[str] | None = None,
    delim: str = DEFAULT_DELIMITER,
    dictionary: Mapping[str, Any] | None = None,
    allow_code: bool = False,
    max_depth: int = DEFAULT_MAX_DEPTH,
    strict: bool = False,
) -> ConfigStore:
    """
    Load a layered configuration.

    Args:
        paths: Files merged in order (JSON, YAML, or Python with ``allow_code``)
        environ: Environment mapping merged after the files, if given
        argv: ``key=value`` tokens merged last, if given
        env_pick: Only merge these environment variables
        arg_pick: Only merge these argument keys
        delim: Nesting delimiter for environment and argument keys
        dictionary: Namespaces to resolve against (e.g. ``{"env": os.environ}``)
        allow_code: Permit Python file sources
        max_depth: Maximum substitution passes per value
        strict: Raise on placeholder cycles instead of leaving text unresolved

    Returns:
        Resolved ConfigStore
    """
    store = ConfigStore(dictionary=dictionary, max_depth=max_depth, strict=strict)

    for path in paths:
        logger.info(f"Merging configuration file: {path}")
        store.merge(parse_file(path, allow_code=allow_code))

    if environ is not None:
        store.merge(parse_env(environ, pick=env_pick, delim=delim))

    if argv is not None:
        store.merge(parse_args(argv, pick=arg_pick, delim=delim))

    return store
