"""
Configuration store with placeholder substitution.

Path codec, deep merge, namespace dictionary, substitution engine and the
store that ties them together, plus readers for files, environment and
arguments.
"""

from stratum.config.dictionary import RESERVED_NAMESPACE, Dictionary
from stratum.config.loader import load_config
from stratum.config.merge import copy_tree, deep_merge
from stratum.config.paths import flatten, get_path, normalize_path, set_path, unflatten
from stratum.config.sentinels import MISSING, UNDEFINED
from stratum.config.sources import SourceFormat, parse_args, parse_env, parse_file
from stratum.config.store import ConfigStore
from stratum.config.substitution import PLACEHOLDER_PATTERN, Substitutor, coerce_literal

__all__ = [
    "ConfigStore",
    "Dictionary",
    "MISSING",
    "PLACEHOLDER_PATTERN",
    "RESERVED_NAMESPACE",
    "SourceFormat",
    "Substitutor",
    "UNDEFINED",
    "coerce_literal",
    "copy_tree",
    "deep_merge",
    "flatten",
    "get_path",
    "load_config",
    "normalize_path",
    "parse_args",
    "parse_env",
    "parse_file",
    "set_path",
    "unflatten",
]
