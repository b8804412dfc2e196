"""設定解決モジュール。"""

from refigure.config._converters import (
    Converter,
    to_bool,
    to_datetime,
    to_float,
    to_int,
    to_string,
)
from refigure.config._locator import (
    find_base_directory,
    find_pyproject_toml,
    resolve_global_path,
    resolve_local_path,
)
from refigure.config._lookup import find_anywhere, find_scoped, iter_entries
from refigure.config._resolver import ConfigResolver
from refigure.config._settings import resolve_settings
from refigure.config._store import DocumentStore

__all__ = [
    "ConfigResolver",
    "Converter",
    "DocumentStore",
    "find_anywhere",
    "find_base_directory",
    "find_pyproject_toml",
    "find_scoped",
    "iter_entries",
    "resolve_global_path",
    "resolve_local_path",
    "resolve_settings",
    "to_bool",
    "to_datetime",
    "to_float",
    "to_int",
    "to_string",
]
