"""リゾルバー設定モデル。

ConfigResolver の探索規約・エントリ形式・開発環境フラグを定義する。
デフォルト値のみで有効なインスタンスを構築可能。
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Annotated, Final

from pydantic import Field, StrictBool, StringConstraints

from refigure.models._base import RefigureBaseModel

DEFAULT_BASE_DIRECTORY_NAME: Final[str] = "Base"
DEFAULT_MAX_SEARCH_LEVELS: Final[int] = 5
DEFAULT_CONFIG_DIR_NAME: Final[str] = "CONFIG"

_NonEmptyStr = Annotated[str, StringConstraints(min_length=1)]


def _entry_script() -> Path | None:
    """エントリスクリプトのパスを返す。対話モード等で特定できなければ None。"""
    argv0 = sys.argv[0] if sys.argv else ""
    if not argv0 or argv0 in ("-c", "-m"):
        return None
    return Path(argv0).resolve()


def default_app_name() -> str:
    """エントリスクリプトのファイル名。特定できなければ "python"。"""
    script = _entry_script()
    return script.name if script is not None else "python"


def default_base_directory() -> Path:
    """エントリスクリプトのあるディレクトリ。特定できなければカレントディレクトリ。"""
    script = _entry_script()
    return script.parent if script is not None else Path.cwd()


class ConfigFileCandidate(RefigureBaseModel):
    """既定の global 設定ファイル名候補。

    Attributes:
        name: search_dir 内で探すファイル名。
        order: 探索順序。小さい値ほど先に試す。
    """

    name: _NonEmptyStr
    order: int


DEFAULT_GLOBAL_CONFIG_FILENAMES: Final[tuple[ConfigFileCandidate, ...]] = (
    ConfigFileCandidate(name="AutomationBase.config", order=1),
    ConfigFileCandidate(name="Automation.config", order=2),
)


class ResolverSettings(RefigureBaseModel):
    """ConfigResolver の全設定項目を統合した不変モデル。

    初期化時の引数が None の場合、ここでの値が使われる。
    """

    # 初期化設定
    in_dev_environment: StrictBool = True
    auto_initialize: StrictBool = True
    global_config_path: Path | None = None
    local_config_path: Path | None = None

    # ファイル探索設定
    search_dir: Path = Field(default_factory=Path.cwd)
    base_directory: Path = Field(default_factory=default_base_directory)
    app_name: _NonEmptyStr = Field(default_factory=default_app_name)
    global_config_filenames: tuple[ConfigFileCandidate, ...] = (
        DEFAULT_GLOBAL_CONFIG_FILENAMES
    )
    base_directory_name: _NonEmptyStr = DEFAULT_BASE_DIRECTORY_NAME
    max_search_levels: int = Field(default=DEFAULT_MAX_SEARCH_LEVELS, gt=0)
    config_dir_name: _NonEmptyStr = DEFAULT_CONFIG_DIR_NAME

    # エントリ形式
    entry_tag: _NonEmptyStr = "add"
    key_attribute: _NonEmptyStr = "key"
    value_attribute: _NonEmptyStr = "value"

    # 開発環境ディレクトリ構成
    solution_directory_name: _NonEmptyStr = "Automation"
    dll_directory_name: _NonEmptyStr = "DLL"

    @property
    def global_file_name(self) -> str:
        """開発環境用 global 設定ファイル名（<app_name>.config）。"""
        return f"{self.app_name}.config"

    @property
    def local_file_name(self) -> str:
        """開発環境用 local 設定ファイル名（<app_name>.local.config）。"""
        return f"{self.app_name}.local.config"
