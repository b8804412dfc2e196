"""設定ファイル探索。

global / local の XML 設定ファイルを、明示パス → 既定ファイル名 →
ベースディレクトリの上方探索、の順で特定する。
リゾルバー自体の設定を記述する pyproject.toml の探索も担当する。
"""

from __future__ import annotations

import logging
import stat as stat_module
from collections.abc import Callable
from pathlib import Path

from refigure.errors import (
    ConfigFileNotFoundError,
    DirectoryNotFoundError,
    OperationNotAllowedError,
)
from refigure.models.settings import ResolverSettings

logger = logging.getLogger(__name__)

_PYPROJECT_FILE_NAME: str = "pyproject.toml"


def _find_ancestor(
    start: Path,
    target_name: str,
    check: Callable[[int], bool],
) -> Path | None:
    """start から親方向に target_name を探索し、最初にマッチした候補パスを返す。

    Args:
        start: 探索開始ディレクトリ。
        target_name: 探索対象の名前（例: "pyproject.toml"）。
        check: stat.st_mode に適用する種別チェック関数（例: stat.S_ISREG）。

    Returns:
        最初にマッチした候補パス（start/…/target_name）。見つからなければ None。

    Raises:
        OSError: 探索パス上のアクセス権限エラー等。
    """
    current = start.resolve()
    while True:
        candidate = current / target_name
        try:
            st = candidate.stat()
        except FileNotFoundError:
            pass
        else:
            if check(st.st_mode):
                return candidate
        parent = current.parent
        if parent == current:
            return None
        current = parent


def find_pyproject_toml(start: Path) -> Path | None:
    """start ディレクトリから親方向に pyproject.toml を探索する。

    Args:
        start: 探索開始ディレクトリ。

    Returns:
        最初に見つかった pyproject.toml のフルパス。見つからなければ None。

    Raises:
        OSError: 探索パス上のアクセス権限エラー等。
    """
    return _find_ancestor(start, _PYPROJECT_FILE_NAME, stat_module.S_ISREG)


def _has_subdirectory(directory: Path, name: str) -> bool:
    """directory の直下に name という名前のディレクトリがあるか判定する。"""
    try:
        return any(child.is_dir() and child.name == name for child in directory.iterdir())
    except (FileNotFoundError, NotADirectoryError):
        return False


def find_base_directory(start: Path, directory_name: str, max_levels: int) -> Path:
    """start から親方向に、直下に directory_name を持つディレクトリを探索する。

    start 自身を1レベル目として最大 max_levels レベルを検査する。
    ファイルシステムルートに到達した場合もそこで打ち切る。

    Args:
        start: 探索開始ディレクトリ。
        directory_name: 探すサブディレクトリ名（例: "Base"）。
        max_levels: 検査するレベル数の上限。

    Returns:
        見つかったサブディレクトリのパス（<祖先>/<directory_name>）。

    Raises:
        DirectoryNotFoundError: 上限レベル内で見つからない場合。
    """
    current = start.resolve()
    for _ in range(max_levels):
        if _has_subdirectory(current, directory_name):
            found = current / directory_name
            logger.debug("Found base directory: %s", found)
            return found
        parent = current.parent
        if parent == current:
            break
        current = parent
    raise DirectoryNotFoundError(
        f"Could not locate a '{directory_name}' directory within {max_levels} "
        f"levels above '{start}'. Pass explicit config paths or set "
        "base_directory in [tool.refigure]."
    )


def debug_config_path(settings: ResolverSettings, *, local: bool) -> Path:
    """開発環境用の規約パス <Base>/CONFIG/<app_name>[.local].config を構築する。

    ファイルの存在チェックは行わない（パスのみ構築）。

    Raises:
        DirectoryNotFoundError: ベースディレクトリが見つからない場合。
    """
    base = find_base_directory(
        settings.base_directory,
        settings.base_directory_name,
        settings.max_search_levels,
    )
    file_name = settings.local_file_name if local else settings.global_file_name
    return base / settings.config_dir_name / file_name


def _resolve_explicit(settings: ResolverSettings, explicit_path: Path) -> Path:
    """明示パスを search_dir 基準で解決し、存在を確認する。"""
    path = explicit_path if explicit_path.is_absolute() else settings.search_dir / explicit_path
    if not path.is_file():
        raise ConfigFileNotFoundError(
            f"Config file does not exist at provided path: {path}"
        )
    return path


def resolve_global_path(
    settings: ResolverSettings,
    in_dev_environment: bool,
    explicit_path: Path | None = None,
) -> Path:
    """global 設定ファイルのパスを解決する。

    明示パスがあればその存在を確認して返す。なければ既定ファイル名を
    order の昇順に search_dir 内で探し、最初に存在したものを返す。
    いずれも存在しない場合、開発環境なら規約パスへフォールバックする。

    Args:
        settings: リゾルバー設定。
        in_dev_environment: 開発環境として初期化中か。
        explicit_path: 呼び出し側が指定したパス。

    Returns:
        global 設定ファイルのパス。

    Raises:
        ConfigFileNotFoundError: 明示パスが存在しない、または開発環境外で
            既定ファイル名がどれも存在しない場合。
        DirectoryNotFoundError: 規約パスのベースディレクトリが見つからない場合。
    """
    if explicit_path is not None:
        return _resolve_explicit(settings, explicit_path)

    candidates = [
        settings.search_dir / candidate.name
        for candidate in sorted(settings.global_config_filenames, key=lambda c: c.order)
    ]
    for candidate in candidates:
        if candidate.is_file():
            return candidate

    if not in_dev_environment:
        tried = ", ".join(str(c) for c in candidates) or "(no candidates configured)"
        raise ConfigFileNotFoundError(
            f"Config file does not exist at any default path: {tried}. "
            "Pass global_config_path or place one of these files in the search directory."
        )
    return debug_config_path(settings, local=False)


def resolve_local_path(
    settings: ResolverSettings,
    in_dev_environment: bool,
    explicit_path: Path | None = None,
) -> Path:
    """local 設定ファイルのパスを解決する。開発環境でのみ許可される。

    明示パスがなければ search_dir 内の <app_name>.local.config を優先し、
    存在しなければ規約パスを返す。

    Raises:
        OperationNotAllowedError: 開発環境外で呼び出された場合。
        ConfigFileNotFoundError: 明示パスが存在しない場合。
        DirectoryNotFoundError: 規約パスのベースディレクトリが見つからない場合。
    """
    if not in_dev_environment:
        raise OperationNotAllowedError(
            "Local config resolution is only allowed in dev environment."
        )
    if explicit_path is not None:
        return _resolve_explicit(settings, explicit_path)

    beside = settings.search_dir / settings.local_file_name
    if beside.is_file():
        return beside
    return debug_config_path(settings, local=True)
