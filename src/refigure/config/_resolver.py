"""ConfigResolver: local / global 設定の解決と型付きアクセサ。

優先順位: 開発環境では local を先に参照し、空でない値が得られればそれを返す
（global は参照しない）。得られなければ global を参照し、どちらにもなければ空文字列。

型付きアクセサは単一の lookup() が返す LookupResult の射影として実装する。
strict 系は欠落・変換失敗を例外に、silent 系はどちらも None に畳み込む。
"""

from __future__ import annotations

import tempfile
from collections.abc import Callable, Iterator
from datetime import datetime
from pathlib import Path
from typing import TypeVar, assert_never, cast

from refigure.config._converters import (
    Converter,
    to_bool,
    to_datetime,
    to_float,
    to_int,
    to_string,
)
from refigure.config._locator import find_base_directory
from refigure.config._lookup import find_anywhere, find_scoped, iter_entries
from refigure.config._store import DocumentStore
from refigure.config._writer import set_global
from refigure.errors import (
    MissingKeyError,
    OperationNotAllowedError,
    ParseFailureError,
)
from refigure.models.lookup_result import Found, LookupResult, NotFound, Unparseable
from refigure.models.scope import ScopePath, WellKnownScope
from refigure.models.settings import ResolverSettings
from refigure.models.source import ConfigurationSource, ResolutionContext

_GEN_CODE_FOLDER_KEY: str = "RepoGenCodeFolder"
_NUGET_PACKAGES_DIRECTORY_KEY: str = "NugetPackagesDirectoryName"

T = TypeVar("T")

Scope = ScopePath | str | None
"""スコープ指定。None はスコープを無視した全体探索を意味する。"""


class ConfigResolver:
    """設定値リゾルバー。

    プロセス開始時に1つ構築し、呼び出し側に引き回して使う。
    初期化状態は内部の DocumentStore が保持する。

    Args:
        settings: リゾルバー設定。None の場合はデフォルト値。
    """

    def __init__(self, settings: ResolverSettings | None = None) -> None:
        self._settings = settings if settings is not None else ResolverSettings()
        self._store = DocumentStore(self._settings)
        self._base_directory: Path | None = None

    # ------------------------------------------------------------------
    # 初期化
    # ------------------------------------------------------------------

    @property
    def settings(self) -> ResolverSettings:
        """リゾルバー設定。"""
        return self._settings

    @property
    def store(self) -> DocumentStore:
        """内部のドキュメントストア。"""
        return self._store

    @property
    def initialized(self) -> bool:
        """初期化済みなら True。"""
        return self._store.initialized

    @property
    def in_dev_environment(self) -> bool:
        """開発環境として初期化されているか。必要なら自動初期化する。"""
        return self._store.ensure_initialized().in_dev_environment

    def initialize(
        self,
        in_dev_environment: bool | None = None,
        global_config_path: Path | str | None = None,
        local_config_path: Path | str | None = None,
    ) -> None:
        """設定ドキュメントを読み込む。初期化済みなら引数に関わらず何もしない。"""
        self._store.initialize(
            in_dev_environment, _as_path(global_config_path), _as_path(local_config_path)
        )

    def uninitialize(self) -> None:
        """設定ドキュメントを破棄する。未初期化なら何もしない。"""
        self._store.uninitialize()
        self._base_directory = None

    def reinitialize(
        self,
        in_dev_environment: bool | None = None,
        global_config_path: Path | str | None = None,
        local_config_path: Path | str | None = None,
    ) -> None:
        """設定ソースを切り替える唯一の手段。新しいコンテキストを構築してから差し替える。"""
        self._base_directory = None
        self._store.reinitialize(
            in_dev_environment, _as_path(global_config_path), _as_path(local_config_path)
        )

    # ------------------------------------------------------------------
    # 生文字列アクセサ
    # ------------------------------------------------------------------

    def _find(self, key: str, scope: Scope, source: ConfigurationSource) -> str:
        """1つのソースから値を探す。見つからなければ空文字列。"""
        settings = self._settings
        if scope is None:
            return find_anywhere(
                key,
                source,
                key_attribute=settings.key_attribute,
                value_attribute=settings.value_attribute,
            ).value
        return find_scoped(
            key,
            scope,
            source,
            entry_tag=settings.entry_tag,
            key_attribute=settings.key_attribute,
            value_attribute=settings.value_attribute,
        )

    def get(self, key: str, scope: Scope = None) -> str:
        """local → global の優先順位で値を返す。どちらにもなければ空文字列。

        Args:
            key: 探索するキー。
            scope: スコープパス。None の場合はドキュメント全体から探す。

        Returns:
            最初に見つかった空でない値。見つからなければ空文字列。

        Raises:
            NotInitializedError: 未初期化かつ auto_initialize が無効な場合。
            ValueError: スコープパスの形式が不正な場合。
        """
        context = self._store.ensure_initialized()
        for source in context.sources():
            value = self._find(key, scope, source)
            if value:
                return value
        return ""

    def get_scoped(self, key: str, scope: ScopePath | str) -> str:
        """スコープ内で key を探し、local → global の優先順位で値を返す。"""
        return self.get(key, scope)

    def try_get_scoped(self, key: str, scope: ScopePath | str) -> tuple[bool, str]:
        """get_scoped の結果を (見つかったか, 値) で返す。"""
        value = self.get_scoped(key, scope)
        return bool(value), value

    def _require_dev(self) -> ResolutionContext:
        context = self._store.ensure_initialized()
        if not context.in_dev_environment:
            raise OperationNotAllowedError(
                "This operation is only allowed in dev environment."
            )
        return context

    def get_local(self, key: str, scope: Scope = None) -> str:
        """local ソースのみから値を返す。開発環境でのみ許可される。

        Raises:
            OperationNotAllowedError: 開発環境外で呼び出された場合。
        """
        context = self._require_dev()
        if context.local_source is None:
            return ""
        return self._find(key, scope, context.local_source)

    def try_get_local(self, key: str, scope: Scope = None) -> tuple[bool, str]:
        """get_local の結果を (見つかったか, 値) で返す。"""
        value = self.get_local(key, scope)
        return bool(value), value

    def get_global(self, key: str, scope: Scope = None) -> str:
        """global ソースのみから値を返す。"""
        context = self._store.ensure_initialized()
        return self._find(key, scope, context.global_source)

    def try_get_global(self, key: str, scope: Scope = None) -> tuple[bool, str]:
        """get_global の結果を (見つかったか, 値) で返す。"""
        value = self.get_global(key, scope)
        return bool(value), value

    # ------------------------------------------------------------------
    # 型付きアクセサ
    # ------------------------------------------------------------------

    def lookup(
        self,
        key: str,
        converter: Converter = to_string,
        scope: Scope = None,
    ) -> LookupResult:
        """値を探して変換し、結果を LookupResult として返す。

        欠落・変換失敗は例外ではなく NotFound / Unparseable として返す。
        初期化エラー（設定ファイル不在等）は呼び出し側に伝播する。

        Raises:
            ValueError: スコープパスの形式が不正な場合。
        """
        raw = self.get(key, scope)
        if not raw:
            return NotFound(key=key)
        try:
            value = converter(raw)
        except ValueError as exc:
            return Unparseable(key=key, raw=raw, reason=str(exc))
        return Found(value=value, raw=raw)

    def _strict(
        self,
        key: str,
        converter: Callable[[str], T],
        error_message: str | None,
        scope: Scope,
    ) -> T:
        """lookup の結果を値に射影し、欠落・変換失敗は例外にする。"""
        result = self.lookup(key, converter, scope)
        if isinstance(result, Found):
            return cast(T, result.value)
        if isinstance(result, NotFound):
            raise MissingKeyError(
                error_message or f"Configuration key '{key}' was not found."
            )
        if isinstance(result, Unparseable):
            raise ParseFailureError(
                error_message or f"Configuration key '{key}': {result.reason}"
            )
        assert_never(result)

    def _silent(
        self, key: str, converter: Callable[[str], T], scope: Scope
    ) -> T | None:
        """lookup の結果を値に射影し、欠落・変換失敗は None にする。

        スコープパスの形式不正は呼び出し側の誤りとして ValueError を送出する。
        """
        result = self.lookup(key, converter, scope)
        if isinstance(result, Found):
            return cast(T, result.value)
        return None

    def get_string(
        self, key: str, error_message: str | None = None, scope: Scope = None
    ) -> str:
        """文字列値を返す。

        error_message が指定された場合のみ、欠落を MissingKeyError として送出する。
        指定がなければ欠落時は空文字列を返す。
        """
        if error_message is None:
            return self.get(key, scope)
        return self._strict(key, to_string, error_message, scope)

    def get_int(
        self, key: str, error_message: str | None = None, scope: Scope = None
    ) -> int:
        """整数値を返す。

        Raises:
            MissingKeyError: キーが存在しない場合。
            ParseFailureError: 整数として解釈できない場合。
        """
        return self._strict(key, to_int, error_message, scope)

    def get_float(
        self, key: str, error_message: str | None = None, scope: Scope = None
    ) -> float:
        """浮動小数点値を返す。欠落・変換失敗は get_int と同様に例外。"""
        return self._strict(key, to_float, error_message, scope)

    def get_bool(
        self, key: str, error_message: str | None = None, scope: Scope = None
    ) -> bool:
        """真偽値（"true" / "false"）を返す。欠落・変換失敗は例外。"""
        return self._strict(key, to_bool, error_message, scope)

    def get_datetime(
        self, key: str, error_message: str | None = None, scope: Scope = None
    ) -> datetime:
        """ISO 8601 形式の日時を返す。

        Raises:
            MissingKeyError: キーが存在しない場合。error_message を保持する。
            ParseFailureError: 日時として解釈できない場合。error_message を保持する。
        """
        return self._strict(key, to_datetime, error_message, scope)

    def get_int_silent(self, key: str, scope: Scope = None) -> int | None:
        """整数値を返す。欠落・変換失敗時は None。"""
        return self._silent(key, to_int, scope)

    def get_float_silent(self, key: str, scope: Scope = None) -> float | None:
        """浮動小数点値を返す。欠落・変換失敗時は None。"""
        return self._silent(key, to_float, scope)

    def get_bool_silent(self, key: str, scope: Scope = None) -> bool | None:
        """真偽値を返す。欠落・変換失敗時は None。"""
        return self._silent(key, to_bool, scope)

    def get_datetime_silent(self, key: str, scope: Scope = None) -> datetime | None:
        """日時を返す。欠落・変換失敗時は None。"""
        return self._silent(key, to_datetime, scope)

    # ------------------------------------------------------------------
    # よく使うスコープ
    # ------------------------------------------------------------------

    def get_app_setting(self, key: str) -> str:
        return self.get_scoped(key, WellKnownScope.APP_SETTINGS)

    def get_connection_string(self, key: str) -> str:
        return self.get_scoped(key, WellKnownScope.CONNECTION_STRINGS)

    def try_get_connection_string(self, key: str) -> tuple[bool, str]:
        return self.try_get_scoped(key, WellKnownScope.CONNECTION_STRINGS)

    def get_path(self, key: str) -> str:
        return self.get_scoped(key, WellKnownScope.PATHS)

    # ------------------------------------------------------------------
    # 派生パス
    # ------------------------------------------------------------------

    def get_gen_code_directory(self) -> Path:
        """システム一時ディレクトリ配下のコード生成ディレクトリ。"""
        return Path(tempfile.gettempdir()) / self.get_path(_GEN_CODE_FOLDER_KEY)

    def get_repo_code_gen_dto_path(
        self, control_subtype_name: str, assembly_name: str
    ) -> Path:
        return self.get_gen_code_directory() / assembly_name / control_subtype_name / "DTO"

    def get_repo_code_gen_mapping_path(
        self, control_subtype_name: str, assembly_name: str
    ) -> Path:
        return (
            self.get_gen_code_directory() / assembly_name / control_subtype_name / "Mapping"
        )

    def get_binaries_path(self, assembly_name: str) -> Path:
        return self.get_gen_code_directory() / assembly_name / "bin"

    def get_base_directory(self) -> Path:
        """規約名（既定 "Base"）のベースディレクトリ。開発環境のみ。結果はキャッシュする。

        Raises:
            OperationNotAllowedError: 開発環境外で呼び出された場合。
            DirectoryNotFoundError: 上限レベル内で見つからない場合。
        """
        self._require_dev()
        if self._base_directory is None:
            settings = self._settings
            self._base_directory = find_base_directory(
                settings.base_directory,
                settings.base_directory_name,
                settings.max_search_levels,
            )
        return self._base_directory

    def get_repository_directory(self) -> Path:
        """ベースディレクトリの親。開発環境のみ。"""
        return self.get_base_directory().parent

    def get_solution_directory(self) -> Path:
        return self.get_repository_directory() / self._settings.solution_directory_name

    def get_dll_directory(self) -> Path:
        return self.get_solution_directory() / self._settings.dll_directory_name

    def get_nuget_packages_directory(self) -> Path:
        """リポジトリディレクトリ / NugetPackagesDirectoryName の値。開発環境のみ。"""
        return self.get_repository_directory() / self.get(_NUGET_PACKAGES_DIRECTORY_KEY)

    # ------------------------------------------------------------------
    # 書き込み・列挙
    # ------------------------------------------------------------------

    def set_global(self, key: str, value: str, scope: Scope = None) -> None:
        """global 設定ファイルの key に value を書き込む。

        Raises:
            ConfigWriteError: 読み直し・書き込みに失敗した場合。
        """
        set_global(self._store, key, value, scope)

    def iter_source_entries(
        self, scope: Scope = None
    ) -> Iterator[tuple[ConfigurationSource, str, str]]:
        """読み込み済みソースの (source, key, value) を優先順位順に列挙する。"""
        context = self._store.ensure_initialized()
        settings = self._settings
        for source in context.sources():
            for key, value in iter_entries(
                source,
                scope,
                entry_tag=settings.entry_tag,
                key_attribute=settings.key_attribute,
                value_attribute=settings.value_attribute,
            ):
                yield source, key, value


def _as_path(value: Path | str | None) -> Path | None:
    """文字列パスを Path に変換する。None はそのまま。"""
    if value is None:
        return None
    return Path(value)
