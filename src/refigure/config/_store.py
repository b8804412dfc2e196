"""DocumentStore: 設定ドキュメントの保持と初期化制御。

最大2つのパース済みドキュメント（local / global）を ResolutionContext として保持する。
初期化は once-guard 付きで、並行呼び出しでもドキュメントのパースは1回に限られる。
コンテキストは常に丸ごと差し替えられ、読み取り側はロックを取らずに参照する。
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from xml.etree.ElementTree import ParseError

from refigure.config._loader import load_xml_document
from refigure.config._locator import resolve_global_path, resolve_local_path
from refigure.errors import ConfigLoadError, NotInitializedError
from refigure.models.settings import ResolverSettings
from refigure.models.source import ConfigurationSource, ResolutionContext

logger = logging.getLogger(__name__)


def load_source(path: Path, *, is_local: bool) -> ConfigurationSource:
    """設定ファイルを読み込み ConfigurationSource を構築する。

    Args:
        path: 設定ファイルのパス。
        is_local: local ソースとして扱うか。

    Returns:
        構築された ConfigurationSource。

    Raises:
        ConfigLoadError: ファイルの読み込みまたは XML パースに失敗した場合。
    """
    label = "local" if is_local else "global"
    logger.debug("Loading %s config file: %s", label, path)
    try:
        document = load_xml_document(path)
    except ParseError as exc:
        raise ConfigLoadError(
            f"Could not parse {label} config file '{path}': {exc}. "
            "Check that the file is well-formed XML."
        ) from exc
    except OSError as exc:
        raise ConfigLoadError(
            f"Could not read {label} config file '{path}': {exc}"
        ) from exc
    return ConfigurationSource(path=path, is_local=is_local, document=document)


class DocumentStore:
    """local / global 設定ドキュメントのストア。

    initialize は初期化済みなら何もしない。異なる引数で再度呼んでも無視される
    ため、設定ソースを切り替えるには reinitialize を使う。
    """

    def __init__(self, settings: ResolverSettings) -> None:
        self._settings = settings
        self._context: ResolutionContext | None = None
        self.lock = threading.RLock()

    @property
    def settings(self) -> ResolverSettings:
        """ストアの設定。"""
        return self._settings

    @property
    def initialized(self) -> bool:
        """初期化済みなら True。"""
        return self._context is not None

    @property
    def context(self) -> ResolutionContext | None:
        """現在のコンテキスト。未初期化なら None。"""
        return self._context

    def initialize(
        self,
        in_dev_environment: bool | None = None,
        global_config_path: Path | None = None,
        local_config_path: Path | None = None,
    ) -> None:
        """ドキュメントを解決・パースしてストアを初期化する。

        None の引数は ResolverSettings の値で補完する。
        いずれかのドキュメントの解決・パースに失敗した場合、ストアは未初期化のまま。

        Args:
            in_dev_environment: 開発環境として初期化するか。
            global_config_path: global 設定ファイルの明示パス。
            local_config_path: local 設定ファイルの明示パス（開発環境のみ使用）。

        Raises:
            ConfigFileNotFoundError: 設定ファイルが見つからない場合。
            DirectoryNotFoundError: 規約パスのベースディレクトリが見つからない場合。
            ConfigLoadError: ファイルの読み込み・パースに失敗した場合。
        """
        if self._context is not None:
            logger.debug("Config store already initialized; ignoring initialize()")
            return
        with self.lock:
            if self._context is not None:
                return
            self._context = self._build_context(
                in_dev_environment, global_config_path, local_config_path
            )

    def _build_context(
        self,
        in_dev_environment: bool | None,
        global_config_path: Path | None,
        local_config_path: Path | None,
    ) -> ResolutionContext:
        """引数と設定からパスを解決し、新しいコンテキストを構築する。"""
        settings = self._settings
        dev = settings.in_dev_environment if in_dev_environment is None else in_dev_environment
        global_explicit = (
            settings.global_config_path if global_config_path is None else global_config_path
        )
        local_explicit = (
            settings.local_config_path if local_config_path is None else local_config_path
        )

        global_path = resolve_global_path(settings, dev, global_explicit)
        global_source = load_source(global_path, is_local=False)

        local_source: ConfigurationSource | None = None
        if dev:
            local_path = resolve_local_path(settings, dev, local_explicit)
            local_source = load_source(local_path, is_local=True)

        return ResolutionContext(
            in_dev_environment=dev,
            global_source=global_source,
            local_source=local_source,
        )

    def uninitialize(self) -> None:
        """両ドキュメントを破棄し未初期化状態に戻す。未初期化なら何もしない。"""
        with self.lock:
            self._context = None

    def reinitialize(
        self,
        in_dev_environment: bool | None = None,
        global_config_path: Path | None = None,
        local_config_path: Path | None = None,
    ) -> None:
        """新しい引数でコンテキストを構築し直し、一度の代入で差し替える。

        構築中も読み取り側は旧コンテキストを参照し続ける。
        構築に失敗した場合は未初期化状態になる。

        Raises:
            ConfigFileNotFoundError: 設定ファイルが見つからない場合。
            DirectoryNotFoundError: 規約パスのベースディレクトリが見つからない場合。
            ConfigLoadError: ファイルの読み込み・パースに失敗した場合。
        """
        with self.lock:
            try:
                context = self._build_context(
                    in_dev_environment, global_config_path, local_config_path
                )
            except Exception:
                self._context = None
                raise
            self._context = context

    def ensure_initialized(self) -> ResolutionContext:
        """初期化済みのコンテキストを返す。

        未初期化かつ auto_initialize が有効ならデフォルト引数で初期化する。

        Raises:
            NotInitializedError: 未初期化かつ auto_initialize が無効な場合。
            ConfigFileNotFoundError: 自動初期化で設定ファイルが見つからない場合。
            DirectoryNotFoundError: 自動初期化でベースディレクトリが見つからない場合。
            ConfigLoadError: 自動初期化でファイルの読み込みに失敗した場合。
        """
        context = self._context
        if context is not None:
            return context
        if not self._settings.auto_initialize:
            raise NotInitializedError(
                "Configuration has not been initialized. "
                "Call initialize() first or enable auto_initialize."
            )
        self.initialize()
        context = self._context
        if context is None:
            raise NotInitializedError("Configuration has not been initialized.")
        return context

    def replace_global_source(self, source: ConfigurationSource) -> None:
        """global ソースを差し替えたコンテキストに置き換える。

        Writer が永続化後に呼び出す。未初期化なら何もしない。
        """
        with self.lock:
            context = self._context
            if context is None:
                return
            self._context = context.model_copy(update={"global_source": source})
