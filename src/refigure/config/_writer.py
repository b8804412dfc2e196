"""Writer: global 設定ファイルへの単一キー書き込み。

読み取り用ツリーとは別に global ファイルをディスクから読み直して更新し、
永続化後に書き込んだツリーをストアの global ソースとして差し替える。
ストアのロックを保持して実行するため、書き込み同士や再初期化とは交錯しない。
"""

from __future__ import annotations

import logging
from xml.etree.ElementTree import Element, ElementTree, ParseError, SubElement

from refigure.config._loader import load_xml_document, save_xml_document
from refigure.config._lookup import select_scope
from refigure.config._store import DocumentStore
from refigure.errors import ConfigWriteError
from refigure.models.scope import ScopePath, WellKnownScope
from refigure.models.source import ConfigurationSource

logger = logging.getLogger(__name__)


def _find_first_anywhere(root: Element, key: str, key_attribute: str) -> Element | None:
    """ドキュメント順で最初に key 属性が一致する要素を返す。"""
    for element in root.iter():
        if element.get(key_attribute) == key:
            return element
    return None


def _find_first_scoped(
    root: Element, scope: ScopePath, key: str, entry_tag: str, key_attribute: str
) -> Element | None:
    """スコープ直下で key 属性が一致する最初のエントリ要素を返す。"""
    for parent in select_scope(root, scope):
        for child in parent:
            if child.tag == entry_tag and child.get(key_attribute) == key:
                return child
    return None


def _ensure_scope(root: Element, scope: ScopePath) -> Element:
    """スコープパスの要素を辿り、存在しない要素は作成して末端要素を返す。

    Raises:
        ConfigWriteError: ルート要素名がスコープの先頭と一致しない場合。
    """
    if root.tag != scope.root:
        raise ConfigWriteError(
            f"Cannot write under scope '{scope}': document root is <{root.tag}>."
        )
    current = root
    for segment in scope.segments[1:]:
        child = current.find(segment)
        if child is None:
            child = SubElement(current, segment)
        current = child
    return current


def apply_entry(
    document: ElementTree,
    key: str,
    value: str,
    scope: ScopePath | None,
    *,
    entry_tag: str,
    key_attribute: str,
    value_attribute: str,
) -> bool:
    """ツリー上でエントリを更新、なければ追加する。

    scope が None の場合はドキュメント全体で最初に一致した要素を更新し、
    見つからなければ appSettings スコープに追加する。

    Args:
        document: 更新対象の XML ツリー（破壊的に変更される）。
        key: 書き込むキー。
        value: 書き込む値。
        scope: 更新・追加先のスコープ。
        entry_tag: エントリ要素のタグ名。
        key_attribute: キー属性名。
        value_attribute: 値属性名。

    Returns:
        既存エントリを更新した場合 True、新規追加した場合 False。

    Raises:
        ConfigWriteError: 追加先スコープをドキュメント上に構築できない場合。
    """
    root = document.getroot()
    if scope is None:
        existing = _find_first_anywhere(root, key, key_attribute)
        target_scope = ScopePath.parse(WellKnownScope.APP_SETTINGS)
    else:
        existing = _find_first_scoped(root, scope, key, entry_tag, key_attribute)
        target_scope = scope

    if existing is not None:
        existing.set(value_attribute, value)
        return True

    parent = _ensure_scope(root, target_scope)
    SubElement(parent, entry_tag, {key_attribute: key, value_attribute: value})
    return False


def set_global(
    store: DocumentStore,
    key: str,
    value: str,
    scope: ScopePath | str | None = None,
) -> None:
    """global 設定ファイルの key に value を書き込み永続化する。

    Args:
        store: 対象のドキュメントストア。未初期化なら自動初期化規則に従う。
        key: 書き込むキー。
        value: 書き込む値。
        scope: 更新・追加先のスコープ。None の場合は全体から既存キーを探す。

    Raises:
        ConfigWriteError: ファイルの読み直し・パース・書き込みに失敗した場合。
        NotInitializedError: 未初期化かつ auto_initialize が無効な場合。
        ValueError: スコープパスの形式が不正な場合。
    """
    scope_path = ScopePath.parse(scope) if scope is not None else None
    settings = store.settings
    with store.lock:
        context = store.ensure_initialized()
        path = context.global_source.path
        try:
            document = load_xml_document(path, keep_comments=True)
        except (ParseError, OSError) as exc:
            raise ConfigWriteError(
                f"Could not open global config file '{path}' for writing: {exc}"
            ) from exc

        updated = apply_entry(
            document,
            key,
            value,
            scope_path,
            entry_tag=settings.entry_tag,
            key_attribute=settings.key_attribute,
            value_attribute=settings.value_attribute,
        )

        try:
            save_xml_document(document, path)
        except OSError as exc:
            raise ConfigWriteError(
                f"Could not persist global config file '{path}': {exc}. "
                "Check file permissions."
            ) from exc

        logger.debug(
            "%s key '%s' in global config %s",
            "Updated" if updated else "Appended",
            key,
            path,
        )
        store.replace_global_source(
            ConfigurationSource(path=path, is_local=False, document=document)
        )
