"""ルックアップエンジン。

1つの設定ドキュメントに対するスコープ付き探索と全体探索を提供する。
キーとスコープは別パラメータとして扱い、要素名・属性値の等価比較で照合する。
見つからない場合は例外ではなく空文字列を返す。
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from xml.etree.ElementTree import Element

from refigure.models.lookup_result import AnywhereMatch
from refigure.models.scope import ScopePath
from refigure.models.source import ConfigurationSource

logger = logging.getLogger(__name__)

DEFAULT_ENTRY_TAG: str = "add"
DEFAULT_KEY_ATTRIBUTE: str = "key"
DEFAULT_VALUE_ATTRIBUTE: str = "value"


def select_scope(root: Element, scope: ScopePath) -> list[Element]:
    """スコープパスに一致する要素をドキュメント順で全て返す。

    先頭セグメントはルート要素名と一致する必要がある。
    以降のセグメントは子要素をタグ名で選択する（同名要素は全て辿る）。

    Args:
        root: ドキュメントのルート要素。
        scope: 構造化スコープパス。

    Returns:
        スコープに一致した要素のリスト。一致なしなら空リスト。
    """
    if root.tag != scope.root:
        return []
    selected = [root]
    for segment in scope.segments[1:]:
        selected = [child for parent in selected for child in parent if child.tag == segment]
        if not selected:
            break
    return selected


def _iter_scope_entries(
    source: ConfigurationSource,
    scope: ScopePath,
    entry_tag: str,
) -> Iterator[Element]:
    """スコープ直下のエントリ要素をドキュメント順に列挙する。"""
    for parent in select_scope(source.document.getroot(), scope):
        for child in parent:
            if child.tag == entry_tag:
                yield child


def find_scoped(
    key: str,
    scope: ScopePath | str,
    source: ConfigurationSource,
    *,
    entry_tag: str = DEFAULT_ENTRY_TAG,
    key_attribute: str = DEFAULT_KEY_ATTRIBUTE,
    value_attribute: str = DEFAULT_VALUE_ATTRIBUTE,
) -> str:
    """スコープ直下で key 属性が一致する最初のエントリの値を返す。

    Args:
        key: 探索するキー。
        scope: スコープパス（文字列は ScopePath.parse で変換）。
        source: 探索対象のソース。
        entry_tag: エントリ要素のタグ名。
        key_attribute: キー属性名。
        value_attribute: 値属性名。

    Returns:
        一致したエントリの値。スコープ・キー・値属性のいずれかがなければ空文字列。

    Raises:
        ValueError: スコープパスの形式が不正な場合。
    """
    scope_path = ScopePath.parse(scope)
    for entry in _iter_scope_entries(source, scope_path, entry_tag):
        if entry.get(key_attribute) == key:
            return entry.get(value_attribute, "")
    return ""


def find_anywhere(
    key: str,
    source: ConfigurationSource,
    *,
    key_attribute: str = DEFAULT_KEY_ATTRIBUTE,
    value_attribute: str = DEFAULT_VALUE_ATTRIBUTE,
) -> AnywhereMatch:
    """スコープを無視してドキュメント全体から key を探索する。

    深さ優先・ドキュメント順で、key 属性が一致し値属性を持つ全要素を収集する。
    重複キーはドキュメント順で最初のものを採用する。

    Args:
        key: 探索するキー。
        source: 探索対象のソース。
        key_attribute: キー属性名。
        value_attribute: 値属性名。

    Returns:
        最初の値と一致総数。見つからなければ AnywhereMatch("", 0)。
    """
    values = [
        element.get(value_attribute, "")
        for element in source.document.getroot().iter()
        if element.get(key_attribute) == key and value_attribute in element.attrib
    ]
    if len(values) > 1:
        logger.debug(
            "Key '%s' appears %d times in %s config %s; using the first",
            key,
            len(values),
            source.label,
            source.path,
        )
    return AnywhereMatch(values[0] if values else "", len(values))


def iter_entries(
    source: ConfigurationSource,
    scope: ScopePath | str | None = None,
    *,
    entry_tag: str = DEFAULT_ENTRY_TAG,
    key_attribute: str = DEFAULT_KEY_ATTRIBUTE,
    value_attribute: str = DEFAULT_VALUE_ATTRIBUTE,
) -> Iterator[tuple[str, str]]:
    """ソース内の (key, value) をドキュメント順に列挙する。

    scope が None の場合はドキュメント全体から key 属性を持つ要素を、
    指定時はスコープ直下のエントリ要素のみを列挙する。
    """
    if scope is None:
        elements: Iterator[Element] = source.document.getroot().iter()
    else:
        elements = _iter_scope_entries(source, ScopePath.parse(scope), entry_tag)
    for element in elements:
        element_key = element.get(key_attribute)
        if element_key is not None:
            yield element_key, element.get(value_attribute, "")
