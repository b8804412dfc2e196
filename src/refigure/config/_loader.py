"""設定ファイルローダー。

XML 設定ドキュメントのパースと、pyproject.toml の [tool.refigure]
セクション読み込みを担当する（バリデーションは呼び出し側が担当）。
アクセスエラー・構文エラーは例外として送出する。
"""

from __future__ import annotations

import errno
import os
import shutil
import tempfile
import tomllib
from pathlib import Path
from typing import IO
from xml.etree import ElementTree as ET

_TOOL_SECTION_KEY: str = "tool"
_REFIGURE_SECTION_KEY: str = "refigure"
_XML_DECLARATION: bytes = b"<?xml version='1.0' encoding='utf-8'?>\n"


class ConfigDocument(ET.ElementTree):
    """ルート要素の前後にあるコメント・処理命令も保持する XML ツリー。

    Attributes:
        prolog: ルート要素より前のコメント・処理命令。
        epilog: ルート要素より後のコメント・処理命令。
    """

    def __init__(self, element: ET.Element | None = None) -> None:
        super().__init__(element)
        self.prolog: list[ET.Element] = []
        self.epilog: list[ET.Element] = []


class _CommentKeepingBuilder:
    """コメント・処理命令を残す XMLParser ターゲット。

    ルート要素内のものはツリーに挿入し、ルート要素外のものは
    prolog / epilog として別に集める。
    """

    def __init__(self) -> None:
        self._builder = ET.TreeBuilder(insert_comments=True, insert_pis=True)
        self._depth = 0
        self._seen_root = False
        self.prolog: list[ET.Element] = []
        self.epilog: list[ET.Element] = []

    def _outside(self) -> list[ET.Element]:
        return self.epilog if self._seen_root else self.prolog

    def start(self, tag: str, attrs: dict[str, str]) -> ET.Element:
        self._depth += 1
        self._seen_root = True
        return self._builder.start(tag, attrs)

    def end(self, tag: str) -> ET.Element:
        self._depth -= 1
        return self._builder.end(tag)

    def data(self, data: str) -> None:
        self._builder.data(data)

    def comment(self, text: str) -> ET.Element:
        if self._depth == 0:
            node = ET.Comment(text)
            self._outside().append(node)
            return node
        return self._builder.comment(text)

    def pi(self, target: str, text: str | None = None) -> ET.Element:
        if self._depth == 0:
            node = ET.ProcessingInstruction(target, text)
            self._outside().append(node)
            return node
        return self._builder.pi(target, text)

    def close(self) -> ET.Element:
        return self._builder.close()


def load_xml_document(path: Path, *, keep_comments: bool = False) -> ET.ElementTree:
    """XML 設定ファイルを読み込みツリーとして返す。

    Args:
        path: XML ファイルのパス。
        keep_comments: コメントと処理命令を残すか。書き戻す場合に指定する。
            指定時は ConfigDocument を返す。

    Returns:
        パースされた XML ツリー。

    Raises:
        xml.etree.ElementTree.ParseError: XML 構文エラーの場合。
        FileNotFoundError: ファイルが存在しない場合。
        PermissionError: 読み取り権限がない場合。
    """
    if not keep_comments:
        with path.open("rb") as f:
            return ET.parse(f)

    builder = _CommentKeepingBuilder()
    parser = ET.XMLParser(target=builder)
    with path.open("rb") as f:
        parser.feed(f.read())
    document = ConfigDocument(parser.close())
    document.prolog = builder.prolog
    document.epilog = builder.epilog
    return document


def _write_document(document: ET.ElementTree, f: IO[bytes]) -> None:
    """XML 宣言、prolog、ルート要素、epilog の順に書き出す。"""
    if not isinstance(document, ConfigDocument):
        document.write(f, encoding="utf-8", xml_declaration=True)
        return
    f.write(_XML_DECLARATION)
    for node in document.prolog:
        f.write(ET.tostring(node, encoding="unicode").encode("utf-8"))
        f.write(b"\n")
    document.write(f, encoding="utf-8", xml_declaration=False)
    for node in document.epilog:
        f.write(b"\n")
        f.write(ET.tostring(node, encoding="unicode").encode("utf-8"))
    f.write(b"\n")


def save_xml_document(document: ET.ElementTree, path: Path) -> None:
    """XML ツリーを UTF-8（XML 宣言付き）でファイルに書き出す。

    同じディレクトリの一時ファイルに書き出してから置き換えるため、
    書き込み途中で失敗しても既存ファイルの内容は変わらない。
    既存ファイルのパーミッションは引き継ぐ。

    Raises:
        PermissionError: 既存ファイルが書き込み不可の場合。
        OSError: 書き込み・置き換えに失敗した場合。
    """
    if path.exists() and not os.access(path, os.W_OK):
        raise PermissionError(errno.EACCES, "Config file is not writable", str(path))

    tmp = tempfile.NamedTemporaryFile(
        dir=path.parent, prefix=f".{path.name}.", suffix=".tmp", delete=False
    )
    tmp_path = Path(tmp.name)
    try:
        with tmp as f:
            _write_document(document, f)
            f.flush()
            os.fsync(f.fileno())
        if path.exists():
            shutil.copymode(path, tmp_path)
        os.replace(tmp_path, path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


def load_pyproject_config(path: Path) -> dict[str, object] | None:
    """pyproject.toml から [tool.refigure] セクションを読み込む。

    [tool.refigure] セクションが存在しない場合は None を返す。

    Args:
        path: pyproject.toml のパス。

    Returns:
        [tool.refigure] セクションの辞書。セクションが存在しなければ None。

    Raises:
        tomllib.TOMLDecodeError: TOML 構文エラーの場合。
        FileNotFoundError: ファイルが存在しない場合。
        PermissionError: 読み取り権限がない場合。
    """
    with path.open("rb") as f:
        data = tomllib.load(f)
    tool = data.get(_TOOL_SECTION_KEY)
    if not isinstance(tool, dict):
        return None
    refigure = tool.get(_REFIGURE_SECTION_KEY)
    if not isinstance(refigure, dict):
        return None
    return refigure
