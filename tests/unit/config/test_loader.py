"""設定ファイルローダーのテスト。

load_xml_document: 有効 XML, コメント保持, 構文エラー, 不在, 権限なし
save_xml_document: XML 宣言付き UTF-8 で書き出し, 失敗時に既存ファイルを保持
load_pyproject_config: セクションあり, 空セクション, セクションなし, tool なし, 構文エラー
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import IO
from xml.etree.ElementTree import Comment, ElementTree, ParseError, ProcessingInstruction

import pytest

from refigure.config._loader import (
    ConfigDocument,
    load_pyproject_config,
    load_xml_document,
    save_xml_document,
)
from tests.unit.conftest import GLOBAL_XML, write_config

# =============================================================================
# ヘルパー
# =============================================================================

_SKIP_PERMISSION = pytest.mark.skipif(
    os.name == "nt" or os.getuid() == 0,
    reason="POSIX permissions required and not running as root",
)


class _PartialWriteTree(ElementTree):
    """先頭だけ書き出してから失敗するツリー。"""

    def write(self, file_or_filename: IO[bytes], *args: object, **kwargs: object) -> None:  # type: ignore[override]
        file_or_filename.write(b"<?xml version=")
        raise OSError("disk full")


def _write_toml(path: Path, content: str) -> Path:
    """TOML ファイルを書き込みパスを返す。"""
    path.write_text(content, encoding="utf-8")
    return path


# =============================================================================
# load_xml_document()
# =============================================================================


class TestLoadXmlDocumentValid:
    """有効な XML ファイルの読み込み。"""

    def test_returns_tree_with_root(self, tmp_path: Path) -> None:
        """有効な XML → ルート要素を持つツリー。"""
        path = write_config(tmp_path / "app.config", GLOBAL_XML)
        document = load_xml_document(path)
        assert document.getroot().tag == "configuration"

    def test_non_ascii_values(self, tmp_path: Path) -> None:
        """UTF-8 の非 ASCII 値を保持する。"""
        path = write_config(
            tmp_path / "app.config",
            '<?xml version="1.0" encoding="utf-8"?>\n'
            '<configuration><add key="名前" value="設定値" /></configuration>',
        )
        element = load_xml_document(path).getroot().find("add")
        assert element is not None
        assert element.get("value") == "設定値"

    def test_comments_dropped_by_default(self, tmp_path: Path) -> None:
        path = write_config(
            tmp_path / "app.config", "<configuration><!-- note --><a /></configuration>"
        )
        assert [child.tag for child in load_xml_document(path).getroot()] == ["a"]

    def test_keep_comments(self, tmp_path: Path) -> None:
        """keep_comments=True → コメントと処理命令がツリーに残る。"""
        path = write_config(
            tmp_path / "app.config",
            "<configuration><!-- note --><?build stamp?><a /></configuration>",
        )
        children = list(load_xml_document(path, keep_comments=True).getroot())
        assert children[0].tag is Comment
        assert children[0].text == " note "
        assert children[1].tag is ProcessingInstruction
        assert children[2].tag == "a"

    def test_keep_comments_outside_root(self, tmp_path: Path) -> None:
        """ルート要素外のコメントは prolog / epilog に集める。"""
        path = write_config(
            tmp_path / "app.config",
            '<?xml version="1.0"?>\n<!-- head -->\n<configuration />\n<!-- tail -->\n',
        )
        document = load_xml_document(path, keep_comments=True)
        assert isinstance(document, ConfigDocument)
        assert [node.text for node in document.prolog] == [" head "]
        assert [node.text for node in document.epilog] == [" tail "]
        assert document.getroot().tag == "configuration"


class TestLoadXmlDocumentErrors:
    """読み込みエラー。"""

    def test_malformed_xml_raises_parse_error(self, tmp_path: Path) -> None:
        """XML 構文エラー → ParseError。"""
        path = write_config(tmp_path / "app.config", "<configuration><add></configuration>")
        with pytest.raises(ParseError):
            load_xml_document(path)

    def test_empty_file_raises_parse_error(self, tmp_path: Path) -> None:
        """空ファイル → ParseError。"""
        path = write_config(tmp_path / "app.config", "")
        with pytest.raises(ParseError):
            load_xml_document(path)

    def test_missing_file_raises_file_not_found(self, tmp_path: Path) -> None:
        """ファイル不在 → FileNotFoundError。"""
        with pytest.raises(FileNotFoundError):
            load_xml_document(tmp_path / "missing.config")

    @_SKIP_PERMISSION
    def test_raises_permission_error(self, tmp_path: Path) -> None:
        """読み取り権限なし → PermissionError。"""
        path = write_config(tmp_path / "app.config", GLOBAL_XML)
        path.chmod(0o000)
        try:
            with pytest.raises(PermissionError):
                load_xml_document(path)
        finally:
            path.chmod(0o644)


# =============================================================================
# save_xml_document()
# =============================================================================


class TestSaveXmlDocument:
    """XML ツリーの書き出し。"""

    def test_writes_declaration_and_content(self, tmp_path: Path) -> None:
        """XML 宣言付きで書き出し、再読み込みで同じ値が得られる。"""
        source = write_config(tmp_path / "in.config", GLOBAL_XML)
        document = load_xml_document(source)
        target = tmp_path / "out.config"

        save_xml_document(document, target)

        text = target.read_text(encoding="utf-8")
        assert text.startswith("<?xml version='1.0' encoding='utf-8'?>")
        reloaded = load_xml_document(target).getroot()
        assert reloaded.find("appSettings/add[@key='Timeout']").get("value") == "30"  # type: ignore[union-attr]

    def test_round_trips_comments(self, tmp_path: Path) -> None:
        target = write_config(
            tmp_path / "app.config",
            "<!-- head --><configuration><!-- inner --><a /></configuration><!-- tail -->",
        )
        save_xml_document(load_xml_document(target, keep_comments=True), target)

        text = target.read_text(encoding="utf-8")
        assert text.startswith("<?xml version='1.0' encoding='utf-8'?>\n<!-- head -->\n")
        assert "<configuration><!-- inner --><a /></configuration>" in text
        assert text.rstrip().endswith("<!-- tail -->")

    def test_keeps_existing_file_mode(self, tmp_path: Path) -> None:
        target = write_config(tmp_path / "app.config", GLOBAL_XML)
        target.chmod(0o640)
        save_xml_document(load_xml_document(target), target)
        assert target.stat().st_mode & 0o777 == 0o640

    def test_failed_write_keeps_original(self, tmp_path: Path) -> None:
        """書き込み途中で失敗しても既存ファイルは変わらず、一時ファイルも残らない。"""
        target = write_config(tmp_path / "app.config", GLOBAL_XML)
        document = _PartialWriteTree(load_xml_document(target).getroot())

        with pytest.raises(OSError, match="disk full"):
            save_xml_document(document, target)

        assert target.read_text(encoding="utf-8") == GLOBAL_XML
        assert sorted(p.name for p in tmp_path.iterdir()) == ["app.config"]

    @_SKIP_PERMISSION
    def test_read_only_file_rejected(self, tmp_path: Path) -> None:
        target = write_config(tmp_path / "app.config", GLOBAL_XML)
        target.chmod(0o444)
        try:
            with pytest.raises(PermissionError):
                save_xml_document(load_xml_document(target), target)
            assert target.read_text(encoding="utf-8") == GLOBAL_XML
        finally:
            target.chmod(0o644)


# =============================================================================
# load_pyproject_config()
# =============================================================================


class TestLoadPyprojectConfigWithSection:
    """[tool.refigure] セクションあり。"""

    def test_returns_section_dict(self, tmp_path: Path) -> None:
        """[tool.refigure] セクションあり → そのセクションの辞書。"""
        path = _write_toml(
            tmp_path / "pyproject.toml",
            '[tool.refigure]\napp_name = "runner.py"\nmax_search_levels = 3\n',
        )
        result = load_pyproject_config(path)
        assert result == {"app_name": "runner.py", "max_search_levels": 3}


class TestLoadPyprojectConfigEmptySection:
    """[tool.refigure] セクションあるが空。"""

    def test_returns_empty_dict(self, tmp_path: Path) -> None:
        """[tool.refigure] あるが空 → 空辞書。"""
        path = _write_toml(tmp_path / "pyproject.toml", "[tool.refigure]\n")
        assert load_pyproject_config(path) == {}


class TestLoadPyprojectConfigNoSection:
    """[tool.refigure] セクションなし。"""

    def test_returns_none(self, tmp_path: Path) -> None:
        """[tool.refigure] なし → None。"""
        path = _write_toml(
            tmp_path / "pyproject.toml",
            "[tool.ruff]\nline-length = 88\n",
        )
        assert load_pyproject_config(path) is None

    def test_no_tool_table(self, tmp_path: Path) -> None:
        """[tool] なし → None。"""
        path = _write_toml(tmp_path / "pyproject.toml", '[project]\nname = "test"\n')
        assert load_pyproject_config(path) is None

    def test_non_dict_section(self, tmp_path: Path) -> None:
        """tool.refigure が文字列 → None。"""
        path = _write_toml(tmp_path / "pyproject.toml", '[tool]\nrefigure = "x"\n')
        assert load_pyproject_config(path) is None


class TestLoadPyprojectConfigSyntaxError:
    """TOML 構文エラー。"""

    def test_raises_toml_decode_error(self, tmp_path: Path) -> None:
        """TOML 構文エラー → TOMLDecodeError。"""
        path = _write_toml(tmp_path / "pyproject.toml", "[invalid\n")
        with pytest.raises(tomllib.TOMLDecodeError):
            load_pyproject_config(path)
