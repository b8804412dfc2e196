"""refigure: local / global の XML 設定ファイルからキー値を解決するライブラリ。

公開 API:
    ConfigResolver: 初期化・優先順位付きルックアップ・型付きアクセサ・書き込み。
    ResolverSettings: 探索規約とエントリ形式の設定。
    resolve_settings: pyproject.toml [tool.refigure] と上書きから設定を構築する。
"""

from refigure.config import ConfigResolver, resolve_settings
from refigure.errors import (
    ConfigFileNotFoundError,
    ConfigLoadError,
    ConfigWriteError,
    DirectoryNotFoundError,
    MissingKeyError,
    NotInitializedError,
    OperationNotAllowedError,
    ParseFailureError,
    RefigureError,
)
from refigure.models import (
    Found,
    LookupResult,
    NotFound,
    ResolverSettings,
    ScopePath,
    Unparseable,
    WellKnownScope,
)


def main() -> None:
    """パッケージエントリポイント。cli.main() に委譲する。"""
    from refigure.cli import main as cli_main

    cli_main()


__all__ = [
    "ConfigFileNotFoundError",
    "ConfigLoadError",
    "ConfigResolver",
    "ConfigWriteError",
    "DirectoryNotFoundError",
    "Found",
    "LookupResult",
    "MissingKeyError",
    "NotFound",
    "NotInitializedError",
    "OperationNotAllowedError",
    "ParseFailureError",
    "RefigureError",
    "ResolverSettings",
    "ScopePath",
    "Unparseable",
    "WellKnownScope",
    "main",
    "resolve_settings",
]
