"""refigure の例外階層。

すべての例外は RefigureError を基底とする。
エラーメッセージは解決方法のヒントを含む。
"""

from __future__ import annotations


class RefigureError(Exception):
    """refigure が送出する全例外の基底クラス。"""


class ConfigFileNotFoundError(RefigureError, FileNotFoundError):
    """設定ファイルが指定パス・既定ファイル名のいずれにも存在しない。"""


class DirectoryNotFoundError(RefigureError, FileNotFoundError):
    """ベースディレクトリの上方探索が上限レベルに達しても見つからない。"""


class ConfigLoadError(RefigureError):
    """設定ファイルの読み込み・XML パースに失敗した。"""


class NotInitializedError(RefigureError):
    """自動初期化が無効な状態で初期化前にアクセスされた。"""


class OperationNotAllowedError(RefigureError):
    """開発環境専用の操作が開発環境外で呼び出された。"""


class MissingKeyError(RefigureError):
    """必須キーが local / global のどちらにも存在しない。"""


class ParseFailureError(RefigureError, ValueError):
    """設定値を要求された型に変換できない。"""


class ConfigWriteError(RefigureError):
    """global 設定ファイルへの書き込みに失敗した。"""


__all__ = [
    "ConfigFileNotFoundError",
    "ConfigLoadError",
    "ConfigWriteError",
    "DirectoryNotFoundError",
    "MissingKeyError",
    "NotInitializedError",
    "OperationNotAllowedError",
    "ParseFailureError",
    "RefigureError",
]
