"""ExitCode: CLI 終了コードの定義。"""

from enum import IntEnum


class ExitCode(IntEnum):
    """プロセス終了コード。

    KEY_NOT_FOUND は get で値が見つからなかった場合。
    CONFIG_ERROR は設定ファイルの探索・読み込み・書き込み失敗。
    """

    SUCCESS = 0
    KEY_NOT_FOUND = 1
    CONFIG_ERROR = 2
    INPUT_ERROR = 4
