"""設定値の厳格な型変換。

各変換関数は前後の空白を除いた文字列を受け付け、
変換できない場合は ValueError を送出する。
"""

from __future__ import annotations

import math
import re
from collections.abc import Callable
from datetime import datetime
from typing import Final

Converter = Callable[[str], object]
"""文字列を型付き値に変換する関数。失敗時は ValueError を送出する。"""

_INT_RE: Final[re.Pattern[str]] = re.compile(r"[+-]?[0-9]+")
_TRUE_LITERAL: Final[str] = "true"
_FALSE_LITERAL: Final[str] = "false"


def to_string(raw: str) -> str:
    """恒等変換。"""
    return raw


def to_int(raw: str) -> int:
    """符号付き10進整数に変換する。桁区切りの "_" や小数は受け付けない。"""
    text = raw.strip()
    if not _INT_RE.fullmatch(text):
        raise ValueError(f"'{raw}' is not a valid integer")
    return int(text)


def to_float(raw: str) -> float:
    """有限の浮動小数点数に変換する。nan / inf は受け付けない。"""
    text = raw.strip()
    try:
        value = float(text)
    except ValueError:
        raise ValueError(f"'{raw}' is not a valid number") from None
    if not math.isfinite(value) or "_" in text:
        raise ValueError(f"'{raw}' is not a valid number")
    return value


def to_bool(raw: str) -> bool:
    """"true" / "false"（大文字小文字非依存）を bool に変換する。"""
    text = raw.strip().lower()
    if text == _TRUE_LITERAL:
        return True
    if text == _FALSE_LITERAL:
        return False
    raise ValueError(f"'{raw}' is not a valid boolean (expected 'true' or 'false')")


def to_datetime(raw: str) -> datetime:
    """ISO 8601 形式の文字列を datetime に変換する。"""
    text = raw.strip()
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        raise ValueError(f"'{raw}' is not a valid ISO 8601 date/time") from None
