"""スコープパスの定義。

スコープパスはドキュメントルートからの要素名をスラッシュ区切りで並べた絶対パスで、
必ず区切り文字で終端する（例: "/configuration/appSettings/paths/"）。
キーとの連結でクエリを組み立てることはせず、要素名のタプルとして保持する。
"""

from __future__ import annotations

import re
from enum import StrEnum
from typing import Final

from pydantic import Field, field_validator

from refigure.models._base import RefigureBaseModel

SCOPE_SEPARATOR: Final[str] = "/"

_ELEMENT_NAME_RE: Final[re.Pattern[str]] = re.compile(r"[A-Za-z_][A-Za-z0-9_.\-]*")


class WellKnownScope(StrEnum):
    """よく参照される設定セクションのスコープパス。"""

    APP_SETTINGS = "/configuration/appSettings/"
    CONNECTION_STRINGS = "/configuration/appSettings/connectionStrings/"
    PATHS = "/configuration/appSettings/paths/"
    RABBITMQ = "/configuration/appSettings/rabbitMQ/"
    RABBITMQ_MANAGEMENT = "/configuration/appSettings/rabbitMQ/management/"


class ScopePath(RefigureBaseModel):
    """構造化されたスコープパス。

    Attributes:
        segments: ルート要素から順に並べた要素名。先頭はルート要素名。
    """

    segments: tuple[str, ...] = Field(min_length=1)

    @field_validator("segments")
    @classmethod
    def validate_segments(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """各セグメントが XML 要素名として妥当か検証する。"""
        for segment in v:
            if not _ELEMENT_NAME_RE.fullmatch(segment):
                msg = f"Invalid element name '{segment}' in scope path"
                raise ValueError(msg)
        return v

    @classmethod
    def parse(cls, raw: str | ScopePath) -> ScopePath:
        """スコープパス文字列を ScopePath に変換する。

        Args:
            raw: "/root/section/" 形式の文字列、または構築済みの ScopePath。

        Returns:
            構築された ScopePath。

        Raises:
            ValueError: 先頭・末尾が区切り文字でない、空セグメントを含む、
                要素名が不正な場合。
        """
        if isinstance(raw, ScopePath):
            return raw
        text = str(raw)
        if not text.startswith(SCOPE_SEPARATOR) or not text.endswith(SCOPE_SEPARATOR):
            msg = (
                f"Scope path '{text}' must start and end with '{SCOPE_SEPARATOR}' "
                "(e.g. '/configuration/appSettings/')"
            )
            raise ValueError(msg)
        inner = text[1:-1]
        if not inner:
            msg = f"Scope path '{text}' must name at least the root element"
            raise ValueError(msg)
        segments = tuple(inner.split(SCOPE_SEPARATOR))
        if any(not segment for segment in segments):
            msg = f"Scope path '{text}' contains an empty segment"
            raise ValueError(msg)
        return cls(segments=segments)

    @property
    def root(self) -> str:
        """ルート要素名。"""
        return self.segments[0]

    def __str__(self) -> str:
        return SCOPE_SEPARATOR + SCOPE_SEPARATOR.join(self.segments) + SCOPE_SEPARATOR
