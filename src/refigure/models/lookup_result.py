"""型付きルックアップ結果の定義。

status フィールドの固定値で型を一意に特定する判別共用体。
strict / silent の各アクセサはこの結果の射影として実装される。
"""

from __future__ import annotations

from typing import Annotated, Literal, NamedTuple, Union

from pydantic import Field

from refigure.models._base import RefigureBaseModel


class Found(RefigureBaseModel):
    """値が見つかり変換に成功した結果。判別キー: status="found"。

    Attributes:
        status: 判別キー。固定値 "found"。
        value: 変換済みの値。
        raw: 変換前の文字列。
    """

    status: Literal["found"] = "found"
    value: object
    raw: str


class NotFound(RefigureBaseModel):
    """キーがどのソースにも存在しない結果。判別キー: status="not_found"。"""

    status: Literal["not_found"] = "not_found"
    key: str


class Unparseable(RefigureBaseModel):
    """値は存在するが要求型に変換できない結果。判別キー: status="unparseable"。

    Attributes:
        status: 判別キー。固定値 "unparseable"。
        key: 対象キー。
        raw: 変換に失敗した文字列。
        reason: 変換失敗の理由。
    """

    status: Literal["unparseable"] = "unparseable"
    key: str
    raw: str
    reason: str


LookupResult = Annotated[
    Union[Found, NotFound, Unparseable],
    Field(discriminator="status"),
]
"""ルックアップ結果の判別共用体。status フィールドの値で型を自動選択する。"""


class AnywhereMatch(NamedTuple):
    """スコープを無視した全体探索の結果。

    Attributes:
        value: ドキュメント順で最初に見つかった値。見つからなければ空文字列。
        multiplicity: 同じキーを持つ要素の総数。
    """

    value: str
    multiplicity: int
