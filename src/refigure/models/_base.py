"""全ドメインモデルの基底クラス。

extra="forbid" と frozen=True で厳格かつ不変なモデルを一元管理する。
"""

from pydantic import BaseModel, ConfigDict


class RefigureBaseModel(BaseModel):
    """全ドメインモデルの基底クラス。extra="forbid" で厳格モードを一元管理。"""

    model_config = ConfigDict(extra="forbid", frozen=True)
