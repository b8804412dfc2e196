"""設定ソースと解決コンテキスト。

ConfigurationSource は1つのパース済み XML ドキュメントとその出自を保持する。
ResolutionContext は初期化済みストアの状態全体を表し、丸ごと差し替えられる。
"""

from __future__ import annotations

from pathlib import Path
from typing import Self
from xml.etree.ElementTree import ElementTree

from pydantic import ConfigDict, model_validator

from refigure.models._base import RefigureBaseModel


class ConfigurationSource(RefigureBaseModel):
    """パース済み設定ドキュメント。

    Attributes:
        path: 読み込み元ファイルのパス。
        is_local: local（開発者マシン上書き）ソースなら True。
        document: パース済み XML ツリー。
    """

    model_config = ConfigDict(
        extra="forbid", frozen=True, arbitrary_types_allowed=True
    )

    path: Path
    is_local: bool
    document: ElementTree

    @property
    def label(self) -> str:
        """ログ・表示用のソース種別名。"""
        return "local" if self.is_local else "global"


class ResolutionContext(RefigureBaseModel):
    """初期化済みストアの状態。

    不変条件: local_source が存在するのは in_dev_environment が True の場合に限る。

    Attributes:
        in_dev_environment: 開発環境として初期化されたか。
        global_source: global ソース（常に必須）。
        local_source: local ソース（開発環境でのみ存在）。
    """

    in_dev_environment: bool
    global_source: ConfigurationSource
    local_source: ConfigurationSource | None = None

    @model_validator(mode="after")
    def validate_local_presence(self) -> Self:
        """local ソースの有無が開発環境フラグと一致することを検証する。"""
        if self.in_dev_environment and self.local_source is None:
            raise ValueError("local_source is required in dev environment")
        if not self.in_dev_environment and self.local_source is not None:
            raise ValueError("local_source must be absent outside dev environment")
        if self.global_source.is_local:
            raise ValueError("global_source must not be flagged as local")
        if self.local_source is not None and not self.local_source.is_local:
            raise ValueError("local_source must be flagged as local")
        return self

    def sources(self) -> tuple[ConfigurationSource, ...]:
        """優先順位順（local → global）のソースを返す。"""
        if self.local_source is not None:
            return (self.local_source, self.global_source)
        return (self.global_source,)
