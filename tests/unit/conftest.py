"""ユニットテスト共通フィクスチャ・ヘルパー。"""

from __future__ import annotations

from pathlib import Path

import pytest

from refigure.config import ConfigResolver
from refigure.models.settings import ResolverSettings

GLOBAL_XML = """\
<?xml version="1.0" encoding="utf-8"?>
<configuration>
  <appSettings>
    <add key="Shared" value="global-shared" />
    <add key="GlobalOnly" value="global-only" />
    <add key="Timeout" value="30" />
    <add key="Ratio" value="0.75" />
    <add key="Enabled" value="false" />
    <add key="ReleaseDate" value="2024-03-15T10:30:00" />
    <add key="NugetPackagesDirectoryName" value="packages" />
    <paths>
      <add key="RepoGenCodeFolder" value="gencode" />
      <add key="Logs" value="/var/log/global" />
    </paths>
    <connectionStrings>
      <add key="Main" value="Server=global;Database=main" />
    </connectionStrings>
  </appSettings>
</configuration>
"""

LOCAL_XML = """\
<?xml version="1.0" encoding="utf-8"?>
<configuration>
  <appSettings>
    <add key="Shared" value="local-shared" />
    <add key="Tests.A" value="true" />
    <add key="Tests.C" value="notabool" />
    <add key="Empty" value="" />
    <paths>
      <add key="Logs" value="/var/log/local" />
    </paths>
  </appSettings>
</configuration>
"""


def write_config(path: Path, content: str) -> Path:
    """content を path に UTF-8 で書き込み、そのパスを返す。"""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def make_settings(tmp_path: Path, **overrides: object) -> ResolverSettings:
    """tmp_path に閉じた探索設定を持つ ResolverSettings を生成する。"""
    data: dict[str, object] = {
        "search_dir": tmp_path,
        "base_directory": tmp_path,
        "app_name": "app.py",
    }
    data.update(overrides)
    return ResolverSettings.model_validate(data)


@pytest.fixture
def global_config(tmp_path: Path) -> Path:
    """GLOBAL_XML を書き込んだ global 設定ファイル。"""
    return write_config(tmp_path / "global.config", GLOBAL_XML)


@pytest.fixture
def local_config(tmp_path: Path) -> Path:
    """LOCAL_XML を書き込んだ local 設定ファイル。"""
    return write_config(tmp_path / "local.config", LOCAL_XML)


@pytest.fixture
def dev_resolver(
    tmp_path: Path, global_config: Path, local_config: Path
) -> ConfigResolver:
    """開発環境（local + global）で初期化済みの ConfigResolver。"""
    resolver = ConfigResolver(make_settings(tmp_path))
    resolver.initialize(True, global_config, local_config)
    return resolver


@pytest.fixture
def prod_resolver(tmp_path: Path, global_config: Path) -> ConfigResolver:
    """本番環境（global のみ）で初期化済みの ConfigResolver。"""
    resolver = ConfigResolver(make_settings(tmp_path))
    resolver.initialize(False, global_config)
    return resolver
