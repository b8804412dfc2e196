"""CliApp: Typer アプリケーション定義。

get / set / where / show サブコマンドで ConfigResolver を操作する。
値は stdout、エラーと補足情報は stderr に出力する。
"""

from __future__ import annotations

import importlib.metadata
import sys
import tomllib
from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table
from rich.text import Text

from refigure.config import ConfigResolver, resolve_settings
from refigure.errors import RefigureError
from refigure.models.exit_code import ExitCode

_SETTINGS_OVERRIDES_KEY = "settings_overrides"

app = typer.Typer(
    name="refigure",
    help=(
        "Resolve configuration values from layered local/global XML config files.\n\n"
        "In dev environment the local file overrides the global file."
    ),
    add_completion=False,
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    """--version 指定時にバージョン番号を出力して終了する。"""
    if value:
        print(importlib.metadata.version("refigure"))
        raise typer.Exit()


def main() -> None:
    """CLI エントリポイント。pyproject.toml の [project.scripts] から呼び出される。"""
    app()


@app.callback()
def root_callback(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            help="Show version and exit.",
            callback=_version_callback,
            is_eager=True,
        ),
    ] = None,
    global_config: Annotated[
        Path | None,
        typer.Option("--global-config", help="Path to the global config file."),
    ] = None,
    local_config: Annotated[
        Path | None,
        typer.Option("--local-config", help="Path to the local config file."),
    ] = None,
    dev: Annotated[
        bool | None,
        typer.Option(
            "--dev/--prod",
            help="Load as dev environment (local overrides global) or production.",
        ),
    ] = None,
    search_dir: Annotated[
        Path | None,
        typer.Option("--search-dir", help="Directory searched for default config files."),
    ] = None,
) -> None:
    """設定上書きオプションを ctx.obj に保存する。"""
    ctx.ensure_object(dict)
    ctx.obj[_SETTINGS_OVERRIDES_KEY] = {
        "global_config_path": global_config,
        "local_config_path": local_config,
        "in_dev_environment": dev,
        "search_dir": search_dir,
    }


def _build_resolver(ctx: typer.Context) -> ConfigResolver:
    """CLI オプションと pyproject.toml から ConfigResolver を構築し初期化する。

    設定エラーは終了コード INPUT_ERROR、設定ファイルの探索・読み込みエラーは
    CONFIG_ERROR で終了する。
    """
    overrides: dict[str, object] = (ctx.obj or {}).get(_SETTINGS_OVERRIDES_KEY, {})
    try:
        settings = resolve_settings(overrides=overrides)
    except (ValidationError, tomllib.TOMLDecodeError) as e:
        print(
            f"Error: Invalid refigure settings: {e}\n"
            "Check [tool.refigure] in pyproject.toml for syntax errors or invalid values.",
            file=sys.stderr,
        )
        raise typer.Exit(code=ExitCode.INPUT_ERROR) from None

    resolver = ConfigResolver(settings)
    try:
        resolver.initialize()
    except RefigureError as e:
        print(
            f"Error: {e}\nUse --global-config/--local-config to point at config files.",
            file=sys.stderr,
        )
        raise typer.Exit(code=ExitCode.CONFIG_ERROR) from None
    return resolver


@app.command()
def get(
    ctx: typer.Context,
    key: Annotated[str, typer.Argument(help="Configuration key.")],
    scope: Annotated[
        str | None,
        typer.Option(
            "--scope", help="Scope path such as /configuration/appSettings/paths/."
        ),
    ] = None,
) -> None:
    """Print the resolved value of KEY."""
    resolver = _build_resolver(ctx)
    try:
        value = resolver.get(key, scope)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise typer.Exit(code=ExitCode.INPUT_ERROR) from None

    if not value:
        print(f"Error: Key '{key}' was not found.", file=sys.stderr)
        raise typer.Exit(code=ExitCode.KEY_NOT_FOUND)
    print(value)


@app.command(name="set")
def set_value(
    ctx: typer.Context,
    key: Annotated[str, typer.Argument(help="Configuration key.")],
    value: Annotated[str, typer.Argument(help="Value to store.")],
    scope: Annotated[
        str | None,
        typer.Option("--scope", help="Scope path to update or append the entry in."),
    ] = None,
) -> None:
    """Write KEY=VALUE into the global config file."""
    resolver = _build_resolver(ctx)
    try:
        resolver.set_global(key, value, scope)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise typer.Exit(code=ExitCode.INPUT_ERROR) from None
    except RefigureError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise typer.Exit(code=ExitCode.CONFIG_ERROR) from None

    context = resolver.store.context
    if context is not None:
        print(f"Updated {context.global_source.path}", file=sys.stderr)


@app.command()
def where(ctx: typer.Context) -> None:
    """Print the resolved global and local config file paths."""
    resolver = _build_resolver(ctx)
    context = resolver.store.context
    if context is None:
        raise typer.Exit(code=ExitCode.CONFIG_ERROR)
    print(f"global: {context.global_source.path}")
    if context.local_source is not None:
        print(f"local:  {context.local_source.path}")
    else:
        print("local:  (not used outside dev environment)")


def build_entries_table(resolver: ConfigResolver, scope: str | None) -> Table:
    """読み込み済みソースのエントリを Rich テーブルとして構築する。

    テーブル列: Source | Key | Value
    行順序: 優先順位順（local → global）、ソース内はドキュメント順。
    キーと値は Rich マークアップとして解釈せずそのまま表示する。
    """
    table = Table(title=f"Entries in {scope}" if scope else "Entries")
    table.add_column("Source")
    table.add_column("Key")
    table.add_column("Value")
    for source, key, value in resolver.iter_source_entries(scope):
        table.add_row(source.label, Text(key), Text(value))
    return table


@app.command()
def show(
    ctx: typer.Context,
    scope: Annotated[
        str | None,
        typer.Option("--scope", help="Only list entries directly under this scope path."),
    ] = None,
) -> None:
    """List the entries of every loaded config file."""
    resolver = _build_resolver(ctx)
    try:
        table = build_entries_table(resolver, scope)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise typer.Exit(code=ExitCode.INPUT_ERROR) from None
    Console().print(table)
