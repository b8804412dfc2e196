"""リゾルバー設定の解決。

フィールドデフォルト < pyproject.toml [tool.refigure] < 呼び出し側の上書き、
の3層を項目単位でマージし ResolverSettings を構築する。
"""

from __future__ import annotations

from pathlib import Path
from typing import Final

from refigure.config._loader import load_pyproject_config
from refigure.config._locator import find_pyproject_toml
from refigure.models.settings import ResolverSettings

_PATH_KEYS: Final[frozenset[str]] = frozenset(
    {"global_config_path", "local_config_path", "search_dir", "base_directory"}
)
"""pyproject.toml 内で相対指定された場合に pyproject.toml の位置を基準とするキー。"""


def merge_settings_layers(
    *layers: dict[str, object] | None,
) -> dict[str, object]:
    """複数の設定レイヤーを項目単位でマージする。

    後のレイヤーが先のレイヤーを上書きする。None のレイヤーはスキップされる。
    リスト値（global_config_filenames 等）は要素単位ではなく丸ごと置き換える。

    Args:
        layers: マージ対象の設定辞書。低優先度から高優先度の順。

    Returns:
        マージ済みの設定辞書。
    """
    result: dict[str, object] = {}
    for layer in layers:
        if layer is None:
            continue
        result.update(layer)
    return result


def filter_overrides(overrides: dict[str, object]) -> dict[str, object]:
    """上書き辞書から None 値を除外する。

    None 値は「未指定」を意味し、マージ対象から除外する。
    """
    return {k: v for k, v in overrides.items() if v is not None}


def anchor_relative_paths(
    layer: dict[str, object], anchor: Path
) -> dict[str, object]:
    """パス系キーの相対パスを anchor ディレクトリ基準の絶対パスに変換する。

    Args:
        layer: pyproject.toml から読み込んだ設定辞書。
        anchor: 基準ディレクトリ（pyproject.toml のあるディレクトリ）。

    Returns:
        変換後の新しい辞書。パス系以外のキーはそのまま。
    """
    anchored: dict[str, object] = dict(layer)
    for key in _PATH_KEYS:
        value = anchored.get(key)
        if isinstance(value, str) and not Path(value).is_absolute():
            anchored[key] = str(anchor / value)
    return anchored


def resolve_settings(
    start_dir: Path | None = None,
    overrides: dict[str, object] | None = None,
) -> ResolverSettings:
    """設定レイヤーを解決し ResolverSettings を構築する。

    pyproject.toml が見つからない、または [tool.refigure] がない場合は
    該当レイヤーをスキップする。

    Args:
        start_dir: pyproject.toml の探索開始ディレクトリ。None の場合はカレントディレクトリ。
        overrides: 呼び出し側の上書き辞書。None 値は未指定扱い。

    Returns:
        解決済みの ResolverSettings インスタンス。

    Raises:
        pydantic.ValidationError: マージ後の設定が不正な場合。
        tomllib.TOMLDecodeError: pyproject.toml の TOML 構文が不正な場合。
        PermissionError: pyproject.toml の読み取り権限がない場合。
    """
    effective_start = start_dir if start_dir is not None else Path.cwd()

    pyproject_layer: dict[str, object] | None = None
    pyproject_path = find_pyproject_toml(effective_start)
    if pyproject_path is not None:
        section = load_pyproject_config(pyproject_path)
        if section is not None:
            pyproject_layer = anchor_relative_paths(section, pyproject_path.parent)

    override_layer: dict[str, object] | None = None
    if overrides is not None:
        override_layer = filter_overrides(overrides)

    merged = merge_settings_layers(pyproject_layer, override_layer)
    return ResolverSettings.model_validate(merged)
