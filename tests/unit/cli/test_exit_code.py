"""ExitCode IntEnum のテスト。

CLI の各サブコマンドが返す終了コード。
"""

from enum import IntEnum

import pytest

from refigure.models.exit_code import ExitCode


class TestExitCodeValues:
    """ExitCode IntEnum の値を検証する。"""

    def test_success_is_zero(self) -> None:
        assert ExitCode.SUCCESS == 0

    def test_key_not_found_is_one(self) -> None:
        assert ExitCode.KEY_NOT_FOUND == 1

    def test_config_error_is_two(self) -> None:
        assert ExitCode.CONFIG_ERROR == 2

    def test_input_error_is_four(self) -> None:
        assert ExitCode.INPUT_ERROR == 4

    def test_has_four_members(self) -> None:
        assert len(ExitCode) == 4


class TestExitCodeIsIntEnum:
    def test_is_int_enum_subclass(self) -> None:
        assert issubclass(ExitCode, IntEnum)

    def test_can_be_used_as_process_exit_code(self) -> None:
        """int() で変換可能である（sys.exit() に渡せる）。"""
        assert int(ExitCode.CONFIG_ERROR) == 2


class TestExitCodeInvalidValues:
    @pytest.mark.parametrize("value", [-1, 3, 5, 999])
    def test_undefined_value_raises_value_error(self, value: int) -> None:
        with pytest.raises(ValueError):
            ExitCode(value)
