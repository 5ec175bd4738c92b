from __future__ import annotations

from pathlib import Path

import pytest

from sysdev_helpers.tuning.settings import Settings


def test_defaults() -> None:
    s = Settings.from_env({})
    assert s.sys_root == Path("/")
    assert s.p_core_threshold_khz == 3200000
    assert s.restore_governor is None
    assert s.interactive is True


def test_from_env_overrides(tmp_path: Path) -> None:
    s = Settings.from_env(
        {
            "SYSDEV_HELPERS_ROOT": str(tmp_path),
            "SYSDEV_HELPERS_P_CORE_KHZ": "3000000",
            "SYSDEV_HELPERS_RESTORE_GOVERNOR": "schedutil",
            "SYSDEV_HELPERS_NON_INTERACTIVE": "1",
        }
    )
    assert s.sys_root == tmp_path
    assert s.p_core_threshold_khz == 3000000
    assert s.restore_governor == "schedutil"
    assert s.interactive is False


def test_rejects_bad_threshold() -> None:
    with pytest.raises(ValueError):
        Settings.from_env({"SYSDEV_HELPERS_P_CORE_KHZ": "fast"})
    with pytest.raises(ValueError):
        Settings(p_core_threshold_khz=0)


@pytest.mark.parametrize(("raw", "interactive"), [("1", False), ("true", False), ("YES", False), ("0", True), ("false", True), ("off", True)])
def test_non_interactive_is_parsed_as_boolean(raw: str, interactive: bool) -> None:
    assert Settings.from_env({"SYSDEV_HELPERS_NON_INTERACTIVE": raw}).interactive is interactive


def test_non_interactive_rejects_garbage() -> None:
    with pytest.raises(ValueError):
        Settings.from_env({"SYSDEV_HELPERS_NON_INTERACTIVE": "maybe"})
