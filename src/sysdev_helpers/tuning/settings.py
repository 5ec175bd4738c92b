from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

import attrs

from . import paths

ENV_ROOT = "SYSDEV_HELPERS_ROOT"
ENV_P_CORE_KHZ = "SYSDEV_HELPERS_P_CORE_KHZ"
ENV_RESTORE_GOVERNOR = "SYSDEV_HELPERS_RESTORE_GOVERNOR"
ENV_NON_INTERACTIVE = "SYSDEV_HELPERS_NON_INTERACTIVE"

DEFAULT_P_CORE_THRESHOLD_KHZ = 3_200_000

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off"})


def _parse_bool(name: str, raw: str) -> bool:
    v = raw.strip().lower()
    if v in _TRUE:
        return True
    if v in _FALSE:
        return False
    raise ValueError(f"{name} must be a boolean (1/0, true/false, yes/no, on/off), got {raw!r}")


def _positive_int(instance: object, attribute: attrs.Attribute, value: int) -> None:
    if value <= 0:
        raise ValueError(f"{attribute.name} must be positive, got {value}")


def _non_empty(instance: object, attribute: attrs.Attribute, value: str) -> None:
    if not value.strip():
        raise ValueError(f"{attribute.name} must be non-empty")


@attrs.define(frozen=True, slots=True)
class Settings:
    sys_root: Path = paths.DEFAULT_SYS_ROOT
    p_core_threshold_khz: int = attrs.field(default=DEFAULT_P_CORE_THRESHOLD_KHZ, validator=_positive_int)
    profiling_governor: str = attrs.field(default="performance", validator=_non_empty)
    # None: per-CPU default of the cpufreq driver
    restore_governor: str | None = attrs.field(default=None, validator=attrs.validators.optional(_non_empty))
    interactive: bool = True
    sudo: str = "sudo"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """Build settings from `SYSDEV_HELPERS_*` environment variables.

        Unset variables keep their defaults. A malformed threshold or boolean raises ValueError.
        """
        env = os.environ if environ is None else environ
        kwargs: dict[str, object] = {}
        if env.get(ENV_ROOT):
            kwargs["sys_root"] = Path(env[ENV_ROOT]).expanduser()
        if env.get(ENV_P_CORE_KHZ):
            raw = env[ENV_P_CORE_KHZ].strip()
            try:
                kwargs["p_core_threshold_khz"] = int(raw)
            except ValueError:
                raise ValueError(f"{ENV_P_CORE_KHZ} must be an integer (kHz), got {raw!r}") from None
        if env.get(ENV_RESTORE_GOVERNOR):
            kwargs["restore_governor"] = env[ENV_RESTORE_GOVERNOR].strip()
        if env.get(ENV_NON_INTERACTIVE):
            kwargs["interactive"] = not _parse_bool(ENV_NON_INTERACTIVE, env[ENV_NON_INTERACTIVE])
        return cls(**kwargs)  # type: ignore[arg-type]
