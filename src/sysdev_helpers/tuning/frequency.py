from __future__ import annotations

from pathlib import Path

from . import paths, registry, toggle, topology
from .model import StepOutcome
from .privilege import ElevatedHandle

# Drivers that select frequencies themselves; their `powersave` is the dynamic default.
ACTIVE_PSTATE_DRIVERS: tuple[str, ...] = ("intel_pstate", "amd-pstate-epp")
# Dynamic governors of generic cpufreq drivers, in order of preference.
DYNAMIC_GOVERNORS: tuple[str, ...] = ("schedutil", "ondemand", "conservative")
FALLBACK_GOVERNOR = "schedutil"


def _read_attr(root: Path, location: str) -> str | None:
    try:
        return paths.resolve(root, location).read_text().strip()
    except OSError:
        return None


def default_governor(cpu_id: int, *, root: Path) -> str:
    """Return the governor that gives `cpu_id` back dynamic frequency scaling.

    Under an active-mode pstate driver that is `powersave`; under generic drivers
    (acpi-cpufreq, intel_cpufreq, ...) `powersave` pins the lowest frequency, so
    the first dynamic governor the CPU offers is used instead.
    """
    driver = _read_attr(root, paths.cpu_location(cpu_id, "cpufreq/scaling_driver"))
    if driver in ACTIVE_PSTATE_DRIVERS:
        return "powersave"
    available = (_read_attr(root, paths.cpu_location(cpu_id, "cpufreq/scaling_available_governors")) or "").split()
    for governor in DYNAMIC_GOVERNORS:
        if governor in available:
            return governor
    return FALLBACK_GOVERNOR


def _governor_outcomes(governor: str | None, handle: ElevatedHandle, *, root: Path) -> list[StepOutcome]:
    outcomes: list[StepOutcome] = []
    for unit in topology.enumerate_units(root=root):
        # offline units expose no cpufreq directory
        if not paths.resolve(root, paths.governor_location(unit.id)).exists():
            continue
        target = governor or default_governor(unit.id, root=root)
        d = registry.governor_descriptor(unit.id, armed=target, default=target)
        outcomes.append(toggle.apply(d, target, handle, root=root))
    return outcomes


def disable_frequency_scaling(handle: ElevatedHandle, *, root: Path, governor: str = "performance") -> StepOutcome:
    """Pin every online CPU to `governor` and turn turbo off."""
    outcomes = _governor_outcomes(governor, handle, root=root)
    outcomes.append(toggle.arm(registry.NO_TURBO, handle, root=root))
    return topology.fold_outcomes("disable_frequency_scaling", outcomes)


def enable_frequency_scaling(handle: ElevatedHandle, *, root: Path, governor: str | None = None) -> StepOutcome:
    """Hand frequency selection back to a dynamic governor and re-enable turbo.

    With `governor=None` each CPU gets the default of its cpufreq driver.
    """
    outcomes = _governor_outcomes(governor, handle, root=root)
    outcomes.append(toggle.restore(registry.NO_TURBO, handle, root=root))
    return topology.fold_outcomes("enable_frequency_scaling", outcomes)
