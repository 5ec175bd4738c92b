"""Logical CPU enumeration, P-core/E-core classification and hotplug.

Units are re-read from `/sys/devices/system/cpu` on every call: offlining a
unit removes its `cpufreq` directory, so a cached view goes stale immediately.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from . import paths, registry, toggle
from .model import CoreRole, CoreUnit, StepOutcome
from .privilege import ElevatedHandle


def _read_int(path: Path) -> int | None:
    try:
        return int(path.read_text().strip())
    except (OSError, ValueError):
        return None


def read_unit(cpu_id: int, *, root: Path) -> CoreUnit:
    online_raw = _read_int(paths.resolve(root, paths.online_location(cpu_id)))
    return CoreUnit(
        id=cpu_id,
        base_frequency_khz=_read_int(paths.resolve(root, paths.base_frequency_location(cpu_id))),
        # no `online` file: the unit cannot be hot-unplugged and is always up
        online=online_raw != 0,
    )


def enumerate_units(*, root: Path) -> list[CoreUnit]:
    return [read_unit(cpu_id, root=root) for cpu_id in paths.cpu_ids(root)]


def classify(unit: CoreUnit, *, threshold_khz: int) -> CoreRole | None:
    freq = unit.base_frequency_khz
    if not freq:
        return None
    if freq < threshold_khz:
        return "efficiency"
    return "performance"


def set_online(unit: CoreUnit, online: bool, handle: ElevatedHandle, *, root: Path) -> StepOutcome:
    if unit.id == 0 and not online:
        return StepOutcome(
            step=unit.name,
            status="refused",
            location=str(paths.resolve(root, paths.online_location(0))),
            value="0",
            details="cpu0 must stay online",
        )
    return toggle.apply(registry.online_descriptor(unit.id), "1" if online else "0", handle, root=root)


def fold_outcomes(step: str, outcomes: Iterable[StepOutcome], *, location: str | None = None) -> StepOutcome:
    """Summarize per-unit outcomes of a bulk operation into one step outcome."""
    units = tuple(outcomes)
    changed = sum(u.changed for u in units)
    failed = [u for u in units if u.status == "write_failed"]
    if failed:
        status = "write_failed"
        details = f"{len(failed)} of {len(units)} unit(s) failed: " + ", ".join(u.step for u in failed)
    elif changed:
        status = "applied"
        details = None
    else:
        status = "already_satisfied"
        details = None if units else "no matching units"
    return StepOutcome(
        step=step,
        status=status,
        location=location,
        changed=changed,
        details=details,
        units=units,
        bulk=True,
    )


def disable_efficiency_cores(handle: ElevatedHandle, *, root: Path, threshold_khz: int) -> StepOutcome:
    targets = [u for u in enumerate_units(root=root) if classify(u, threshold_khz=threshold_khz) == "efficiency"]
    return fold_outcomes(
        "disable_efficiency_cores",
        (set_online(u, False, handle, root=root) for u in targets),
        location=str(paths.resolve(root, paths.CPU_DIR)),
    )


def single_core_mode(handle: ElevatedHandle, *, root: Path) -> StepOutcome:
    targets = [u for u in enumerate_units(root=root) if u.id != 0]
    return fold_outcomes(
        "single_core_mode",
        (set_online(u, False, handle, root=root) for u in targets),
        location=str(paths.resolve(root, paths.CPU_DIR)),
    )


def online_all_cores(handle: ElevatedHandle, *, root: Path) -> StepOutcome:
    targets = [u for u in enumerate_units(root=root) if u.id != 0]
    return fold_outcomes(
        "online_all_cores",
        (set_online(u, True, handle, root=root) for u in targets),
        location=str(paths.resolve(root, paths.CPU_DIR)),
    )
