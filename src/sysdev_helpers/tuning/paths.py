from __future__ import annotations

import re
from pathlib import Path

DEFAULT_SYS_ROOT = Path("/")

CPU_DIR = "/sys/devices/system/cpu"
PERF_EVENT_PARANOID = "/proc/sys/kernel/perf_event_paranoid"
KPTR_RESTRICT = "/proc/sys/kernel/kptr_restrict"
PTRACE_SCOPE = "/proc/sys/kernel/yama/ptrace_scope"
RANDOMIZE_VA_SPACE = "/proc/sys/kernel/randomize_va_space"
RDPMC = "/sys/bus/event_source/devices/cpu/rdpmc"
SMT_CONTROL = f"{CPU_DIR}/smt/control"
NO_TURBO = f"{CPU_DIR}/intel_pstate/no_turbo"

_CPU_DIR_RE = re.compile(r"^cpu(\d+)$")


def resolve(root: Path, location: str) -> Path:
    """Map an absolute host location (e.g. `/proc/sys/...`) under `root`.

    With the default root `/` this is the location itself; tests and chroots
    point `root` at a directory that mirrors the `/proc` and `/sys` layout.
    """
    return root / location.lstrip("/")


def cpu_location(cpu_id: int, attr: str) -> str:
    if cpu_id < 0:
        raise ValueError(f"cpu id must be non-negative, got {cpu_id}")
    return f"{CPU_DIR}/cpu{cpu_id}/{attr}"


def online_location(cpu_id: int) -> str:
    return cpu_location(cpu_id, "online")


def base_frequency_location(cpu_id: int) -> str:
    return cpu_location(cpu_id, "cpufreq/base_frequency")


def governor_location(cpu_id: int) -> str:
    return cpu_location(cpu_id, "cpufreq/scaling_governor")


def cpu_ids(root: Path) -> list[int]:
    """Return the logical CPU ids present under `root`, ascending."""
    cpu_root = resolve(root, CPU_DIR)
    if not cpu_root.is_dir():
        return []
    ids: list[int] = []
    for entry in cpu_root.iterdir():
        m = _CPU_DIR_RE.match(entry.name)
        if m and entry.is_dir():
            ids.append(int(m.group(1)))
    return sorted(ids)
