from __future__ import annotations

from pathlib import Path

import pytest

from sysdev_helpers.tuning import paths
from sysdev_helpers.tuning.privilege import ElevatedHandle, TunableIOError


def write_value(root: Path, location: str, value: object) -> Path:
    p = paths.resolve(root, location)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(f"{value}\n")
    return p


def read_value(root: Path, location: str) -> str:
    return paths.resolve(root, location).read_text().strip()


def add_cpu(
    root: Path,
    cpu_id: int,
    *,
    base_khz: int | None,
    online: bool = True,
    governor: str | None = "powersave",
    driver: str = "intel_pstate",
    available: str = "performance powersave",
) -> None:
    cpu_dir = paths.resolve(root, f"{paths.CPU_DIR}/cpu{cpu_id}")
    cpu_dir.mkdir(parents=True, exist_ok=True)
    # cpu0 has no hotplug control on most kernels
    if cpu_id != 0:
        write_value(root, paths.online_location(cpu_id), 1 if online else 0)
    if base_khz is not None:
        write_value(root, paths.base_frequency_location(cpu_id), base_khz)
    if governor is not None:
        write_value(root, paths.governor_location(cpu_id), governor)
        write_value(root, paths.cpu_location(cpu_id, "cpufreq/scaling_driver"), driver)
        write_value(root, paths.cpu_location(cpu_id, "cpufreq/scaling_available_governors"), available)


class RecordingHandle:
    """Direct file I/O that records writes and can reject chosen paths."""

    def __init__(self, *, fail_on: tuple[str, ...] = ()) -> None:
        self.inner = ElevatedHandle(use_sudo=False)
        self.fail_on = fail_on
        self.writes: list[tuple[Path, str]] = []

    def read(self, path: Path) -> str:
        return self.inner.read(path)

    def write(self, path: Path, value: str) -> None:
        self.writes.append((path, value))
        if any(str(path).endswith(suffix) for suffix in self.fail_on):
            raise TunableIOError(f"Failed to write {value!r} to {path}: Read-only file system")
        self.inner.write(path, value)


@pytest.fixture
def host_root(tmp_path: Path) -> Path:
    """A fake host in its secure default state: cpu0 P-core, cpu1/cpu2 E-cores."""
    root = tmp_path / "host"
    write_value(root, paths.PERF_EVENT_PARANOID, 2)
    write_value(root, paths.KPTR_RESTRICT, 1)
    write_value(root, paths.PTRACE_SCOPE, 1)
    write_value(root, paths.RDPMC, 0)
    write_value(root, paths.RANDOMIZE_VA_SPACE, 2)
    write_value(root, paths.SMT_CONTROL, "on")
    write_value(root, paths.NO_TURBO, 0)
    add_cpu(root, 0, base_khz=3600000)
    add_cpu(root, 1, base_khz=2000000)
    add_cpu(root, 2, base_khz=1800000)
    return root


@pytest.fixture
def handle() -> RecordingHandle:
    return RecordingHandle()
