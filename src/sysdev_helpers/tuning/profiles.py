"""Named, ordered compositions of toggles and bulk core operations.

A profile run acquires privileges once, before its first step. A
failed elevation aborts the run with nothing touched; every other failure is
recorded and the remaining steps still execute, so a restore always attempts
every reset.
"""

from __future__ import annotations

import subprocess
import sys
from collections.abc import Callable
from functools import partial
from typing import TextIO

import attrs

from . import frequency, registry, report, toggle, topology
from .model import ProfileResult, StepOutcome, TunableDescriptor
from .privilege import ElevatedHandle, ElevationFailed, PrivilegeContext
from .settings import Settings

StepAction = Callable[[ElevatedHandle], StepOutcome]


@attrs.define(frozen=True, slots=True)
class Step:
    name: str
    action: StepAction


@attrs.define(frozen=True, slots=True)
class Profile:
    name: str
    description: str
    steps: tuple[Step, ...]


def run(
    profile: Profile,
    *,
    context: PrivilegeContext | None = None,
    handle: ElevatedHandle | None = None,
    out: TextIO | None = None,
    echo: bool = True,
) -> ProfileResult:
    """Execute `profile` step by step and return the collected outcomes."""
    stream = sys.stdout if out is None else out
    if handle is None:
        ctx = context if context is not None else PrivilegeContext()
        try:
            handle = ctx.ensure()
        except ElevationFailed as e:
            print(f"{e}. Aborting {profile.name}.", file=sys.stderr)
            return ProfileResult(profile=profile.name, per_step=[], aborted=True, failure_reason=str(e))
    outcomes: list[StepOutcome] = []
    for step in profile.steps:
        try:
            outcome = step.action(handle)
        except (OSError, subprocess.SubprocessError) as e:
            outcome = StepOutcome(step=step.name, status="write_failed", details=str(e))
        outcomes.append(outcome)
        if echo:
            print(report.format_step(outcome), file=stream)

    result = ProfileResult(profile=profile.name, per_step=outcomes)
    if echo:
        print(report.format_result(result), file=stream)
    return result


def _arm_step(d: TunableDescriptor, settings: Settings) -> Step:
    return Step(name=d.name, action=partial(toggle.arm, d, root=settings.sys_root))


def _restore_step(d: TunableDescriptor, settings: Settings) -> Step:
    return Step(name=d.name, action=partial(toggle.restore, d, root=settings.sys_root))


def _bulk_step(name: str, fn: Callable[..., StepOutcome], **kwargs: object) -> Step:
    return Step(name=name, action=partial(fn, **kwargs))


def build_profiles(settings: Settings) -> dict[str, Profile]:
    root = settings.sys_root
    tracing_on = tuple(_arm_step(d, settings) for d in registry.TRACING_TUNABLES)
    tracing_off = tuple(_restore_step(d, settings) for d in registry.TRACING_TUNABLES)
    aslr_off = _arm_step(registry.RANDOMIZE_VA_SPACE, settings)
    aslr_on = _restore_step(registry.RANDOMIZE_VA_SPACE, settings)
    smt_off = _arm_step(registry.SMT_CONTROL, settings)
    smt_on = _restore_step(registry.SMT_CONTROL, settings)
    freq_off = _bulk_step(
        "disable_frequency_scaling",
        frequency.disable_frequency_scaling,
        root=root,
        governor=settings.profiling_governor,
    )
    freq_on = _bulk_step(
        "enable_frequency_scaling",
        frequency.enable_frequency_scaling,
        root=root,
        governor=settings.restore_governor,
    )
    e_cores_off = _bulk_step(
        "disable_efficiency_cores",
        topology.disable_efficiency_cores,
        root=root,
        threshold_khz=settings.p_core_threshold_khz,
    )
    single_core = _bulk_step("single_core_mode", topology.single_core_mode, root=root)
    all_cores = _bulk_step("online_all_cores", topology.online_all_cores, root=root)
    restore_label = f"'{settings.restore_governor}'" if settings.restore_governor else "its cpufreq driver default"

    profiles = [
        Profile("enable-tracing", "Relax perf/kptr/ptrace restrictions and allow user-space RDPMC.", tracing_on),
        Profile("disable-tracing", "Reset perf/kptr/ptrace/RDPMC to their secure defaults.", tracing_off),
        Profile("disable-aslr", "Disable address space layout randomization.", (aslr_off,)),
        Profile("enable-aslr", "Re-enable full address space layout randomization.", (aslr_on,)),
        Profile("disable-smt", "Disable simultaneous multithreading.", (smt_off,)),
        Profile("enable-smt", "Re-enable simultaneous multithreading.", (smt_on,)),
        Profile(
            "disable-frequency-scaling",
            f"Set every governor to '{settings.profiling_governor}' and disable turbo.",
            (freq_off,),
        ),
        Profile(
            "enable-frequency-scaling",
            f"Set every governor to {restore_label} and re-enable turbo.",
            (freq_on,),
        ),
        Profile(
            "disable-e-cores",
            f"Offline efficiency cores (base frequency below {settings.p_core_threshold_khz} kHz).",
            (e_cores_off,),
        ),
        Profile("single-core-mode", "Offline every core except cpu0.", (single_core,)),
        Profile("restore-cores", "Bring every core back online.", (all_cores,)),
        Profile(
            "profiling-mode",
            "Tracing access on, frequency scaling off, SMT off, ASLR off.",
            (*tracing_on, freq_off, smt_off, aslr_off),
        ),
        Profile(
            "restore-defaults",
            "Reset tracing access and ASLR, re-enable SMT, all cores and frequency scaling.",
            (tracing_off[0], tracing_off[1], tracing_off[2], aslr_on, tracing_off[3], smt_on, all_cores, freq_on),
        ),
    ]
    return {p.name: p for p in profiles}


PROFILE_ALIASES: dict[str, str] = {
    "vtune-mode": "profiling-mode",
    "debug-off": "restore-defaults",
    "restore-all-cores": "restore-cores",
}


def get_profile(name: str, settings: Settings) -> Profile:
    profiles = build_profiles(settings)
    key = PROFILE_ALIASES.get(name, name)
    if key not in profiles:
        raise KeyError(f"Unknown profile: {name!r} (known: {', '.join(sorted(profiles))})")
    return profiles[key]
