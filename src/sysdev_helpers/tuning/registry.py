from __future__ import annotations

from . import paths
from .model import TunableDescriptor

PERF_EVENT_PARANOID = TunableDescriptor(
    name="perf_event_paranoid",
    location=paths.PERF_EVENT_PARANOID,
    value_kind="integer",
    armed_value="-1",
    default_value="2",
    description="perf event access for unprivileged users",
)
KPTR_RESTRICT = TunableDescriptor(
    name="kptr_restrict",
    location=paths.KPTR_RESTRICT,
    value_kind="integer",
    armed_value="0",
    default_value="1",
    description="kernel pointer exposure in /proc",
)
PTRACE_SCOPE = TunableDescriptor(
    name="ptrace_scope",
    location=paths.PTRACE_SCOPE,
    value_kind="integer",
    armed_value="0",
    default_value="1",
    description="Yama ptrace attach restrictions",
)
RDPMC = TunableDescriptor(
    name="rdpmc",
    location=paths.RDPMC,
    value_kind="integer",
    # 2: user-space RDPMC for programmable counters only
    armed_value="2",
    default_value="0",
    description="user-space RDPMC access",
)
RANDOMIZE_VA_SPACE = TunableDescriptor(
    name="randomize_va_space",
    location=paths.RANDOMIZE_VA_SPACE,
    value_kind="integer",
    armed_value="0",
    default_value="2",
    description="address space layout randomization (ASLR)",
)
SMT_CONTROL = TunableDescriptor(
    name="smt_control",
    location=paths.SMT_CONTROL,
    value_kind="token",
    armed_value="off",
    default_value="on",
    vocabulary=("on", "off"),
    description="simultaneous multithreading (hyper-threading)",
)
NO_TURBO = TunableDescriptor(
    name="no_turbo",
    location=paths.NO_TURBO,
    value_kind="integer",
    armed_value="1",
    default_value="0",
    description="intel_pstate turbo boost disable",
)

# Order is the order of the tracing-access group in the profiling profiles.
TRACING_TUNABLES: tuple[TunableDescriptor, ...] = (PERF_EVENT_PARANOID, KPTR_RESTRICT, PTRACE_SCOPE, RDPMC)

TUNABLES: dict[str, TunableDescriptor] = {
    t.name: t
    for t in (
        PERF_EVENT_PARANOID,
        KPTR_RESTRICT,
        PTRACE_SCOPE,
        RDPMC,
        RANDOMIZE_VA_SPACE,
        SMT_CONTROL,
        NO_TURBO,
    )
}


def governor_descriptor(cpu_id: int, *, armed: str, default: str) -> TunableDescriptor:
    """Per-CPU cpufreq governor; any governor name is an accepted token."""
    return TunableDescriptor(
        name=f"cpu{cpu_id}/scaling_governor",
        location=paths.governor_location(cpu_id),
        value_kind="token",
        armed_value=armed,
        default_value=default,
        description=f"cpufreq governor of cpu{cpu_id}",
    )


def online_descriptor(cpu_id: int) -> TunableDescriptor:
    return TunableDescriptor(
        name=f"cpu{cpu_id}",
        location=paths.online_location(cpu_id),
        value_kind="integer",
        armed_value="0",
        default_value="1",
        description=f"online state of cpu{cpu_id}",
    )


def get_tunable(name: str) -> TunableDescriptor:
    try:
        return TUNABLES[name]
    except KeyError:
        raise KeyError(f"Unknown tunable: {name!r} (known: {', '.join(sorted(TUNABLES))})") from None
