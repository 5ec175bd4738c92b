from __future__ import annotations

from .model import CoreUnit, ProfileResult, StepOutcome, TunableDescriptor

_TAGS = {
    "applied": "[changed]",
    "already_satisfied": "[ok]",
    "unsupported": "[unsupported]",
    "write_failed": "[failed]",
    "refused": "[refused]",
}


def format_outcome(o: StepOutcome) -> str:
    """Render one status line for a single tunable or unit outcome."""
    tag = _TAGS[o.status]
    if o.status == "applied":
        return f"{tag} {o.step}: {o.previous} -> {o.value}"
    if o.status == "already_satisfied":
        return f"{tag} {o.step}: already {o.value}"
    if o.status == "unsupported":
        where = f" ({o.location})" if o.location else ""
        return f"{tag} {o.step}: {o.details or 'not available'}{where}"
    return f"{tag} {o.step}: {o.details or 'no details'}"


def format_bulk(o: StepOutcome) -> str:
    lines = [f"  {format_outcome(u)}" for u in o.units]
    summary = f"{_TAGS[o.status]} {o.step}: {o.changed} unit(s) changed"
    if o.details:
        summary += f" ({o.details})"
    lines.append(summary)
    return "\n".join(lines)


def format_step(o: StepOutcome) -> str:
    return format_bulk(o) if o.bulk else format_outcome(o)


def format_result(result: ProfileResult) -> str:
    if result.aborted:
        return f"{result.profile}: aborted ({result.failure_reason})"
    failed = result.failed
    summary = f"{result.profile}: {len(result.per_step)} step(s), {result.changed} change(s)"
    if failed:
        summary += f", {len(failed)} failed: " + ", ".join(o.step for o in failed)
    return summary


def format_status_table(
    rows: list[tuple[TunableDescriptor, str | None]],
    units: list[tuple[CoreUnit, str | None]],
) -> str:
    """Plain-text table of current tunable values and CPU units."""
    lines = [f"{'tunable':<22} {'current':<14} {'armed':<8} {'default':<8}"]
    for d, current in rows:
        lines.append(f"{d.name:<22} {current if current is not None else '-':<14} {d.armed_value:<8} {d.default_value:<8}")
    if units:
        lines.append("")
        lines.append(f"{'cpu':<6} {'online':<7} {'base_khz':<10} {'role':<12}")
        for u, role in units:
            freq = str(u.base_frequency_khz) if u.base_frequency_khz is not None else "-"
            lines.append(f"{u.name:<6} {'yes' if u.online else 'no':<7} {freq:<10} {role or '-':<12}")
    return "\n".join(lines)
