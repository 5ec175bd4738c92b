from __future__ import annotations

from pathlib import Path

from . import paths
from .model import StepOutcome, TunableDescriptor
from .privilege import ElevatedHandle


def values_equal(descriptor: TunableDescriptor, current: str, target: str) -> bool:
    """Exact comparison: integer equality for integer tunables, string match otherwise."""
    if descriptor.value_kind == "integer":
        try:
            return int(current) == int(target)
        except ValueError:
            return False
    return current == target


def read_current(descriptor: TunableDescriptor, handle: ElevatedHandle, *, root: Path) -> str | None:
    """Return the current value, or None when the location does not exist."""
    path = paths.resolve(root, descriptor.location)
    if not path.exists():
        return None
    return handle.read(path)


def apply(descriptor: TunableDescriptor, target: str, handle: ElevatedHandle, *, root: Path) -> StepOutcome:
    """Idempotent read-compare-write of one tunable.

    Never writes when the current value already equals `target` and never
    retries a failed write.
    """
    path = paths.resolve(root, descriptor.location)
    location = str(path)
    try:
        exists = path.exists()
    except OSError as e:
        return StepOutcome(step=descriptor.name, status="write_failed", location=location, value=target, details=str(e))
    if not exists:
        return StepOutcome(
            step=descriptor.name,
            status="unsupported",
            location=location,
            value=target,
            details="not available on this kernel or hardware",
        )

    try:
        current = handle.read(path)
    except OSError as e:
        return StepOutcome(step=descriptor.name, status="write_failed", location=location, value=target, details=str(e))

    if descriptor.vocabulary and current not in descriptor.vocabulary:
        return StepOutcome(
            step=descriptor.name,
            status="unsupported",
            location=location,
            previous=current,
            value=target,
            details=f"current value {current!r} is outside {'/'.join(descriptor.vocabulary)}",
        )

    if values_equal(descriptor, current, target):
        return StepOutcome(
            step=descriptor.name,
            status="already_satisfied",
            location=location,
            previous=current,
            value=target,
        )

    try:
        handle.write(path, target)
    except OSError as e:
        return StepOutcome(
            step=descriptor.name,
            status="write_failed",
            location=location,
            previous=current,
            value=target,
            details=str(e),
        )
    return StepOutcome(
        step=descriptor.name,
        status="applied",
        location=location,
        previous=current,
        value=target,
        changed=1,
    )


def arm(descriptor: TunableDescriptor, handle: ElevatedHandle, *, root: Path) -> StepOutcome:
    return apply(descriptor, descriptor.armed_value, handle, root=root)


def restore(descriptor: TunableDescriptor, handle: ElevatedHandle, *, root: Path) -> StepOutcome:
    return apply(descriptor, descriptor.default_value, handle, root=root)
