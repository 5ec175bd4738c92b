from __future__ import annotations

from typing import Any, Literal

import attrs

ValueKind = Literal["integer", "token"]
CoreRole = Literal["performance", "efficiency"]
OutcomeStatus = Literal["applied", "already_satisfied", "unsupported", "write_failed", "refused"]


@attrs.define(frozen=True, slots=True)
class TunableDescriptor:
    name: str
    location: str
    value_kind: ValueKind
    armed_value: str
    default_value: str
    vocabulary: tuple[str, ...] = ()
    description: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "location": self.location,
            "value_kind": self.value_kind,
            "armed_value": self.armed_value,
            "default_value": self.default_value,
            "vocabulary": list(self.vocabulary),
            "description": self.description,
        }


@attrs.define(frozen=True, slots=True)
class CoreUnit:
    id: int
    # kHz, as exposed by cpufreq/base_frequency. None when the attribute is absent.
    base_frequency_khz: int | None
    online: bool

    @property
    def name(self) -> str:
        return f"cpu{self.id}"


@attrs.define(frozen=True, slots=True)
class StepOutcome:
    step: str
    status: OutcomeStatus
    location: str | None = None
    previous: str | None = None
    value: str | None = None
    changed: int = 0
    details: str | None = None
    units: tuple["StepOutcome", ...] = ()
    bulk: bool = False

    @property
    def ok(self) -> bool:
        return self.status != "write_failed"

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "step": self.step,
            "status": self.status,
            "location": self.location,
            "previous": self.previous,
            "value": self.value,
            "changed": self.changed,
            "details": self.details,
        }
        if self.bulk:
            d["units"] = [u.to_dict() for u in self.units]
        return d


@attrs.define(frozen=True, slots=True)
class ProfileResult:
    profile: str
    per_step: list[StepOutcome] = attrs.field(factory=list)
    aborted: bool = False
    failure_reason: str | None = None

    @property
    def changed(self) -> int:
        return sum(o.changed for o in self.per_step)

    @property
    def failed(self) -> list[StepOutcome]:
        return [o for o in self.per_step if not o.ok]

    def to_dict(self) -> dict[str, Any]:
        return {
            "profile": self.profile,
            "aborted": self.aborted,
            "failure_reason": self.failure_reason,
            "changed": self.changed,
            "per_step": [o.to_dict() for o in self.per_step],
        }
