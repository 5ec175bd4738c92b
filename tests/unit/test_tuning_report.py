from __future__ import annotations

from sysdev_helpers.tuning import report
from sysdev_helpers.tuning.model import CoreUnit, ProfileResult, StepOutcome
from sysdev_helpers.tuning.registry import SMT_CONTROL


def test_format_outcome_distinguishes_statuses() -> None:
    assert report.format_outcome(StepOutcome("smt_control", "applied", previous="on", value="off")) == (
        "[changed] smt_control: on -> off"
    )
    assert report.format_outcome(StepOutcome("smt_control", "already_satisfied", value="off")) == (
        "[ok] smt_control: already off"
    )
    assert report.format_outcome(
        StepOutcome("rdpmc", "unsupported", location="/sys/x/rdpmc", details="not available")
    ) == "[unsupported] rdpmc: not available (/sys/x/rdpmc)"
    assert report.format_outcome(StepOutcome("rdpmc", "write_failed", details="EPERM")) == "[failed] rdpmc: EPERM"
    assert report.format_outcome(StepOutcome("cpu0", "refused", details="cpu0 must stay online")).startswith("[refused]")


def test_format_bulk_lists_units_and_summary() -> None:
    o = StepOutcome(
        "single_core_mode",
        "applied",
        changed=1,
        units=(StepOutcome("cpu1", "applied", previous="1", value="0", changed=1),),
        bulk=True,
    )
    assert report.format_step(o).splitlines() == [
        "  [changed] cpu1: 1 -> 0",
        "[changed] single_core_mode: 1 unit(s) changed",
    ]


def test_format_result_summaries() -> None:
    aborted = ProfileResult(profile="profiling-mode", aborted=True, failure_reason="Failed to gain sudo access")
    assert report.format_result(aborted) == "profiling-mode: aborted (Failed to gain sudo access)"

    partial = ProfileResult(
        profile="restore-defaults",
        per_step=[StepOutcome("a", "applied", changed=1), StepOutcome("b", "write_failed")],
    )
    assert report.format_result(partial) == "restore-defaults: 2 step(s), 1 change(s), 1 failed: b"


def test_result_to_dict_is_json_ready() -> None:
    r = ProfileResult(profile="p", per_step=[StepOutcome("x", "applied", changed=1)])
    d = r.to_dict()
    assert d["changed"] == 1
    assert d["per_step"][0]["status"] == "applied"
    assert "units" not in d["per_step"][0]


def test_status_table_renders_missing_values() -> None:
    text = report.format_status_table([(SMT_CONTROL, None)], [(CoreUnit(1, None, False), None)])
    assert "smt_control" in text
    assert "cpu1" in text
