from __future__ import annotations

import argparse
from pathlib import Path

import attrs

from . import workflow
from .profiles import PROFILE_ALIASES, build_profiles
from .settings import Settings


def _abs_path(p: str) -> Path:
    return Path(p).expanduser().resolve()


def build_parser() -> argparse.ArgumentParser:
    """Build CLI parser for the kernel tunable manager."""
    parser = argparse.ArgumentParser(
        prog="sysdev-helpers",
        description="Prepare a Linux host for low-level profiling and restore it afterwards.",
    )
    parser.add_argument("--root", type=_abs_path, default=None, help="System root holding proc/ and sys/ (default: /).")
    parser.add_argument(
        "--p-core-threshold-khz",
        type=int,
        default=None,
        help="Base frequency (kHz) at or above which a core counts as a performance core (default: 3200000).",
    )
    parser.add_argument("--restore-governor", default=None, help="Governor restored by enable-frequency-scaling (default: per-CPU cpufreq driver default).")
    parser.add_argument(
        "--non-interactive",
        action="store_true",
        help="Never prompt for a password; fail elevation instead (sudo -n).",
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    sub.add_parser("list", help="List available profiles.")
    sub.add_parser("status", help="Show current tunable values and CPU units (read-only).")

    run = sub.add_parser("run", help="Run a profile.")
    run.add_argument(
        "profile",
        choices=sorted([*build_profiles(Settings()), *PROFILE_ALIASES]),
        metavar="PROFILE",
        help="Profile name (see `list`).",
    )
    run.add_argument("--json", action="store_true", help="Print the result as JSON instead of status lines.")

    return parser


def _settings_from_args(parser: argparse.ArgumentParser, ns: argparse.Namespace) -> Settings:
    try:
        settings = Settings.from_env()
        overrides: dict[str, object] = {}
        if ns.root is not None:
            overrides["sys_root"] = ns.root
        if ns.p_core_threshold_khz is not None:
            overrides["p_core_threshold_khz"] = ns.p_core_threshold_khz
        if ns.restore_governor is not None:
            overrides["restore_governor"] = ns.restore_governor
        if ns.non_interactive:
            overrides["interactive"] = False
        return attrs.evolve(settings, **overrides)
    except ValueError as e:
        parser.error(str(e))
        raise AssertionError("unreachable")


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint. Returns process exit code."""
    parser = build_parser()
    ns = parser.parse_args(argv)
    settings = _settings_from_args(parser, ns)

    if ns.cmd == "list":
        return workflow.list_profiles(settings)
    if ns.cmd == "status":
        return workflow.show_status(settings)
    if ns.cmd == "run":
        return workflow.run_profile(name=ns.profile, settings=settings, as_json=ns.json)

    raise AssertionError(f"Unhandled cmd: {ns.cmd}")


if __name__ == "__main__":
    raise SystemExit(main())
