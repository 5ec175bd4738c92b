from __future__ import annotations

import json

from . import registry, report, toggle, topology
from .model import TunableDescriptor
from .privilege import ElevatedHandle, PrivilegeContext, TunableIOError
from .profiles import PROFILE_ALIASES, build_profiles, get_profile, run
from .settings import Settings

EXIT_OK = 0
EXIT_ELEVATION_FAILED = 2


def list_profiles(settings: Settings) -> int:
    aliases: dict[str, list[str]] = {}
    for alias, target in PROFILE_ALIASES.items():
        aliases.setdefault(target, []).append(alias)
    for name, profile in build_profiles(settings).items():
        extra = f" (alias: {', '.join(aliases[name])})" if name in aliases else ""
        print(f"{name:<27} {profile.description}{extra}")
    return EXIT_OK


def show_status(settings: Settings) -> int:
    """Print current tunable values and CPU units without mutating anything."""
    handle = ElevatedHandle(use_sudo=False)
    rows: list[tuple[TunableDescriptor, str | None]] = []
    for d in registry.TUNABLES.values():
        try:
            current = toggle.read_current(d, handle, root=settings.sys_root)
        except TunableIOError:
            current = "unreadable"
        rows.append((d, current))
    units = [
        (u, topology.classify(u, threshold_khz=settings.p_core_threshold_khz))
        for u in topology.enumerate_units(root=settings.sys_root)
    ]
    print(report.format_status_table(rows, units))
    return EXIT_OK


def run_profile(*, name: str, settings: Settings, as_json: bool = False, context: PrivilegeContext | None = None) -> int:
    profile = get_profile(name, settings)
    ctx = context or PrivilegeContext(sudo=settings.sudo, interactive=settings.interactive)
    result = run(profile, context=ctx, echo=not as_json)
    if as_json:
        print(json.dumps(result.to_dict(), indent=2, sort_keys=True))
    if result.aborted:
        return EXIT_ELEVATION_FAILED
    return EXIT_OK
