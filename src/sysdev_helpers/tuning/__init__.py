"""Kernel tunable manager for preparing a Linux host for low-level profiling.

This package toggles the kernel knobs that get in the way of perf/VTune style
tooling (perf/ptrace/kptr restrictions, RDPMC, ASLR, SMT, frequency scaling,
CPU core online state) and restores them afterwards. Operations are grouped
into named profiles that run sequentially under a single privilege elevation.
"""

from __future__ import annotations
