from __future__ import annotations

"""
Probe service package.

A probe is one diagnosed request attempt:

    clear signals -> execute request -> snapshot signals -> classify

See runner.py for the orchestration and its concurrency rules.
"""

from .runner import ProbeResult, run_probe  # noqa: F401
