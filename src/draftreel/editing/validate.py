"""Structural checks for edit decision lists."""

from __future__ import annotations

from draftreel.models.edl import EditDecisionList
from draftreel.utils.progress import log_warning


def edl_problems(edl: EditDecisionList) -> list[str]:
    """Return every structural problem found in the EDL (empty if valid)."""
    if not edl.entries:
        return ["EDL has no entries"]

    problems: list[str] = []

    # Overlap is judged in original time, independent of play order
    ordered = sorted(edl.entries, key=lambda e: e.original_start_ms)
    for current, following in zip(ordered, ordered[1:]):
        if current.original_end_ms > following.original_start_ms:
            problems.append(
                "EDL has overlapping segments: "
                f"[{current.original_start_ms:g}, {current.original_end_ms:g}] and "
                f"[{following.original_start_ms:g}, {following.original_end_ms:g}]"
            )

    for index, entry in enumerate(edl.entries):
        if entry.original_end_ms <= entry.original_start_ms:
            problems.append(f"EDL entry {index} has zero or negative duration")
        if entry.new_end_ms <= entry.new_start_ms:
            problems.append(f"EDL entry {index} has zero or negative new duration")

    return problems


def validate_edl(edl: EditDecisionList) -> bool:
    """Check an EDL for consistency. Failures are logged, never raised."""
    problems = edl_problems(edl)
    for problem in problems:
        log_warning(problem)
    return not problems
