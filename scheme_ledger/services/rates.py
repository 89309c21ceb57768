"""
Rate snapshot lookups.

Rates are supplied by staff, never computed here. A payment captures the
rate in force when it is recorded.
"""

from typing import Iterable, Optional

from scheme_ledger.schemas.savings import MetalGrade, RateSnapshot
from scheme_ledger.services.dates import DateLike, to_utc


def latest_rate(
    snapshots: Iterable[RateSnapshot],
    grade: MetalGrade,
    at: Optional[DateLike] = None,
) -> Optional[RateSnapshot]:
    """Most recent snapshot of `grade` effective at `at` (or overall), None if there is none."""
    grade = MetalGrade(grade)
    cutoff = to_utc(at) if at is not None else None
    best = None
    for snapshot in snapshots:
        if snapshot.grade != grade:
            continue
        effective = to_utc(snapshot.effective_from)
        if cutoff is not None and effective > cutoff:
            continue
        if best is None or effective > to_utc(best.effective_from):
            best = snapshot
    return best


def current_rates(
    snapshots: Iterable[RateSnapshot],
    at: Optional[DateLike] = None,
) -> dict[MetalGrade, Optional[RateSnapshot]]:
    """Latest snapshot for every grade; grades without a rate map to None."""
    snapshots = list(snapshots)
    return {grade: latest_rate(snapshots, grade, at) for grade in MetalGrade}
