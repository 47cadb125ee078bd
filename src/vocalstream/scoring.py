from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import List, Mapping, Optional, Tuple

from .dsp import shift_octaves
from .ledger import FeedbackKind, FeedbackRecord
from .melody import TargetNote


class GradeTier(str, Enum):
    S = "S"
    A_PLUS = "A+"
    A = "A"
    B = "B"
    C = "C"
    D = "D"
    F = "F"


GRADE_THRESHOLDS: List[Tuple[int, GradeTier]] = [
    (95, GradeTier.S),
    (90, GradeTier.A_PLUS),
    (80, GradeTier.A),
    (70, GradeTier.B),
    (60, GradeTier.C),
    (50, GradeTier.D),
]


@dataclass(frozen=True)
class ScoreSummary:
    total: int
    matched: int
    miss_high: int
    miss_low: int
    no_input: int
    percentage: int
    grade: GradeTier


def compare_pitch(
    scale_number: Optional[float],
    active_note: Optional[TargetNote],
    octave_offset: int,
    tolerance_cents: float,
) -> Optional[FeedbackKind]:
    if active_note is None:
        return None
    if scale_number is None:
        return FeedbackKind.NO_INPUT

    target = shift_octaves(active_note.pitch, octave_offset)
    cents = (scale_number - target) * 100.0
    if abs(cents) <= tolerance_cents:
        return FeedbackKind.MATCH
    return FeedbackKind.MISS_HIGH if cents > 0 else FeedbackKind.MISS_LOW


def grade_for(percentage: int) -> GradeTier:
    for threshold, grade in GRADE_THRESHOLDS:
        if percentage >= threshold:
            return grade
    return GradeTier.F


def summarize(permanent: Mapping[int, FeedbackRecord]) -> ScoreSummary:
    counts = {kind: 0 for kind in FeedbackKind}
    for record in permanent.values():
        counts[record.result] += 1

    total = len(permanent)
    matched = counts[FeedbackKind.MATCH]
    percentage = _round_half_up(100.0 * matched / total) if total else 0

    return ScoreSummary(
        total=total,
        matched=matched,
        miss_high=counts[FeedbackKind.MISS_HIGH],
        miss_low=counts[FeedbackKind.MISS_LOW],
        no_input=counts[FeedbackKind.NO_INPUT],
        percentage=percentage,
        grade=grade_for(percentage),
    )


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))
