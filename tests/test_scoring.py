from vocalstream.ledger import FeedbackKind, FeedbackRecord
from vocalstream.melody import TargetNote
from vocalstream.scoring import GradeTier, compare_pitch, grade_for, summarize

C4 = TargetNote(start_time=0.0, duration=1.0, pitch=60, display_name="C4", sequence_id=0)


def test_tolerance_boundary():
    assert compare_pitch(60.49, C4, 0, 50.0) is FeedbackKind.MATCH
    assert compare_pitch(60.51, C4, 0, 50.0) is FeedbackKind.MISS_HIGH
    assert compare_pitch(59.49, C4, 0, 50.0) is FeedbackKind.MISS_LOW
    assert compare_pitch(60.5, C4, 0, 50.0) is FeedbackKind.MATCH


def test_no_target_is_not_feedback():
    assert compare_pitch(60.0, None, 0, 50.0) is None
    assert compare_pitch(None, None, 0, 50.0) is None


def test_no_pitch_on_target_is_no_input():
    assert compare_pitch(None, C4, 0, 50.0) is FeedbackKind.NO_INPUT


def test_octave_offset_shifts_target():
    assert compare_pitch(48.0, C4, -1, 50.0) is FeedbackKind.MATCH
    assert compare_pitch(60.0, C4, -1, 50.0) is FeedbackKind.MISS_HIGH
    assert C4.pitch == 60


def test_tolerance_is_configurable():
    assert compare_pitch(60.9, C4, 0, 100.0) is FeedbackKind.MATCH
    assert compare_pitch(60.2, C4, 0, 10.0) is FeedbackKind.MISS_HIGH


def test_grade_boundaries():
    assert grade_for(100) is GradeTier.S
    assert grade_for(95) is GradeTier.S
    assert grade_for(94) is GradeTier.A_PLUS
    assert grade_for(90) is GradeTier.A_PLUS
    assert grade_for(80) is GradeTier.A
    assert grade_for(70) is GradeTier.B
    assert grade_for(60) is GradeTier.C
    assert grade_for(50) is GradeTier.D
    assert grade_for(49) is GradeTier.F
    assert grade_for(0) is GradeTier.F


def _ledger(*kinds):
    return {idx: FeedbackRecord(idx, kind, 0.0) for idx, kind in enumerate(kinds)}


def test_empty_session():
    summary = summarize({})
    assert summary.total == 0
    assert summary.percentage == 0
    assert summary.grade is GradeTier.F


def test_counts_and_percentage():
    summary = summarize(_ledger(
        FeedbackKind.MATCH,
        FeedbackKind.MATCH,
        FeedbackKind.MISS_HIGH,
        FeedbackKind.MISS_LOW,
        FeedbackKind.NO_INPUT,
        FeedbackKind.MATCH,
    ))
    assert summary.total == 6
    assert summary.matched == 3
    assert summary.miss_high == 1
    assert summary.miss_low == 1
    assert summary.no_input == 1
    assert summary.percentage == 50
    assert summary.grade is GradeTier.D


def test_percentage_rounds_half_up():
    summary = summarize(_ledger(*([FeedbackKind.MATCH] * 1 + [FeedbackKind.MISS_LOW] * 7)))
    assert summary.percentage == 13  # 12.5
    summary = summarize(_ledger(FeedbackKind.MATCH, FeedbackKind.MATCH, FeedbackKind.NO_INPUT))
    assert summary.percentage == 67
