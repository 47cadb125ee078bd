import pytest

from vocalstream.errors import InvalidScript
from vocalstream.melody import Melody, TargetNote, elapsed_notes, resolve_active_note


def _melody():
    return Melody.from_rows([
        (0.0, 1.0, 60),
        (1.5, 0.5, 62),
        (3.0, 1.0, 64, "Mi"),
    ])


def test_rows_get_ids_and_names():
    notes = _melody().notes
    assert [n.sequence_id for n in notes] == [0, 1, 2]
    assert notes[0].display_name == "C4"
    assert notes[2].display_name == "Mi"
    assert notes[1].end_time == pytest.approx(2.0)


def test_rows_are_sorted_before_numbering():
    notes = Melody.from_rows([(2.0, 1.0, 64), (0.0, 1.0, 60)]).notes
    assert [n.pitch for n in notes] == [60, 64]
    assert [n.sequence_id for n in notes] == [0, 1]


def test_from_csv(tmp_path):
    path = tmp_path / "melody.csv"
    path.write_text("start_s,duration_s,midi\n0.000,0.500,60\n0.500,0.500,62\n", encoding="utf-8")
    melody = Melody.from_csv(path)
    assert len(melody) == 2
    assert melody.notes[1].pitch == 62


def test_from_csv_missing_column(tmp_path):
    path = tmp_path / "melody.csv"
    path.write_text("start_s,midi\n0.0,60\n", encoding="utf-8")
    with pytest.raises(InvalidScript):
        Melody.from_csv(path)


@pytest.mark.parametrize("rows", [
    [],
    [(0.0, 0.0, 60)],
    [(-1.0, 1.0, 60)],
    [(0.0, 1.0, 60.5)],
    [(0.0, "abc", 60)],
    [(0.0, 1.0)],
])
def test_invalid_scripts(rows):
    with pytest.raises(InvalidScript):
        Melody.from_rows(rows)


def test_repeated_ids_are_rejected():
    note = TargetNote(0.0, 1.0, 60, "C4", 0)
    twin = TargetNote(2.0, 1.0, 62, "D4", 0)
    with pytest.raises(InvalidScript):
        Melody([note, twin])


def test_out_of_order_notes_are_rejected():
    first = TargetNote(2.0, 1.0, 60, "C4", 0)
    second = TargetNote(0.0, 1.0, 62, "D4", 1)
    with pytest.raises(InvalidScript):
        Melody([first, second])


def test_resolve_active_note():
    notes = _melody().notes
    assert resolve_active_note(0.0, notes).sequence_id == 0
    assert resolve_active_note(0.5, notes).sequence_id == 0
    assert resolve_active_note(1.0, notes).sequence_id == 0
    assert resolve_active_note(1.2, notes) is None
    assert resolve_active_note(1.75, notes).sequence_id == 1
    assert resolve_active_note(-0.3, notes) is None
    assert resolve_active_note(10.0, notes) is None


def test_elapsed_notes():
    notes = _melody().notes
    assert elapsed_notes(0.5, notes) == []
    assert [n.sequence_id for n in elapsed_notes(2.5, notes)] == [0, 1]
