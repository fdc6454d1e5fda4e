"""Unit tests for triad, spacing and doubling checks."""

import random

import pytest

from harmonycheck.chord_structure import (
    can_add_note_to_chord,
    get_chord_root,
    validate_chord,
    validate_doubling,
    validate_spacing,
    validate_triad,
)
from harmonycheck.errors import ChordShapeError
from harmonycheck.music_models import Note, parse_note
from harmonycheck.pitch import NOTE_NAMES


def _notes(*tokens: str) -> list:
    return [parse_note(t) for t in tokens]


def test_root_position_c_major_is_clean() -> None:
    result = validate_chord(_notes("G4", "E4", "C4", "C3"))
    assert result.is_valid
    assert result.warnings == []


def test_seventh_chord_is_valid() -> None:
    result = validate_triad(_notes("Bb4", "E4", "C4", "G3"))
    assert result.is_valid
    assert result.warnings == []


def test_single_pitch_class_is_an_error() -> None:
    result = validate_chord(_notes("C5", "C4", "C4", "C3"))
    assert not result.is_valid
    assert "too uniform" in result.errors[0]
    assert "Pitch class 0 appears 4 times" in result.warnings


def test_non_tertian_triad_warns() -> None:
    result = validate_triad(_notes("G4", "D4", "C4", "C3"))
    assert result.is_valid
    assert any("Non-standard triad" in w for w in result.warnings)


def test_wide_upper_spacing_warns() -> None:
    result = validate_spacing(_notes("G5", "E4", "C4", "C3"))
    assert result.warnings == ["Soprano and Alto are 15 semitones apart (limit 12)"]


def test_tenor_bass_may_span_two_octaves() -> None:
    assert validate_spacing(_notes("G4", "E4", "C4", "C2")).warnings == []
    assert len(validate_spacing(_notes("G4", "E4", "C4", "B1")).warnings) == 1


def test_spacing_never_makes_chord_invalid() -> None:
    assert validate_chord(_notes("G5", "E4", "C4", "C2")).is_valid


def test_tripled_note_and_incomplete_chord_warn() -> None:
    result = validate_doubling(_notes("G4", "C4", "C4", "C3"))
    assert "Pitch class 0 appears 3 times" in result.warnings
    assert "Incomplete chord: only 2 different pitch classes" in result.warnings


def test_validate_chord_needs_four_notes() -> None:
    with pytest.raises(ChordShapeError):
        validate_chord(_notes("G4", "E4", "C4"))


def test_can_add_first_note_is_always_fine() -> None:
    result = can_add_note_to_chord([None, None, None, None], parse_note("C6"), 0)
    assert result.is_valid
    assert result.warnings == []


def test_can_add_note_warns_on_adjacent_gap() -> None:
    result = can_add_note_to_chord([parse_note("G5"), None, None, None], parse_note("E4"), 1)
    assert result.is_valid
    assert len(result.warnings) == 1


def test_can_add_note_ignores_non_adjacent_slots() -> None:
    result = can_add_note_to_chord([parse_note("C6"), None, None, None], parse_note("C4"), 2)
    assert result.warnings == []


def test_can_add_note_uses_bass_limit_for_tenor_and_bass() -> None:
    result = can_add_note_to_chord([None, None, parse_note("C4"), None], parse_note("C2"), 3)
    assert result.warnings == []


def test_can_add_last_note_runs_full_check() -> None:
    slots = [parse_note("C5"), parse_note("C4"), parse_note("C4"), None]
    partial = can_add_note_to_chord(slots, parse_note("C3"), 3)
    assert partial == validate_chord(_notes("C5", "C4", "C4", "C3"))
    assert not partial.is_valid


def test_can_add_note_replaces_occupied_slot() -> None:
    slots = _notes("C5", "E4", "C4", "C3")
    result = can_add_note_to_chord(slots, parse_note("G4"), 0)
    assert result == validate_chord(_notes("G4", "E4", "C4", "C3"))


def test_can_add_note_rejects_bad_voice_index() -> None:
    result = can_add_note_to_chord([None, None, None, None], parse_note("C4"), 4)
    assert not result.is_valid


def test_can_add_note_needs_four_slots() -> None:
    with pytest.raises(ChordShapeError):
        can_add_note_to_chord([None, None], parse_note("C4"), 0)


def test_chord_root_is_lowest_note() -> None:
    assert get_chord_root(_notes("G4", "E4", "C4", "E3")) == parse_note("E3")


def test_chord_root_of_nothing_raises() -> None:
    with pytest.raises(ChordShapeError):
        get_chord_root([])


def _random_note(rng: random.Random) -> Note:
    return Note(rng.choice(NOTE_NAMES), rng.randint(0, 8))


def test_fewer_than_two_filled_voices_is_always_valid() -> None:
    rng = random.Random(42)
    for _ in range(500):
        slots: list = [None, None, None, None]
        index = rng.randrange(4)
        if rng.random() < 0.5:
            slots[index] = _random_note(rng)
        result = can_add_note_to_chord(slots, _random_note(rng), index)
        assert result.is_valid
        assert result.warnings == []


def test_out_of_range_voice_index_is_always_invalid() -> None:
    rng = random.Random(43)
    for _ in range(200):
        slots = [rng.choice([None, _random_note(rng)]) for _ in range(4)]
        index = rng.choice([rng.randint(-10, -1), rng.randint(4, 10)])
        result = can_add_note_to_chord(slots, _random_note(rng), index)
        assert not result.is_valid
        assert result.errors
