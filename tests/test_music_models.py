"""Unit tests for Note, Chord and ChordProgression."""

import random

import pytest

from harmonycheck.errors import ChordShapeError, ExerciseDataError, InvalidPitchError
from harmonycheck.music_models import (
    Chord,
    ChordProgression,
    Note,
    Voice,
    make_chord,
    parse_note,
)
from harmonycheck.pitch import NOTE_NAMES


def _chord_data(*tokens: str, label: str = "I") -> dict:
    notes = [parse_note(t).to_dict() for t in tokens]
    return {"notes": notes, "romanNumeral": label}


def test_parse_note_natural() -> None:
    assert parse_note("C4") == Note("C", 4)


def test_parse_note_with_accidentals() -> None:
    assert parse_note("F#3") == Note("F#", 3)
    assert parse_note("Bbb2") == Note("Bbb", 2)


def test_parse_note_negative_octave() -> None:
    assert parse_note("Bb-1").octave == -1


def test_parse_note_without_octave_raises() -> None:
    with pytest.raises(ExerciseDataError):
        parse_note("C#")


def test_parse_note_bad_spelling_raises() -> None:
    with pytest.raises(InvalidPitchError):
        parse_note("H4")


def test_note_name() -> None:
    assert Note("Eb", 5).name == "Eb5"


def test_chord_requires_four_notes() -> None:
    with pytest.raises(ChordShapeError):
        Chord(notes=(Note("C", 4), Note("E", 4), Note("G", 4)))


def test_chord_note_for_voice() -> None:
    chord = make_chord([parse_note(t) for t in ("G4", "E4", "C4", "C3")], label="I")
    assert chord.note_for(Voice.BASS) == Note("C", 3)
    assert chord.inversion is None


def test_with_note_returns_copy() -> None:
    chord = make_chord([parse_note(t) for t in ("G4", "E4", "C4", "C3")])
    changed = chord.with_note(Voice.SOPRANO, Note("C", 5))
    assert changed.notes[0] == Note("C", 5)
    assert chord.notes[0] == Note("G", 4)


def test_chord_dict_round_trip_keeps_label() -> None:
    data = _chord_data("G4", "E4", "C4", "C3", label="V")
    chord = Chord.from_dict(data)
    assert chord.label == "V"
    assert chord.to_dict()["romanNumeral"] == "V"


def test_progression_from_dict() -> None:
    progression = ChordProgression.from_dict(
        {
            "key": "C major",
            "chords": [
                _chord_data("G4", "E4", "C4", "C3", label="I"),
                _chord_data("A4", "F4", "C4", "F3", label="IV"),
            ],
        }
    )
    assert len(progression) == 2
    assert progression.key == "C major"
    assert progression.labels == ["I", "IV"]


def test_progression_without_chords_list_raises() -> None:
    with pytest.raises(ExerciseDataError):
        ChordProgression.from_dict({"key": "C major"})


def test_progression_with_three_note_chord_raises() -> None:
    with pytest.raises(ExerciseDataError):
        ChordProgression.from_dict({"chords": [{"notes": [{"pitch": "C", "octave": 4}] * 3}]})


def test_note_missing_octave_raises() -> None:
    with pytest.raises(ExerciseDataError):
        Note.from_dict({"pitch": "C"})


def test_labels_skip_unlabelled_chords() -> None:
    notes = [parse_note(t) for t in ("G4", "E4", "C4", "C3")]
    progression = ChordProgression(chords=(make_chord(notes), make_chord(notes, label="I")))
    assert progression.labels == ["I"]


def test_replacing_a_voice_and_back_restores_the_chord() -> None:
    rng = random.Random(11)
    original = make_chord([parse_note(t) for t in ("G4", "E4", "C4", "C3")], label="I")
    for _ in range(50):
        voice = rng.choice(list(Voice))
        other = Note(rng.choice(NOTE_NAMES), rng.randint(2, 5))
        edited = original.with_note(voice, other)
        assert all(edited.notes[v] == original.notes[v] for v in Voice if v is not voice)
        assert edited.with_note(voice, original.notes[voice]) == original


def test_make_chord_keeps_inversion_unknown_by_default() -> None:
    notes = [parse_note(t) for t in ("G4", "E4", "C4", "E3")]
    assert make_chord(notes).inversion is None
    assert make_chord(notes, label="I6", inversion=1).inversion == 1
    assert "inversion" not in make_chord(notes).to_dict()
