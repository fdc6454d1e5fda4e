"""Pitch model: spelling + octave to absolute semitones."""

from typing import TYPE_CHECKING, Final

from harmonycheck.errors import InvalidPitchError

if TYPE_CHECKING:
    from harmonycheck.music_models import Note

SEMITONES_PER_OCTAVE: Final[int] = 12

# Chromatic display names (index 0 = C)
NOTE_NAMES: Final[list[str]] = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]

#: Every accepted spelling mapped to its pitch class. Enharmonic spellings share
#: a class; the octave number is never adjusted (B#4 and C4 are the same pitch).
PITCH_CLASSES: Final[dict[str, int]] = {
    "B#": 0, "C": 0, "Dbb": 0,
    "C#": 1, "Db": 1, "B##": 1,
    "D": 2, "C##": 2, "Ebb": 2,
    "D#": 3, "Eb": 3, "Fbb": 3,
    "E": 4, "Fb": 4, "D##": 4,
    "E#": 5, "F": 5, "Gbb": 5,
    "F#": 6, "Gb": 6, "E##": 6,
    "G": 7, "F##": 7, "Abb": 7,
    "G#": 8, "Ab": 8,
    "A": 9, "G##": 9, "Bbb": 9,
    "A#": 10, "Bb": 10, "Cbb": 10,
    "B": 11, "Cb": 11, "A##": 11,
}


def is_valid_pitch(pitch: str) -> bool:
    """Return True when *pitch* is a known spelling."""
    return pitch in PITCH_CLASSES


def pitch_class_of(pitch: str) -> int:
    """
    Look up the pitch class (0-11) of a spelling such as ``"F#"`` or ``"Bb"``.

    Raises:
        InvalidPitchError: If the spelling is not in :data:`PITCH_CLASSES`.
    """
    try:
        return PITCH_CLASSES[pitch]
    except KeyError:
        raise InvalidPitchError(pitch) from None


def pitch_to_semitones(pitch: str, octave: int) -> int:
    """
    Convert a spelling and octave number to an absolute semitone count.

    Counting starts at C0 = 0, so C4 = 48 and A4 = 57.
    """
    return octave * SEMITONES_PER_OCTAVE + pitch_class_of(pitch)


def semitone_to_name(semitones: int) -> str:
    """Display name for an absolute semitone count, using sharp spellings (48 -> 'C4')."""
    octave, pitch_class = divmod(semitones, SEMITONES_PER_OCTAVE)
    return f"{NOTE_NAMES[pitch_class]}{octave}"


def semitone(note: "Note") -> int:
    """Absolute semitone count of a :class:`~harmonycheck.music_models.Note`."""
    return pitch_to_semitones(note.pitch, note.octave)
