"""Per-voice singable ranges and voice-crossing checks."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from harmonycheck.errors import ChordShapeError, VoiceOrderError
from harmonycheck.music_models import VOICE_COUNT, Note, Voice
from harmonycheck.pitch import semitone, semitone_to_name


@dataclass(frozen=True)
class VoiceRange:
    """Inclusive semitone window for one voice."""

    min: int
    max: int

    def contains(self, semitones: int) -> bool:
        return self.min <= semitones <= self.max


#: Standard SATB choir ranges. Adjacent windows overlap on purpose.
#:
#:   Soprano  C4 - A5
#:   Alto     G3 - E5
#:   Tenor    C3 - G4
#:   Bass     E2 - D4
VOICE_RANGES: dict[Voice, VoiceRange] = {
    Voice.SOPRANO: VoiceRange(min=48, max=69),
    Voice.ALTO: VoiceRange(min=43, max=64),
    Voice.TENOR: VoiceRange(min=36, max=55),
    Voice.BASS: VoiceRange(min=28, max=50),
}

#: Adjacent voice pairs as (lower voice, higher voice).
ADJACENT_VOICE_PAIRS: tuple[tuple[Voice, Voice], ...] = (
    (Voice.ALTO, Voice.SOPRANO),
    (Voice.TENOR, Voice.ALTO),
    (Voice.BASS, Voice.TENOR),
)


class RangeDirection(str, Enum):
    TOO_LOW = "too_low"
    TOO_HIGH = "too_high"


@dataclass(frozen=True)
class RangeViolation:
    """How far, and in which direction, a note lies outside its voice range."""

    direction: RangeDirection
    semitones: int


@dataclass(frozen=True)
class VoiceCrossing:
    lower_voice: Voice
    higher_voice: Voice


def is_in_range(note: Note, voice: Voice) -> bool:
    return VOICE_RANGES[voice].contains(semitone(note))


def range_violation(note: Note, voice: Voice) -> Optional[RangeViolation]:
    """Return the violation for *note* sung by *voice*, or None when it fits."""
    value = semitone(note)
    window = VOICE_RANGES[voice]
    if value < window.min:
        return RangeViolation(RangeDirection.TOO_LOW, window.min - value)
    if value > window.max:
        return RangeViolation(RangeDirection.TOO_HIGH, value - window.max)
    return None


def has_voice_crossing(lower_voice: Voice, lower_note: Note, higher_voice: Voice, higher_note: Note) -> bool:
    """
    True when the lower-register voice sounds at or above the higher one.

    Unisons count as crossings.

    Raises:
        VoiceOrderError: If *lower_voice* is not below *higher_voice* in the
            register order (its ordinal must be the larger one).
    """
    if lower_voice <= higher_voice:
        raise VoiceOrderError(
            f"lower_voice ({Voice(lower_voice).display_name}) must sit below "
            f"higher_voice ({Voice(higher_voice).display_name})"
        )
    return semitone(lower_note) >= semitone(higher_note)


def _require_four(notes: Sequence[Note]) -> None:
    if len(notes) != VOICE_COUNT:
        raise ChordShapeError(f"A chord needs exactly {VOICE_COUNT} notes, got {len(notes)}")


def chord_range_violations(notes: Sequence[Note]) -> list[tuple[Voice, RangeViolation]]:
    """All (voice, violation) pairs for a four-note chord, soprano first."""
    _require_four(notes)
    violations: list[tuple[Voice, RangeViolation]] = []
    for voice in Voice:
        violation = range_violation(notes[voice], voice)
        if violation is not None:
            violations.append((voice, violation))
    return violations


def find_voice_crossings(notes: Sequence[Note]) -> list[VoiceCrossing]:
    """Check the three adjacent pairs (S/A, A/T, T/B) and return every crossing."""
    _require_four(notes)
    return [
        VoiceCrossing(lower_voice=lower, higher_voice=higher)
        for lower, higher in ADJACENT_VOICE_PAIRS
        if has_voice_crossing(lower, notes[lower], higher, notes[higher])
    ]


def voice_center(voice: Voice) -> int:
    """Middle of a voice's range in semitones (rounded down)."""
    window = VOICE_RANGES[voice]
    return (window.min + window.max) // 2


def voice_range_description(voice: Voice) -> str:
    """e.g. 'Soprano: C4 - A5'."""
    window = VOICE_RANGES[voice]
    return f"{voice.display_name}: {semitone_to_name(window.min)} - {semitone_to_name(window.max)}"
