"""
Structural checks on a single four-voice chord.

Three independent checks are combined by :func:`validate_chord`:

1. **Triad shape** - distinct pitch classes must number 2..4; with exactly
   three classes the sorted classes should stack in thirds.
2. **Spacing** - soprano/alto and alto/tenor within an octave, tenor/bass
   within two octaves.
3. **Doubling** - a pitch class sung by three or more voices, or a chord
   made of only two pitch classes, is flagged.

Only the first check can produce errors. Everything else is a warning and
never affects ``is_valid``.
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import Sequence

from harmonycheck.errors import ChordShapeError
from harmonycheck.music_models import VOICE_COUNT, Note, PartialChord, Voice
from harmonycheck.pitch import SEMITONES_PER_OCTAVE, semitone

#: Largest comfortable gap between adjacent upper voices (S/A, A/T).
UPPER_SPACING_LIMIT = 12
#: Largest comfortable gap between tenor and bass.
BASS_SPACING_LIMIT = 24

MIN_PITCH_CLASSES = 2
MAX_PITCH_CLASSES = 4
STACKED_THIRDS = frozenset({3, 4})


@dataclass
class ChordCheckResult:
    """Outcome of a structural chord check; warnings never affect ``is_valid``."""

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def extend(self, other: "ChordCheckResult") -> None:
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)


def _require_four(notes: Sequence[Note]) -> None:
    if len(notes) != VOICE_COUNT:
        raise ChordShapeError(f"A chord needs exactly {VOICE_COUNT} notes (one per voice), got {len(notes)}")


def _pitch_classes(notes: Sequence[Note]) -> list[int]:
    return [semitone(n) % SEMITONES_PER_OCTAVE for n in notes]


def _spacing_limit(upper_index: int) -> int:
    return UPPER_SPACING_LIMIT if upper_index < Voice.TENOR else BASS_SPACING_LIMIT


def _spacing_warning(upper_index: int, gap: int) -> str:
    upper = Voice(upper_index).display_name
    lower = Voice(upper_index + 1).display_name
    return f"{upper} and {lower} are {gap} semitones apart (limit {_spacing_limit(upper_index)})"


def validate_triad(notes: Sequence[Note]) -> ChordCheckResult:
    """Check the pitch-class content of a four-note chord."""
    _require_four(notes)
    result = ChordCheckResult()
    classes = sorted(set(_pitch_classes(notes)))

    if len(classes) < MIN_PITCH_CLASSES:
        result.errors.append("Chord is too uniform: at least 2 different pitch classes are needed")
        return result
    if len(classes) > MAX_PITCH_CLASSES:
        result.errors.append(
            f"Chord has {len(classes)} pitch classes; four voices allow at most {MAX_PITCH_CLASSES}"
        )
        return result

    if len(classes) == 3:
        low_gap = (classes[1] - classes[0]) % SEMITONES_PER_OCTAVE
        high_gap = (classes[2] - classes[1]) % SEMITONES_PER_OCTAVE
        if low_gap not in STACKED_THIRDS or high_gap not in STACKED_THIRDS:
            result.warnings.append("Non-standard triad structure: pitch classes do not stack in thirds")
    return result


def validate_spacing(notes: Sequence[Note]) -> ChordCheckResult:
    _require_four(notes)
    result = ChordCheckResult()
    values = [semitone(n) for n in notes]
    for i in range(VOICE_COUNT - 1):
        gap = abs(values[i] - values[i + 1])
        if gap > _spacing_limit(i):
            result.warnings.append(_spacing_warning(i, gap))
    return result


def validate_doubling(notes: Sequence[Note]) -> ChordCheckResult:
    _require_four(notes)
    result = ChordCheckResult()
    counts = Counter(_pitch_classes(notes))
    for pitch_class, count in sorted(counts.items()):
        if count >= 3:
            result.warnings.append(f"Pitch class {pitch_class} appears {count} times")
    if len(counts) == 2:
        result.warnings.append("Incomplete chord: only 2 different pitch classes")
    return result


def validate_chord(notes: Sequence[Note]) -> ChordCheckResult:
    """
    Run the triad, spacing and doubling checks on a four-note chord.

    Raises:
        ChordShapeError: If *notes* does not hold exactly four notes.
        InvalidPitchError: If any spelling is unknown.
    """
    result = validate_triad(notes)
    result.extend(validate_spacing(notes))
    result.extend(validate_doubling(notes))
    return result


def can_add_note_to_chord(existing_notes: PartialChord, new_note: Note, voice_index: int) -> ChordCheckResult:
    """
    Live feedback while a chord is entered one voice at a time.

    Args:
        existing_notes: Four slots, soprano to bass; ``None`` for empty slots.
        new_note:       The note being placed.
        voice_index:    Slot receiving *new_note* (0 = soprano ... 3 = bass).

    Returns:
        With fewer than two filled slots: always valid.
        With two or three: spacing warnings between filled neighbours only.
        With all four: the result of :func:`validate_chord`.
    """
    if not 0 <= voice_index < VOICE_COUNT:
        return ChordCheckResult(errors=[f"Voice index must be between 0 and {VOICE_COUNT - 1}, got {voice_index}"])
    if len(existing_notes) != VOICE_COUNT:
        raise ChordShapeError(f"Expected {VOICE_COUNT} chord slots, got {len(existing_notes)}")

    slots = list(existing_notes)
    slots[voice_index] = new_note
    filled = [n for n in slots if n is not None]

    if len(filled) == VOICE_COUNT:
        return validate_chord(filled)

    result = ChordCheckResult()
    if len(filled) < 2:
        return result

    for i in range(VOICE_COUNT - 1):
        upper, lower = slots[i], slots[i + 1]
        if upper is None or lower is None:
            continue
        gap = abs(semitone(upper) - semitone(lower))
        if gap > _spacing_limit(i):
            result.warnings.append(_spacing_warning(i, gap))
    return result


def get_chord_root(notes: Sequence[Note]) -> Note:
    """
    Return the lowest-sounding note (first one wins on ties).

    This is the bass note, not a functional root; inversions are not analysed.

    Raises:
        ChordShapeError: If *notes* is empty.
    """
    if not notes:
        raise ChordShapeError("Cannot take the root of an empty note sequence")
    return min(notes, key=semitone)
