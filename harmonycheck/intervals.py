"""Interval arithmetic and two-voice motion classification."""

from enum import Enum

from harmonycheck.music_models import Note
from harmonycheck.pitch import SEMITONES_PER_OCTAVE, semitone

PERFECT_FIFTH = 7
PERFECT_FOURTH = 5
MAJOR_THIRD = 4
MINOR_THIRD = 3
MAJOR_SIXTH = 9
MINOR_SIXTH = 8

INTERVAL_NAMES: dict[int, str] = {
    0: "unison",
    1: "minor 2nd",
    2: "major 2nd",
    3: "minor 3rd",
    4: "major 3rd",
    5: "perfect 4th",
    6: "tritone",
    7: "perfect 5th",
    8: "minor 6th",
    9: "major 6th",
    10: "minor 7th",
    11: "major 7th",
}


class Motion(str, Enum):
    """Relative motion of two voices between successive chords."""

    STATIC = "static"
    OBLIQUE = "oblique"
    PARALLEL = "parallel"
    CONTRARY = "contrary"


def interval(a: Note, b: Note) -> int:
    """Signed semitone distance from *a* to *b*; positive when *b* is higher."""
    return semitone(b) - semitone(a)


def abs_interval(a: Note, b: Note) -> int:
    return abs(interval(a, b))


def _interval_class(a: Note, b: Note) -> int:
    return abs_interval(a, b) % SEMITONES_PER_OCTAVE


def is_perfect_fifth(a: Note, b: Note) -> bool:
    """True for a perfect fifth or any compound of one (12th, 19th, ...)."""
    return _interval_class(a, b) == PERFECT_FIFTH


def is_octave(a: Note, b: Note) -> bool:
    """True for a unison or any number of octaves."""
    return _interval_class(a, b) == 0


def is_perfect_fourth(a: Note, b: Note) -> bool:
    return _interval_class(a, b) == PERFECT_FOURTH


def is_major_third(a: Note, b: Note) -> bool:
    return _interval_class(a, b) == MAJOR_THIRD


def is_minor_third(a: Note, b: Note) -> bool:
    return _interval_class(a, b) == MINOR_THIRD


def is_major_sixth(a: Note, b: Note) -> bool:
    return _interval_class(a, b) == MAJOR_SIXTH


def is_minor_sixth(a: Note, b: Note) -> bool:
    return _interval_class(a, b) == MINOR_SIXTH


def interval_name(semitones: int) -> str:
    """Name an interval size, e.g. 19 -> 'perfect 5th + 1 octave'."""
    octaves, simple = divmod(abs(semitones), SEMITONES_PER_OCTAVE)
    base = INTERVAL_NAMES[simple]
    if octaves == 0:
        return base
    plural = "s" if octaves > 1 else ""
    return f"{base} + {octaves} octave{plural}"


def classify_motion(v1_before: Note, v1_after: Note, v2_before: Note, v2_after: Note) -> Motion:
    """
    Classify how two voices move from one chord to the next.

    Only the signs of the two melodic intervals matter:

    - both zero                 -> STATIC
    - exactly one zero          -> OBLIQUE
    - same sign                 -> PARALLEL
    - opposite non-zero signs   -> CONTRARY
    """
    i1 = interval(v1_before, v1_after)
    i2 = interval(v2_before, v2_after)

    if i1 == 0 and i2 == 0:
        return Motion.STATIC
    if i1 == 0 or i2 == 0:
        return Motion.OBLIQUE
    if (i1 > 0) == (i2 > 0):
        return Motion.PARALLEL
    return Motion.CONTRARY


def has_parallel_fifths(v1_before: Note, v1_after: Note, v2_before: Note, v2_after: Note) -> bool:
    """True when the voices form a perfect fifth in both chords and move in parallel."""
    return (
        is_perfect_fifth(v1_before, v2_before)
        and is_perfect_fifth(v1_after, v2_after)
        and classify_motion(v1_before, v1_after, v2_before, v2_after) is Motion.PARALLEL
    )


def has_parallel_octaves(v1_before: Note, v1_after: Note, v2_before: Note, v2_after: Note) -> bool:
    """True when the voices form an octave/unison in both chords and move in parallel."""
    return (
        is_octave(v1_before, v2_before)
        and is_octave(v1_after, v2_after)
        and classify_motion(v1_before, v1_after, v2_before, v2_after) is Motion.PARALLEL
    )
