"""Rule: Strategy objects that check one chord (or one transition) of a progression."""

from abc import ABC, abstractmethod
from itertools import combinations
from typing import Callable

from harmonycheck.intervals import has_parallel_fifths, has_parallel_octaves
from harmonycheck.music_models import ChordProgression, Note, Voice
from harmonycheck.pitch import semitone_to_name
from harmonycheck.results import (
    RulePriority,
    ValidationError,
    ValidationResult,
    failure,
    success,
)
from harmonycheck.voice_ranges import VOICE_RANGES, find_voice_crossings, range_violation

CHAPTER_1_REFERENCE = "Chapter 1: Chord connection basics"


# ── Abstract base ────────────────────────────────────────────────────────────

class Rule(ABC):
    """
    Abstract Strategy for one part-writing rule.

    Subclasses set the metadata class attributes and implement
    ``validate()``. The engine calls ``validate`` once per chord index,
    including index 0; transition rules must succeed trivially there.
    """

    id: str
    name: str
    chapter: int
    priority: int
    description: str = ""
    chapter_reference: str = CHAPTER_1_REFERENCE

    @abstractmethod
    def validate(self, progression: ChordProgression, chord_index: int) -> ValidationResult:
        """
        Check the chord at *chord_index* (and, for transition rules, its predecessor).

        Returns:
            A ValidationResult holding one ValidationError per offending voice
            or voice pair.
        """

    def _error(self, message: str, voices: list[int], chords: list[int]) -> ValidationError:
        return ValidationError(
            rule_id=self.id,
            rule_name=self.name,
            message=message,
            chapter_reference=self.chapter_reference,
            affected_voices=tuple(voices),
            affected_chords=tuple(chords),
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r}, chapter={self.chapter}, priority={self.priority})"


class FunctionRule(Rule):
    """A rule built from metadata plus a plain ``(progression, index) -> result`` callable."""

    def __init__(
        self,
        id: str,
        name: str,
        chapter: int,
        priority: int,
        check: Callable[[ChordProgression, int], ValidationResult],
        description: str = "",
        chapter_reference: str = CHAPTER_1_REFERENCE,
    ) -> None:
        if chapter < 1:
            raise ValueError(f"Rule chapter must be >= 1, got {chapter}")
        self.id = id
        self.name = name
        self.chapter = chapter
        self.priority = priority
        self.description = description
        self.chapter_reference = chapter_reference
        self._check = check

    def validate(self, progression: ChordProgression, chord_index: int) -> ValidationResult:
        return self._check(progression, chord_index)


# ── Per-chord rules ──────────────────────────────────────────────────────────

class VoiceRangeRule(Rule):
    """Every voice must stay inside its singable range."""

    id = "voice-range"
    name = "Voice range"
    chapter = 1
    priority = RulePriority.STRUCTURE
    description = "Each note must lie within the natural range of the voice singing it."

    def validate(self, progression: ChordProgression, chord_index: int) -> ValidationResult:
        chord = progression.chords[chord_index]
        errors = []
        for voice in Voice:
            note = chord.notes[voice]
            violation = range_violation(note, voice)
            if violation is None:
                continue
            window = VOICE_RANGES[voice]
            errors.append(
                self._error(
                    f"{voice.display_name} note {note.name} is outside its range "
                    f"({semitone_to_name(window.min)} - {semitone_to_name(window.max)}), "
                    f"{violation.semitones} semitone(s) {violation.direction.value.replace('_', ' ')}",
                    [voice],
                    [chord_index],
                )
            )
        return failure(errors) if errors else success()


class VoiceCrossingRule(Rule):
    """A lower voice may not sound at or above the voice directly above it."""

    id = "voice-crossing"
    name = "Voice crossing"
    chapter = 1
    priority = RulePriority.STRUCTURE
    description = "Adjacent voices must keep their register order."

    def validate(self, progression: ChordProgression, chord_index: int) -> ValidationResult:
        chord = progression.chords[chord_index]
        errors = []
        for crossing in find_voice_crossings(chord.notes):
            lower = crossing.lower_voice
            higher = crossing.higher_voice
            errors.append(
                self._error(
                    f"{lower.display_name} ({chord.notes[lower].name}) is at or above "
                    f"{higher.display_name} ({chord.notes[higher].name})",
                    [higher, lower],
                    [chord_index],
                )
            )
        return failure(errors) if errors else success()


# ── Transition rules ─────────────────────────────────────────────────────────

class ParallelMotionRule(Rule):
    """
    Base for forbidden-parallel rules: checks all six voice pairs between
    the previous chord and the current one.
    """

    interval_label: str

    @staticmethod
    @abstractmethod
    def detect(v1_before: Note, v1_after: Note, v2_before: Note, v2_after: Note) -> bool:
        """Return True when the two voices move in the forbidden parallel."""

    def validate(self, progression: ChordProgression, chord_index: int) -> ValidationResult:
        if chord_index == 0:
            return success()

        previous = progression.chords[chord_index - 1]
        current = progression.chords[chord_index]
        errors = []
        for upper, lower in combinations(Voice, 2):
            before_1, after_1 = previous.notes[upper], current.notes[upper]
            before_2, after_2 = previous.notes[lower], current.notes[lower]
            if self.detect(before_1, after_1, before_2, after_2):
                errors.append(
                    self._error(
                        f"Parallel {self.interval_label} between {upper.display_name} and "
                        f"{lower.display_name} ({before_1.name} -> {after_1.name} against "
                        f"{before_2.name} -> {after_2.name})",
                        [upper, lower],
                        [chord_index - 1, chord_index],
                    )
                )
        return failure(errors) if errors else success()


class ParallelFifthsRule(ParallelMotionRule):
    id = "parallel-fifths"
    name = "Parallel fifths"
    chapter = 1
    priority = RulePriority.VOICE_LEADING
    description = "Two voices may not move in parallel perfect fifths."
    interval_label = "fifths"

    detect = staticmethod(has_parallel_fifths)


class ParallelOctavesRule(ParallelMotionRule):
    id = "parallel-octaves"
    name = "Parallel octaves"
    chapter = 1
    priority = RulePriority.VOICE_LEADING
    description = "Two voices may not move in parallel octaves or unisons."
    interval_label = "octaves"

    detect = staticmethod(has_parallel_octaves)


def basic_rules() -> list[Rule]:
    """Fresh instances of the four chapter-1 rules, structural rules first."""
    return [
        VoiceRangeRule(),
        VoiceCrossingRule(),
        ParallelFifthsRule(),
        ParallelOctavesRule(),
    ]
