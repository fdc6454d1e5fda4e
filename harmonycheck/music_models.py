"""Data models for four-voice chords and progressions."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import IntEnum
from typing import Any, Optional, Sequence

from harmonycheck.errors import ChordShapeError, ExerciseDataError
from harmonycheck.pitch import pitch_class_of

VOICE_COUNT = 4
DEFAULT_DURATION = "w"


class Voice(IntEnum):
    """The four parts, in register order (soprano highest)."""

    SOPRANO = 0
    ALTO = 1
    TENOR = 2
    BASS = 3

    @property
    def display_name(self) -> str:
        return self.name.capitalize()


@dataclass(frozen=True)
class Note:
    """
    A single sounding pitch.

    Attributes:
        pitch:    Spelling such as "C", "F#" or "Bb".
        octave:   Octave number (C4 is middle C).
        duration: VexFlow-style duration token; ignored by validation.
    """

    pitch: str
    octave: int
    duration: str = DEFAULT_DURATION

    @property
    def name(self) -> str:
        """Human-readable name, e.g. 'F#4'."""
        return f"{self.pitch}{self.octave}"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Note:
        try:
            note = cls(
                pitch=str(data["pitch"]),
                octave=int(data["octave"]),
                duration=str(data.get("duration", DEFAULT_DURATION)),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise ExerciseDataError(f"Malformed note data {data!r}: {exc}") from exc
        pitch_class_of(note.pitch)
        return note

    def to_dict(self) -> dict[str, Any]:
        return {"pitch": self.pitch, "octave": self.octave, "duration": self.duration}


#: A chord being entered voice by voice; ``None`` marks an empty slot.
PartialChord = Sequence[Optional[Note]]


@dataclass(frozen=True)
class Chord:
    """
    Four notes indexed by :class:`Voice`, plus an optional function label.

    Attributes:
        notes:     (soprano, alto, tenor, bass).
        label:     Chord-function label such as "I" or "V7"; None when unlabelled.
        inversion: 0 = root position, 1 = first inversion, ...; None when unknown.
    """

    notes: tuple[Note, ...]
    label: Optional[str] = None
    inversion: Optional[int] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "notes", tuple(self.notes))
        if len(self.notes) != VOICE_COUNT:
            raise ChordShapeError(
                f"A chord needs exactly {VOICE_COUNT} notes (one per voice), got {len(self.notes)}"
            )

    def note_for(self, voice: Voice) -> Note:
        return self.notes[voice]

    def with_note(self, voice: Voice, note: Note) -> Chord:
        """Return a copy of this chord with *voice* replaced by *note*."""
        notes = list(self.notes)
        notes[voice] = note
        return replace(self, notes=tuple(notes))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Chord:
        try:
            raw_notes = data["notes"]
        except (KeyError, TypeError) as exc:
            raise ExerciseDataError(f"Chord data has no 'notes': {data!r}") from exc
        if not isinstance(raw_notes, list):
            raise ExerciseDataError(f"Chord 'notes' must be a list, got {raw_notes!r}")
        inversion = data.get("inversion")
        return cls(
            notes=tuple(Note.from_dict(n) for n in raw_notes),
            label=data.get("romanNumeral"),
            inversion=int(inversion) if inversion is not None else None,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"notes": [n.to_dict() for n in self.notes]}
        if self.label is not None:
            data["romanNumeral"] = self.label
        if self.inversion is not None:
            data["inversion"] = self.inversion
        return data


@dataclass(frozen=True)
class ChordProgression:
    """An ordered run of chords. *key* is informational only."""

    chords: tuple[Chord, ...] = field(default_factory=tuple)
    key: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "chords", tuple(self.chords))

    def __len__(self) -> int:
        return len(self.chords)

    @property
    def labels(self) -> list[str]:
        """Labels of the labelled chords, in order."""
        return [c.label for c in self.chords if c.label is not None]

    def with_chord(self, index: int, chord: Chord) -> ChordProgression:
        chords = list(self.chords)
        chords[index] = chord
        return replace(self, chords=tuple(chords))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ChordProgression:
        raw_chords = data.get("chords") if isinstance(data, dict) else None
        if not isinstance(raw_chords, list):
            raise ExerciseDataError("Progression data needs a 'chords' list.")
        try:
            chords = tuple(Chord.from_dict(c) for c in raw_chords)
        except ChordShapeError as exc:
            raise ExerciseDataError(str(exc)) from exc
        return cls(chords=chords, key=str(data.get("key", "")))

    def to_dict(self) -> dict[str, Any]:
        return {"key": self.key, "chords": [c.to_dict() for c in self.chords]}


def make_chord(
    notes: Sequence[Note],
    label: Optional[str] = None,
    inversion: Optional[int] = None,
) -> Chord:
    return Chord(notes=tuple(notes), label=label, inversion=inversion)


def parse_note(token: str, duration: str = DEFAULT_DURATION) -> Note:
    """
    Parse a compact token such as ``"C4"``, ``"F#3"`` or ``"Bb-1"``.

    Raises:
        InvalidPitchError: If the spelling part is unknown.
        ExerciseDataError: If the token has no octave number.
    """
    idx = 1
    while idx < len(token) and token[idx] in "#b":
        idx += 1
    pitch, octave_text = token[:idx], token[idx:]
    try:
        octave = int(octave_text)
    except ValueError:
        raise ExerciseDataError(f"Note token '{token}' needs an octave number, e.g. 'C4'.") from None
    pitch_class_of(pitch)
    return Note(pitch=pitch, octave=octave, duration=duration)
