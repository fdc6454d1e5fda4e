"""ConstraintValidator: exercise-level checks on chord labels and progression length."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from harmonycheck.errors import ExerciseDataError
from harmonycheck.music_models import Chord, ChordProgression


class ConstraintType(str, Enum):
    REQUIRED = "required"
    FORBIDDEN = "forbidden"
    LENGTH = "length"


@dataclass(frozen=True)
class ExerciseConstraints:
    """
    Optional requirements attached to an exercise.

    Attributes:
        required_chords:  Labels that must appear at least once.
        forbidden_chords: Labels that must not appear.
        specific_rules:   Rule ids the rule engine is limited to (empty = all).
        min_length:       Minimum chord count, inclusive.
        max_length:       Maximum chord count, inclusive.
    """

    required_chords: tuple[str, ...] = ()
    forbidden_chords: tuple[str, ...] = ()
    specific_rules: tuple[str, ...] = ()
    min_length: Optional[int] = None
    max_length: Optional[int] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ExerciseConstraints:
        if not isinstance(data, dict):
            raise ExerciseDataError(f"Constraints must be an object, got {data!r}")
        try:
            return cls(
                required_chords=tuple(str(c) for c in data.get("requiredChords") or ()),
                forbidden_chords=tuple(str(c) for c in data.get("forbiddenChords") or ()),
                specific_rules=tuple(str(r) for r in data.get("specificRules") or ()),
                min_length=_optional_int(data.get("minLength")),
                max_length=_optional_int(data.get("maxLength")),
            )
        except (TypeError, ValueError) as exc:
            raise ExerciseDataError(f"Malformed constraints {data!r}: {exc}") from exc


def _optional_int(value: Any) -> Optional[int]:
    return None if value is None else int(value)


@dataclass(frozen=True)
class ConstraintViolation:
    type: ConstraintType
    message: str
    related_chords: tuple[str, ...] = ()


@dataclass(frozen=True)
class ConstraintValidationResult:
    violations: tuple[ConstraintViolation, ...] = field(default_factory=tuple)

    @property
    def is_valid(self) -> bool:
        return not self.violations


def validate_constraints(
    progression: ChordProgression,
    constraints: Optional[ExerciseConstraints] = None,
) -> ConstraintValidationResult:
    """
    Check *progression* against an exercise's constraints.

    Produces at most one ``required`` and one ``forbidden`` violation (each
    naming every offending label) plus one ``length`` violation per bound
    broken. No constraints means no violations.
    """
    if constraints is None:
        return ConstraintValidationResult()

    violations: list[ConstraintViolation] = []
    used = progression.labels

    missing = [label for label in constraints.required_chords if label not in used]
    if missing:
        violations.append(
            ConstraintViolation(
                type=ConstraintType.REQUIRED,
                message=f"Missing required chords: {', '.join(missing)}",
                related_chords=tuple(missing),
            )
        )

    offending = [label for label in used if label in constraints.forbidden_chords]
    if offending:
        violations.append(
            ConstraintViolation(
                type=ConstraintType.FORBIDDEN,
                message=f"Uses forbidden chords: {', '.join(offending)}",
                related_chords=tuple(offending),
            )
        )

    length = len(progression.chords)
    if constraints.min_length is not None and length < constraints.min_length:
        violations.append(
            ConstraintViolation(
                type=ConstraintType.LENGTH,
                message=f"Too few chords: at least {constraints.min_length} required, got {length}",
            )
        )
    if constraints.max_length is not None and length > constraints.max_length:
        violations.append(
            ConstraintViolation(
                type=ConstraintType.LENGTH,
                message=f"Too many chords: at most {constraints.max_length} allowed, got {length}",
            )
        )

    return ConstraintValidationResult(violations=tuple(violations))


def can_submit_progression(
    progression: ChordProgression,
    constraints: Optional[ExerciseConstraints],
    expected_length: int,
) -> bool:
    """True when the progression has exactly *expected_length* chords and meets its constraints."""
    if len(progression.chords) != expected_length:
        return False
    return validate_constraints(progression, constraints).is_valid


def is_chord_forbidden(chord: Chord, constraints: Optional[ExerciseConstraints]) -> bool:
    if constraints is None or chord.label is None:
        return False
    return chord.label in constraints.forbidden_chords


def is_chord_required(chord: Chord, constraints: Optional[ExerciseConstraints]) -> bool:
    if constraints is None or chord.label is None:
        return False
    return chord.label in constraints.required_chords


def available_chords(all_labels: list[str], constraints: Optional[ExerciseConstraints]) -> list[str]:
    """*all_labels* minus the forbidden ones, order preserved."""
    if constraints is None:
        return list(all_labels)
    return [label for label in all_labels if label not in constraints.forbidden_chords]


def constraint_hints(constraints: Optional[ExerciseConstraints]) -> list[str]:
    """Short human-readable lines describing the constraints, for display."""
    if constraints is None:
        return []
    hints: list[str] = []
    if constraints.required_chords:
        hints.append(f"Must use: {', '.join(constraints.required_chords)}")
    if constraints.forbidden_chords:
        hints.append(f"Must not use: {', '.join(constraints.forbidden_chords)}")
    if constraints.min_length is not None:
        hints.append(f"At least {constraints.min_length} chords")
    if constraints.max_length is not None:
        hints.append(f"At most {constraints.max_length} chords")
    return hints
