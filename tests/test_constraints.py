"""Unit tests for exercise constraint checking."""

import pytest

from harmonycheck.constraints import (
    ConstraintType,
    ExerciseConstraints,
    available_chords,
    can_submit_progression,
    constraint_hints,
    is_chord_forbidden,
    is_chord_required,
    validate_constraints,
)
from harmonycheck.errors import ExerciseDataError
from harmonycheck.music_models import ChordProgression, make_chord, parse_note

_NOTES = [parse_note(t) for t in ("G4", "E4", "C4", "C3")]


def _progression(*labels: str) -> ChordProgression:
    return ChordProgression(chords=tuple(make_chord(_NOTES, label=label) for label in labels))


def test_no_constraints_means_no_violations() -> None:
    assert validate_constraints(_progression("I", "V"), None).is_valid
    assert validate_constraints(_progression("I", "V"), ExerciseConstraints()).is_valid


def test_missing_required_chords_reported_once() -> None:
    result = validate_constraints(_progression("I", "V", "I"), ExerciseConstraints(required_chords=("I", "IV", "ii")))
    assert len(result.violations) == 1
    violation = result.violations[0]
    assert violation.type is ConstraintType.REQUIRED
    assert violation.message == "Missing required chords: IV, ii"
    assert violation.related_chords == ("IV", "ii")


def test_forbidden_chords_reported() -> None:
    result = validate_constraints(_progression("I", "V", "I"), ExerciseConstraints(forbidden_chords=("V",)))
    assert [v.type for v in result.violations] == [ConstraintType.FORBIDDEN]
    assert result.violations[0].message == "Uses forbidden chords: V"


def test_too_few_chords() -> None:
    result = validate_constraints(_progression("I", "V"), ExerciseConstraints(min_length=4))
    assert result.violations[0].message == "Too few chords: at least 4 required, got 2"


def test_too_many_chords() -> None:
    result = validate_constraints(_progression("I", "V", "I"), ExerciseConstraints(max_length=2))
    assert result.violations[0].message == "Too many chords: at most 2 allowed, got 3"


def test_zero_length_bound_is_enforced() -> None:
    result = validate_constraints(_progression("I"), ExerciseConstraints(max_length=0))
    assert not result.is_valid


def test_all_violation_kinds_together() -> None:
    constraints = ExerciseConstraints(required_chords=("IV",), forbidden_chords=("V",), min_length=5)
    result = validate_constraints(_progression("I", "V"), constraints)
    assert [v.type for v in result.violations] == [
        ConstraintType.REQUIRED,
        ConstraintType.FORBIDDEN,
        ConstraintType.LENGTH,
    ]


def test_unlabelled_chords_do_not_satisfy_requirements() -> None:
    progression = ChordProgression(chords=(make_chord(_NOTES),))
    result = validate_constraints(progression, ExerciseConstraints(required_chords=("I",)))
    assert not result.is_valid


def test_can_submit_requires_exact_length() -> None:
    constraints = ExerciseConstraints(required_chords=("I",))
    assert can_submit_progression(_progression("I", "V"), constraints, 2)
    assert not can_submit_progression(_progression("I", "V"), constraints, 3)
    assert not can_submit_progression(_progression("V", "V"), constraints, 2)


def test_chord_lookups() -> None:
    constraints = ExerciseConstraints(required_chords=("I",), forbidden_chords=("vii",))
    assert is_chord_required(make_chord(_NOTES, label="I"), constraints)
    assert is_chord_forbidden(make_chord(_NOTES, label="vii"), constraints)
    assert not is_chord_forbidden(make_chord(_NOTES), constraints)
    assert not is_chord_required(make_chord(_NOTES, label="I"), None)


def test_available_chords_drops_forbidden() -> None:
    constraints = ExerciseConstraints(forbidden_chords=("V7",))
    assert available_chords(["I", "IV", "V7", "vi"], constraints) == ["I", "IV", "vi"]
    assert available_chords(["I"], None) == ["I"]


def test_constraint_hints() -> None:
    constraints = ExerciseConstraints(required_chords=("I", "V"), max_length=4)
    assert constraint_hints(constraints) == ["Must use: I, V", "At most 4 chords"]
    assert constraint_hints(None) == []


def test_constraints_from_camel_case_dict() -> None:
    constraints = ExerciseConstraints.from_dict(
        {
            "requiredChords": ["I"],
            "forbiddenChords": ["V7"],
            "specificRules": ["parallel-fifths"],
            "minLength": 3,
            "maxLength": 4,
        }
    )
    assert constraints == ExerciseConstraints(("I",), ("V7",), ("parallel-fifths",), 3, 4)


def test_constraints_from_bad_dict_raises() -> None:
    with pytest.raises(ExerciseDataError):
        ExerciseConstraints.from_dict({"minLength": "many"})
    with pytest.raises(ExerciseDataError):
        ExerciseConstraints.from_dict(["I"])  # type: ignore[arg-type]
