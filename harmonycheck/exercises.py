"""Exercise records and the repository that loads them from JSON."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

from harmonycheck.constraints import ExerciseConstraints
from harmonycheck.errors import ChordShapeError, ExerciseDataError, InvalidPitchError
from harmonycheck.music_models import Chord, ChordProgression

logger = logging.getLogger(__name__)

MIN_CHAPTER = 1
MAX_CHAPTER = 60
EXERCISES_PER_CHAPTER = 2
MIN_EXPECTED_LENGTH = 2

_EXERCISE_ID_RE = re.compile(r"^(\d+)-(\d+)$")


@dataclass(frozen=True)
class Exercise:
    """
    One harmonisation exercise.

    Attributes:
        id:              "{chapter}-{number}", e.g. "3-2".
        chapter:         Textbook chapter (1-60); selects the cumulative rule set.
        number:          1 or 2 within the chapter.
        instructions:    Task text shown to the student.
        key:             Key label, e.g. "C major".
        starting_chords: Chords given to the student.
        expected_length: Total chord count of a complete answer.
        solution:        Reference answer.
        constraints:     Optional label/length constraints.
        difficulty:      Optional 1-5 rating.
        hints:           Optional hint lines.
    """

    id: str
    chapter: int
    number: int
    instructions: str
    key: str
    starting_chords: tuple[Chord, ...]
    expected_length: int
    solution: ChordProgression
    constraints: Optional[ExerciseConstraints] = None
    difficulty: Optional[int] = None
    hints: tuple[str, ...] = ()

    def starting_progression(self) -> ChordProgression:
        return ChordProgression(chords=self.starting_chords, key=self.key)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Exercise:
        if not isinstance(data, dict):
            raise ExerciseDataError(f"Exercise must be an object, got {data!r}")
        try:
            constraints_data = data.get("constraints")
            solution_data = data.get("solution") or {"chords": []}
            return cls(
                id=str(data.get("id", "")),
                chapter=int(data.get("chapter", 0)),
                number=int(data.get("number", 0)),
                instructions=str(data.get("instructions", "")),
                key=str(data.get("key", "")),
                starting_chords=tuple(Chord.from_dict(c) for c in data.get("startingChords") or ()),
                expected_length=int(data.get("expectedLength", 0)),
                solution=ChordProgression.from_dict(solution_data),
                constraints=(
                    ExerciseConstraints.from_dict(constraints_data) if constraints_data is not None else None
                ),
                difficulty=_optional_int(data.get("difficulty")),
                hints=tuple(str(h) for h in data.get("hints") or ()),
            )
        except ExerciseDataError:
            raise
        except (ChordShapeError, InvalidPitchError, TypeError, ValueError) as exc:
            raise ExerciseDataError(f"Exercise {data.get('id', '?')}: {exc}") from exc


def _optional_int(value: Any) -> Optional[int]:
    return None if value is None else int(value)


@dataclass(frozen=True)
class ChapterData:
    chapter: int
    title: str
    exercises: tuple[Exercise, ...]
    description: Optional[str] = None
    concepts: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ChapterData:
        if not isinstance(data, dict):
            raise ExerciseDataError(f"Chapter must be an object, got {data!r}")
        try:
            chapter = int(data.get("chapter", 0))
        except (TypeError, ValueError) as exc:
            raise ExerciseDataError(f"Chapter number is not an integer: {data.get('chapter')!r}") from exc
        return cls(
            chapter=chapter,
            title=str(data.get("title", "")),
            exercises=tuple(Exercise.from_dict(e) for e in data.get("exercises") or ()),
            description=data.get("description"),
            concepts=tuple(str(c) for c in data.get("concepts") or ()),
        )


@dataclass
class DataCheckResult:
    """Outcome of an exercise/chapter integrity check."""

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def make_exercise_id(chapter: int, number: int) -> str:
    return f"{chapter}-{number}"


def parse_exercise_id(exercise_id: str) -> Optional[tuple[int, int]]:
    """Split "3-2" into (3, 2); None when the id is malformed."""
    match = _EXERCISE_ID_RE.match(exercise_id)
    if not match:
        return None
    return int(match.group(1)), int(match.group(2))


def check_exercise(exercise: Exercise) -> DataCheckResult:
    """Integrity check of one exercise record."""
    result = DataCheckResult()
    errors = result.errors

    if not exercise.id:
        errors.append("Exercise has no id")
    if not MIN_CHAPTER <= exercise.chapter <= MAX_CHAPTER:
        errors.append(f"Chapter must be between {MIN_CHAPTER} and {MAX_CHAPTER}")
    if exercise.number not in (1, 2):
        errors.append("Exercise number must be 1 or 2")
    if not exercise.instructions:
        errors.append("Exercise has no instructions")
    if not exercise.key:
        errors.append("Exercise has no key")
    if not exercise.starting_chords:
        errors.append("Exercise has no starting chords")
    if exercise.expected_length < MIN_EXPECTED_LENGTH:
        errors.append(f"Expected length must be at least {MIN_EXPECTED_LENGTH}")
    if not exercise.solution.chords:
        errors.append("Exercise has no solution")

    parsed = parse_exercise_id(exercise.id)
    if parsed is None:
        errors.append(f"Malformed exercise id: '{exercise.id}'")
    elif parsed != (exercise.chapter, exercise.number):
        errors.append(f"Exercise id '{exercise.id}' does not match its chapter/number")

    if len(exercise.starting_chords) > exercise.expected_length:
        errors.append("More starting chords than the expected length")

    if exercise.solution.chords and len(exercise.solution.chords) != exercise.expected_length:
        result.warnings.append(
            f"Solution has {len(exercise.solution.chords)} chords, "
            f"expected length is {exercise.expected_length}"
        )

    constraints = exercise.constraints
    if constraints is not None:
        for label in constraints.required_chords:
            if label in constraints.forbidden_chords:
                errors.append(f"Chord '{label}' is both required and forbidden")
        if (
            constraints.min_length is not None
            and constraints.max_length is not None
            and constraints.min_length > constraints.max_length
        ):
            errors.append("Minimum length exceeds maximum length")

    return result


def check_chapter(chapter: ChapterData) -> DataCheckResult:
    result = DataCheckResult()
    if not MIN_CHAPTER <= chapter.chapter <= MAX_CHAPTER:
        result.errors.append(f"Chapter must be between {MIN_CHAPTER} and {MAX_CHAPTER}")
    if not chapter.title:
        result.errors.append("Chapter has no title")
    if len(chapter.exercises) != EXERCISES_PER_CHAPTER:
        result.errors.append(
            f"A chapter needs exactly {EXERCISES_PER_CHAPTER} exercises, found {len(chapter.exercises)}"
        )
    for exercise in chapter.exercises:
        sub = check_exercise(exercise)
        result.errors.extend(f"Exercise {exercise.id}: {e}" for e in sub.errors)
        result.warnings.extend(f"Exercise {exercise.id}: {w}" for w in sub.warnings)
    return result


class ExerciseRepository:
    """
    In-memory store of chapters and exercises, loaded from the JSON data file.

    Usage:

        repo = ExerciseRepository()
        repo.load_from_file("exercises.json")
        exercise = repo.get_exercise_by_id("1-1")
    """

    def __init__(self) -> None:
        self._chapters: dict[int, ChapterData] = {}
        self._exercises: dict[str, Exercise] = {}
        self._loaded = False

    def load_from_data(self, data: dict[str, Any]) -> None:
        """
        Replace the repository contents with *data*.

        Raises:
            ExerciseDataError: If the data is malformed or any chapter fails
                its integrity check. Previously loaded data is discarded.
        """
        self._chapters.clear()
        self._exercises.clear()
        self._loaded = False

        raw_chapters = data.get("chapters") if isinstance(data, dict) else None
        if not isinstance(raw_chapters, list):
            raise ExerciseDataError("Exercise data needs a 'chapters' list.")

        for raw in raw_chapters:
            chapter = ChapterData.from_dict(raw)
            check = check_chapter(chapter)
            if not check.is_valid:
                self._chapters.clear()
                self._exercises.clear()
                raise ExerciseDataError(f"Chapter {chapter.chapter} is invalid:\n" + "\n".join(check.errors))
            for warning in check.warnings:
                logger.warning("Chapter %d: %s", chapter.chapter, warning)

            self._chapters[chapter.chapter] = chapter
            for exercise in chapter.exercises:
                self._exercises[exercise.id] = exercise

        self._loaded = True
        logger.debug("Loaded %d chapter(s), %d exercise(s)", len(self._chapters), len(self._exercises))

    def load_from_file(self, path: Union[str, Path]) -> None:
        """
        Load exercise data from a JSON file.

        Raises:
            OSError: If the file cannot be read.
            ExerciseDataError: If the file is not valid exercise JSON.
        """
        with open(path, encoding="utf-8") as fh:
            try:
                data = json.load(fh)
            except json.JSONDecodeError as exc:
                raise ExerciseDataError(f"'{path}' is not valid JSON: {exc}") from exc
        self.load_from_data(data)

    def exercises_for_chapter(self, chapter: int) -> list[Exercise]:
        data = self._chapters.get(chapter)
        return list(data.exercises) if data else []

    def get_exercise(self, chapter: int, number: int) -> Optional[Exercise]:
        return self._exercises.get(make_exercise_id(chapter, number))

    def get_exercise_by_id(self, exercise_id: str) -> Optional[Exercise]:
        return self._exercises.get(exercise_id)

    def get_chapter(self, chapter: int) -> Optional[ChapterData]:
        return self._chapters.get(chapter)

    def all_chapters(self) -> list[ChapterData]:
        return [self._chapters[ch] for ch in sorted(self._chapters)]

    def chapter_count(self) -> int:
        return len(self._chapters)

    def exercise_count(self) -> int:
        return len(self._exercises)

    def is_loaded(self) -> bool:
        return self._loaded
