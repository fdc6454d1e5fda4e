"""Scoring and level unlocking on top of a validation result."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from harmonycheck.constraints import ConstraintValidationResult, can_submit_progression, validate_constraints
from harmonycheck.errors import LevelLockedError
from harmonycheck.exercises import Exercise, make_exercise_id, parse_exercise_id
from harmonycheck.music_models import ChordProgression
from harmonycheck.results import ValidationResult
from harmonycheck.rule_engine import RuleEngine

logger = logging.getLogger(__name__)

FIRST_LEVEL_ID = "1-1"


@dataclass(frozen=True)
class ScoringPolicy:
    """Perfect score minus a fixed penalty per error, floored at zero."""

    perfect_score: int = 100
    error_penalty: int = 10

    def score(self, result: ValidationResult) -> int:
        if result.is_valid:
            return self.perfect_score
        return max(0, self.perfect_score - len(result.errors) * self.error_penalty)


class LevelStatus(str, Enum):
    LOCKED = "locked"
    UNLOCKED = "unlocked"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


@dataclass
class LevelProgress:
    level_id: str
    status: LevelStatus = LevelStatus.LOCKED
    score: int = 0
    best_score: int = 0
    attempts: int = 0


@dataclass(frozen=True)
class SubmissionOutcome:
    validation: ValidationResult
    constraints: ConstraintValidationResult
    score: int
    completed: bool
    unlocked: tuple[str, ...] = ()


def next_level_ids(level_id: str) -> list[str]:
    """
    Levels unlocked by completing *level_id*.

    Completing X-1 opens X-2; completing X-2 opens (X+1)-1.
    """
    parsed = parse_exercise_id(level_id)
    if parsed is None:
        return []
    chapter, number = parsed
    if number == 1:
        return [make_exercise_id(chapter, 2)]
    if number == 2:
        return [make_exercise_id(chapter + 1, 1)]
    return []


class ExerciseSession:
    """
    Tracks in-memory level progress and scores submissions.

    The engine is passed in, already populated; the session never registers
    rules itself.
    """

    def __init__(self, engine: RuleEngine, policy: Optional[ScoringPolicy] = None) -> None:
        self.engine = engine
        self.policy = policy or ScoringPolicy()
        self.progress: dict[str, LevelProgress] = {
            FIRST_LEVEL_ID: LevelProgress(FIRST_LEVEL_ID, LevelStatus.UNLOCKED),
        }
        self.total_score = 0

    def status(self, level_id: str) -> LevelStatus:
        entry = self.progress.get(level_id)
        return entry.status if entry else LevelStatus.LOCKED

    def evaluate(self, exercise: Exercise, progression: ChordProgression) -> tuple[ValidationResult, ConstraintValidationResult]:
        """Run both validators without touching progress."""
        rule_ids = exercise.constraints.specific_rules if exercise.constraints else ()
        validation = self.engine.validate(progression, exercise.chapter, rule_ids=rule_ids)
        constraints = validate_constraints(progression, exercise.constraints)
        return validation, constraints

    def submit(self, exercise: Exercise, progression: ChordProgression) -> SubmissionOutcome:
        """
        Score a submitted progression and update progress.

        A level counts as completed only when the rule check passes and the
        progression has the expected length and meets the constraints. Total
        score grows on first completion only.

        Raises:
            LevelLockedError: If the exercise's level is still locked.
        """
        if self.status(exercise.id) is LevelStatus.LOCKED:
            raise LevelLockedError(exercise.id)

        validation, constraints = self.evaluate(exercise, progression)
        score = self.policy.score(validation)
        completed = validation.is_valid and can_submit_progression(
            progression, exercise.constraints, exercise.expected_length
        )

        entry = self.progress[exercise.id]
        first_completion = completed and entry.status is not LevelStatus.COMPLETED
        entry.attempts += 1
        entry.score = score

        unlocked: list[str] = []
        if completed:
            entry.status = LevelStatus.COMPLETED
            entry.best_score = max(entry.best_score, score)
            for next_id in next_level_ids(exercise.id):
                nxt = self.progress.setdefault(next_id, LevelProgress(next_id))
                if nxt.status is LevelStatus.LOCKED:
                    nxt.status = LevelStatus.UNLOCKED
                    unlocked.append(next_id)
        elif entry.status is not LevelStatus.COMPLETED:
            entry.status = LevelStatus.IN_PROGRESS

        if first_completion:
            self.total_score += score

        logger.debug(
            "Exercise %s: %d error(s), %d constraint violation(s), score %d",
            exercise.id,
            len(validation.errors),
            len(constraints.violations),
            score,
        )
        return SubmissionOutcome(
            validation=validation,
            constraints=constraints,
            score=score,
            completed=completed,
            unlocked=tuple(unlocked),
        )
