"""Validation result records shared by the rules and the rule engine."""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Iterable, Mapping


class RulePriority(IntEnum):
    """
    Priority bands; lower values run (and report) first.

    Concrete rules use a band's base value or anything up to the next band.
    """

    STRUCTURE = 100      # voice range, voice crossing
    VOICE_LEADING = 200  # parallel fifths / octaves
    CHORD = 300          # doubling, omission
    STYLE = 400          # period or style specific


@dataclass(frozen=True)
class ValidationError:
    """
    One rule violation, carrying everything a display needs.

    Attributes:
        rule_id:           Id of the rule that fired.
        rule_name:         Display name of the rule.
        message:           What went wrong, naming voices and notes.
        chapter_reference: Textbook chapter the rule comes from.
        affected_voices:   Voice indices involved (never empty).
        affected_chords:   Progression indices involved (never empty).
    """

    rule_id: str
    rule_name: str
    message: str
    chapter_reference: str
    affected_voices: tuple[int, ...]
    affected_chords: tuple[int, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "affected_voices", tuple(int(v) for v in self.affected_voices))
        object.__setattr__(self, "affected_chords", tuple(self.affected_chords))
        if not self.affected_voices or not self.affected_chords:
            raise ValueError(f"{self.rule_id}: affected voices and chords must not be empty")


@dataclass(frozen=True)
class ValidationResult:
    errors: tuple[ValidationError, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "errors", tuple(self.errors))

    @property
    def is_valid(self) -> bool:
        return not self.errors


def success() -> ValidationResult:
    return ValidationResult()


def failure(errors: Iterable[ValidationError]) -> ValidationResult:
    return ValidationResult(errors=tuple(errors))


def merge_results(results: Iterable[ValidationResult]) -> ValidationResult:
    """Concatenate errors in the order the results are given."""
    return ValidationResult(errors=tuple(e for r in results for e in r.errors))


def sort_errors_by_priority(
    errors: Iterable[ValidationError],
    priorities: Mapping[str, int],
) -> tuple[ValidationError, ...]:
    """
    Stable sort by the priority of each error's rule.

    Errors whose rule id is missing from *priorities* sort after all known ones.
    """
    fallback = max(priorities.values(), default=0) + 1
    return tuple(sorted(errors, key=lambda e: priorities.get(e.rule_id, fallback)))
