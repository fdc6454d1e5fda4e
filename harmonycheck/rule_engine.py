"""RuleEngine: chapter-keyed rule registry and progression validation."""

import logging
from typing import Iterable, Optional

from harmonycheck.music_models import ChordProgression
from harmonycheck.results import ValidationResult, merge_results, sort_errors_by_priority, success
from harmonycheck.rules import Rule

logger = logging.getLogger(__name__)


class RuleEngine:
    """
    Holds the registered rules and validates progressions against them.

    Rules are bucketed by the chapter that introduces them. Validation at
    chapter N applies the *cumulative* rule set: every rule introduced at
    chapters 1..N, ordered by ascending priority (ties keep chapter order,
    then registration order).

    The registry is the only mutable state. Register everything up front;
    the engine does no locking, so do not register while a validation runs.

    Usage:

        engine = RuleEngine()
        engine.register_all(basic_rules())
        result = engine.validate(progression, chapter=3)
    """

    def __init__(self) -> None:
        self._rules_by_chapter: dict[int, list[Rule]] = {}
        self._rules_by_id: dict[str, Rule] = {}

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, rule: Rule) -> None:
        """
        Insert *rule*, replacing any rule already registered under its id.

        Raises:
            ValueError: If the rule's chapter is below 1.
        """
        if rule.chapter < 1:
            raise ValueError(f"Rule {rule.id!r} has chapter {rule.chapter}; chapters start at 1")
        previous = self._rules_by_id.get(rule.id)
        if previous is not None and previous.chapter != rule.chapter:
            self._rules_by_chapter[previous.chapter].remove(previous)
            if not self._rules_by_chapter[previous.chapter]:
                del self._rules_by_chapter[previous.chapter]
            previous = None

        bucket = self._rules_by_chapter.setdefault(rule.chapter, [])
        if previous is not None:
            bucket[bucket.index(previous)] = rule
            logger.debug("Replaced rule %r in chapter %d", rule.id, rule.chapter)
        else:
            bucket.append(rule)
            logger.debug("Registered rule %r in chapter %d (priority %d)", rule.id, rule.chapter, rule.priority)

        bucket.sort(key=lambda r: r.priority)
        self._rules_by_id[rule.id] = rule

    def register_all(self, rules: Iterable[Rule]) -> None:
        for rule in rules:
            self.register(rule)

    def clear(self) -> None:
        self._rules_by_chapter.clear()
        self._rules_by_id.clear()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_rules_for_chapter(self, chapter: int) -> list[Rule]:
        """Cumulative rule set for *chapter*, sorted by priority."""
        rules: list[Rule] = []
        for ch in sorted(self._rules_by_chapter):
            if ch > chapter:
                break
            rules.extend(self._rules_by_chapter[ch])
        return sorted(rules, key=lambda r: r.priority)

    def get_rule(self, rule_id: str) -> Optional[Rule]:
        return self._rules_by_id.get(rule_id)

    def all_rules(self) -> list[Rule]:
        return list(self._rules_by_id.values())

    def rule_count(self) -> int:
        return len(self._rules_by_id)

    def has_rules_for_chapter(self, chapter: int) -> bool:
        """True when *chapter* itself introduces at least one rule."""
        return bool(self._rules_by_chapter.get(chapter))

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(
        self,
        progression: ChordProgression,
        chapter: int,
        rule_ids: Optional[Iterable[str]] = None,
    ) -> ValidationResult:
        """
        Run the cumulative rule set for *chapter* over every chord of *progression*.

        Args:
            progression: The progression to check. Not modified.
            chapter:     Chapter whose cumulative rules apply.
            rule_ids:    Optional whitelist; when non-empty only these rules
                         (still limited to the cumulative set) run.

        Returns:
            One merged result. Errors are ordered by rule priority; equal
            priorities keep chord order, then rule order within a chord.
        """
        rules = self.get_rules_for_chapter(chapter)
        if rule_ids:
            wanted = set(rule_ids)
            rules = [r for r in rules if r.id in wanted]

        if not rules or len(progression.chords) <= 1:
            return success()

        logger.debug(
            "Validating %d chord(s) against %d rule(s) for chapter %d",
            len(progression.chords),
            len(rules),
            chapter,
        )
        merged = merge_results(
            rule.validate(progression, index)
            for index in range(len(progression.chords))
            for rule in rules
        )
        if merged.is_valid:
            return merged

        priorities = {rule.id: rule.priority for rule in rules}
        return ValidationResult(errors=sort_errors_by_priority(merged.errors, priorities))
