"""harmonycheck CLI entry point."""

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import click

from harmonycheck import __version__
from harmonycheck.chord_structure import validate_chord
from harmonycheck.constraints import ConstraintValidationResult, validate_constraints
from harmonycheck.errors import HarmonyCheckError
from harmonycheck.exercises import MAX_CHAPTER, Exercise, ExerciseRepository
from harmonycheck.music_models import ChordProgression, Voice, parse_note
from harmonycheck.results import ValidationResult
from harmonycheck.rule_engine import RuleEngine
from harmonycheck.rules import basic_rules
from harmonycheck.scoring import ScoringPolicy


def _build_engine() -> RuleEngine:
    engine = RuleEngine()
    engine.register_all(basic_rules())
    return engine


def _fail(message: str) -> None:
    click.echo(f"  ERROR: {message}", err=True)
    sys.exit(1)


def _load_progression(path: str) -> ChordProgression:
    with open(path, encoding="utf-8") as fh:
        try:
            data = json.load(fh)
        except json.JSONDecodeError as exc:
            raise HarmonyCheckError(f"'{path}' is not valid JSON: {exc}") from exc
    return ChordProgression.from_dict(data)


def _load_exercise(exercises_file: str, exercise_id: str) -> Exercise:
    repo = ExerciseRepository()
    repo.load_from_file(exercises_file)
    exercise = repo.get_exercise_by_id(exercise_id)
    if exercise is None:
        raise HarmonyCheckError(f"No exercise '{exercise_id}' in {exercises_file}")
    return exercise


def _voice_names(voices: tuple[int, ...]) -> str:
    return ", ".join(Voice(v).display_name for v in voices)


def _echo_result(result: ValidationResult) -> None:
    if result.is_valid:
        click.echo("      No part-writing errors.")
        return
    click.echo(f"      {len(result.errors)} error(s):")
    for error in result.errors:
        chords = ", ".join(str(c + 1) for c in error.affected_chords)
        click.echo(f"        [{error.rule_name}] {error.message}")
        click.echo(f"          voices: {_voice_names(error.affected_voices)}  |  chords: {chords}")
        click.echo(f"          see {error.chapter_reference}")


def _echo_constraints(result: ConstraintValidationResult) -> None:
    if result.is_valid:
        click.echo("      All exercise constraints met.")
        return
    for violation in result.violations:
        click.echo(f"        ({violation.type.value}) {violation.message}")


# ── CLI group ──────────────────────────────────────────────────────────────────

@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="harmonycheck")
@click.option("--verbose", "-v", is_flag=True, help="Log rule registration and validation details.")
def main(verbose: bool) -> None:
    """harmonycheck: four-part harmony rule checker."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


# ── check subcommand ───────────────────────────────────────────────────────────

@main.command()
@click.argument("progression_file", type=click.Path(exists=True, dir_okay=False, readable=True))
@click.option(
    "--chapter",
    type=click.IntRange(1, MAX_CHAPTER),
    default=None,
    help="Chapter whose cumulative rules apply. Defaults to the exercise chapter, or 1.",
)
@click.option(
    "--exercises",
    "exercises_file",
    type=click.Path(exists=True, dir_okay=False, readable=True),
    default=None,
    metavar="PATH",
    help="Exercise data JSON; combine with --exercise-id to check constraints too.",
)
@click.option("--exercise-id", default=None, metavar="ID", help='Exercise id such as "1-2".')
def check(
    progression_file: str,
    chapter: Optional[int],
    exercises_file: Optional[str],
    exercise_id: Optional[str],
) -> None:
    """
    Check a progression JSON file against the part-writing rules.

    Exits with status 1 when any rule or constraint is violated.

    \b
    Examples:
      harmonycheck check answer.json
      harmonycheck check answer.json --chapter 3
      harmonycheck check answer.json --exercises exercises.json --exercise-id 1-2
    """
    if (exercises_file is None) != (exercise_id is None):
        _fail("--exercises and --exercise-id must be given together.")

    try:
        progression = _load_progression(progression_file)
        exercise = _load_exercise(exercises_file, exercise_id) if exercises_file and exercise_id else None
    except (HarmonyCheckError, OSError, ValueError) as exc:
        _fail(str(exc))
        return

    resolved_chapter = chapter or (exercise.chapter if exercise else 1)
    rule_ids = exercise.constraints.specific_rules if exercise and exercise.constraints else ()

    click.echo(f"harmonycheck v{__version__}")
    click.echo(f"  File    : {progression_file}")
    click.echo(f"  Chords  : {len(progression.chords)}  |  Key: {progression.key or '-'}")
    click.echo(f"  Chapter : {resolved_chapter}")
    click.echo()

    engine = _build_engine()
    try:
        result = engine.validate(progression, resolved_chapter, rule_ids=rule_ids)
    except HarmonyCheckError as exc:
        _fail(str(exc))
        return

    click.echo("[1/2] Part-writing rules...")
    _echo_result(result)

    passed = result.is_valid
    if exercise is not None:
        click.echo(f"[2/2] Constraints of exercise {exercise.id}...")
        constraint_result = validate_constraints(progression, exercise.constraints)
        _echo_constraints(constraint_result)
        if len(progression.chords) != exercise.expected_length:
            click.echo(f"        Expected {exercise.expected_length} chords, got {len(progression.chords)}.")
            passed = False
        passed = passed and constraint_result.is_valid
    else:
        click.echo("[2/2] No exercise given, constraints skipped.")

    click.echo()
    click.echo(f"Score: {ScoringPolicy().score(result)}")
    if not passed:
        sys.exit(1)


# ── rules subcommand ───────────────────────────────────────────────────────────

@main.command()
@click.option(
    "--chapter",
    type=click.IntRange(1, MAX_CHAPTER),
    default=1,
    show_default=True,
    help="List the cumulative rule set that applies at this chapter.",
)
def rules(chapter: int) -> None:
    """List the rules in force at a chapter, in priority order."""
    engine = _build_engine()
    active = engine.get_rules_for_chapter(chapter)
    click.echo(f"{len(active)} rule(s) in force at chapter {chapter}:")
    for rule in active:
        click.echo(f"  {int(rule.priority):>4}  {rule.id:<18} {rule.name}  (from chapter {rule.chapter})")


# ── chord subcommand ───────────────────────────────────────────────────────────

@main.command()
@click.argument("notes", nargs=4)
def chord(notes: tuple[str, ...]) -> None:
    """
    Check the structure of one chord, given soprano to bass.

    \b
    Example:
      harmonycheck chord G4 E4 C4 C3
    """
    try:
        parsed = [parse_note(token) for token in notes]
        result = validate_chord(parsed)
    except HarmonyCheckError as exc:
        _fail(str(exc))
        return

    for error in result.errors:
        click.echo(f"  error  : {error}")
    for warning in result.warnings:
        click.echo(f"  warning: {warning}")
    if result.is_valid and not result.warnings:
        click.echo("  Chord structure OK.")
    if not result.is_valid:
        sys.exit(1)


# ── sheet subcommand ───────────────────────────────────────────────────────────

@main.command()
@click.argument("progression_file", type=click.Path(exists=True, dir_okay=False, readable=True))
@click.option(
    "--output",
    "-o",
    default=None,
    metavar="PATH",
    help="Destination sheet file path. Defaults to extension based on --format.",
)
@click.option(
    "--title",
    default=None,
    metavar="TEXT",
    help="Title shown in the output header. Defaults to the file stem.",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["html", "md-vexflow"], case_sensitive=False),
    default="md-vexflow",
    show_default=True,
    help="Self-contained HTML (music21 + verovio) or Markdown with a VexFlow script.",
)
@click.option(
    "--chapter",
    type=click.IntRange(1, MAX_CHAPTER),
    default=1,
    show_default=True,
    help="Chapter whose rules are used to highlight errors.",
)
def sheet(
    progression_file: str,
    output: Optional[str],
    title: Optional[str],
    output_format: str,
    chapter: int,
) -> None:
    """
    Render a progression as sheet music with rule violations highlighted.

    \b
    Examples:
      harmonycheck sheet answer.json
      harmonycheck sheet answer.json --format html -o answer.html --title "Exercise 1-1"
    """
    from harmonycheck.sheet_exporter import SheetExporter

    path = Path(progression_file)
    normalized_format = output_format.lower()
    resolved_title = title if title is not None else path.stem.replace("_", " ")
    default_suffix = ".html" if normalized_format == "html" else ".md"
    resolved_output = output if output is not None else str(path.with_suffix(default_suffix))

    try:
        progression = _load_progression(progression_file)
    except (HarmonyCheckError, OSError, ValueError) as exc:
        _fail(str(exc))
        return

    result = _build_engine().validate(progression, chapter)

    click.echo(f"harmonycheck v{__version__}")
    click.echo(f"  Format : {normalized_format}")
    click.echo(f"  Errors : {len(result.errors)}")
    click.echo(f"  Output : {resolved_output}")

    exporter = SheetExporter(title=resolved_title, output_format=normalized_format)
    try:
        exporter.export(progression, resolved_output, result)
    except OSError as exc:
        _fail(f"Could not write output file: {exc}")
    except ValueError as exc:
        _fail(f"Could not render score: {exc}")

    click.echo(f"Done!  Wrote '{resolved_output}'.")
