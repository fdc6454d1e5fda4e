"""CLI tests using click's CliRunner."""

import json
from pathlib import Path

from click.testing import CliRunner

from harmonycheck import __version__
from harmonycheck.cli import main


def _run(*args: str):
    return CliRunner().invoke(main, list(args))


def test_version() -> None:
    result = _run("--version")
    assert result.exit_code == 0
    assert __version__ in result.output


def test_help_short_flag() -> None:
    result = _run("-h")
    assert result.exit_code == 0
    assert "check" in result.output
    assert "sheet" in result.output


def test_check_clean_progression(clean_progression_file: Path) -> None:
    result = _run("check", str(clean_progression_file))
    assert result.exit_code == 0
    assert "No part-writing errors." in result.output
    assert "Score: 100" in result.output


def test_check_reports_parallels(parallel_progression_file: Path) -> None:
    result = _run("check", str(parallel_progression_file))
    assert result.exit_code == 1
    assert "3 error(s)" in result.output
    assert "[Parallel fifths]" in result.output
    assert "voices: Tenor, Bass" in result.output
    assert "Score: 70" in result.output


def test_check_with_verbose_logging(clean_progression_file: Path) -> None:
    result = _run("--verbose", "check", str(clean_progression_file))
    assert result.exit_code == 0


def test_check_against_exercise(clean_progression_file: Path, exercises_file: Path) -> None:
    result = _run("check", str(clean_progression_file), "--exercises", str(exercises_file), "--exercise-id", "1-1")
    assert result.exit_code == 0
    assert "All exercise constraints met." in result.output


def test_check_exercise_length_mismatch(clean_progression_file: Path, exercises_file: Path) -> None:
    result = _run("check", str(clean_progression_file), "--exercises", str(exercises_file), "--exercise-id", "1-2")
    assert result.exit_code == 1
    assert "Expected 3 chords, got 2" in result.output


def test_check_unknown_exercise(clean_progression_file: Path, exercises_file: Path) -> None:
    result = _run("check", str(clean_progression_file), "--exercises", str(exercises_file), "--exercise-id", "9-9")
    assert result.exit_code == 1
    assert "ERROR" in result.output


def test_check_exercise_id_needs_file(clean_progression_file: Path) -> None:
    result = _run("check", str(clean_progression_file), "--exercise-id", "1-1")
    assert result.exit_code == 1


def test_check_malformed_progression(tmp_path: Path) -> None:
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"key": "C major"}), encoding="utf-8")
    result = _run("check", str(path))
    assert result.exit_code == 1
    assert "ERROR" in result.output


def test_check_invalid_json(tmp_path: Path) -> None:
    path = tmp_path / "bad.json"
    path.write_text("[", encoding="utf-8")
    assert _run("check", str(path)).exit_code == 1


def test_check_rejects_chapter_out_of_range(clean_progression_file: Path) -> None:
    result = _run("check", str(clean_progression_file), "--chapter", "61")
    assert result.exit_code == 2


def test_rules_lists_chapter_one() -> None:
    result = _run("rules")
    assert result.exit_code == 0
    assert "4 rule(s) in force at chapter 1" in result.output
    lines = result.output.splitlines()
    assert lines.index(next(line for line in lines if "voice-range" in line)) < lines.index(
        next(line for line in lines if "parallel-fifths" in line)
    )


def test_chord_ok() -> None:
    result = _run("chord", "G4", "E4", "C4", "C3")
    assert result.exit_code == 0
    assert "Chord structure OK." in result.output


def test_chord_warnings_only() -> None:
    result = _run("chord", "G5", "E4", "C4", "C3")
    assert result.exit_code == 0
    assert "warning: Soprano and Alto are 15 semitones apart" in result.output


def test_chord_too_uniform() -> None:
    result = _run("chord", "C5", "C4", "C4", "C3")
    assert result.exit_code == 1
    assert "too uniform" in result.output


def test_chord_bad_pitch() -> None:
    result = _run("chord", "H4", "E4", "C4", "C3")
    assert result.exit_code == 1
    assert "Invalid pitch spelling" in result.output


def test_chord_needs_four_notes() -> None:
    assert _run("chord", "G4", "E4", "C4").exit_code == 2


def test_sheet_markdown_default_output(clean_progression_file: Path) -> None:
    result = _run("sheet", str(clean_progression_file))
    assert result.exit_code == 0
    out = clean_progression_file.with_suffix(".md")
    content = out.read_text(encoding="utf-8")
    assert content.startswith("# clean answer")
    assert "No part-writing errors." in content


def test_sheet_markdown_custom_output(parallel_progression_file: Path, tmp_path: Path) -> None:
    out = tmp_path / "sheet.md"
    result = _run("sheet", str(parallel_progression_file), "-o", str(out), "--title", "Parallels")
    assert result.exit_code == 0
    assert "Errors : 3" in result.output
    assert "[Parallel octaves]" in out.read_text(encoding="utf-8")
