"""Shared exercise data for the repository, session and CLI tests."""

import json
from pathlib import Path
from typing import Any

import pytest


def chord_data(label: str, *tokens: str) -> dict[str, Any]:
    notes = []
    for token in tokens:
        pitch, octave = token[:-1], int(token[-1])
        notes.append({"pitch": pitch, "octave": octave, "duration": "w"})
    return {"notes": notes, "romanNumeral": label}


TONIC = chord_data("I", "G4", "E4", "C4", "C3")
SUBDOMINANT = chord_data("IV", "A4", "F4", "C4", "F3")
SUPERTONIC_PARALLEL = chord_data("ii", "A4", "F4", "D4", "D3")


def make_chapter_one() -> dict[str, Any]:
    return {
        "chapter": 1,
        "title": "Chord connection basics",
        "description": "Connecting root-position triads.",
        "concepts": ["common tone", "contrary motion"],
        "exercises": [
            {
                "id": "1-1",
                "chapter": 1,
                "number": 1,
                "instructions": "Continue I with IV.",
                "key": "C major",
                "startingChords": [TONIC],
                "expectedLength": 2,
                "solution": {"key": "C major", "chords": [TONIC, SUBDOMINANT]},
                "constraints": {"requiredChords": ["IV"]},
                "difficulty": 1,
                "hints": ["Keep the common tone C in the tenor."],
            },
            {
                "id": "1-2",
                "chapter": 1,
                "number": 2,
                "instructions": "Write I - IV - I.",
                "key": "C major",
                "startingChords": [TONIC],
                "expectedLength": 3,
                "solution": {"key": "C major", "chords": [TONIC, SUBDOMINANT, TONIC]},
                "constraints": {"forbiddenChords": ["ii"], "maxLength": 3},
            },
        ],
    }


@pytest.fixture
def exercise_data() -> dict[str, Any]:
    return {"chapters": [make_chapter_one()]}


@pytest.fixture
def exercises_file(tmp_path: Path, exercise_data: dict[str, Any]) -> Path:
    path = tmp_path / "exercises.json"
    path.write_text(json.dumps(exercise_data), encoding="utf-8")
    return path


@pytest.fixture
def clean_progression_file(tmp_path: Path) -> Path:
    path = tmp_path / "clean_answer.json"
    path.write_text(json.dumps({"key": "C major", "chords": [TONIC, SUBDOMINANT]}), encoding="utf-8")
    return path


@pytest.fixture
def parallel_progression_file(tmp_path: Path) -> Path:
    path = tmp_path / "parallels.json"
    path.write_text(json.dumps({"key": "C major", "chords": [TONIC, SUPERTONIC_PARALLEL]}), encoding="utf-8")
    return path
