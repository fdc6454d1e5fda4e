"""SheetExporter: renders a progression, annotated with its errors, as HTML or Markdown."""

from __future__ import annotations

from typing import Any, Final, Optional

from harmonycheck.music_models import ChordProgression, Note, Voice
from harmonycheck.results import ValidationResult
from harmonycheck.sheet_models import ScoreDocument, VexflowMeasure, VexflowNote
from harmonycheck.sheet_renderers import (
    SheetRenderer,
    VerovioHtmlRenderer,
    VexflowMarkdownRenderer,
)

SUPPORTED_FORMATS: Final[set[str]] = {"html", "md-vexflow"}

ERROR_COLOR: Final[str] = "#c62828"

#: Voices per staff, low to high as VexFlow expects chord keys.
TREBLE_VOICES: Final[tuple[Voice, Voice]] = (Voice.ALTO, Voice.SOPRANO)
BASS_VOICES: Final[tuple[Voice, Voice]] = (Voice.BASS, Voice.TENOR)

_QUARTER_LENGTHS: Final[dict[str, float]] = {"w": 4.0, "h": 2.0, "q": 1.0, "8": 0.5, "16": 0.25}

_PART_CLEFS: Final[dict[Voice, str]] = {
    Voice.SOPRANO: "TrebleClef",
    Voice.ALTO: "TrebleClef",
    Voice.TENOR: "Treble8vbClef",
    Voice.BASS: "BassClef",
}


def flagged_voices(result: Optional[ValidationResult], chord_count: int) -> list[set[int]]:
    """Per chord index, the voices named by any error touching that chord."""
    flags: list[set[int]] = [set() for _ in range(chord_count)]
    if result is None:
        return flags
    for error in result.errors:
        for chord_index in error.affected_chords:
            if 0 <= chord_index < chord_count:
                flags[chord_index].update(error.affected_voices)
    return flags


def error_lines(result: Optional[ValidationResult]) -> list[str]:
    if result is None:
        return []
    return [f"[{e.rule_name}] {e.message} ({e.chapter_reference})" for e in result.errors]


def _vexflow_key(note: Note) -> str:
    return f"{note.pitch.lower()}/{note.octave}"


def _vexflow_accidental(note: Note) -> Optional[str]:
    accidental = note.pitch[1:]
    return accidental or None


def _music21_name(note: Note) -> str:
    """'Bb4' -> 'B-4' (music21 spells flats with '-')."""
    return note.pitch[0] + note.pitch[1:].replace("b", "-") + str(note.octave)


def _staff_entry(notes: tuple[Note, ...], voices: tuple[Voice, Voice], flags: set[int]) -> VexflowNote:
    staff_notes = [notes[v] for v in voices]
    return VexflowNote(
        keys=[_vexflow_key(n) for n in staff_notes],
        duration=staff_notes[-1].duration,
        accidentals=[_vexflow_accidental(n) for n in staff_notes],
        colors=[ERROR_COLOR if v in flags else None for v in voices],
    )


def build_score_document(
    progression: ChordProgression,
    result: Optional[ValidationResult] = None,
    title: str = "",
) -> ScoreDocument:
    """
    Lay a progression out on a grand staff: soprano and alto on the treble
    staff, tenor and bass on the bass staff, one chord per measure.
    """
    flags = flagged_voices(result, len(progression.chords))
    measures = [
        VexflowMeasure(
            treble=_staff_entry(chord.notes, TREBLE_VOICES, flags[i]),
            bass=_staff_entry(chord.notes, BASS_VOICES, flags[i]),
            label=chord.label,
            flagged=bool(flags[i]),
        )
        for i, chord in enumerate(progression.chords)
    ]
    return ScoreDocument(
        title=title,
        key=progression.key,
        measures=measures,
        errors=error_lines(result),
    )


class SheetExporter:
    """
    Render a progression into sheet output via a pluggable renderer.

    Supported formats:
    - ``html``: music21 -> MusicXML -> verovio -> inline SVG in a self-contained HTML file.
    - ``md-vexflow``: markdown file with embedded VexFlow JavaScript renderer.
    """

    def __init__(self, title: str = "", output_format: str = "html") -> None:
        self.title = title
        normalized = output_format.strip().lower()
        if normalized not in SUPPORTED_FORMATS:
            supported = ", ".join(sorted(SUPPORTED_FORMATS))
            raise ValueError(f"Unsupported output format '{output_format}'. Use one of: {supported}.")
        self.output_format = normalized
        self.renderer = self._build_renderer(normalized)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _build_renderer(self, output_format: str) -> SheetRenderer:
        if output_format == "html":
            return VerovioHtmlRenderer()
        return VexflowMarkdownRenderer()

    def _build_music21_score(self, progression: ChordProgression, result: Optional[ValidationResult]) -> Any:
        from music21 import clef, metadata, meter, note, stream

        flags = flagged_voices(result, len(progression.chords))
        score = stream.Score()
        score.metadata = metadata.Metadata(title=self.title)

        for voice in Voice:
            part = stream.Part()
            part.partName = voice.display_name
            part.append(getattr(clef, _PART_CLEFS[voice])())
            part.append(meter.TimeSignature("4/4"))
            for index, chord in enumerate(progression.chords):
                source = chord.notes[voice]
                m21_note = note.Note(_music21_name(source))
                m21_note.quarterLength = _QUARTER_LENGTHS.get(source.duration, 4.0)
                if voice in flags[index]:
                    m21_note.style.color = ERROR_COLOR
                if voice is Voice.BASS and chord.label:
                    m21_note.lyric = chord.label
                part.append(m21_note)
            score.insert(0, part)
        return score

    def _score_to_musicxml_bytes(self, score: Any) -> bytes:
        from music21.musicxml.m21ToXml import GeneralObjectExporter

        exporter = GeneralObjectExporter(score)
        return exporter.parse()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def render(self, progression: ChordProgression, result: Optional[ValidationResult] = None) -> str:
        """Render *progression* (and the errors in *result*) to a content string."""
        errors = error_lines(result)
        if self.output_format == "html":
            score = self._build_music21_score(progression, result)
            return self.renderer.render(
                title=self.title,
                errors=errors,
                musicxml_bytes=self._score_to_musicxml_bytes(score),
            )
        return self.renderer.render(
            title=self.title,
            errors=errors,
            score_document=build_score_document(progression, result, self.title),
        )

    def export(
        self,
        progression: ChordProgression,
        output_path: str,
        result: Optional[ValidationResult] = None,
    ) -> None:
        """
        Render and write to disk.

        Raises:
            ValueError: If rendering fails.
            OSError: If the output file cannot be written.
        """
        content = self.render(progression, result)
        with open(output_path, "w", encoding="utf-8") as fh:
            fh.write(content)
