"""Renderer implementations for annotated progression sheets."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import asdict
from typing import Any, Sequence, cast

from harmonycheck.sheet_models import ScoreDocument


def _escape_html(text: str) -> str:
    """Escape the three characters that are unsafe in HTML text content."""
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


class SheetRenderer(ABC):
    """Abstract sheet renderer."""

    @property
    @abstractmethod
    def default_extension(self) -> str:
        """Default filename extension for this renderer."""

    @abstractmethod
    def render(
        self,
        *,
        title: str,
        errors: Sequence[str] = (),
        musicxml_bytes: bytes | None = None,
        score_document: ScoreDocument | None = None,
    ) -> str:
        """Render output into a file content string."""


def _error_list_html(errors: Sequence[str]) -> str:
    if not errors:
        return '  <p class="verdict ok">No part-writing errors.</p>\n'
    items = "\n".join(f"    <li>{_escape_html(e)}</li>" for e in errors)
    return f'  <ol class="verdict errors">\n{items}\n  </ol>\n'


class VerovioHtmlRenderer(SheetRenderer):
    """Render MusicXML bytes into a self-contained HTML document with inline SVG."""

    # Verovio layout constants (verovio abstract units; ~1 unit ≈ 0.1 mm)
    _PAGE_WIDTH: int = 2100
    _SCALE: int = 45
    _PAGE_MARGIN: int = 100

    @property
    def default_extension(self) -> str:
        return ".html"

    def render(
        self,
        *,
        title: str,
        errors: Sequence[str] = (),
        musicxml_bytes: bytes | None = None,
        score_document: ScoreDocument | None = None,
    ) -> str:
        if musicxml_bytes is None:
            raise ValueError("musicxml_bytes is required for HTML rendering.")

        svgs = self.render_svgs(musicxml_bytes)
        return self.build_html(title, svgs, errors)

    def render_svgs(self, musicxml_bytes: bytes) -> list[str]:
        """
        Render a MusicXML document to a list of SVG strings via verovio.

        Raises:
            ValueError: If verovio cannot load the MusicXML data.
        """
        import verovio

        tk = verovio.toolkit()
        tk.setOptions(
            {
                "pageWidth": self._PAGE_WIDTH,
                "scale": self._SCALE,
                "pageMarginTop": self._PAGE_MARGIN,
                "pageMarginBottom": self._PAGE_MARGIN,
                "pageMarginLeft": self._PAGE_MARGIN,
                "pageMarginRight": self._PAGE_MARGIN,
                "adjustPageHeight": True,
            }
        )

        loaded: bool = tk.loadData(musicxml_bytes.decode("utf-8"))
        if not loaded:
            raise ValueError("verovio could not load the MusicXML data.")

        page_count: int = tk.getPageCount()
        return [self._render_page_svg(tk, page_no) for page_no in range(1, page_count + 1)]

    def _render_page_svg(self, toolkit: Any, page_no: int) -> str:
        """Some verovio bindings accept keyword arguments, others only positional ones."""
        try:
            return cast(str, toolkit.renderToSVG(pageNo=page_no, xmlDeclaration=False))
        except TypeError:
            return cast(str, toolkit.renderToSVG(page_no))

    def build_html(self, title: str, svgs: Sequence[str], errors: Sequence[str] = ()) -> str:
        """Wrap SVG pages and the error list in a self-contained HTML document."""
        title_safe = _escape_html(title)
        heading = f"  <h1>{title_safe}</h1>\n" if title else ""
        pages = "\n".join(f'  <div class="page">{svg}</div>' for svg in svgs)
        verdict = _error_list_html(errors)
        return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8" />
  <title>{title_safe}</title>
  <style>
    body {{ font-family: Georgia, serif; background: #f0f0f0; margin: 0; padding: 2rem; }}
    h1 {{ text-align: center; font-size: 1.6rem; color: #222; }}
    .page {{ background: #fff; margin: 0 auto 2rem; max-width: 860px; padding: 1rem; }}
    .page svg {{ display: block; width: 100%; height: auto; }}
    .verdict {{ max-width: 860px; margin: 0 auto; }}
    .verdict.ok {{ color: #2e7d32; }}
    .verdict.errors li {{ color: #c62828; margin-bottom: 0.3rem; }}
  </style>
</head>
<body>
{heading}{pages}
{verdict}</body>
</html>"""


class VexflowMarkdownRenderer(SheetRenderer):
    """Render a score document into Markdown with an embedded VexFlow script."""

    @property
    def default_extension(self) -> str:
        return ".md"

    def render(
        self,
        *,
        title: str,
        errors: Sequence[str] = (),
        musicxml_bytes: bytes | None = None,
        score_document: ScoreDocument | None = None,
    ) -> str:
        if score_document is None:
            raise ValueError("score_document is required for md-vexflow rendering.")

        title_safe = _escape_html(title)
        score_json = json.dumps(asdict(score_document), separators=(",", ":"))
        score_json = score_json.replace("</", "<\\/")

        all_errors = list(errors) or score_document.errors
        if all_errors:
            findings = "\n".join(f"{i}. {_escape_html(e)}" for i, e in enumerate(all_errors, start=1))
        else:
            findings = "No part-writing errors."

        key_line = f"Key: {_escape_html(score_document.key)}\n\n" if score_document.key else ""

        return f"""# {title_safe}

{key_line}This Markdown uses embedded JavaScript + VexFlow. Open it in a Markdown viewer that allows script execution.

<div id="harmonycheck-score"></div>
<script id="harmonycheck-score-data" type="application/json">{score_json}</script>
<script type="module">
  import {{
    Accidental,
    Annotation,
    Formatter,
    Renderer,
    Stave,
    StaveConnector,
    StaveNote,
    Voice
  }} from "https://cdn.jsdelivr.net/npm/vexflow@4.2.3/build/esm/entry/vexflow.js";

  const host = document.getElementById("harmonycheck-score");
  const payload = JSON.parse(document.getElementById("harmonycheck-score-data").textContent || "{{}}");
  const measures = Array.isArray(payload.measures) ? payload.measures : [];
  const width = 40 + Math.max(measures.length, 1) * 110;

  const renderer = new Renderer(host, Renderer.Backends.SVG);
  renderer.resize(width + 20, 260);
  const context = renderer.getContext();

  const treble = new Stave(10, 20, width).addClef("treble").addTimeSignature(payload.time_signature || "4/4");
  const bass = new Stave(10, 130, width).addClef("bass").addTimeSignature(payload.time_signature || "4/4");
  treble.setContext(context).draw();
  bass.setContext(context).draw();
  const brace = new StaveConnector(treble, bass);
  brace.setType(StaveConnector.type.BRACE);
  brace.setContext(context).draw();

  const toStaveNote = (entry, clef, label) => {{
    const staveNote = new StaveNote({{ clef, keys: entry.keys, duration: entry.duration || "w" }});
    entry.accidentals.forEach((symbol, i) => {{
      if (symbol) staveNote.addModifier(new Accidental(symbol), i);
    }});
    entry.colors.forEach((color, i) => {{
      if (color) staveNote.setKeyStyle(i, {{ fillStyle: color, strokeStyle: color }});
    }});
    if (label) {{
      staveNote.addModifier(
        new Annotation(label).setVerticalJustification(Annotation.VerticalJustify.BOTTOM),
        0,
      );
    }}
    return staveNote;
  }};

  const trebleNotes = measures.map((m) => toStaveNote(m.treble, "treble", null));
  const bassNotes = measures.map((m) => toStaveNote(m.bass, "bass", m.label));

  if (measures.length > 0) {{
    const trebleVoice = new Voice({{ num_beats: measures.length * 4, beat_value: 4 }}).setMode(Voice.Mode.SOFT);
    const bassVoice = new Voice({{ num_beats: measures.length * 4, beat_value: 4 }}).setMode(Voice.Mode.SOFT);
    trebleVoice.addTickables(trebleNotes);
    bassVoice.addTickables(bassNotes);
    new Formatter().joinVoices([trebleVoice]).joinVoices([bassVoice]).format([trebleVoice, bassVoice], width - 80);
    trebleVoice.draw(context, treble);
    bassVoice.draw(context, bass);
  }}
</script>

## Findings

{findings}
"""
