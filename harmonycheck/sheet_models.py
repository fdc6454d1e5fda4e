"""Data models for sheet music rendering outputs."""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class VexflowNote:
    """
    One staff's share of a chord: two voices stacked as a VexFlow chord.

    ``keys`` run low to high; ``colors`` holds a highlight colour per key
    (None = default ink).
    """

    keys: list[str]
    duration: str
    accidentals: list[Optional[str]]
    colors: list[Optional[str]]


@dataclass(frozen=True)
class VexflowMeasure:
    """One chord of the progression on a grand staff."""

    treble: VexflowNote
    bass: VexflowNote
    label: Optional[str] = None
    flagged: bool = False


@dataclass(frozen=True)
class ScoreDocument:
    """Neutral score representation consumed by the VexFlow renderer."""

    title: str
    key: str
    measures: list[VexflowMeasure]
    errors: list[str] = field(default_factory=list)
    time_signature: str = "4/4"
