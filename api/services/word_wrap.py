"""Greedy word wrapping against measured font widths."""

from __future__ import annotations

from typing import Callable, List

from reportlab.pdfbase import pdfmetrics

from .render_errors import MeasurementFailure

Measure = Callable[[str, float, str], float]

FONT_FAMILY = {
    "regular": "Helvetica",
    "bold": "Helvetica-Bold",
}


def font_name(weight: str) -> str:
    try:
        return FONT_FAMILY[weight]
    except KeyError as exc:
        raise MeasurementFailure(f"unknown font weight {weight!r}") from exc


def helvetica_measure(text: str, size: float, weight: str = "regular") -> float:
    """Width of ``text`` in points using the standard Helvetica metrics."""

    name = font_name(weight)
    try:
        return pdfmetrics.stringWidth(text, name, size)
    except Exception as exc:  # reportlab raises assorted errors for bad glyphs/fonts
        raise MeasurementFailure(f"cannot measure {text[:40]!r} in {name} {size}pt") from exc


def wrap_text(
    text: str,
    max_width: float,
    measure: Measure = helvetica_measure,
    size: float = 11,
    weight: str = "regular",
) -> List[str]:
    """Fill rows word by word until the next word would overflow ``max_width``.

    A word wider than ``max_width`` on its own is placed alone on its row
    without hyphenation. The last row is always returned, so empty input
    yields a single empty row.
    """

    rows: List[str] = []
    current = ""
    for word in str(text or "").split():
        candidate = f"{current} {word}" if current else word
        if current and measure(candidate, size, weight) > max_width:
            rows.append(current)
            current = word
        else:
            current = candidate
    rows.append(current)
    return rows
