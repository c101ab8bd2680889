"""Structural classification of generated report lines.

The generator produces a small, predictable vocabulary of layout cues:
numbered sections (``1. Query``), lettered sub-sections (``A) Scope``), label
lines ending in a colon, dash or dot bullets and plain prose. Each trimmed line
is mapped to exactly one :class:`LineRole` by walking :data:`CLASSIFICATION_RULES`
in order; the first rule that matches wins. Numbered and lettered markers are
tested before the label and bullet patterns because they are more specific,
so the order of that tuple must not change.

Exactly one marker is stripped per line. Whatever follows it is content, even
when it looks like another marker: ``1. A) Scope`` is a heading reading
``A) Scope``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, List, Optional, Pattern, Tuple


class LineRole(str, Enum):
    HEADING = "heading"
    SUB_HEADING = "sub_heading"
    LABEL = "label"
    BULLET = "bullet"
    BODY = "body"
    BLANK = "blank"


# Label lines keep their trailing colon in every output.
KEEP_LABEL_COLON = True

BULLET_MARKER = "• "

# The generated footer starts with this phrase; the flowable document drops
# everything from here on and appends its own footer instead.
FOOTER_MARKER = "This report was prepared using"


@dataclass(frozen=True)
class ClassifiedLine:
    role: LineRole
    text: str
    source: str = ""


_HEADING = re.compile(r"^\d+[).\s]")
_HEADING_MARKER = re.compile(r"^\d+[).\s]+")
_SUB_HEADING = re.compile(r"^[A-Z][).\s]")
_SUB_HEADING_MARKER = re.compile(r"^[A-Z][).\s]+")
_LABEL = re.compile(r"^[-•]?\s*[A-Z].*:\s*$")
_BULLET = re.compile(r"^[-•]")
_BULLET_MARKER = re.compile(r"^[-•]\s*")


def _strip_heading(line: str) -> str:
    return _HEADING_MARKER.sub("", line).strip()


def _strip_sub_heading(line: str) -> str:
    return _SUB_HEADING_MARKER.sub("", line).strip()


def _strip_label(line: str) -> str:
    text = _BULLET_MARKER.sub("", line).strip()
    if not KEEP_LABEL_COLON:
        text = text.rstrip().rstrip(":").rstrip()
    return text


def _normalize_bullet(line: str) -> str:
    return _BULLET_MARKER.sub(BULLET_MARKER, line).strip()


Rule = Tuple[LineRole, Pattern[str], Callable[[str], str]]

CLASSIFICATION_RULES: Tuple[Rule, ...] = (
    (LineRole.HEADING, _HEADING, _strip_heading),
    (LineRole.SUB_HEADING, _SUB_HEADING, _strip_sub_heading),
    (LineRole.LABEL, _LABEL, _strip_label),
    (LineRole.BULLET, _BULLET, _normalize_bullet),
)


def classify_line(line: str) -> ClassifiedLine:
    """Return the structural role and display text of one trimmed line."""

    if not line:
        return ClassifiedLine(role=LineRole.BLANK, text="", source="")
    for role, pattern, display in CLASSIFICATION_RULES:
        if pattern.match(line):
            return ClassifiedLine(role=role, text=display(line), source=line)
    return ClassifiedLine(role=LineRole.BODY, text=line, source=line)


def split_report_lines(text: Optional[str]) -> List[str]:
    """Break raw report text into trimmed candidate lines.

    Runs of blank lines collapse to a single break, and two or more spaces in
    a row act as a soft line break.
    """

    normalized = str(text or "").replace("\r\n", "\n")
    normalized = re.sub(r"\n{2,}", "\n", normalized)
    return [piece.strip() for piece in re.split(r"\n| {2,}", normalized)]


def classify_report(text: Optional[str]) -> List[ClassifiedLine]:
    return [classify_line(line) for line in split_report_lines(text)]


def is_footer_line(line: ClassifiedLine) -> bool:
    return line.text.startswith(FOOTER_MARKER)


def truncate_at_footer(lines: Iterable[ClassifiedLine]) -> List[ClassifiedLine]:
    """Lines before the generated footer, which is regenerated per document."""

    kept: List[ClassifiedLine] = []
    for line in lines:
        if is_footer_line(line):
            break
        kept.append(line)
    return kept
