"""Flowable DOCX rendering for advisory reports."""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Pt

from .documents import DOCX_CONTENT_TYPE, RenderedDocument, ReportMetadata
from .line_classifier import ClassifiedLine, LineRole, truncate_at_footer
from .pdf_renderer import REPORT_TITLE

logger = logging.getLogger(__name__)

TITLE_ROLE = "title"
GENERATED_ROLE = "generated"
FOOTER_ROLE = "footer"

_ALIGNMENT = {
    "left": WD_ALIGN_PARAGRAPH.LEFT,
    "center": WD_ALIGN_PARAGRAPH.CENTER,
}


@dataclass(frozen=True)
class StyleProfile:
    size_pt: Optional[float]
    bold: bool = False
    italic: bool = False
    space_before_pt: float = 0
    space_after_pt: float = 0
    left_indent_pt: float = 0
    hanging_indent_pt: float = 0
    alignment: Optional[str] = None


@dataclass(frozen=True)
class Block:
    role: str
    text: str
    style: StyleProfile


BLOCK_STYLES: Dict[str, StyleProfile] = {
    TITLE_ROLE: StyleProfile(16, bold=True, space_after_pt=5, alignment="center"),
    GENERATED_ROLE: StyleProfile(15, bold=True, space_after_pt=15, alignment="center"),
    LineRole.HEADING.value: StyleProfile(14, bold=True, space_before_pt=10, space_after_pt=6),
    LineRole.SUB_HEADING.value: StyleProfile(12, bold=True, space_before_pt=6, space_after_pt=4),
    LineRole.LABEL.value: StyleProfile(12, bold=True, space_before_pt=6, space_after_pt=4),
    LineRole.BULLET.value: StyleProfile(11, space_after_pt=3, left_indent_pt=34, hanging_indent_pt=18),
    LineRole.BODY.value: StyleProfile(11, space_after_pt=6),
    LineRole.BLANK.value: StyleProfile(None),
    FOOTER_ROLE: StyleProfile(10, italic=True, space_before_pt=12, alignment="left"),
}


def build_blocks(
    lines: Sequence[ClassifiedLine],
    metadata: ReportMetadata,
    footer_text: str,
) -> List[Block]:
    """Title, timestamp, the report body up to its own footer, then ``footer_text``."""

    blocks = [
        Block(TITLE_ROLE, REPORT_TITLE, BLOCK_STYLES[TITLE_ROLE]),
        Block(GENERATED_ROLE, f"Generated {metadata.timestamp}", BLOCK_STYLES[GENERATED_ROLE]),
    ]
    for line in truncate_at_footer(lines):
        blocks.append(Block(line.role.value, line.text, BLOCK_STYLES[line.role.value]))
    blocks.append(Block(FOOTER_ROLE, footer_text.strip(), BLOCK_STYLES[FOOTER_ROLE]))
    return blocks


def _add_block(document, block: Block) -> None:
    paragraph = document.add_paragraph()
    style = block.style
    if style.size_pt is None or not block.text:
        return

    fmt = paragraph.paragraph_format
    fmt.space_before = Pt(style.space_before_pt)
    fmt.space_after = Pt(style.space_after_pt)
    if style.left_indent_pt:
        fmt.left_indent = Pt(style.left_indent_pt)
    if style.hanging_indent_pt:
        fmt.first_line_indent = Pt(-style.hanging_indent_pt)
    if style.alignment:
        paragraph.alignment = _ALIGNMENT[style.alignment]

    run = paragraph.add_run(block.text)
    run.bold = style.bold
    run.italic = style.italic
    run.font.size = Pt(style.size_pt)


def render_docx(blocks: Sequence[Block]) -> RenderedDocument:
    """Write the blocks in order into a single-section DOCX held in memory."""

    document = Document()
    for block in blocks:
        _add_block(document, block)
    buffer = io.BytesIO()
    document.save(buffer)
    content = buffer.getvalue()
    logger.info(f"docx_rendered blocks={len(blocks)} bytes={len(content)}")
    return RenderedDocument(content=content, content_type=DOCX_CONTENT_TYPE)
