"""Fixed-layout PDF rendering for advisory reports.

Layout and encoding are separate steps. :func:`layout_pages` folds every
content unit through a :class:`PageComposer` and returns immutable
:class:`Page` objects with absolute row positions; :func:`render_pdf` draws
those pages with a ReportLab canvas into an in-memory buffer. The PDF does
not style structural roles: every report line is printed in the body font,
footer included.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple

from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from .documents import PDF_CONTENT_TYPE, RenderedDocument, ReportMetadata
from .line_classifier import ClassifiedLine
from .text_sanitizer import sanitize_for_pdf
from .word_wrap import Measure, font_name, helvetica_measure, wrap_text

logger = logging.getLogger(__name__)

REPORT_TITLE = "ECM Assistant Report"

PAGE_LAYOUT = {
    "page_size": A4,
    "margin": 50.0,
    "title_size": 16,
    "body_size": 11,
    "line_height_ratio": 1.4,
}


class LayoutState(str, Enum):
    IDLE = "idle"
    WRITING = "writing"
    PAGE_FULL = "page_full"
    DONE = "done"


@dataclass(frozen=True)
class PlacedRow:
    text: str
    x: float
    y: float
    font_name: str
    font_size: float


@dataclass(frozen=True)
class Page:
    number: int
    rows: Tuple[PlacedRow, ...]


class PageComposer:
    """Places rows top to bottom and opens a new page when space runs out."""

    def __init__(
        self,
        page_size: Tuple[float, float] = PAGE_LAYOUT["page_size"],
        margin: float = PAGE_LAYOUT["margin"],
    ) -> None:
        self.width, self.height = page_size
        self.margin = margin
        self.state = LayoutState.IDLE
        self._pages: List[Page] = []
        self._rows: List[PlacedRow] = []
        self._cursor = self.top

    @property
    def top(self) -> float:
        return self.height - self.margin

    @property
    def cursor(self) -> float:
        return self._cursor

    @property
    def printable_width(self) -> float:
        return self.width - 2 * self.margin

    def place(self, text: str, size: float, weight: str = "regular", advance: Optional[float] = None) -> None:
        """Draw one row at the cursor and move the cursor down by ``advance``."""

        self._start()
        need = advance if advance is not None else size * PAGE_LAYOUT["line_height_ratio"]
        if self._cursor - need < self.margin:
            self.state = LayoutState.PAGE_FULL
            self._break_page()
        self._rows.append(PlacedRow(text, self.margin, self._cursor, font_name(weight), size))
        self._cursor -= need

    def skip(self, amount: float) -> None:
        self._start()
        self._cursor -= amount

    def finish(self) -> List[Page]:
        if self.state is LayoutState.DONE:
            raise RuntimeError("page composer already finished")
        if self._rows or not self._pages:
            self._pages.append(Page(len(self._pages) + 1, tuple(self._rows)))
        self._rows = []
        self.state = LayoutState.DONE
        return list(self._pages)

    def _start(self) -> None:
        if self.state is LayoutState.DONE:
            raise RuntimeError("page composer already finished")
        if self.state is LayoutState.IDLE:
            self.state = LayoutState.WRITING

    def _break_page(self) -> None:
        self._pages.append(Page(len(self._pages) + 1, tuple(self._rows)))
        self._rows = []
        self._cursor = self.top
        self.state = LayoutState.WRITING


def _place_paragraph(composer: PageComposer, text: str, measure: Measure) -> None:
    size = PAGE_LAYOUT["body_size"]
    rows = wrap_text(sanitize_for_pdf(text), composer.printable_width, measure, size, "regular")
    for row in rows:
        composer.place(row, size)


def layout_pages(
    lines: Sequence[ClassifiedLine],
    metadata: ReportMetadata,
    measure: Measure = helvetica_measure,
    page_size: Tuple[float, float] = PAGE_LAYOUT["page_size"],
) -> List[Page]:
    """Position the title block and every report line on fixed-size pages."""

    composer = PageComposer(page_size=page_size)
    title_size = PAGE_LAYOUT["title_size"]
    composer.place(REPORT_TITLE, title_size, "bold", advance=title_size * PAGE_LAYOUT["line_height_ratio"])
    _place_paragraph(composer, f"Prepared for: {metadata.recipient_name or 'N/A'}", measure)
    _place_paragraph(composer, f"Timestamp (UK): {metadata.timestamp}", measure)
    composer.skip(PAGE_LAYOUT["body_size"] * PAGE_LAYOUT["line_height_ratio"])
    _place_paragraph(composer, metadata.question or "", measure)
    for line in lines:
        _place_paragraph(composer, line.source, measure)
    return composer.finish()


def _draw_pages(pages: Iterable[Page], page_size: Tuple[float, float]) -> bytes:
    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=page_size)
    pdf.setTitle(REPORT_TITLE)
    for page in pages:
        for row in page.rows:
            pdf.setFont(row.font_name, row.font_size)
            pdf.drawString(row.x, row.y, row.text)
        pdf.showPage()
    pdf.save()
    return buffer.getvalue()


def render_pdf(
    lines: Sequence[ClassifiedLine],
    metadata: ReportMetadata,
    measure: Measure = helvetica_measure,
    page_size: Tuple[float, float] = PAGE_LAYOUT["page_size"],
) -> RenderedDocument:
    """Render the report as a paginated PDF held in memory."""

    pages = layout_pages(lines, metadata, measure=measure, page_size=page_size)
    content = _draw_pages(pages, page_size)
    logger.info(f"pdf_rendered pages={len(pages)} bytes={len(content)}")
    return RenderedDocument(content=content, content_type=PDF_CONTENT_TYPE)
