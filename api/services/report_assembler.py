"""Turns one generated report into its PDF and DOCX artifacts."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, TypeVar

from .docx_renderer import build_blocks, render_docx
from .documents import RenderedDocument, ReportMetadata
from .line_classifier import ClassifiedLine, classify_report
from .pdf_renderer import render_pdf
from .render_errors import EncodingFailure, ReportRenderError
from .report_footer import footer_for
from .word_wrap import Measure, helvetica_measure

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RenderedReport:
    metadata: ReportMetadata
    pdf: RenderedDocument
    docx: RenderedDocument

    @property
    def timestamp(self) -> str:
        return self.metadata.timestamp


def _encode(document_format: str, build: Callable[[], T]) -> T:
    try:
        return build()
    except ReportRenderError:
        raise
    except Exception as exc:
        raise EncodingFailure(str(exc) or type(exc).__name__, document_format=document_format) from exc


def assemble_report(
    report_text: str,
    metadata: ReportMetadata,
    measure: Measure = helvetica_measure,
    rng: Optional[random.Random] = None,
) -> RenderedReport:
    """Classify ``report_text`` once and render both documents from the result.

    Either renderer failing aborts the whole call; a
    :class:`~api.services.render_errors.ReportRenderError` is raised and no
    partial result is returned.
    """

    lines: Sequence[ClassifiedLine] = tuple(classify_report(report_text))
    footer = footer_for(metadata.generated_at, metadata.item_count, rng=rng)

    pdf = _encode("pdf", lambda: render_pdf(lines, metadata, measure=measure))
    docx = _encode("docx", lambda: render_docx(build_blocks(lines, metadata, footer)))

    logger.info(f"report_assembled lines={len(lines)} pdf_bytes={len(pdf.content)} docx_bytes={len(docx.content)}")
    return RenderedReport(metadata=metadata, pdf=pdf, docx=docx)
