import io
import random
from datetime import datetime, timedelta, timezone

import docx
import pytest
from pypdf import PdfReader

from api.services import report_assembler
from api.services.documents import ReportMetadata
from api.services.render_errors import EncodingFailure, MeasurementFailure, ReportRenderError
from api.services.report_assembler import assemble_report

SCENARIO = "1. Query\nWhat is required?\n- Item one\n- Item two\nLabel Heading:\nSome body text here."
FRAGMENTS = ("Query", "What is required?", "Item one", "Item two", "Label Heading", "Some body text here.")


def _metadata(**overrides):
    values = {
        "question": "What is required?",
        "generated_at": datetime(2025, 10, 29, 16, 15, tzinfo=timezone.utc),
        "recipient_name": "analyst@example.com",
        "item_count": 42,
    }
    values.update(overrides)
    return ReportMetadata(**values)


def _pdf_text(content):
    return "\n".join(page.extract_text() for page in PdfReader(io.BytesIO(content)).pages)


def _docx_text(content):
    return "\n".join(p.text for p in docx.Document(io.BytesIO(content)).paragraphs)


def test_scenario_renders_both_documents():
    rendered = assemble_report(SCENARIO, _metadata(), rng=random.Random(5))
    assert rendered.pdf.content.startswith(b"%PDF")
    assert rendered.docx.content.startswith(b"PK")
    assert rendered.timestamp == "2025-10-29T16:15:00.000Z"
    pdf_text = _pdf_text(rendered.pdf.content)
    docx_text = _docx_text(rendered.docx.content)
    for fragment in FRAGMENTS:
        assert fragment in pdf_text
        assert fragment in docx_text


def test_empty_report_still_renders_minimal_documents():
    rendered = assemble_report("", _metadata())
    assert "ECM Assistant Report" in _pdf_text(rendered.pdf.content)
    docx_text = _docx_text(rendered.docx.content)
    assert "Generated 2025-10-29T16:15:00.000Z" in docx_text
    assert "Reg. No. AIVS/UK/251029-" in docx_text


def test_footer_date_matches_timestamp_for_non_utc_times():
    eastern = timezone(timedelta(hours=-5))
    rendered = assemble_report("", _metadata(generated_at=datetime(2025, 10, 29, 23, 30, tzinfo=eastern), item_count=1))
    assert rendered.timestamp == "2025-10-30T04:30:00.000Z"
    assert "Reg. No. AIVS/UK/251030-" in _docx_text(rendered.docx.content)


def test_generated_footer_only_survives_in_pdf():
    text = (
        SCENARIO
        + "\n\nThis report was prepared using the AIVS FAISS-indexed ECM knowledge base,\n"
        + "Reg. No. AIVS/UK/000000-0000/3"
    )
    rendered = assemble_report(text, _metadata(item_count=42))
    pdf_text = _pdf_text(rendered.pdf.content)
    docx_text = _docx_text(rendered.docx.content)
    assert "AIVS/UK/000000-0000/3" in pdf_text
    assert "AIVS/UK/000000-0000/3" not in docx_text
    assert docx_text.count("This report was prepared using") == 1
    assert "/42" in docx_text


def test_encoding_errors_are_wrapped(monkeypatch):
    def explode(blocks):
        raise ValueError("zip writer closed")

    monkeypatch.setattr(report_assembler, "render_docx", explode)
    with pytest.raises(EncodingFailure) as info:
        assemble_report(SCENARIO, _metadata())
    assert info.value.document_format == "docx"
    assert "zip writer closed" in str(info.value)


def test_measurement_failures_propagate_unchanged():
    def broken(text, size, weight):
        raise MeasurementFailure("font metrics unavailable")

    with pytest.raises(MeasurementFailure):
        assemble_report(SCENARIO, _metadata(), measure=broken)


def test_render_errors_share_a_base_class():
    assert issubclass(EncodingFailure, ReportRenderError)
    assert issubclass(MeasurementFailure, ReportRenderError)
