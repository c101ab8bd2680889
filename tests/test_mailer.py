import base64
from datetime import datetime, timezone

import requests

from api.services import mailer
from api.services.documents import DOCX_CONTENT_TYPE, PDF_CONTENT_TYPE, RenderedDocument, ReportMetadata
from api.services.report_assembler import RenderedReport


def _rendered():
    return RenderedReport(
        metadata=ReportMetadata(
            question="q",
            generated_at=datetime(2025, 10, 29, 16, 15, tzinfo=timezone.utc),
        ),
        pdf=RenderedDocument(content=b"%PDF-1.4 fake", content_type=PDF_CONTENT_TYPE),
        docx=RenderedDocument(content=b"PK fake", content_type=DOCX_CONTENT_TYPE),
    )


class FakeResponse:
    def __init__(self, status_code=200):
        self.status_code = status_code
        self.ok = status_code < 400
        self.text = "{}"


def test_build_message_filters_recipients_and_attaches_documents():
    message = mailer.build_message(["a@example.com", "", None, " m@example.com "], "Line <1>\nLine 2", _rendered())
    assert message["To"] == [{"Email": "a@example.com"}, {"Email": "m@example.com"}]
    assert message["HTMLPart"] == "<p>Line &lt;1&gt;</p><p>Line 2</p>"
    pdf, docx = message["Attachments"]
    assert pdf["Filename"] == "ecm-audit-2025-10-29T16:15:00.000Z.pdf"
    assert base64.b64decode(pdf["Base64Content"]) == b"%PDF-1.4 fake"
    assert docx["Filename"] == "ecm-report.docx"
    assert docx["ContentType"] == DOCX_CONTENT_TYPE


def test_send_skips_without_credentials(monkeypatch):
    monkeypatch.delenv("MJ_APIKEY_PUBLIC", raising=False)
    monkeypatch.delenv("MJ_APIKEY_PRIVATE", raising=False)

    def fail(*args, **kwargs):
        raise AssertionError("should not send")

    monkeypatch.setattr(mailer.requests, "post", fail)
    assert mailer.send_report_email(["a@example.com"], "text", _rendered()) is None


def test_send_skips_without_recipients(monkeypatch):
    monkeypatch.setenv("MJ_APIKEY_PUBLIC", "pub")
    monkeypatch.setenv("MJ_APIKEY_PRIVATE", "priv")
    assert mailer.send_report_email([None, ""], "text", _rendered()) is None


def test_send_posts_to_mailjet(monkeypatch):
    monkeypatch.setenv("MJ_APIKEY_PUBLIC", "pub")
    monkeypatch.setenv("MJ_APIKEY_PRIVATE", "priv")
    calls = []

    def fake_post(url, json=None, auth=None, timeout=None):
        calls.append({"url": url, "json": json, "auth": auth})
        return FakeResponse(200)

    monkeypatch.setattr(mailer.requests, "post", fake_post)
    assert mailer.send_report_email(["a@example.com"], "text", _rendered()) == 200
    assert calls[0]["url"] == mailer.MAILJET_SEND_URL
    assert calls[0]["auth"] == ("pub", "priv")
    assert calls[0]["json"]["Messages"][0]["Subject"] == mailer.SUBJECT


def test_send_failures_are_not_raised(monkeypatch):
    monkeypatch.setenv("MJ_APIKEY_PUBLIC", "pub")
    monkeypatch.setenv("MJ_APIKEY_PRIVATE", "priv")

    def broken(*args, **kwargs):
        raise requests.ConnectionError("mailjet unreachable")

    monkeypatch.setattr(mailer.requests, "post", broken)
    assert mailer.send_report_email(["a@example.com"], "text", _rendered()) is None
