"""Outbound delivery of rendered reports through the Mailjet send API."""

from __future__ import annotations

import base64
import html
import logging
import os
from typing import Any, Dict, Iterable, List, Optional

import requests

from .report_assembler import RenderedReport

logger = logging.getLogger(__name__)

MAILJET_SEND_URL = "https://api.mailjet.com/v3.1/send"
SENDER = {"Email": "noreply@securemaildrop.uk", "Name": "Secure Maildrop"}
SUBJECT = "Your AI ECM Assistant Report"
DOCX_FILENAME = "ecm-report.docx"


def _recipients(addresses: Iterable[Optional[str]]) -> List[Dict[str, str]]:
    return [{"Email": a.strip()} for a in addresses if a and a.strip()]


def _html_part(report_text: str) -> str:
    return "".join(f"<p>{html.escape(line)}</p>" for line in report_text.split("\n"))


def build_message(recipients: Iterable[Optional[str]], report_text: str, rendered: RenderedReport) -> Dict[str, Any]:
    return {
        "From": SENDER,
        "To": _recipients(recipients),
        "Subject": SUBJECT,
        "TextPart": report_text,
        "HTMLPart": _html_part(report_text),
        "Attachments": [
            {
                "ContentType": rendered.pdf.content_type,
                "Filename": f"ecm-audit-{rendered.timestamp}.pdf",
                "Base64Content": base64.b64encode(rendered.pdf.content).decode("ascii"),
            },
            {
                "ContentType": rendered.docx.content_type,
                "Filename": DOCX_FILENAME,
                "Base64Content": base64.b64encode(rendered.docx.content).decode("ascii"),
            },
        ],
    }


def send_report_email(
    recipients: Iterable[Optional[str]],
    report_text: str,
    rendered: RenderedReport,
    timeout: float = 30,
) -> Optional[int]:
    """Send the report with both attachments; return the HTTP status or ``None``.

    Delivery problems are logged and never raised: the caller has already
    produced the report and still returns it.
    """

    public_key = os.getenv("MJ_APIKEY_PUBLIC")
    private_key = os.getenv("MJ_APIKEY_PRIVATE")
    message = build_message(recipients, report_text, rendered)
    if not message["To"]:
        logger.info("report_email_skipped reason=no_recipients")
        return None
    if not public_key or not private_key:
        logger.warning("report_email_skipped reason=mailjet_credentials_missing")
        return None

    try:
        response = requests.post(
            MAILJET_SEND_URL,
            json={"Messages": [message]},
            auth=(public_key, private_key),
            timeout=timeout,
        )
    except requests.RequestException as exc:
        logger.error(f"report_email_failed: {exc}")
        return None

    if response.ok:
        logger.info(f"report_email_sent status={response.status_code} recipients={len(message['To'])}")
    else:
        logger.error(f"report_email_rejected status={response.status_code} body={response.text[:500]}")
    return response.status_code
