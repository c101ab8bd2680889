"""Endpoint that answers a question with a generated, rendered and mailed report."""

import asyncio
import logging
import traceback
from datetime import datetime, timezone

from fastapi import APIRouter, Body, Request
from fastapi.responses import JSONResponse

from ..schemas import AskRequest, AskResponse
from ..services.advisory_report import generate_advisory_report
from ..services.documents import ReportMetadata
from ..services.knowledge_index import KnowledgeIndexHandle
from ..services.llm_client import LLMUnavailableError
from ..services.mailer import send_report_email
from ..services.render_errors import ReportRenderError
from ..services.report_assembler import assemble_report

logger = logging.getLogger(__name__)
router = APIRouter(tags=["ask"])

REPORT_FAILED = {"error": "Report generation failed"}


def _knowledge(request: Request) -> KnowledgeIndexHandle:
    return request.app.state.knowledge


@router.post("/ask", response_model=AskResponse)
async def ask(
    request: Request,
    req: AskRequest = Body(
        ...,
        examples=[
            {
                "question": "What disclosures are required for an AIM admission document?",
                "email": "analyst@example.com",
                "managerEmail": "manager@example.com",
                "clientEmail": "",
            }
        ],
    ),
):
    """
    Generate an ECM advisory report for ``question``.

    The report text is returned in the response; the PDF and DOCX renderings
    are emailed to every non-empty address in the request.
    """
    question = (req.question or "").strip()
    logger.info(f"ask_received question={question!r} recipients={sum(1 for r in req.recipients() if r)}")
    if not question:
        return JSONResponse({"error": "Missing question"}, status_code=400)

    knowledge = _knowledge(request)
    generated_at = datetime.now(timezone.utc)
    try:
        report_text = await generate_advisory_report(question, knowledge, now=generated_at)
        rendered = assemble_report(
            report_text,
            ReportMetadata(
                question=question,
                generated_at=generated_at,
                recipient_name=req.email,
                item_count=knowledge.size,
            ),
        )
    except LLMUnavailableError as exc:
        logger.error(f"LLM_UNAVAILABLE: {exc}")
        return JSONResponse(REPORT_FAILED, status_code=500)
    except ReportRenderError as exc:
        logger.error(f"REPORT_RENDER_ERROR: {exc}")
        return JSONResponse(REPORT_FAILED, status_code=500)
    except Exception as exc:  # pragma: no cover - unexpected runtime
        logger.error(f"ASK_ERROR: {exc}")
        logger.error(f"TRACEBACK: {traceback.format_exc()}")
        return JSONResponse(REPORT_FAILED, status_code=500)

    await asyncio.to_thread(send_report_email, req.recipients(), report_text, rendered)
    return AskResponse(question=question, answer=report_text, timestamp=rendered.timestamp)
