"""Generation of the ECM advisory report text."""

from __future__ import annotations

import logging
import random
import re
from datetime import datetime, timezone
from typing import Awaitable, Callable, Dict, List, Optional, Sequence

from . import llm_client
from .knowledge_index import Embedder, KnowledgeIndexHandle, retrieve_context
from .report_footer import footer_for

logger = logging.getLogger(__name__)

REPORT_SECTIONS = (
    "Query",
    "Applicability / Scope",
    "Relevant Guidance",
    "Evidence Requirements",
    "Common Non-Compliance Factors",
    "Key Reference Materials (FCA, Takeover Panel, FRC, HMRC, LSE, UK Gov, AIM, Aquis)",
    "Practical Wrap-Up",
)

FAIRNESS_SYSTEM_PROMPT = (
    "You are an ISO 42001 fairness auditor. Identify any gender, age, racial, or cultural bias "
    "in the text below. Respond 'No bias detected' if compliant."
)

_APPENDIX = re.compile(r"8\)\s*Appendix.*$", re.IGNORECASE | re.DOTALL)

Completion = Callable[[Sequence[Dict[str, str]]], Awaitable[str]]


def build_prompt(question: str, context: str) -> str:
    structure = "\n".join(f"{i}. {title}" for i, title in enumerate(REPORT_SECTIONS, start=1))
    return f"""
You are a UK corporate finance adviser specialising in Equity Capital Markets (ECM) and public company transactions.
You work to the professional standards of a London-based firm providing FCA-regulated ECM, financial and Takeover Code advisory services.

Use the verified UK Government, FCA, Takeover Panel, FRC, HMRC, AIM, Aquis and London Stock Exchange guidance provided in the Context section as your primary source.
If the Context is limited, you may supplement it with accurate, well-established professional knowledge of ECM practice,
but clearly indicate where information reflects market convention rather than specific regulatory text.

You must:
- Write only the finished report text.
- Do not offer to draft documents or perform legal tasks.
- Keep answers factual, neutral and practical.
- Reflect the tone and scope appropriate for FCA-regulated corporate finance advisers.
- Follow the exact structure shown.

Question: "{question}"

Structure:
{structure}

Context:
{context}
""".strip()


def strip_appendix(text: str) -> str:
    """Drop an ``8) Appendix`` section and everything after it."""

    return _APPENDIX.sub("", text).strip()


async def audit_fairness(text: str, complete: Completion = llm_client.chat_completion) -> str:
    """ISO 42001 bias review of ``text``; never raises."""

    messages = [
        {"role": "system", "content": FAIRNESS_SYSTEM_PROMPT},
        {"role": "user", "content": text},
    ]
    try:
        result = await complete(messages)
    except Exception as exc:
        logger.warning(f"fairness_check_failed: {exc}")
        return f"Fairness verification not completed ({exc})"
    logger.info(f"fairness_check_completed: {result}")
    return result


async def generate_advisory_report(
    question: str,
    knowledge: KnowledgeIndexHandle,
    complete: Completion = llm_client.chat_completion,
    embed: Embedder = llm_client.embed_text,
    now: Optional[datetime] = None,
    rng: Optional[random.Random] = None,
) -> str:
    """Full report text: generated body followed by the registration footer.

    Raises :class:`~api.services.llm_client.LLMUnavailableError` when the
    report itself cannot be generated.
    """

    context = await retrieve_context(knowledge, question, embed=embed)

    messages: List[Dict[str, str]] = [{"role": "user", "content": build_prompt(question, context.text)}]
    text = strip_appendix(await complete(messages))
    fairness = await audit_fairness(text, complete=complete)

    footer = footer_for(now or datetime.now(timezone.utc), context.count, fairness=fairness, rng=rng)
    return f"{text}\n\n\n{footer}"
