"""Registration numbers and the boilerplate footer appended to every report."""

from __future__ import annotations

import random
from datetime import datetime
from typing import Optional

from .documents import to_utc

REGISTRATION_PREFIX = "AIVS/UK"
ISSUER = "AIVS Software Limited"

_FOOTER_BODY = (
    "This report was prepared using the AIVS FAISS-indexed ECM knowledge base,\n"
    "derived entirely from verified UK Government, HSE, DEFRA and professional manuals.\n"
    "It is provided for internal compliance and advisory purposes only and should not\n"
    "be relied upon as a substitute for professional environmental or compliance advice."
)


def generate_registration_code(when: datetime, rng: Optional[random.Random] = None) -> str:
    """``YYMMDD-NNNN``: the UTC date of ``when`` plus a random four digit suffix."""

    rng = rng or random.Random()
    return f"{to_utc(when):%y%m%d}-{rng.randint(1000, 9999)}"


def registration_number(code: str, item_count: int) -> str:
    return f"{REGISTRATION_PREFIX}/{code}/{item_count}"


def build_footer(
    registration: str,
    year: int,
    fairness: Optional[str] = None,
) -> str:
    lines = [_FOOTER_BODY, ""]
    if fairness is not None:
        lines.append(f"ISO 42001 Fairness Verification: {fairness}")
    lines.append(f"Reg. No. {registration}")
    lines.append(f"© {ISSUER} {year} — All rights reserved.")
    return "\n".join(lines)


def footer_for(
    when: datetime,
    item_count: int,
    fairness: Optional[str] = None,
    rng: Optional[random.Random] = None,
) -> str:
    """Footer with a freshly generated registration number."""

    code = generate_registration_code(when, rng)
    return build_footer(registration_number(code, item_count), to_utc(when).year, fairness)
