"""Value objects shared by the report renderers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

PDF_CONTENT_TYPE = "application/pdf"
DOCX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


def to_utc(when: datetime) -> datetime:
    """``when`` as an aware UTC datetime; naive values are taken to be UTC."""

    if when.tzinfo is None:
        return when.replace(tzinfo=timezone.utc)
    return when.astimezone(timezone.utc)


def format_timestamp(when: datetime) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a ``Z`` suffix."""

    return to_utc(when).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class ReportMetadata:
    """Request details printed alongside the report body."""

    question: str
    generated_at: datetime
    recipient_name: Optional[str] = None
    item_count: int = 0

    @property
    def timestamp(self) -> str:
        return format_timestamp(self.generated_at)


@dataclass(frozen=True)
class RenderedDocument:
    content: bytes
    content_type: str
