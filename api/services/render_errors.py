"""Error types raised by the report rendering pipeline."""

from __future__ import annotations

from typing import Optional


class ReportRenderError(RuntimeError):
    """Raised when a report cannot be turned into its document artifacts."""

    kind = "render_failed"

    def __init__(self, detail: str, *, document_format: Optional[str] = None) -> None:
        self.detail = detail
        self.document_format = document_format
        prefix = f"{document_format}: " if document_format else ""
        super().__init__(f"{self.kind}: {prefix}{detail}")


class EncodingFailure(ReportRenderError):
    """A renderer could not produce its byte buffer."""

    kind = "encoding_failure"


class MeasurementFailure(ReportRenderError):
    """The font metrics could not measure a string."""

    kind = "measurement_failure"
