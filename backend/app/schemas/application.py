"""
Careers Site Backend: Pydantic Schemas
========================================

What:  Data shapes for one application submission and the JSON envelopes
       the API returns.
How:   Internal models (StoredResume, ApplicationSubmission,
       SubmissionOutcome) flow between services; response models
       (SubmissionResponse, HealthResponse) are what clients see.
When:  Built per request and discarded when the response is sent.
       Nothing here is persisted.
"""

from datetime import datetime
from pathlib import Path

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Internal Models: passed between pipeline stages
# ══════════════════════════════════════════════════════════════════════════


class StoredResume(BaseModel):
    """
    What:  A resume as written to the upload directory.
    Who:   Yielded by UploadService.accept(); attached by MailService.
    When:  Valid only inside the upload scope; the file is gone afterwards.
    """
    original_name: str = Field(description="Filename as sent by the browser")
    stored_path: Path = Field(description="Absolute path of the temp copy")
    mime_type: str = Field(description="Declared content type (PDF/DOC/DOCX)")
    size_bytes: int = Field(ge=0, description="Bytes written to disk")


class ApplicationSubmission(BaseModel):
    """
    What:  One applicant's validated form data plus the stored resume.
    Who:   Built by ApplicationService after field validation.
    """
    name: str
    email: str
    position: str
    resume: StoredResume
    submitted_at: datetime


# ══════════════════════════════════════════════════════════════════════════
# Response Models: what the API returns to clients
# ══════════════════════════════════════════════════════════════════════════


class SubmissionResponse(BaseModel):
    """
    What:  The `{success, message}` envelope.
    Who:   Returned by POST /enviar-candidatura and by every error handler,
           so the landing page form has one shape to read.
    """
    success: bool = Field(description="Whether the application was delivered")
    message: str = Field(description="Human-readable message shown under the form")


class SubmissionOutcome(BaseModel):
    """
    What:  Terminal result of the intake pipeline.
    How:   ApplicationService converts every expected failure into one of
           these, so the route maps a value to a response instead of
           catching exceptions.
    """
    status_code: int = Field(ge=100, le=599)
    response: SubmissionResponse

    @property
    def success(self) -> bool:
        return self.response.success


class HealthResponse(BaseModel):
    """Liveness probe payload returned by GET /health."""
    status: str = Field(default="OK", description="Always OK while the process serves requests")
    timestamp: datetime = Field(description="Server time (UTC, ISO 8601)")
