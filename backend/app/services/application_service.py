"""
Careers Site Backend: Application Intake Service
==================================================

What:  Runs one job application through the intake pipeline.
How:   Composes UploadService and MailService; converts every expected
       failure into a SubmissionOutcome so the route never handles exceptions.
Who:   Called by POST /enviar-candidatura.

Pipeline:
    ┌──────────────┐   ┌───────────────┐   ┌──────────────┐   ┌──────────┐
    │ Accept upload│──▶│ Validate      │──▶│ Send email   │──▶│ Outcome  │
    │ (scoped)     │   │ fields        │   │ (MailService)│   │ 200      │
    └──────┬───────┘   └──────┬────────┘   └──────┬───────┘   └──────────┘
           │ type/size        │ missing/email     │ transport/send
           ▼                  ▼                   ▼
        400 outcome        400 outcome         500 outcome

    The upload scope wraps validation and sending, so the stored resume is
    deleted on every path out of submit(), including unexpected errors.
"""

import logging
import re
from datetime import datetime, timezone
from typing import Optional

from fastapi import UploadFile

from app.exceptions import CareersError, InvalidEmailError, MissingFieldError
from app.schemas.application import (
    ApplicationSubmission,
    StoredResume,
    SubmissionOutcome,
    SubmissionResponse,
)
from app.services.mail_service import MailService
from app.services.upload_service import UploadService

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

SUCCESS_MESSAGE = "Candidatura enviada com sucesso! Entraremos em contato em breve."


def _clean(value: Optional[str]) -> str:
    # Collapses runs of whitespace (including CR/LF) so values are safe in mail headers
    return " ".join((value or "").split())


class ApplicationService:
    """
    Business logic for job applications.

    Stateless apart from its two collaborators, which are injected by the
    application factory.
    """

    def __init__(self, upload_service: UploadService, mail_service: MailService):
        self.upload_service = upload_service
        self.mail_service = mail_service

    def validate_fields(
        self,
        name: Optional[str],
        email: Optional[str],
        position: Optional[str],
        resume: Optional[StoredResume],
    ) -> ApplicationSubmission:
        """
        Check the form fields and build the submission.

        Raises:
            MissingFieldError: name, email, position or resume absent/blank
            InvalidEmailError: email not shaped like local@domain.tld
        """
        fields = {"name": _clean(name), "email": _clean(email), "position": _clean(position)}
        missing = [field for field, value in fields.items() if not value]
        if resume is None:
            missing.append("resume")
        if missing:
            raise MissingFieldError(missing=missing)

        if not EMAIL_PATTERN.match(fields["email"]):
            raise InvalidEmailError()

        return ApplicationSubmission(
            **fields,
            resume=resume,
            submitted_at=datetime.now(timezone.utc),
        )

    async def submit(
        self,
        name: Optional[str],
        email: Optional[str],
        position: Optional[str],
        resume: Optional[UploadFile],
    ) -> SubmissionOutcome:
        """
        Accept, validate and email one application.

        Returns:
            SubmissionOutcome with 200 on delivery, 400 for upload/field
            problems, 500 when the email could not be sent.

        Raises:
            Only unexpected exceptions; the stored resume is still removed
            and the global handler answers 500.
        """
        try:
            async with self.upload_service.accept(resume) as stored:
                submission = self.validate_fields(name, email, position, stored)
                await self.mail_service.send_application(submission)
        except CareersError as exc:
            return self._failure(exc)

        logger.info("Application sent: %s - %s", submission.name, submission.position)
        return SubmissionOutcome(
            status_code=200,
            response=SubmissionResponse(success=True, message=SUCCESS_MESSAGE),
        )

    def _failure(self, exc: CareersError) -> SubmissionOutcome:
        if exc.status_code >= 500:
            logger.error("Application failed: %s | Context: %s", type(exc).__name__, exc.context)
        else:
            logger.warning("Application rejected: %s | Context: %s", exc.message, exc.context)
        return SubmissionOutcome(
            status_code=exc.status_code,
            response=SubmissionResponse(success=False, message=exc.message),
        )
