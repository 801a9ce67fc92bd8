"""
Careers Site Backend: Application Submission Route
====================================================

What:  Handles POST /enviar-candidatura, the landing page's job-application form.
How:   Receives the multipart form, hands the fields and the resume to
       ApplicationService, and turns the returned outcome into JSON.
Who:   Called by the form in public/index.html (fetch + FormData).

Request Flow:
    1. Browser sends multipart/form-data: name, email, position, resume
    2. FastAPI parses the form (every field optional here, so a missing
       field becomes our 400 envelope rather than FastAPI's 422)
    3. ApplicationService runs upload → validate → send, cleanup included
    4. Outcome → {success, message} with 200 / 400 / 500
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse

from app.schemas.application import SubmissionResponse
from app.services.application_service import ApplicationService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Applications"])


def get_application_service(request: Request) -> ApplicationService:
    """Service graph is built by create_app() and kept on app.state."""
    return request.app.state.application_service


@router.post(
    "/enviar-candidatura",
    response_model=SubmissionResponse,
    responses={
        200: {"description": "Application emailed to HR", "model": SubmissionResponse},
        400: {"description": "Missing field, invalid email, or rejected resume", "model": SubmissionResponse},
        500: {"description": "Mail transport failure", "model": SubmissionResponse},
    },
    summary="Submit a job application",
    description=(
        "Accepts name, email, desired position and a resume (PDF, DOC or DOCX, max 5MB). "
        "The application is emailed to the HR mailbox with the resume attached; "
        "the uploaded file is deleted before the response is returned."
    ),
)
async def submit_application(
    name: Optional[str] = Form(default=None),
    email: Optional[str] = Form(default=None),
    position: Optional[str] = Form(default=None),
    resume: Optional[UploadFile] = File(default=None, description="Resume (PDF, DOC or DOCX)"),
    service: ApplicationService = Depends(get_application_service),
) -> JSONResponse:
    logger.info(
        "Received application: position=%s, file=%s",
        position or "-",
        resume.filename if resume is not None else "-",
    )
    try:
        outcome = await service.submit(name=name, email=email, position=position, resume=resume)
    finally:
        if resume is not None:
            await resume.close()

    return JSONResponse(status_code=outcome.status_code, content=outcome.response.model_dump())
