"""
Careers Site Backend: Upload Size Guard
=========================================

What:  Rejects POST bodies whose declared Content-Length cannot fit a resume
       under the upload limit, before the multipart form is parsed.
How:   Compares Content-Length against max_upload_size plus a fixed allowance
       for the text fields and multipart boundaries. Oversized requests get
       the same 400 envelope UploadService uses for an oversized file.
When:  Innermost custom middleware, so rejections are still access-logged
       and carry X-Request-ID.

Chunked bodies (no Content-Length) pass through; UploadService still stops
writing once the stream crosses the limit.
"""

import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from app.exceptions import UploadRejectedError
from app.services.upload_service import UploadService

logger = logging.getLogger(__name__)

# Name, email, position and the multipart framing around them
FORM_OVERHEAD_BYTES = 64 * 1024


class UploadLimitMiddleware(BaseHTTPMiddleware):
    """Short-circuit POSTs that announce a body larger than any valid application."""

    def __init__(self, app, upload_service: UploadService, **kwargs):
        super().__init__(app, **kwargs)
        self.upload_service = upload_service

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.method != "POST":
            return await call_next(request)

        declared = request.headers.get("content-length")
        if declared is not None and declared.isdigit():
            try:
                self.upload_service.validate_size(int(declared) - FORM_OVERHEAD_BYTES)
            except UploadRejectedError as exc:
                logger.warning(
                    "Rejected %s body of %s bytes before parsing (limit %d + %d)",
                    request.url.path,
                    declared,
                    self.upload_service.max_size,
                    FORM_OVERHEAD_BYTES,
                )
                return JSONResponse(
                    status_code=exc.status_code,
                    content={"success": False, "message": exc.message},
                )

        return await call_next(request)
