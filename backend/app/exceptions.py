"""
Careers Site Backend: Custom Exception Hierarchy
==================================================

What:  Application-specific exceptions for every way a submission can fail.
How:   Each exception carries a user-facing message, the HTTP status it maps
       to, and an optional context dict. The context is logged server-side
       and never returned to the client.
Who:   Raised by the upload, validation and mail stages; converted into a
       SubmissionOutcome by ApplicationService, or into a JSON envelope by
       the global handlers registered in main.py.

Exception Hierarchy:
    CareersError (base)                → 500
    ├── ValidationError                → 400 Bad Request (client can fix)
    │   ├── MissingFieldError
    │   ├── InvalidEmailError
    │   └── UploadRejectedError        (bad MIME type or size)
    ├── NotFoundError                  → 404 Not Found
    ├── FileStorageError               → 500 (could not write the upload)
    └── DispatchError                  → 500 (generic send failure)
        ├── TransportError             (connect/auth/timeout)
        └── AttachmentError            (resume unreadable at send time)

User-facing messages are Portuguese; they are shown verbatim by the
application form on the landing page.
"""

from typing import Any, Dict, Optional


class CareersError(Exception):
    """
    Base exception for all careers site errors.

    Attributes:
        message:     User-facing error description (safe to return in API response)
        status_code: HTTP status the error maps to
        context:     Additional debug info (logged but NOT returned to client)
    """

    status_code: int = 500
    default_message: str = "Erro interno do servidor"

    def __init__(
        self,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message or self.default_message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(CareersError):
    """
    Raised when client input fails validation.

    HTTP:    400 Bad Request
    """

    status_code = 400
    default_message = "Dados inválidos"

    def __init__(
        self,
        message: Optional[str] = None,
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class MissingFieldError(ValidationError):
    """One of name, email, position or resume was not sent (or was blank)."""

    default_message = "Todos os campos são obrigatórios"

    def __init__(self, missing: Optional[list] = None):
        super().__init__(context={"missing": missing or []})
        self.missing = missing or []


class InvalidEmailError(ValidationError):
    """The applicant email does not look like local@domain.tld."""

    default_message = "E-mail inválido"

    def __init__(self):
        super().__init__(field="email")


class UploadRejectedError(ValidationError):
    """
    Raised by the upload stage when the resume cannot be accepted.

    When:    Content-type outside PDF/DOC/DOCX, or size above the limit.
    Note:    Raised before the file is kept; any partial write is removed
             before this propagates.
    """

    default_message = "Apenas arquivos PDF e DOC/DOCX são permitidos"

    def __init__(
        self,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, field="resume", context=context)


class NotFoundError(CareersError):
    """Route or resource does not exist."""

    status_code = 404
    default_message = "Rota não encontrada"


class FileStorageError(CareersError):
    """
    Raised when the upload directory cannot be written.

    When:    Disk full, permission denied, I/O error.
    HTTP:    500 Internal Server Error
    """

    default_message = "Erro ao salvar o arquivo enviado"


class DispatchError(CareersError):
    """
    Raised when the notification email could not be delivered.

    HTTP:    500 Internal Server Error
    Subclasses narrow the cause so the client message can tell a
    misconfigured mailbox apart from a transient send failure.
    """

    default_message = "Erro interno do servidor"


class TransportError(DispatchError):
    """
    The SMTP server could not be reached or refused our credentials.

    When:    Connection refused/timed out, TLS handshake failed, AUTH rejected.
             Raised by the verification step, so nothing has been sent.
    """

    default_message = "Erro de configuração do servidor de e-mail"


class AttachmentError(DispatchError):
    """The stored resume could not be read back for attaching."""

    default_message = "Erro ao processar o arquivo anexo"
