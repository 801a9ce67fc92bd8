"""
Careers Site Backend: Application Service Unit Tests
======================================================

What:  Tests for the intake pipeline (upload → validate → send → outcome).
How:   Real UploadService on a tmp directory; MailService.send_application
       replaced with an AsyncMock.

What we test:
    ✅ Field validation (missing, blank, malformed email)
    ✅ Each failure becomes an outcome with the right status and message
    ✅ The stored resume is gone after every path, including unexpected errors
"""

from unittest.mock import AsyncMock

import pytest

from app.exceptions import DispatchError, InvalidEmailError, MissingFieldError, TransportError
from app.schemas.application import StoredResume
from app.services.application_service import SUCCESS_MESSAGE, ApplicationService
from app.services.mail_service import MailService
from app.services.upload_service import UploadService


@pytest.fixture
def mail_service(test_settings):
    mail = MailService(test_settings.smtp)
    mail.send_application = AsyncMock()
    return mail


@pytest.fixture
def service(upload_dir, mail_service):
    return ApplicationService(
        UploadService(upload_dir=str(upload_dir), max_size=5 * 1024 * 1024),
        mail_service,
    )


@pytest.fixture
def stored_resume(tmp_path):
    return StoredResume(
        original_name="cv.pdf",
        stored_path=tmp_path / "cv.pdf",
        mime_type="application/pdf",
        size_bytes=10,
    )


class TestValidateFields:

    def test_valid_fields(self, service, stored_resume):
        submission = service.validate_fields("Maria", "maria@example.com", "Designer", stored_resume)
        assert submission.name == "Maria"
        assert submission.resume == stored_resume
        assert submission.submitted_at.tzinfo is not None

    def test_whitespace_collapsed(self, service, stored_resume):
        submission = service.validate_fields(
            "  Maria \n Silva ", " maria@example.com ", "Dev\r\nBcc: x@y.com", stored_resume
        )
        assert submission.name == "Maria Silva"
        assert submission.email == "maria@example.com"
        assert "\n" not in submission.position

    @pytest.mark.parametrize(
        "fields, missing",
        [
            ((None, "maria@example.com", "Dev"), ["name"]),
            (("Maria", None, "Dev"), ["email"]),
            (("Maria", "maria@example.com", ""), ["position"]),
            (("   ", "maria@example.com", "Dev"), ["name"]),
            ((None, None, None), ["name", "email", "position"]),
        ],
    )
    def test_missing_fields(self, service, stored_resume, fields, missing):
        with pytest.raises(MissingFieldError, match="Todos os campos são obrigatórios") as exc_info:
            service.validate_fields(*fields, stored_resume)
        assert exc_info.value.missing == missing

    def test_missing_resume(self, service):
        with pytest.raises(MissingFieldError) as exc_info:
            service.validate_fields("Maria", "maria@example.com", "Dev", None)
        assert exc_info.value.missing == ["resume"]

    @pytest.mark.parametrize(
        "email",
        ["maria", "maria@", "@example.com", "maria@example", "maria silva@example.com", "a@b@c"],
    )
    def test_invalid_email(self, service, stored_resume, email):
        with pytest.raises(InvalidEmailError, match="E-mail inválido"):
            service.validate_fields("Maria", email, "Dev", stored_resume)

    @pytest.mark.parametrize("email", ["maria@example.com", "m.silva+jobs@mail.example.com.br"])
    def test_accepted_emails(self, service, stored_resume, email):
        assert service.validate_fields("Maria", email, "Dev", stored_resume).email == email


class TestSubmit:

    @pytest.mark.asyncio
    async def test_success(self, service, mail_service, upload_dir, make_upload, sample_pdf_bytes):
        seen_on_disk = []

        async def capture(submission):
            seen_on_disk.append(submission.resume.stored_path.exists())

        mail_service.send_application.side_effect = capture

        outcome = await service.submit("Maria", "maria@example.com", "Dev", make_upload(sample_pdf_bytes))

        assert outcome.status_code == 200
        assert outcome.success is True
        assert outcome.response.message == SUCCESS_MESSAGE
        assert seen_on_disk == [True]
        assert list(upload_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_missing_field_outcome(self, service, mail_service, upload_dir, make_upload, sample_pdf_bytes):
        outcome = await service.submit(None, "maria@example.com", "Dev", make_upload(sample_pdf_bytes))

        assert outcome.status_code == 400
        assert outcome.response.message == "Todos os campos são obrigatórios"
        mail_service.send_application.assert_not_awaited()
        assert list(upload_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_missing_file_outcome(self, service, mail_service):
        outcome = await service.submit("Maria", "maria@example.com", "Dev", None)

        assert outcome.status_code == 400
        mail_service.send_application.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_email_outcome(self, service, upload_dir, make_upload, sample_pdf_bytes):
        outcome = await service.submit("Maria", "not-an-email", "Dev", make_upload(sample_pdf_bytes))

        assert outcome.status_code == 400
        assert outcome.response.message == "E-mail inválido"
        assert list(upload_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_rejected_upload_outcome(self, service, mail_service, upload_dir, make_upload):
        upload = make_upload(b"GIF89a", filename="foto.gif", content_type="image/gif")
        outcome = await service.submit("Maria", "maria@example.com", "Dev", upload)

        assert outcome.status_code == 400
        assert "PDF e DOC/DOCX" in outcome.response.message
        mail_service.send_application.assert_not_awaited()
        assert list(upload_dir.iterdir()) == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error, message",
        [
            (TransportError(), "Erro de configuração do servidor de e-mail"),
            (DispatchError(), "Erro interno do servidor"),
        ],
    )
    async def test_dispatch_failure_outcome(
        self, service, mail_service, upload_dir, make_upload, sample_pdf_bytes, error, message
    ):
        mail_service.send_application.side_effect = error

        outcome = await service.submit("Maria", "maria@example.com", "Dev", make_upload(sample_pdf_bytes))

        assert outcome.status_code == 500
        assert outcome.success is False
        assert outcome.response.message == message
        assert list(upload_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_unexpected_error_still_cleans_up(self, service, mail_service, upload_dir, make_upload, sample_pdf_bytes):
        mail_service.send_application.side_effect = RuntimeError("boom")

        with pytest.raises(RuntimeError):
            await service.submit("Maria", "maria@example.com", "Dev", make_upload(sample_pdf_bytes))

        assert list(upload_dir.iterdir()) == []
