"""
Careers Site Backend: Test Configuration (conftest.py)
========================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    ├── upload_dir:   Fresh upload directory per test (tmp_path)
    ├── test_settings: Settings pointing at upload_dir and a fake SMTP host
    ├── smtp_client:  Mock aiosmtplib.SMTP (no network)
    ├── mock_smtp:    Patches MailService to hand out smtp_client
    ├── make_upload:  Builds Starlette UploadFile objects for service tests
    └── test_client:  HTTPX AsyncClient wired to a fresh app instance
"""

import io
import os
import tempfile
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from starlette.datastructures import Headers, UploadFile

REPO_ROOT = Path(__file__).resolve().parents[2]

# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Set BEFORE any app import: app.main builds a module-level app from these
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="careers_test_uploads_")
os.environ["PUBLIC_DIR"] = str(REPO_ROOT / "public")
os.environ["SMTP_HOST"] = "smtp.invalid"
os.environ["SMTP_USER"] = "site@example.com"
os.environ["SMTP_PASS"] = "test-pass-not-real"
os.environ["LOG_LEVEL"] = "WARNING"

from app.config import Settings  # noqa: E402
from app.main import create_app  # noqa: E402
from app.services.mail_service import MailService  # noqa: E402

PDF_MIME = "application/pdf"


@pytest.fixture
def upload_dir(tmp_path) -> Path:
    path = tmp_path / "uploads"
    path.mkdir()
    return path


@pytest.fixture
def test_settings(upload_dir) -> Settings:
    return Settings(
        upload_dir=str(upload_dir),
        public_dir=str(REPO_ROOT / "public"),
        smtp_host="smtp.test",
        smtp_port=587,
        smtp_user="site@example.com",
        smtp_pass="secret",
        from_email="site@example.com",
        to_email="rh@example.com",
        log_level="WARNING",
    )


@pytest.fixture
def sample_pdf_bytes() -> bytes:
    """Smallest document that still starts with a PDF header."""
    return b"%PDF-1.4\n1 0 obj\n<< /Type /Catalog >>\nendobj\ntrailer\n<< /Root 1 0 R >>\n%%EOF\n"


@pytest.fixture
def smtp_client() -> MagicMock:
    """
    Stand-in for aiosmtplib.SMTP.

    Usage:
        smtp_client.connect.side_effect = aiosmtplib.SMTPConnectError("refused")
    """
    client = MagicMock()
    client.connect = AsyncMock()
    client.login = AsyncMock()
    client.send_message = AsyncMock(return_value=({}, "OK"))
    client.quit = AsyncMock()
    client.is_connected = True
    return client


@pytest.fixture
def mock_smtp(smtp_client):
    with patch.object(MailService, "_create_client", return_value=smtp_client):
        yield smtp_client


@pytest.fixture
def make_upload():
    """
    Factory for Starlette UploadFile objects.

    size=None mimics a multipart parser that did not report a size.
    """

    def _make(content: bytes, filename: str = "curriculo.pdf", content_type: str = PDF_MIME, size="auto"):
        return UploadFile(
            file=io.BytesIO(content),
            filename=filename,
            headers=Headers({"content-type": content_type}),
            size=len(content) if size == "auto" else size,
        )

    return _make


@pytest.fixture
def app(test_settings):
    return create_app(test_settings)


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient routed straight into the app (no server).

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
