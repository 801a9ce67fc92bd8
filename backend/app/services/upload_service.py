"""
Careers Site Backend: Resume Upload Service
=============================================

What:  Accepts the resume file from a submission, writes it to the upload
       directory, and guarantees it is deleted when the request is done.
How:   Validates the declared content type and size, streams the upload to
       disk in chunks (re-checking size as it goes), and exposes the stored
       file through an async context manager whose exit block removes it.
Who:   Called by ApplicationService as the first stage of the intake pipeline.

Lifecycle of an uploaded resume:
    1. accept(upload) enters the scope
    2. Content-type check (PDF, DOC, DOCX only), nothing written yet
    3. Declared size check against max_upload_size
    4. Chunked copy into <upload_dir>/<epoch-ms>-<random>_<name>
       → oversize stream: partial file removed, UploadRejectedError
    5. StoredResume yielded to the caller
    6. Scope exit (success or any exception): file removed

Naming:
    Stored names combine a millisecond timestamp, a random hex suffix and
    the sanitised original name, so identical resubmissions never collide.
"""

import logging
import re
import secrets
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional

import aiofiles
from fastapi import UploadFile

from app.exceptions import FileStorageError, UploadRejectedError
from app.schemas.application import StoredResume

logger = logging.getLogger(__name__)

# ── Allowed File Types ────────────────────────────────────────────────────
ALLOWED_MIME_TYPES = {
    "application/pdf": ".pdf",
    "application/msword": ".doc",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": ".docx",
}

CHUNK_SIZE = 64 * 1024

# Anything outside word characters, dots and dashes becomes "_"
_UNSAFE_FILENAME_CHARS = re.compile(r"[^\w.\-]+")
_MAX_NAME_LENGTH = 120


class UploadService:
    """
    Manages the short life of an uploaded resume.

    Directory Structure:
        uploads/
        ├── 1718000000000-a1b2c3d4e5f6_curriculo.pdf
        └── 1718000000412-0f9e8d7c6b5a_cv_maria.docx

    Every file in the directory belongs to a request that is still running.
    """

    def __init__(self, upload_dir: str, max_size: int):
        """
        Args:
            upload_dir: Scratch directory for in-flight resumes (created if missing)
            max_size:   Maximum accepted resume size in bytes
        """
        self.upload_dir = Path(upload_dir).resolve()
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        self.max_size = max_size
        logger.info("UploadService initialized with upload_dir=%s", self.upload_dir)

    @property
    def max_size_mb(self) -> int:
        return round(self.max_size / (1024 * 1024))

    def validate_content_type(self, content_type: Optional[str]) -> str:
        """
        Check the declared content type against the allow-list.

        Returns: Normalized MIME type (lowercase, parameters stripped).
        Raises:  UploadRejectedError for anything but PDF, DOC or DOCX.
        """
        mime_type = (content_type or "").split(";", 1)[0].strip().lower()
        if mime_type not in ALLOWED_MIME_TYPES:
            raise UploadRejectedError(
                context={"content_type": content_type, "allowed": list(ALLOWED_MIME_TYPES)},
            )
        return mime_type

    def validate_size(self, size: Optional[int]) -> None:
        """
        Reject a resume larger than max_size.

        Called with the size the multipart parser reports (may be None)
        before writing, and with the running byte count while streaming.
        """
        if size is not None and size > self.max_size:
            raise UploadRejectedError(
                message=f"Arquivo muito grande. Tamanho máximo permitido: {self.max_size_mb}MB",
                context={"size": size, "max_size": self.max_size},
            )

    def _sanitize_filename(self, filename: str) -> str:
        # Browsers on Windows may send the full client path
        name = Path(filename.replace("\\", "/")).name
        name = _UNSAFE_FILENAME_CHARS.sub("_", name).strip("._")
        return name[-_MAX_NAME_LENGTH:] or "curriculo"

    def _generate_storage_path(self, filename: str) -> Path:
        """
        Build a unique path inside upload_dir.

        Format: <epoch milliseconds>-<12 hex chars>_<sanitised name>
        """
        unique_prefix = f"{int(time.time() * 1000)}-{secrets.token_hex(6)}"
        return self.upload_dir / f"{unique_prefix}_{self._sanitize_filename(filename)}"

    async def store_file(self, upload: UploadFile) -> StoredResume:
        """
        Validate and copy an upload into the upload directory.

        Returns: StoredResume describing the written file.
        Raises:
            UploadRejectedError: bad content type, or too large (partial file removed)
            FileStorageError:    the directory could not be written
            Anything else raised mid-stream propagates after the partial file is removed
        """
        mime_type = self.validate_content_type(upload.content_type)
        self.validate_size(upload.size)

        path = self._generate_storage_path(upload.filename or "")
        written = 0

        try:
            async with aiofiles.open(path, "wb") as f:
                while True:
                    chunk = await upload.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    written += len(chunk)
                    self.validate_size(written)
                    await f.write(chunk)
        except UploadRejectedError:
            await self.cleanup_file(path)
            raise
        except OSError as e:
            logger.error("Failed to store upload at %s: %s", path, str(e))
            await self.cleanup_file(path)
            raise FileStorageError(context={"path": str(path), "os_error": str(e)})
        except BaseException:
            # Read failure or client disconnect
            await self.cleanup_file(path)
            raise

        logger.info("Resume stored: %s (%d bytes, %s)", path.name, written, mime_type)
        return StoredResume(
            original_name=upload.filename or path.name,
            stored_path=path,
            mime_type=mime_type,
            size_bytes=written,
        )

    async def cleanup_file(self, file_path: Path) -> None:
        """
        Remove a stored resume if it is still on disk.

        Missing files are ignored. Other OS errors are logged and not raised,
        so cleanup never replaces the error that is already on its way out.
        """
        path = Path(file_path)
        try:
            path.unlink()
            logger.info("Cleaned up file: %s", path.name)
        except FileNotFoundError:
            logger.debug("Cleanup: file already gone: %s", path.name)
        except OSError as e:
            logger.warning("Failed to clean up file %s: %s", path, str(e))

    def purge_stale_uploads(self) -> int:
        """
        Delete files left behind by a previous process (crash, SIGKILL).

        Called once at startup, before any request can own a file here.
        Returns: Number of files removed.
        """
        removed = 0
        for path in self.upload_dir.iterdir():
            if not path.is_file():
                continue
            try:
                path.unlink()
                removed += 1
            except OSError as e:
                logger.warning("Failed to remove stale upload %s: %s", path.name, str(e))
        if removed:
            logger.warning("Removed %d stale upload(s) from %s", removed, self.upload_dir)
        return removed

    @asynccontextmanager
    async def accept(self, upload: Optional[UploadFile]) -> AsyncIterator[Optional[StoredResume]]:
        """
        Scope a stored resume to the block that uses it.

        Yields None when the form carried no file (missing field or an empty
        file input), so the caller can report the missing field itself.

        Usage:
            async with upload_service.accept(upload) as resume:
                ...  # resume.stored_path exists here
            # ...and is gone here, whatever happened inside the block
        """
        if upload is None or not upload.filename:
            yield None
            return

        resume = await self.store_file(upload)
        try:
            yield resume
        finally:
            await self.cleanup_file(resume.stored_path)
