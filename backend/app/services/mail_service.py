"""
Careers Site Backend: Notification Mail Service
=================================================

What:  Emails one application (summary + resume attachment) to the HR mailbox.
How:   Builds an EmailMessage, opens an aiosmtplib connection, verifies it
       (connect, STARTTLS, login) and only then sends. One attempt, no retries.
Who:   Called by ApplicationService after the submission has been validated.

Failure mapping:
    connect / TLS / AUTH / disconnect  → TransportError   (mailbox misconfigured or down)
    resume unreadable                  → AttachmentError
    anything else from the server      → DispatchError

TLS:
    secure=True  → implicit TLS from the first byte (port 465)
    secure=False → plaintext connect, STARTTLS when the server offers it
    Certificates are validated unless SmtpConfig.validate_certs is False,
    which Settings only allows outside production.
"""

import html
import logging
from email.message import EmailMessage

import aiofiles
import aiosmtplib

from app.config import SmtpConfig
from app.exceptions import AttachmentError, DispatchError, TransportError
from app.schemas.application import ApplicationSubmission

logger = logging.getLogger(__name__)

# Errors that mean the transport itself is unusable, not this one message
_TRANSPORT_ERRORS = (
    aiosmtplib.SMTPConnectError,
    aiosmtplib.SMTPServerDisconnected,
    aiosmtplib.SMTPAuthenticationError,
    aiosmtplib.SMTPTimeoutError,
)

SUBMITTED_AT_FORMAT = "%d/%m/%Y %H:%M:%S"


class MailService:
    """Sends application notifications through the configured SMTP transport."""

    def __init__(self, config: SmtpConfig):
        self.config = config
        if not config.validate_certs:
            logger.warning(
                "[MailService] TLS certificate validation is DISABLED for %s:%d",
                config.host,
                config.port,
            )

    def _create_client(self) -> aiosmtplib.SMTP:
        return aiosmtplib.SMTP(
            hostname=self.config.host,
            port=self.config.port,
            use_tls=self.config.secure,
            # None lets aiosmtplib upgrade opportunistically when the server offers STARTTLS
            start_tls=False if self.config.secure else None,
            validate_certs=self.config.validate_certs,
            timeout=self.config.timeout,
        )

    def _render_html(self, submission: ApplicationSubmission) -> str:
        submitted_at = submission.submitted_at.astimezone().strftime(SUBMITTED_AT_FORMAT)
        name = html.escape(submission.name)
        email = html.escape(submission.email)
        position = html.escape(submission.position)
        return f"""\
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
    <h2 style="color: #323232;">Nova Candidatura Recebida</h2>
    <div style="background: #f5f5f5; padding: 20px; border-radius: 5px;">
        <p><strong>Nome:</strong> {name}</p>
        <p><strong>E-mail:</strong> {email}</p>
        <p><strong>Cargo desejado:</strong> {position}</p>
        <p><strong>Data do envio:</strong> {submitted_at}</p>
    </div>
    <p style="margin-top: 20px; color: #666;">
        Este e-mail foi enviado automaticamente através do sistema de candidaturas.
    </p>
</div>
"""

    def _render_text(self, submission: ApplicationSubmission) -> str:
        submitted_at = submission.submitted_at.astimezone().strftime(SUBMITTED_AT_FORMAT)
        return (
            "Nova Candidatura Recebida\n\n"
            f"Nome: {submission.name}\n"
            f"E-mail: {submission.email}\n"
            f"Cargo desejado: {submission.position}\n"
            f"Data do envio: {submitted_at}\n"
        )

    def build_message(self, submission: ApplicationSubmission, attachment: bytes) -> EmailMessage:
        """
        Assemble the notification email.

        Args:
            submission: Validated application data
            attachment: Resume bytes, read from submission.resume.stored_path

        Returns:
            EmailMessage with a text part, an HTML alternative and the resume attached.
        """
        message = EmailMessage()
        message["Subject"] = f"Nova Candidatura - {submission.position}"
        message["From"] = self.config.from_email
        message["To"] = self.config.to_email
        message["Reply-To"] = submission.email

        message.set_content(self._render_text(submission))
        message.add_alternative(self._render_html(submission), subtype="html")

        maintype, subtype = submission.resume.mime_type.split("/", 1)
        message.add_attachment(
            attachment,
            maintype=maintype,
            subtype=subtype,
            filename=submission.resume.original_name,
        )
        return message

    async def _read_attachment(self, submission: ApplicationSubmission) -> bytes:
        path = submission.resume.stored_path
        try:
            async with aiofiles.open(path, "rb") as f:
                return await f.read()
        except OSError as e:
            raise AttachmentError(context={"path": str(path), "os_error": str(e)})

    async def verify(self, client: aiosmtplib.SMTP) -> None:
        """
        Connect and authenticate, failing fast if the transport is unusable.

        Raises:
            TransportError: connection, TLS handshake, timeout or AUTH failure
        """
        try:
            await client.connect()
            if self.config.user:
                await client.login(self.config.user, self.config.password or "")
        except (aiosmtplib.SMTPException, OSError) as e:
            raise TransportError(
                context={
                    "host": self.config.host,
                    "port": self.config.port,
                    "error": f"{type(e).__name__}: {e}",
                }
            )

    async def _close(self, client: aiosmtplib.SMTP) -> None:
        if not client.is_connected:
            return
        try:
            await client.quit()
        except aiosmtplib.SMTPException as e:
            logger.debug("[MailService] QUIT failed, closing socket: %s", str(e))
            client.close()

    async def send_application(self, submission: ApplicationSubmission) -> None:
        """
        Email one application with the resume attached.

        Order: read attachment → verify transport → send → close.
        Nothing is sent unless verification succeeds.

        Raises:
            AttachmentError: the stored resume could not be read
            TransportError:  the SMTP server is unreachable or rejected our login
            DispatchError:   the server refused the message
        """
        attachment = await self._read_attachment(submission)
        message = self.build_message(submission, attachment)

        client = self._create_client()
        try:
            await self.verify(client)
            try:
                await client.send_message(message)
            except _TRANSPORT_ERRORS as e:
                raise TransportError(context={"stage": "send", "error": f"{type(e).__name__}: {e}"})
            except (aiosmtplib.SMTPException, OSError) as e:
                raise DispatchError(context={"stage": "send", "error": f"{type(e).__name__}: {e}"})
        finally:
            await self._close(client)

        logger.info(
            "[MailService] Application for '%s' sent to %s",
            submission.position,
            self.config.to_email,
        )
