"""
Careers Site Backend: Application Configuration
=================================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Read by the application factory, which builds the service graph
       and hands each service the slice of configuration it needs.
When:  Loaded once at module import time; validated before app starts.

Environment variable names follow the deployment this backend replaces
(PORT, SMTP_HOST, SMTP_PASS, NODE_ENV, ...), so an existing .env keeps working.
"""

from typing import Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator
from pydantic_settings import BaseSettings

PRODUCTION_ENVIRONMENTS = {"production", "prod"}


class SmtpConfig(BaseModel):
    """
    Outbound mail transport settings handed to MailService at construction.

    Immutable: MailService never reads the environment itself, so a test or
    a second app instance can run with a different transport side by side.
    """

    host: str
    port: int
    secure: bool = False
    user: Optional[str] = None
    password: Optional[str] = None
    from_email: str
    to_email: str
    timeout: float = 30.0
    validate_certs: bool = True

    model_config = {"frozen": True}


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have development defaults. Production deployments MUST set
    the SMTP credentials and mailbox addresses.
    """

    # ── Server ────────────────────────────────────────────────────────────
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000, ge=1, le=65535)

    # What: Deployment environment; "production" tightens TLS handling
    environment: str = Field(
        default="development",
        validation_alias=AliasChoices("NODE_ENV", "ENVIRONMENT"),
    )

    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Static Site ───────────────────────────────────────────────────────
    # What: Directory holding index.html and assets/, relative to the CWD
    public_dir: str = Field(default="./public")

    # ── Uploads ───────────────────────────────────────────────────────────
    # What: Scratch directory for resumes while a submission is in flight.
    # Files here never outlive the request that wrote them.
    upload_dir: str = Field(default="./uploads")

    # What: Maximum resume size in bytes (default 5MB)
    max_upload_size: int = Field(default=5 * 1024 * 1024, ge=1024, le=52_428_800)

    # ── SMTP ──────────────────────────────────────────────────────────────
    smtp_host: str = Field(default="smtp.hostinger.com")
    smtp_port: int = Field(default=587, ge=1, le=65535)

    # What: Implicit TLS from the first byte (port 465). False means
    # plaintext connect followed by STARTTLS when the server offers it.
    smtp_secure: Optional[bool] = Field(default=None)

    smtp_user: str = Field(default="")
    smtp_pass: str = Field(default="")
    smtp_timeout: float = Field(default=30.0, gt=0, le=300)

    # What: Skip certificate validation. Honoured outside production only.
    smtp_tls_insecure: bool = Field(default=False)

    from_email: str = Field(default="contato@pereirawesolutions.com.br")
    to_email: str = Field(default="rh@pereirawesolutions.com.br")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "populate_by_name": True,
    }

    @property
    def is_production(self) -> bool:
        return self.environment.lower() in PRODUCTION_ENVIRONMENTS

    @property
    def smtp(self) -> SmtpConfig:
        """
        What:  Snapshot of the transport configuration for MailService.
        How:   Resolves the implicit-TLS default from the port and gates
               the insecure-TLS switch on the environment.
        """
        secure = self.smtp_secure if self.smtp_secure is not None else self.smtp_port == 465
        return SmtpConfig(
            host=self.smtp_host,
            port=self.smtp_port,
            secure=secure,
            user=self.smtp_user or None,
            password=self.smtp_pass or None,
            from_email=self.from_email,
            to_email=self.to_email,
            timeout=self.smtp_timeout,
            validate_certs=not (self.smtp_tls_insecure and not self.is_production),
        )

    def validate_required_for_production(self) -> None:
        """
        What:  Validates that the mail transport is configured.
        When:  Called during app startup (lifespan).
        How:   Collects every problem and raises one ValueError listing them.
        """
        errors = []
        if not self.smtp_user or not self.smtp_pass:
            errors.append(
                "SMTP_USER and SMTP_PASS are not set. "
                "Applications cannot be emailed until the mailbox credentials are configured."
            )
        if self.smtp_tls_insecure and self.is_production:
            errors.append(
                "SMTP_TLS_INSECURE is ignored in production; certificates are always validated."
            )
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


# Singleton instance: imported by the application factory
settings = Settings()
