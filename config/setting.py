from typing import Literal, Optional
from pydantic import EmailStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


SMTP_SSL_PORT = 465


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", frozen=True
    )

    API_PREFIX: str = "/api/v1"
    ALLOWED_ORIGINS: list[str] = ["*"]
    LOG_LEVEL: str = "INFO"
    EXPOSE_DEBUG: bool = False
    TRUST_FORWARDED_FOR: bool = False

    TURNSTILE_SECRET_KEY: str
    TURNSTILE_VERIFY_URL: str = (
        "https://challenges.cloudflare.com/turnstile/v0/siteverify"
    )
    TURNSTILE_TIMEOUT: float = 10.0

    CONTACT_EMAIL_TO: EmailStr
    MAIL_SUBJECT: str = "Nuevo mensaje de contacto - PIXEL TERMO"

    # smtp: authenticated client, sendmail: local mail submission fallback
    MAIL_TRANSPORT: Literal["smtp", "sendmail"] = "smtp"
    MAIL_SERVER: str = ""
    MAIL_PORT: int = 587
    MAIL_USERNAME: str = ""
    MAIL_PASSWORD: str = ""
    MAIL_FROM: Optional[EmailStr] = None
    MAIL_FROM_NAME: str = ""
    MAIL_TIMEOUT: int = 30
    VALIDATE_CERTS: bool = True
    MAIL_DEBUG: bool = False
    SENDMAIL_PATH: str = "/usr/sbin/sendmail"

    @model_validator(mode="after")
    def check_transport_settings(self) -> "Settings":
        """Refuse to start with an incomplete delivery configuration"""
        if not self.TURNSTILE_SECRET_KEY.strip():
            raise ValueError("TURNSTILE_SECRET_KEY must not be empty")
        if self.MAIL_TRANSPORT == "sendmail":
            if self.MAIL_FROM is None:
                raise ValueError("MAIL_FROM is required for sendmail transport")
            return self

        required = {
            "MAIL_SERVER": self.MAIL_SERVER,
            "MAIL_USERNAME": self.MAIL_USERNAME,
            "MAIL_PASSWORD": self.MAIL_PASSWORD,
            "MAIL_FROM": self.MAIL_FROM,
            "MAIL_FROM_NAME": self.MAIL_FROM_NAME,
        }
        missing = [key for key, value in required.items() if not value]
        if missing:
            raise ValueError(
                "smtp transport requires " + ", ".join(missing)
            )
        return self

    @property
    def MAIL_SSL_TLS(self) -> bool:
        return self.MAIL_PORT == SMTP_SSL_PORT

    @property
    def MAIL_STARTTLS(self) -> bool:
        return not self.MAIL_SSL_TLS


settings = Settings()
