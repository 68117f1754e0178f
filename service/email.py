import asyncio
import logging
from email.message import EmailMessage
from email.utils import formataddr
from functools import lru_cache
from pathlib import Path
from typing import NamedTuple, Protocol
import aiosmtplib
from fastapi_mail import ConnectionConfig, FastMail, MessageSchema, MessageType
from fastapi_mail.errors import ConnectionErrors
from fastapi_mail.schemas import MultipartSubtypeEnum
from jinja2 import Environment, FileSystemLoader
from markupsafe import Markup, escape

from config.setting import Settings, settings
from error import DeliveryFailed, SmtpError
from schema.contact import ContactSubmission


TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "template"
PHONE_PLACEHOLDER = "No proporcionado"

logger = logging.getLogger(__name__)


def nl2br(value) -> Markup:
    """Escape the value and turn its line breaks into ``<br />``"""
    return Markup("<br />\n").join(escape(line) for line in str(value).splitlines())


html_env = Environment(loader=FileSystemLoader(TEMPLATE_DIR), autoescape=True)
html_env.filters["nl2br"] = nl2br
text_env = Environment(
    loader=FileSystemLoader(TEMPLATE_DIR),
    autoescape=False,
    keep_trailing_newline=True,
)


class ComposedMessage(NamedTuple):
    html_body: str
    plain_body: str
    subject: str


class MailComposer:
    html_template = "contact_message.html"
    text_template = "contact_message.txt"

    def __init__(self, subject: str = settings.MAIL_SUBJECT):
        self.subject = subject

    def compose(self, submission: ContactSubmission) -> ComposedMessage:
        context = {
            "name": submission.name,
            "email": submission.email,
            "phone": submission.phone or PHONE_PLACEHOLDER,
            "message": submission.message,
        }
        html = html_env.get_template(self.html_template).render(**context)
        text = text_env.get_template(self.text_template).render(**context)
        return ComposedMessage(html, text, self.subject)


class Mailer(Protocol):
    name: str

    async def deliver(
        self, submission: ContactSubmission, composed: ComposedMessage
    ) -> None: ...


class SmtpMailer:
    """Authenticated SMTP delivery through fastapi-mail

    Implicit TLS on port 465, STARTTLS on any other port.
    Raises SmtpError carrying the transport's reason on failure.
    """

    name = "smtp"

    def __init__(self, config: Settings = settings):
        self.recipient = config.CONTACT_EMAIL_TO
        self.mail_config = ConnectionConfig(
            MAIL_USERNAME=config.MAIL_USERNAME,
            MAIL_PASSWORD=str(config.MAIL_PASSWORD).strip(),
            MAIL_FROM=config.MAIL_FROM,
            MAIL_FROM_NAME=config.MAIL_FROM_NAME,
            MAIL_PORT=config.MAIL_PORT,
            MAIL_SERVER=config.MAIL_SERVER,
            MAIL_SSL_TLS=config.MAIL_SSL_TLS,
            MAIL_STARTTLS=config.MAIL_STARTTLS,
            USE_CREDENTIALS=True,
            VALIDATE_CERTS=config.VALIDATE_CERTS,
            MAIL_DEBUG=int(config.MAIL_DEBUG),
            TIMEOUT=config.MAIL_TIMEOUT,
        )

    async def deliver(
        self, submission: ContactSubmission, composed: ComposedMessage
    ) -> None:
        message = MessageSchema(
            subject=composed.subject,
            recipients=[self.recipient],
            body=composed.html_body,
            alternative_body=composed.plain_body,
            subtype=MessageType.html,
            multipart_subtype=MultipartSubtypeEnum.alternative,
            headers={
                "Reply-To": formataddr((submission.name, submission.email))
            },
        )
        try:
            fm = FastMail(self.mail_config)
            await fm.send_message(message)
        except ConnectionErrors as e:
            raise SmtpError(str(e)) from e
        except (aiosmtplib.SMTPException, OSError, asyncio.TimeoutError) as e:
            # failures after login are not wrapped by fastapi-mail
            raise SmtpError(f"{type(e).__name__}: {e}") from e


class SendmailMailer:
    """Fallback delivery through the local ``sendmail`` binary

    Nothing is authenticated and nothing confirms delivery: the only
    signal is the exit status of the submission program, and whatever
    the local MTA does afterwards is invisible here.
    """

    name = "sendmail"

    def __init__(self, config: Settings = settings):
        self.recipient = config.CONTACT_EMAIL_TO
        self.sender = config.MAIL_FROM
        self.sendmail_path = config.SENDMAIL_PATH
        self.timeout = config.MAIL_TIMEOUT

    def build_message(
        self, submission: ContactSubmission, composed: ComposedMessage
    ) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = self.recipient
        message["Reply-To"] = submission.email
        message["Subject"] = composed.subject
        message.set_content(composed.html_body, subtype="html", charset="utf-8")
        return message

    async def submit(self, payload: bytes) -> bool:
        try:
            proc = await asyncio.create_subprocess_exec(
                self.sendmail_path, "-t", "-i",
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
            )
        except OSError:
            return False
        try:
            await asyncio.wait_for(proc.communicate(payload), self.timeout)
        except asyncio.TimeoutError:
            proc.kill()
            await proc.wait()
            return False
        return proc.returncode == 0

    async def deliver(
        self, submission: ContactSubmission, composed: ComposedMessage
    ) -> None:
        message = self.build_message(submission, composed)
        if not await self.submit(message.as_bytes()):
            raise DeliveryFailed(debug={"transport": self.name})


def build_mailer(config: Settings = settings) -> Mailer:
    if config.MAIL_TRANSPORT == "sendmail":
        return SendmailMailer(config)
    return SmtpMailer(config)


@lru_cache
def get_mailer() -> Mailer:
    mailer = build_mailer(settings)
    logger.info(f"Mail delivery strategy: {mailer.name}")
    return mailer


def get_composer() -> MailComposer:
    return MailComposer()
