"""
Outgoing email.

Sends through fastapi-mail when mail credentials are configured; otherwise
messages are written to the log so development and tests never need SMTP.
"""
import io
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from fastapi import UploadFile
from fastapi_mail import ConnectionConfig, FastMail, MessageSchema, MessageType
from starlette.datastructures import Headers

from config import settings

logger = logging.getLogger(__name__)


@dataclass
class EmailAttachment:
    filename: str
    content: bytes
    content_type: str = "application/pdf"


@dataclass
class EmailMessage:
    to: List[str]
    subject: str
    html: str
    attachments: List[EmailAttachment] = field(default_factory=list)


class EmailService:

    def __init__(self, connection: Optional[ConnectionConfig] = None):
        self.connection = connection
        self.mailer = FastMail(connection) if connection is not None else None

    @classmethod
    def from_settings(cls) -> "EmailService":
        if not (settings.MAIL_USERNAME and settings.MAIL_PASSWORD):
            logger.warning("Mail credentials not configured, outgoing email will be simulated")
            return cls()
        connection = ConnectionConfig(
            MAIL_USERNAME=settings.MAIL_USERNAME,
            MAIL_PASSWORD=settings.MAIL_PASSWORD,
            MAIL_FROM=settings.MAIL_FROM,
            MAIL_PORT=settings.MAIL_PORT,
            MAIL_SERVER=settings.MAIL_SERVER,
            MAIL_FROM_NAME=settings.COMPANY_NAME,
            MAIL_STARTTLS=True,
            MAIL_SSL_TLS=False,
            USE_CREDENTIALS=True,
            VALIDATE_CERTS=True
        )
        return cls(connection)

    @property
    def is_configured(self) -> bool:
        return self.mailer is not None

    async def send(self, message: EmailMessage) -> None:
        if not message.to:
            logger.warning("Email '%s' has no recipients, skipping", message.subject)
            return

        if not self.is_configured:
            logger.info(
                "EMAIL SIMULATION to=%s subject=%r attachments=%s",
                ", ".join(message.to),
                message.subject,
                [a.filename for a in message.attachments]
            )
            return

        schema = MessageSchema(
            subject=message.subject,
            recipients=message.to,
            body=message.html,
            subtype=MessageType.html,
            attachments=[
                UploadFile(
                    file=io.BytesIO(a.content),
                    filename=a.filename,
                    headers=Headers({"content-type": a.content_type})
                )
                for a in message.attachments
            ]
        )
        await self.mailer.send_message(schema)
        logger.info("Email '%s' sent to %s", message.subject, ", ".join(message.to))
