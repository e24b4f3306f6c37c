import asyncio
import inspect
import logging
from html import escape
from typing import Callable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from config import settings
from modules.auth.models.user import Role, User
from modules.contracts.models.access_token import GuestAccessToken
from modules.contracts.models.contract import Contract
from modules.contracts.services.pdf_service import generate_signed_contract_pdf, signed_contract_filename
from modules.contracts.services.template_renderer import format_currency, format_date
from modules.contracts.services.token_service import signing_url
from modules.notifications.repositories.notification_repository import NotificationRepository
from modules.notifications.services.email_service import EmailAttachment, EmailMessage, EmailService
from modules.notifications.services.notification_service import (
    ContractSentNotification,
    ContractSignedNotification,
    NotificationService,
)

logger = logging.getLogger(__name__)

# Signature of BackgroundTasks.add_task
Scheduler = Callable[..., None]


def run_inline(func, *args, **kwargs):
    """Scheduler used outside a request: runs the job before returning."""
    if inspect.iscoroutinefunction(func):
        asyncio.run(func(*args, **kwargs))
    else:
        func(*args, **kwargs)


class ContractNotifier:
    """
    Side effects of contract transitions: emails and in-app notifications.

    Every method here runs after the transition has been committed and never
    raises; delivery problems are logged and the contract stays as it is.
    """

    def __init__(
        self,
        session: Session,
        email_service: EmailService,
        schedule: Optional[Scheduler] = None,
    ):
        self.session = session
        self.email_service = email_service
        self.schedule = schedule or run_inline
        self.notification_service = NotificationService(NotificationRepository(session))

    def contract_sent(self, contract: Contract, access_token: GuestAccessToken) -> None:
        message = EmailMessage(
            to=[contract.guest_email],
            subject=f"Contract Ready for Your Signature - {settings.COMPANY_NAME}",
            html=self._sent_html(contract, access_token),
        )
        self._dispatch(message)

        if contract.admin_id is not None:
            self._notify_in_app([
                ContractSentNotification(contract.admin_id, contract.project_name, contract.guest_name)
            ])

    def contract_signed(self, contract: Contract) -> None:
        attachments: List[EmailAttachment] = []
        try:
            attachments.append(EmailAttachment(
                filename=signed_contract_filename(contract),
                content=generate_signed_contract_pdf(contract),
            ))
        except Exception:
            logger.exception("Could not generate signed PDF for contract %s", contract.id)

        self._dispatch(EmailMessage(
            to=[contract.signed_email or contract.guest_email],
            subject=f"Contract Signed Successfully - {contract.project_name}",
            html=self._guest_confirmation_html(contract),
            attachments=attachments,
        ))
        if settings.ADMIN_NOTIFICATION_EMAILS:
            self._dispatch(EmailMessage(
                to=list(settings.ADMIN_NOTIFICATION_EMAILS),
                subject=f"Contract Signed by {contract.signed_name} - {contract.project_name}",
                html=self._admin_signed_html(contract),
                attachments=attachments,
            ))

        try:
            admin_ids = [
                row.id for row in
                self.session.query(User.id).filter(User.role == Role.ADMIN, User.is_active.is_(True)).all()
            ]
        except SQLAlchemyError:
            logger.exception("Could not load admins to notify for contract %s", contract.id)
            return
        self._notify_in_app([
            ContractSignedNotification(admin_id, contract.project_name, contract.signed_name)
            for admin_id in admin_ids
        ])

    def _dispatch(self, message: EmailMessage) -> None:
        try:
            self.schedule(self._send_safely, message)
        except Exception:
            logger.exception("Could not schedule email '%s'", message.subject)

    async def _send_safely(self, message: EmailMessage) -> None:
        try:
            await self.email_service.send(message)
        except Exception:
            logger.exception("Failed to send email '%s' to %s", message.subject, ", ".join(message.to))

    def _notify_in_app(self, templates) -> None:
        if not templates:
            return
        try:
            self.notification_service.notify_many(templates)
        except SQLAlchemyError:
            self.session.rollback()
            logger.exception("Failed to store in-app notifications")

    @staticmethod
    def _sent_html(contract: Contract, access_token: GuestAccessToken) -> str:
        url = signing_url(access_token.token)
        rows = [
            ("Project", escape(contract.project_name)),
            ("Amount", format_currency(contract.total_amount)),
        ]
        if contract.start_date:
            rows.append(("Start Date", format_date(contract.start_date)))
        if contract.end_date:
            rows.append(("End Date", format_date(contract.end_date)))
        details = "".join(
            f"<tr><td><strong>{label}:</strong></td><td>{value}</td></tr>" for label, value in rows
        )
        return f"""
        <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
          <h1>Contract Ready for Signature</h1>
          <p>Hello {escape(contract.guest_name or "")},</p>
          <p>You have received a contract from <strong>{settings.COMPANY_NAME}</strong> that requires your signature.</p>
          <table>{details}</table>
          <p><a href="{url}">Review &amp; Sign Contract</a></p>
          <p><strong>This link expires on {format_date(access_token.expires_at)}.</strong></p>
          <p>No account required. If the button doesn't work, copy this link into your browser:<br>{url}</p>
          <p>Best regards,<br><strong>{settings.COMPANY_NAME}</strong></p>
        </div>
        """

    @staticmethod
    def _guest_confirmation_html(contract: Contract) -> str:
        return f"""
        <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
          <h1>Contract Signed Successfully</h1>
          <p>Hello {escape(contract.signed_name or "")},</p>
          <p>Thank you for signing the contract! Your signature has been recorded.</p>
          <table>
            <tr><td><strong>Project:</strong></td><td>{escape(contract.project_name)}</td></tr>
            <tr><td><strong>Contract ID:</strong></td><td>{contract.id}</td></tr>
            <tr><td><strong>Signed On:</strong></td><td>{format_date(contract.guest_signed_at)}</td></tr>
            <tr><td><strong>Status:</strong></td><td>Fully Executed</td></tr>
          </table>
          <p>Your signed contract is attached to this email. Please save a copy for your records.</p>
          <p>Best regards,<br><strong>{settings.COMPANY_NAME}</strong></p>
        </div>
        """

    @staticmethod
    def _admin_signed_html(contract: Contract) -> str:
        return f"""
        <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
          <h1>Contract Signed</h1>
          <p>A guest has signed a contract.</p>
          <table>
            <tr><td><strong>Guest Name:</strong></td><td>{escape(contract.signed_name or "")}</td></tr>
            <tr><td><strong>Guest Email:</strong></td><td>{escape(contract.signed_email or "")}</td></tr>
            <tr><td><strong>Project:</strong></td><td>{escape(contract.project_name)}</td></tr>
            <tr><td><strong>Contract ID:</strong></td><td>{contract.id}</td></tr>
            <tr><td><strong>Signed At:</strong></td><td>{contract.guest_signed_at:%Y-%m-%d %H:%M} UTC</td></tr>
          </table>
        </div>
        """
