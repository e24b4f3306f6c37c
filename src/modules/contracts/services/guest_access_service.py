import logging
from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy.orm import Session

from config import settings
from modules.contracts.errors import (
    AlreadySignedError,
    ContractValidationError,
    ExpiredError,
    NotFoundError,
)
from modules.contracts.models.access_token import GuestAccessToken
from modules.contracts.models.contract import Contract, ContractStatus
from modules.contracts.repositories.contract_repository import ContractRepository
from modules.contracts.schemas.contract_schemas import GuestContractView
from modules.contracts.services.contract_notifier import ContractNotifier
from modules.contracts.services.contract_state_service import ContractStateService
from modules.contracts.services.signature_capture import resolve_signature

logger = logging.getLogger(__name__)


class GuestAccessGateway:
    """
    Token-gated access for guests without an account.

    ``resolve`` is read-only; only ``sign`` changes anything, and it does so
    through the state service.
    """

    def __init__(self, state_service: Optional[ContractStateService] = None):
        self.state_service = state_service or ContractStateService()

    def _validate(self, session: Session, token: str, now: datetime) -> GuestAccessToken:
        access_token = ContractRepository(session).get_token(token)
        if access_token is None:
            logger.info("Guest access with unknown token %s...", (token or "")[:8])
            raise NotFoundError()

        contract = access_token.contract
        if access_token.consumed or contract.status == ContractStatus.SIGNED:
            raise AlreadySignedError()
        if access_token.is_expired(now):
            logger.info("Guest access to contract %s after link expiry", contract.id)
            raise ExpiredError()
        if contract.status != ContractStatus.SENT:
            raise NotFoundError()
        return access_token

    def resolve(self, session: Session, token: str, now: Optional[datetime] = None) -> Contract:
        now = now or datetime.utcnow()
        return self._validate(session, token, now).contract

    def sign(
        self,
        session: Session,
        token: str,
        name: str,
        email: str,
        signature: Optional[str] = None,
        strokes: Optional[Sequence[Sequence[Sequence[float]]]] = None,
        notifier: Optional[ContractNotifier] = None,
        now: Optional[datetime] = None,
    ) -> Contract:
        now = now or datetime.utcnow()
        # Checked again here: the link may have expired or been used since the page loaded
        access_token = self._validate(session, token, now)
        contract = access_token.contract

        name = (name or "").strip()
        email = (email or "").strip()
        if not name or not email:
            raise ContractValidationError("Name and email are required")
        if contract.guest_email and email.lower() != contract.guest_email.lower():
            raise ContractValidationError("Email does not match the intended recipient")

        signature_uri = resolve_signature(signature, strokes)

        contract = self.state_service.mark_signed(
            session, contract, access_token, signature_uri, name, email.lower(), now
        )

        if notifier is not None:
            try:
                notifier.contract_signed(contract)
            except Exception:
                logger.exception("Post-sign notifications failed for contract %s", contract.id)
        return contract

    @staticmethod
    def to_guest_view(contract: Contract, now: Optional[datetime] = None) -> GuestContractView:
        now = now or datetime.utcnow()
        return GuestContractView(
            project_name=contract.project_name,
            project_description=contract.project_description,
            start_date=contract.start_date,
            end_date=contract.end_date,
            total_amount=contract.total_amount,
            payment_terms=contract.payment_terms,
            scope_of_work=contract.scope_of_work,
            contract_content=contract.contract_content,
            guest_name=contract.guest_name,
            guest_email=contract.guest_email,
            contractor_name=settings.COMPANY_NAME,
            status=contract.status_at(now),
            expires_at=contract.access_token.expires_at,
        )
