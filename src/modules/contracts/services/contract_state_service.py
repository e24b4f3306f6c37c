import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from modules.contracts.errors import (
    AlreadySignedError,
    ContractValidationError,
    ExpiredError,
    InvalidTransitionError,
    PersistenceError,
)
from modules.contracts.models.access_token import GuestAccessToken
from modules.contracts.models.contract import Contract, ContractStatus
from modules.contracts.services.contract_notifier import ContractNotifier
from modules.contracts.services.token_service import TokenIssuer

logger = logging.getLogger(__name__)

# EXPIRED is derived at read time and never a target here
ALLOWED_TRANSITIONS = {
    ContractStatus.DRAFT: {ContractStatus.SENT},
    ContractStatus.SENT: {ContractStatus.SIGNED},
    ContractStatus.SIGNED: set(),
}


def commit(session: Session, action: str, contract_id: str) -> None:
    """Commits or rolls back the whole unit of work, raising PersistenceError."""
    try:
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        logger.exception("Could not %s contract %s", action, contract_id)
        raise PersistenceError() from exc


class ContractStateService:
    """
    Owns the contract status field. Token issuance, signature storage and
    notifications only ever happen as part of a transition made here.
    """

    def __init__(self, token_issuer: Optional[TokenIssuer] = None):
        self.token_issuer = token_issuer or TokenIssuer()

    @staticmethod
    def can_change_state(current: ContractStatus, new_state: ContractStatus) -> bool:
        return new_state in ALLOWED_TRANSITIONS.get(current, set())

    @staticmethod
    def check_transition(contract: Contract, new_state: ContractStatus) -> None:
        if not ContractStateService.can_change_state(contract.status, new_state):
            raise InvalidTransitionError(
                f"Contract cannot change from {contract.status.value} to {new_state.value}"
            )

    def send(
        self,
        session: Session,
        contract: Contract,
        guest_name: str,
        guest_email: str,
        admin_signature: str,
        notifier: Optional[ContractNotifier] = None,
        now: Optional[datetime] = None,
    ) -> GuestAccessToken:
        """
        DRAFT -> SENT. Stores the admin signature and mints the guest token;
        contract and token are committed together or not at all.
        """
        now = now or datetime.utcnow()
        self.check_transition(contract, ContractStatus.SENT)

        guest_name = (guest_name or "").strip()
        guest_email = (guest_email or "").strip().lower()
        if not guest_name or not guest_email:
            raise ContractValidationError("Guest name and email are required")
        if not admin_signature:
            raise ContractValidationError("The contract must be signed before it is sent")

        try:
            # flush so a brand-new contract has its id before the token refers to it
            session.add(contract)
            session.flush()
            access_token = self.token_issuer.issue(session, contract.id, now)
            contract.guest_name = guest_name
            contract.guest_email = guest_email
            contract.admin_signature = admin_signature
            contract.admin_signed_at = now
            contract.status = ContractStatus.SENT
            contract.sent_at = now
            contract.updated_at = now
        except SQLAlchemyError as exc:
            session.rollback()
            logger.exception("Could not prepare contract %s for sending", contract.id)
            raise PersistenceError() from exc
        commit(session, "send", contract.id)

        logger.info("Contract %s changed from DRAFT to SENT (guest %s)", contract.id, guest_email)
        if notifier is not None:
            try:
                notifier.contract_sent(contract, access_token)
            except Exception:
                logger.exception("Post-send notifications failed for contract %s", contract.id)
        return access_token

    def mark_signed(
        self,
        session: Session,
        contract: Contract,
        access_token: GuestAccessToken,
        signature: str,
        name: str,
        email: str,
        now: Optional[datetime] = None,
    ) -> Contract:
        """
        SENT -> SIGNED. The token is consumed, the contract marked signed and
        the guest signature stored in one transaction. Both updates are
        conditional, so of two concurrent attempts only one can match.
        """
        now = now or datetime.utcnow()
        self.check_transition(contract, ContractStatus.SIGNED)

        try:
            consumed = (
                session.query(GuestAccessToken)
                .filter(
                    GuestAccessToken.id == access_token.id,
                    GuestAccessToken.consumed.is_(False),
                    GuestAccessToken.expires_at > now,
                )
                .update({"consumed": True, "consumed_at": now}, synchronize_session=False)
            )
            if consumed != 1:
                session.rollback()
                session.refresh(access_token)
                if access_token.consumed:
                    raise AlreadySignedError()
                raise ExpiredError()

            updated = (
                session.query(Contract)
                .filter(Contract.id == contract.id, Contract.status == ContractStatus.SENT)
                .update(
                    {
                        "status": ContractStatus.SIGNED,
                        "guest_signature": signature,
                        "guest_signed_at": now,
                        "signed_name": name,
                        "signed_email": email,
                        "updated_at": now,
                    },
                    synchronize_session=False,
                )
            )
            if updated != 1:
                session.rollback()
                raise AlreadySignedError()
        except SQLAlchemyError as exc:
            session.rollback()
            logger.exception("Could not sign contract %s", contract.id)
            raise PersistenceError() from exc

        commit(session, "sign", contract.id)
        session.refresh(contract)
        session.refresh(access_token)

        logger.info("Contract %s changed from SENT to SIGNED by %s", contract.id, email)
        return contract
