import logging
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from config import settings
from modules.contracts.errors import ContractValidationError, NotFoundError
from modules.contracts.models.access_token import GuestAccessToken
from modules.contracts.models.contract import Contract, ContractStatus, new_contract_id
from modules.contracts.repositories.contract_repository import ContractRepository
from modules.contracts.schemas.contract_schemas import (
    ContractCreateAndSend,
    ContractDraftCreate,
    ContractResponse,
    RenderPreviewRequest,
    RenderPreviewResponse,
    SendToGuestRequest,
)
from modules.contracts.services.contract_notifier import ContractNotifier
from modules.contracts.services.contract_state_service import ContractStateService, commit
from modules.contracts.services.signature_capture import resolve_signature
from modules.contracts.services.template_renderer import (
    find_placeholders,
    render_template,
    unresolved_placeholders,
)
from modules.contracts.services.template_service import TemplateService

logger = logging.getLogger(__name__)


class ContractService:
    """Admin side of the workflow: drafting, sending and reviewing contracts."""

    def __init__(self, state_service: Optional[ContractStateService] = None):
        self.state_service = state_service or ContractStateService()

    @staticmethod
    def template_fields(data: ContractDraftCreate, contract_id: str, now: datetime) -> dict:
        fields = {
            "contract_date": now.date(),
            "contract_id": contract_id,
            "contractor_name": data.contractor_name or settings.COMPANY_NAME,
            "contractor_email": settings.MAIL_FROM,
            "client_name": data.guest_name,
            "client_email": data.guest_email,
            "client_address": data.client_address,
            "project_name": data.project_name,
            "project_description": data.project_description,
            "scope_of_work": data.scope_of_work,
            "total_amount": data.total_amount,
            "payment_terms": data.payment_terms,
            "start_date": data.start_date,
            "end_date": data.end_date,
        }
        for key, value in data.extra_fields.items():
            fields.setdefault(key, value)
        return fields

    def build_draft(
        self,
        session: Session,
        admin_id: Optional[int],
        data: ContractDraftCreate,
        now: Optional[datetime] = None,
    ) -> Contract:
        """A DRAFT contract with its text frozen. Not added to the session."""
        now = now or datetime.utcnow()
        if data.start_date and data.end_date and data.end_date < data.start_date:
            raise ContractValidationError("End date cannot be before the start date")

        contract_id = new_contract_id()
        if data.template_id is not None:
            template = TemplateService.get_template(session, data.template_id)
            content = render_template(template.content, self.template_fields(data, contract_id, now))
        elif data.contract_content and data.contract_content.strip():
            # Rendered by the client already
            content = data.contract_content
        else:
            raise ContractValidationError("Either a template or the contract content is required")

        return Contract(
            id=contract_id,
            admin_id=admin_id,
            template_id=data.template_id,
            project_name=data.project_name,
            project_description=data.project_description,
            start_date=data.start_date,
            end_date=data.end_date,
            total_amount=data.total_amount,
            payment_terms=data.payment_terms,
            scope_of_work=data.scope_of_work,
            contract_content=content,
            guest_name=data.guest_name,
            guest_email=data.guest_email.lower() if data.guest_email else None,
            status=ContractStatus.DRAFT,
            created_at=now,
            updated_at=now,
        )

    def create_draft(
        self,
        session: Session,
        admin_id: Optional[int],
        data: ContractDraftCreate,
        now: Optional[datetime] = None,
    ) -> Contract:
        contract = self.build_draft(session, admin_id, data, now)
        ContractRepository(session).add(contract)
        commit(session, "create", contract.id)
        session.refresh(contract)
        logger.info("Draft contract %s created by admin %s", contract.id, admin_id)
        return contract

    def create_and_send(
        self,
        session: Session,
        admin_id: Optional[int],
        data: ContractCreateAndSend,
        notifier: Optional[ContractNotifier] = None,
        now: Optional[datetime] = None,
    ) -> Tuple[Contract, GuestAccessToken]:
        """Draft and DRAFT -> SENT in a single transaction."""
        now = now or datetime.utcnow()
        admin_signature = resolve_signature(data.admin_signature, data.admin_signature_strokes)
        contract = self.build_draft(session, admin_id, data, now)
        access_token = self.state_service.send(
            session, contract, data.guest_name, data.guest_email, admin_signature, notifier, now
        )
        return contract, access_token

    def send_existing(
        self,
        session: Session,
        contract_id: str,
        data: SendToGuestRequest,
        notifier: Optional[ContractNotifier] = None,
        now: Optional[datetime] = None,
    ) -> Tuple[Contract, GuestAccessToken]:
        contract = self.get_contract(session, contract_id)
        self.state_service.check_transition(contract, ContractStatus.SENT)
        admin_signature = resolve_signature(data.admin_signature, data.admin_signature_strokes)
        access_token = self.state_service.send(
            session, contract, data.guest_name, data.guest_email, admin_signature, notifier, now
        )
        return contract, access_token

    @staticmethod
    def get_contract(session: Session, contract_id: str) -> Contract:
        contract = ContractRepository(session).get(contract_id)
        if contract is None:
            raise NotFoundError("Contract not found")
        return contract

    @staticmethod
    def list_contracts(
        session: Session,
        status: Optional[ContractStatus] = None,
        now: Optional[datetime] = None,
    ) -> List[Contract]:
        now = now or datetime.utcnow()
        stored = ContractStatus.SENT if status == ContractStatus.EXPIRED else status
        contracts = ContractRepository(session).list(stored)
        if status is None:
            return contracts
        return [c for c in contracts if c.status_at(now) == status]

    @staticmethod
    def to_response(contract: Contract, now: Optional[datetime] = None) -> ContractResponse:
        now = now or datetime.utcnow()
        response = ContractResponse.model_validate(contract)
        return response.model_copy(update={
            "status": contract.status_at(now),
            "token_expires_at": contract.access_token.expires_at if contract.access_token else None,
        })

    @staticmethod
    def preview(session: Session, request: RenderPreviewRequest) -> RenderPreviewResponse:
        """Renders without storing anything and reports what was left unresolved."""
        if request.template_id is not None:
            content = TemplateService.get_template(session, request.template_id).content
        elif request.content:
            content = request.content
        else:
            raise ContractValidationError("Either a template or content is required")

        rendered = render_template(content, request.field_values)
        return RenderPreviewResponse(
            content=rendered,
            placeholders=find_placeholders(content),
            unresolved_placeholders=unresolved_placeholders(content, request.field_values.keys()),
        )
