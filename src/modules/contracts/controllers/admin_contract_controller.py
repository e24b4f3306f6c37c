from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from database import get_db
from modules.auth.dependencies import require_permission
from modules.auth.models.user import User
from modules.contracts.controllers.dependencies import get_notifier, http_error
from modules.contracts.errors import ContractError
from modules.contracts.models.contract import ContractStatus
from modules.contracts.schemas.contract_schemas import (
    ContractCreateAndSend,
    ContractDraftCreate,
    ContractListResponse,
    ContractResponse,
    RenderPreviewRequest,
    RenderPreviewResponse,
    SendResult,
    SendToGuestRequest,
)
from modules.contracts.services.contract_notifier import ContractNotifier
from modules.contracts.services.contract_service import ContractService
from modules.contracts.services.token_service import signing_url

router = APIRouter(prefix="/api/admin/contracts", tags=["admin contracts"])

contract_service = ContractService()


def _send_result(contract, access_token) -> SendResult:
    return SendResult(
        contract_id=contract.id,
        guest_email=contract.guest_email,
        signing_url=signing_url(access_token.token),
        expires_at=access_token.expires_at,
        status=contract.status,
    )


@router.post("/create-and-send-guest", response_model=SendResult)
def create_and_send_guest(
    payload: ContractCreateAndSend,
    db: Session = Depends(get_db),
    notifier: ContractNotifier = Depends(get_notifier),
    current_user: User = Depends(require_permission("send_contract"))
):
    """Create a contract and send the signing link to the guest in one step."""
    try:
        contract, access_token = contract_service.create_and_send(db, current_user.id, payload, notifier)
    except ContractError as e:
        raise http_error(e)
    return _send_result(contract, access_token)


@router.post("", response_model=ContractResponse, status_code=status.HTTP_201_CREATED)
def create_draft(
    payload: ContractDraftCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("send_contract"))
):
    try:
        contract = contract_service.create_draft(db, current_user.id, payload)
    except ContractError as e:
        raise http_error(e)
    return contract_service.to_response(contract)


@router.post("/{contract_id}/send-guest", response_model=SendResult)
def send_to_guest(
    contract_id: str,
    payload: SendToGuestRequest,
    db: Session = Depends(get_db),
    notifier: ContractNotifier = Depends(get_notifier),
    current_user: User = Depends(require_permission("send_contract"))
):
    try:
        contract, access_token = contract_service.send_existing(db, contract_id, payload, notifier)
    except ContractError as e:
        raise http_error(e)
    return _send_result(contract, access_token)


@router.post("/render-preview", response_model=RenderPreviewResponse)
def render_preview(
    payload: RenderPreviewRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("send_contract"))
):
    try:
        return contract_service.preview(db, payload)
    except ContractError as e:
        raise http_error(e)


@router.get("", response_model=ContractListResponse)
def list_contracts(
    status_filter: Optional[ContractStatus] = Query(None, alias="status"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("view_contracts"))
):
    contracts = contract_service.list_contracts(db, status_filter)
    return ContractListResponse(
        contracts=[contract_service.to_response(c) for c in contracts],
        total=len(contracts)
    )


@router.get("/{contract_id}", response_model=ContractResponse)
def get_contract(
    contract_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("view_contracts"))
):
    try:
        contract = contract_service.get_contract(db, contract_id)
    except ContractError as e:
        raise http_error(e)
    return contract_service.to_response(contract)
