# Public endpoints reached through the emailed signing link; no login.
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_db
from modules.contracts.controllers.dependencies import get_notifier, http_error
from modules.contracts.errors import ContractError
from modules.contracts.schemas.contract_schemas import (
    GuestContractView,
    GuestSignRequest,
    SignedContractResponse,
)
from modules.contracts.services.contract_notifier import ContractNotifier
from modules.contracts.services.guest_access_service import GuestAccessGateway

router = APIRouter(prefix="/api/contracts/guest", tags=["guest signing"])

gateway = GuestAccessGateway()


@router.get("/{token}", response_model=GuestContractView)
def get_guest_contract(token: str, db: Session = Depends(get_db)):
    """Contract as the guest sees it. Viewing never consumes the link."""
    try:
        contract = gateway.resolve(db, token)
    except ContractError as e:
        raise http_error(e)
    return gateway.to_guest_view(contract)


@router.post("/{token}/sign", response_model=SignedContractResponse)
def sign_guest_contract(
    token: str,
    payload: GuestSignRequest,
    db: Session = Depends(get_db),
    notifier: ContractNotifier = Depends(get_notifier)
):
    try:
        contract = gateway.sign(
            db,
            token,
            name=payload.name,
            email=payload.email,
            signature=payload.signature,
            strokes=payload.strokes,
            notifier=notifier,
        )
    except ContractError as e:
        raise http_error(e)
    return SignedContractResponse(
        project_name=contract.project_name,
        status=contract.status,
        signed_name=contract.signed_name,
        signed_at=contract.guest_signed_at,
    )
