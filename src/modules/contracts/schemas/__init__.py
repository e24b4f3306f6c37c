from .contract_schemas import (
    ContractCreateAndSend,
    ContractDraftCreate,
    ContractListResponse,
    ContractResponse,
    GuestContractView,
    GuestSignRequest,
    RenderPreviewRequest,
    RenderPreviewResponse,
    SendResult,
    SendToGuestRequest,
    SignedContractResponse,
)
from .template_schemas import TemplateCreate, TemplateResponse, TemplateUpdate

__all__ = [
    'ContractCreateAndSend',
    'ContractDraftCreate',
    'ContractListResponse',
    'ContractResponse',
    'GuestContractView',
    'GuestSignRequest',
    'RenderPreviewRequest',
    'RenderPreviewResponse',
    'SendResult',
    'SendToGuestRequest',
    'SignedContractResponse',
    'TemplateCreate',
    'TemplateResponse',
    'TemplateUpdate',
]
