from datetime import date, datetime
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from modules.contracts.models.contract import ContractStatus

Stroke = List[Tuple[float, float]]


class CamelModel(BaseModel):
    """The web client talks camelCase; snake_case is accepted as well."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class ContractFields(CamelModel):
    project_name: str = Field(min_length=1, max_length=255)
    project_description: str = ""
    total_amount: Decimal = Field(gt=0)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    payment_terms: str = ""
    scope_of_work: str = Field("", alias="scope")
    client_address: Optional[str] = None
    contractor_name: Optional[str] = None
    extra_fields: Dict[str, str] = {}


class ContractDraftCreate(ContractFields):
    guest_name: Optional[str] = None
    guest_email: Optional[EmailStr] = None
    template_id: Optional[int] = None
    contract_content: Optional[str] = None


class SignatureInput(CamelModel):
    admin_signature: Optional[str] = None
    admin_signature_strokes: Optional[List[Stroke]] = None


class ContractCreateAndSend(ContractDraftCreate, SignatureInput):
    guest_name: str = Field(min_length=1)
    guest_email: EmailStr


class SendToGuestRequest(SignatureInput):
    guest_name: str = Field(min_length=1)
    guest_email: EmailStr


class SendResult(CamelModel):
    contract_id: str
    guest_email: str
    signing_url: str
    expires_at: datetime
    status: ContractStatus
    message: str = "Contract sent to guest successfully"


class ContractResponse(CamelModel):
    id: str
    admin_id: Optional[int]
    template_id: Optional[int]
    project_name: str
    project_description: Optional[str]
    start_date: Optional[date]
    end_date: Optional[date]
    total_amount: Decimal
    payment_terms: Optional[str]
    scope_of_work: Optional[str]
    contract_content: str
    guest_name: Optional[str]
    guest_email: Optional[str]
    status: ContractStatus
    admin_signature: Optional[str]
    admin_signed_at: Optional[datetime]
    guest_signature: Optional[str]
    guest_signed_at: Optional[datetime]
    signed_name: Optional[str]
    signed_email: Optional[str]
    sent_at: Optional[datetime]
    token_expires_at: Optional[datetime] = None
    created_at: datetime


class ContractListResponse(CamelModel):
    contracts: List[ContractResponse]
    total: int


class GuestContractView(CamelModel):
    """What an unauthenticated guest may see: no ids, no admin signature."""
    project_name: str
    project_description: Optional[str]
    start_date: Optional[date]
    end_date: Optional[date]
    total_amount: Decimal
    payment_terms: Optional[str]
    scope_of_work: Optional[str]
    contract_content: str
    guest_name: Optional[str]
    guest_email: Optional[str]
    contractor_name: str
    status: ContractStatus
    expires_at: datetime


class GuestSignRequest(CamelModel):
    signature: Optional[str] = None
    strokes: Optional[List[Stroke]] = None
    name: str = ""
    email: str = ""


class SignedContractResponse(CamelModel):
    project_name: str
    status: ContractStatus
    signed_name: str
    signed_at: datetime
    message: str = "Contract signed successfully"


class RenderPreviewRequest(CamelModel):
    template_id: Optional[int] = None
    content: Optional[str] = None
    field_values: Dict[str, Optional[str]] = {}


class RenderPreviewResponse(CamelModel):
    content: str
    placeholders: List[str]
    unresolved_placeholders: List[str]
