from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from database import get_db
from modules.auth.dependencies import require_permission
from modules.auth.models.user import User
from modules.contracts.controllers.dependencies import http_error
from modules.contracts.errors import ContractError
from modules.contracts.schemas.template_schemas import TemplateCreate, TemplateResponse, TemplateUpdate
from modules.contracts.services.template_renderer import find_placeholders
from modules.contracts.services.template_service import TemplateService

router = APIRouter(prefix="/api/admin/contract-templates", tags=["contract templates"])


def _to_response(template) -> TemplateResponse:
    response = TemplateResponse.model_validate(template)
    return response.model_copy(update={"placeholders": find_placeholders(template.content)})


@router.post("", response_model=TemplateResponse, status_code=status.HTTP_201_CREATED)
def create_template(
    payload: TemplateCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("manage_templates"))
):
    return _to_response(TemplateService.create_template(db, payload, current_user.id))


@router.get("", response_model=List[TemplateResponse])
def list_templates(
    category: Optional[str] = Query(None, description="Filter by category"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("manage_templates"))
):
    return [_to_response(t) for t in TemplateService.list_templates(db, category)]


@router.get("/{template_id}", response_model=TemplateResponse)
def get_template(
    template_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("manage_templates"))
):
    try:
        return _to_response(TemplateService.get_template(db, template_id))
    except ContractError as e:
        raise http_error(e)


@router.put("/{template_id}", response_model=TemplateResponse)
def update_template(
    template_id: int,
    payload: TemplateUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("manage_templates"))
):
    try:
        return _to_response(TemplateService.update_template(db, template_id, payload))
    except ContractError as e:
        raise http_error(e)


@router.delete("/{template_id}")
def delete_template(
    template_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("manage_templates"))
):
    try:
        TemplateService.delete_template(db, template_id)
    except ContractError as e:
        raise http_error(e)
    return {"message": "Template deleted"}
