import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from modules.contracts.errors import NotFoundError
from modules.contracts.models.contract import Contract
from modules.contracts.models.template import ContractTemplate
from modules.contracts.schemas.template_schemas import TemplateCreate, TemplateUpdate

logger = logging.getLogger(__name__)


class TemplateService:

    @staticmethod
    def create_template(session: Session, data: TemplateCreate, user_id: Optional[int] = None) -> ContractTemplate:
        template = ContractTemplate(
            name=data.name,
            category=data.category,
            description=data.description,
            content=data.content,
            is_default=data.is_default,
            created_by=user_id,
        )
        session.add(template)
        session.commit()
        session.refresh(template)
        logger.info("Template %s (%s) created", template.id, template.name)
        return template

    @staticmethod
    def list_templates(session: Session, category: Optional[str] = None) -> List[ContractTemplate]:
        query = session.query(ContractTemplate)
        if category:
            query = query.filter(ContractTemplate.category == category)
        return query.order_by(ContractTemplate.name).all()

    @staticmethod
    def get_template(session: Session, template_id: int) -> ContractTemplate:
        template = session.get(ContractTemplate, template_id)
        if template is None:
            raise NotFoundError("Template not found")
        return template

    @staticmethod
    def update_template(session: Session, template_id: int, data: TemplateUpdate) -> ContractTemplate:
        """Edits never reach contracts already rendered from this template."""
        template = TemplateService.get_template(session, template_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(template, field, value)
        session.commit()
        session.refresh(template)
        return template

    @staticmethod
    def delete_template(session: Session, template_id: int) -> None:
        template = TemplateService.get_template(session, template_id)
        # Contracts keep their frozen text, only the back-reference goes
        session.query(Contract).filter(Contract.template_id == template_id).update(
            {"template_id": None}, synchronize_session=False
        )
        session.delete(template)
        session.commit()
        logger.info("Template %s deleted", template_id)
