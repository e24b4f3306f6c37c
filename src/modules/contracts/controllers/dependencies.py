from functools import lru_cache

from fastapi import BackgroundTasks, Depends, HTTPException
from sqlalchemy.orm import Session

from database import get_db
from modules.contracts.errors import ContractError
from modules.contracts.services.contract_notifier import ContractNotifier
from modules.notifications.services.email_service import EmailService


@lru_cache
def get_email_service() -> EmailService:
    return EmailService.from_settings()


def get_notifier(
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
) -> ContractNotifier:
    # Emails go out after the response, so delivery never delays or fails the request
    return ContractNotifier(db, email_service, schedule=background_tasks.add_task)


def http_error(exc: ContractError) -> HTTPException:
    return HTTPException(
        status_code=exc.status_code,
        detail={"error": exc.message, "code": exc.code}
    )
