# modules/notifications/services/notification_service.py
from typing import List, Optional

from modules.notifications.models.notification import Notification
from modules.notifications.repositories.notification_repository import NotificationRepository


class NotificationTemplate:
    type = "general"

    def __init__(self, user_id: int, title: str, message: str):
        self.user_id = user_id
        self.title = title
        self.message = message

    def to_model(self) -> Notification:
        return Notification(
            user_id=self.user_id,
            type=self.type,
            title=self.title,
            message=self.message
        )


class ContractSentNotification(NotificationTemplate):
    type = "contract_sent"

    def __init__(self, user_id: int, project_name: str, guest_name: str):
        title = "Contract sent"
        message = f"The contract for '{project_name}' was sent to {guest_name} for signature."
        super().__init__(user_id, title, message)


class ContractSignedNotification(NotificationTemplate):
    type = "contract_signed"

    def __init__(self, user_id: int, project_name: str, signer_name: str):
        title = "Contract signed"
        message = f"{signer_name} has signed the contract for '{project_name}'."
        super().__init__(user_id, title, message)


class NotificationService:
    def __init__(self, repository: NotificationRepository):
        self.notification_repository = repository

    def notify_many(self, templates: List[NotificationTemplate]) -> List[Notification]:
        return self.notification_repository.save_all([t.to_model() for t in templates])

    def get_notifications(self, user_id: int) -> List[Notification]:
        return self.notification_repository.find_by_user_id(user_id)

    def mark_as_read(self, notification_id: int) -> Optional[Notification]:
        return self.notification_repository.update(notification_id, {'read': True})
