import logging

from donation_api.data_access.dynamodb import DynamoDataAccess
from donation_api.models.user import ContactMessage
from donation_api.services.notification_service import NotificationService

logger = logging.getLogger(__name__)


class ContactService:
    def __init__(
        self,
        data_access: DynamoDataAccess,
        notification_service: NotificationService | None = None,
        notify_email: str | None = None
    ):
        self.data_access = data_access
        self.notification_service = notification_service
        self.notify_email = notify_email

    def submit(self, name: str, email: str, message: str) -> dict:
        contact = ContactMessage(name=name, email=email, message=message)
        item = self.data_access.create_contact_message(contact)
        logger.info(f"Stored contact message {contact.contact_id}")

        if self.notification_service and self.notify_email:
            try:
                self.notification_service.send_contact_notification(self.notify_email, contact)
            except Exception as e:
                # The message is already stored; a lost email is not worth a failed request
                logger.error(f"Failed to send notification for contact {contact.contact_id}: {e}")

        return item
