import logging
from botocore.exceptions import ClientError
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from donation_api.models.user import ContactMessage

logger = logging.getLogger(__name__)


class NotificationService:
    def __init__(self, client, from_email: str):
        self.ses_client = client
        self.from_email = from_email

    @retry(
        wait=wait_exponential(multiplier=1, min=1, max=4),
        stop=stop_after_attempt(3),
        retry=retry_if_exception_type(ClientError),
        reraise=True
    )
    def send_contact_notification(self, email_to: str, contact: ContactMessage):
        subject = f"New contact message from {contact.name}"
        body_text = (
            f"Name: {contact.name}\n"
            f"Email: {contact.email}\n"
            f"Received: {contact.created_at.isoformat()}\n\n"
            f"{contact.message}"
        )

        logger.info(f"Sending contact notification {contact.contact_id} to {email_to}")

        self.ses_client.send_email(
            Source=self.from_email,
            Destination={'ToAddresses': [email_to]},
            ReplyToAddresses=[contact.email],
            Message={
                'Subject': {'Data': subject},
                'Body': {'Text': {'Data': body_text}}
            }
        )
