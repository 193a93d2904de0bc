import logging
from boto3.dynamodb.conditions import Key
from botocore.exceptions import ClientError

from donation_api.models.donation import Donation
from donation_api.models.user import ContactMessage, UserProfile

logger = logging.getLogger(__name__)

USER_PREFIX = "USER#"
DONATION_PREFIX = "DONATION#"
CONTACT_PREFIX = "CONTACT#"
PROFILE_SK = "PROFILE"
MESSAGE_SK = "MESSAGE"
USER_ID_INDEX = "UserIdIndex"


class DynamoDataAccess:
    """Single-table document store for users, contact messages and donations."""

    def __init__(self, table):
        self.table = table

    def create_user_profile(self, profile: UserProfile) -> dict:
        """Creates the profile unless one exists for the email; returns the stored item."""
        item = {
            "PK": f"{USER_PREFIX}{profile.email}",
            "SK": PROFILE_SK,
            "email": profile.email,
            "name": profile.name,
            "user_id": profile.user_id,
            "provider": profile.provider,
            "created_at": profile.created_at.isoformat()
        }

        try:
            self.table.put_item(
                Item=item,
                ConditionExpression="attribute_not_exists(PK)"
            )
            return item
        except ClientError as e:
            if e.response['Error']['Code'] == 'ConditionalCheckFailedException':
                logger.info(f"User profile already exists for {profile.email}")
                return self.get_user_profile(profile.email)
            else:
                raise

    def get_user_profile(self, email: str) -> dict | None:
        key = {
            "PK": f"{USER_PREFIX}{email}",
            "SK": PROFILE_SK
        }
        response = self.table.get_item(Key=key)
        return response.get("Item")

    def get_user_by_id(self, user_id: str) -> dict | None:
        response = self.table.query(
            IndexName=USER_ID_INDEX,
            KeyConditionExpression=Key("user_id").eq(user_id),
            Limit=1
        )
        items = response.get("Items", [])
        return items[0] if items else None

    def create_contact_message(self, contact: ContactMessage) -> dict:
        item = {
            "PK": f"{CONTACT_PREFIX}{contact.contact_id}",
            "SK": MESSAGE_SK,
            "contact_id": contact.contact_id,
            "name": contact.name,
            "email": contact.email,
            "message": contact.message,
            "created_at": contact.created_at.isoformat()
        }

        self.table.put_item(Item=item)
        return item

    def create_donation_record(self, donation: Donation) -> dict:
        item = {
            "PK": f"{USER_PREFIX}{donation.email}",
            "SK": f"{DONATION_PREFIX}{donation.donation_id}",
            "donation_id": donation.donation_id,
            "name": donation.name,
            "email": donation.email,
            "amount": donation.amount,
            "currency": donation.currency,
            "status": donation.status,
            "payment_id": donation.payment_id,
            "created_at": donation.created_at.isoformat(),
            "updated_at": donation.updated_at.isoformat()
        }

        self.table.put_item(Item=item)
        return item

    def list_donations_by_user(self, email: str) -> list[dict]:
        response = self.table.query(
            KeyConditionExpression=Key("PK").eq(f"{USER_PREFIX}{email}") &
                                 Key("SK").begins_with(DONATION_PREFIX)
        )
        return response.get("Items", [])
