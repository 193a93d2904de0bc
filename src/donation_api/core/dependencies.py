import boto3
from fastapi import Depends, HTTPException
from functools import lru_cache

from donation_api.core.config import Settings, get_settings
from donation_api.data_access.dynamodb import DynamoDataAccess
from donation_api.services.auth_service import AuthService
from donation_api.services.contact_service import ContactService
from donation_api.services.donation_service import DonationService
from donation_api.services.notification_service import NotificationService
from donation_api.services.oauth_client import GoogleOAuthClient
from donation_api.services.payment_gateway import StripeGateway
from donation_api.services.webhook_service import WebhookService


@lru_cache()
def get_boto_session() -> boto3.Session:
    settings = get_settings()
    return boto3.Session(
        region_name=settings.AWS_REGION,
        profile_name=settings.AWS_PROFILE
    )


@lru_cache()
def get_payment_gateway() -> StripeGateway:
    return StripeGateway(api_key=get_settings().STRIPE_SECRET_KEY)


@lru_cache()
def get_data_access() -> DynamoDataAccess | None:
    settings = get_settings()
    if not settings.DYNAMODB_TABLE_NAME:
        return None

    dynamo_resource = get_boto_session().resource(
        'dynamodb',
        endpoint_url=settings.DYNAMODB_ENDPOINT_URL
    )
    table = dynamo_resource.Table(settings.DYNAMODB_TABLE_NAME)
    return DynamoDataAccess(table=table)


@lru_cache()
def get_notification_service() -> NotificationService | None:
    settings = get_settings()
    if not settings.SES_FROM_EMAIL:
        return None

    ses_client = get_boto_session().client('ses')
    return NotificationService(
        client=ses_client,
        from_email=settings.SES_FROM_EMAIL
    )


def get_donation_service(
    gateway: StripeGateway = Depends(get_payment_gateway),
    settings: Settings = Depends(get_settings)
) -> DonationService:
    return DonationService(gateway=gateway, client_url=settings.CLIENT_URL)


def get_webhook_service(
    gateway: StripeGateway = Depends(get_payment_gateway),
    settings: Settings = Depends(get_settings)
) -> WebhookService:
    return WebhookService(
        gateway=gateway,
        webhook_secret=settings.STRIPE_WEBHOOK_SECRET,
        allow_unsigned=settings.STRIPE_WEBHOOK_ALLOW_UNSIGNED
    )


def require_data_access(
    data_access: DynamoDataAccess | None = Depends(get_data_access)
) -> DynamoDataAccess:
    if data_access is None:
        raise HTTPException(status_code=503, detail="Data store is not configured")
    return data_access


def get_contact_service(
    data_access: DynamoDataAccess = Depends(require_data_access),
    notification_service: NotificationService | None = Depends(get_notification_service),
    settings: Settings = Depends(get_settings)
) -> ContactService:
    return ContactService(
        data_access=data_access,
        notification_service=notification_service,
        notify_email=settings.CONTACT_NOTIFY_EMAIL
    )


@lru_cache()
def get_oauth_client() -> GoogleOAuthClient | None:
    settings = get_settings()
    if not (settings.GOOGLE_CLIENT_ID and settings.GOOGLE_CLIENT_SECRET):
        return None

    return GoogleOAuthClient(
        client_id=settings.GOOGLE_CLIENT_ID,
        client_secret=settings.GOOGLE_CLIENT_SECRET,
        redirect_uri=settings.GOOGLE_CALLBACK_URL
    )


def get_auth_service(
    data_access: DynamoDataAccess = Depends(require_data_access),
    oauth_client: GoogleOAuthClient | None = Depends(get_oauth_client)
) -> AuthService:
    if oauth_client is None:
        raise HTTPException(status_code=503, detail="Google login is not configured")
    return AuthService(data_access=data_access, oauth_client=oauth_client)
