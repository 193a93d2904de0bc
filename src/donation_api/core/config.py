import logging
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_SESSION_SECRET = "dev-session-secret"


class Settings(BaseSettings):

    STRIPE_SECRET_KEY: str | None = None
    STRIPE_WEBHOOK_SECRET: str | None = None
    # Accept webhooks without a signature. Local development only.
    STRIPE_WEBHOOK_ALLOW_UNSIGNED: bool = False

    CLIENT_URL: str = "http://localhost:5173"
    CORS_ORIGINS: list[str] = ["https://hdfintl.com"]

    GOOGLE_CLIENT_ID: str | None = None
    GOOGLE_CLIENT_SECRET: str | None = None
    GOOGLE_CALLBACK_URL: str = "http://localhost:5000/api/auth/google/callback"
    SESSION_SECRET_KEY: str = DEFAULT_SESSION_SECRET

    AWS_REGION: str = "us-east-1"
    AWS_PROFILE: str | None = None
    DYNAMODB_TABLE_NAME: str | None = None
    DYNAMODB_ENDPOINT_URL: str | None = None
    SES_FROM_EMAIL: str | None = None
    CONTACT_NOTIFY_EMAIL: str | None = None

    UPLOAD_DIR: str = "uploads"
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024

    PORT: int = 5000
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()


def log_configuration_warnings(settings: Settings) -> None:
    """
    Reports missing or unsafe configuration at startup. Nothing here is fatal:
    the affected feature degrades instead.
    """
    if not settings.STRIPE_SECRET_KEY:
        logger.error("STRIPE_SECRET_KEY is not set. Stripe payments will fail.")
    if not settings.DYNAMODB_TABLE_NAME:
        logger.warning("DYNAMODB_TABLE_NAME is not set. Contact and login endpoints are disabled.")
    if not settings.STRIPE_WEBHOOK_SECRET:
        if settings.STRIPE_WEBHOOK_ALLOW_UNSIGNED:
            logger.warning("Webhook signature verification is DISABLED (STRIPE_WEBHOOK_ALLOW_UNSIGNED).")
        else:
            logger.warning("STRIPE_WEBHOOK_SECRET is not set. Webhook deliveries will be rejected.")
    if not (settings.GOOGLE_CLIENT_ID and settings.GOOGLE_CLIENT_SECRET):
        logger.warning("Google OAuth credentials are not set. Login is disabled.")
    if settings.SESSION_SECRET_KEY == DEFAULT_SESSION_SECRET:
        logger.warning("SESSION_SECRET_KEY is using the development default.")
