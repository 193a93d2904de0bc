import logging

from donation_api.data_access.dynamodb import DynamoDataAccess
from donation_api.models.user import UserProfile
from donation_api.services.oauth_client import GoogleOAuthClient, OAuthError

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, data_access: DynamoDataAccess, oauth_client: GoogleOAuthClient):
        self.data_access = data_access
        self.oauth_client = oauth_client

    def authorization_url(self, state: str) -> str:
        return self.oauth_client.authorization_url(state)

    def login_with_google(self, code: str) -> dict:
        """
        Completes the OAuth callback: finds the user by email, or creates one
        from the Google profile on first login.
        """
        access_token = self.oauth_client.exchange_code(code)
        profile = self.oauth_client.fetch_profile(access_token)

        email = profile.get("email")
        if not email:
            raise OAuthError("Google profile has no email address")

        user = self.data_access.get_user_profile(email)
        if user:
            return user

        logger.info(f"Creating user profile for {email}")
        return self.data_access.create_user_profile(
            UserProfile(email=email, name=profile.get("name"))
        )
