import logging
from urllib.parse import urlencode

import httpx

logger = logging.getLogger(__name__)

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"


class OAuthError(Exception):
    pass


class GoogleOAuthClient:
    def __init__(self, client_id: str, client_secret: str, redirect_uri: str, http_client: httpx.Client | None = None):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.http_client = http_client or httpx.Client(timeout=10.0)

    def authorization_url(self, state: str) -> str:
        params = {
            "response_type": "code",
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "scope": "openid email profile",
            "state": state,
            "prompt": "select_account"
        }
        return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"

    def exchange_code(self, code: str) -> str:
        """Exchanges an authorization code for an access token."""
        data = {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": self.redirect_uri,
            "client_id": self.client_id,
            "client_secret": self.client_secret
        }

        try:
            response = self.http_client.post(GOOGLE_TOKEN_URL, data=data)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Google token exchange failed: {e}")
            raise OAuthError("Token exchange failed") from e

        access_token = response.json().get("access_token")
        if not access_token:
            raise OAuthError("Token response has no access_token")
        return access_token

    def fetch_profile(self, access_token: str) -> dict:
        try:
            response = self.http_client.get(
                GOOGLE_USERINFO_URL,
                headers={"Authorization": f"Bearer {access_token}"}
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Google profile lookup failed: {e}")
            raise OAuthError("Profile lookup failed") from e

        return response.json()
