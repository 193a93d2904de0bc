import logging
import secrets
import time
from pathlib import Path
from typing import Optional

from fastapi import (
    APIRouter,
    Depends,
    File,
    Header,
    HTTPException,
    Request,
    UploadFile,
)
from fastapi.responses import PlainTextResponse, RedirectResponse, Response
from pydantic import ValidationError

from donation_api.api.schemas import (
    CheckoutSessionRequest,
    CheckoutSessionResponse,
    ContactRequest,
    ContactResponse,
    HealthResponse,
    PaymentIntentRequest,
    PaymentIntentResponse,
    UploadResponse,
    UserResponse,
    WebhookAck,
)
from donation_api.core.config import Settings, get_settings
from donation_api.core.dependencies import (
    get_auth_service,
    get_contact_service,
    get_donation_service,
    get_webhook_service,
    require_data_access,
)
from donation_api.core.errors import DonationAPIError, WebhookSignatureError
from donation_api.data_access.dynamodb import DynamoDataAccess
from donation_api.services.auth_service import AuthService
from donation_api.services.contact_service import ContactService
from donation_api.services.donation_service import DonationService
from donation_api.services.oauth_client import OAuthError
from donation_api.services.webhook_service import WebhookService

donate_router = APIRouter(prefix="/api/donate", tags=["donations"])
contact_router = APIRouter(tags=["contact"])
auth_router = APIRouter(prefix="/api/auth", tags=["auth"])
upload_router = APIRouter(tags=["uploads"])
health_router = APIRouter(tags=["health"])

logger = logging.getLogger(__name__)

SESSION_USER_KEY = "user_id"
SESSION_STATE_KEY = "oauth_state"


@donate_router.post(
    "/payment-intent",
    response_model=PaymentIntentResponse
)
def create_payment_intent(
    body: PaymentIntentRequest,
    donation_service: DonationService = Depends(get_donation_service)
):
    try:
        return donation_service.create_payment_intent(body)
    except DonationAPIError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@donate_router.post(
    "/create-checkout-session",
    response_model=CheckoutSessionResponse
)
def create_checkout_session(
    body: CheckoutSessionRequest,
    donation_service: DonationService = Depends(get_donation_service)
):
    try:
        return donation_service.create_checkout_session(body)
    except DonationAPIError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@donate_router.post("/webhook", response_model=WebhookAck)
async def handle_stripe_webhook(
    request: Request,
    stripe_signature: Optional[str] = Header(None),
    webhook_service: WebhookService = Depends(get_webhook_service)
):
    """
    Receives webhook events from Stripe. The signature covers the exact bytes
    Stripe sent, so the body is read raw and never decoded before verification.

    A 500 tells Stripe to redeliver the event later.
    """
    payload = await request.body()

    try:
        event = webhook_service.parse_event(payload, stripe_signature)
    except WebhookSignatureError as e:
        return PlainTextResponse(f"Webhook Error: {e.message}", status_code=400)

    try:
        webhook_service.handle_event(event)
    except Exception as e:
        logger.exception(f"Error handling webhook event: {e}", extra={"event_id": getattr(event, "id", None)})
        return Response(status_code=500)

    return WebhookAck()


@contact_router.post(
    "/api/contact",
    status_code=201,
    response_model=ContactResponse
)
def submit_contact(
    body: ContactRequest,
    contact_service: ContactService = Depends(get_contact_service)
):
    fields = (body.name, body.email, body.message)
    if not all(value and value.strip() for value in fields):
        raise HTTPException(status_code=400, detail="Missing required fields")

    try:
        record = contact_service.submit(
            name=body.name.strip(),
            email=body.email.strip(),
            message=body.message
        )
    except ValidationError:
        raise HTTPException(status_code=400, detail="Invalid email address")
    except Exception as e:
        logger.exception(f"Contact route error: {e}")
        raise HTTPException(status_code=500, detail="Server error")

    return ContactResponse(message="Message received", data=record)


@auth_router.get("/google")
def google_login(
    request: Request,
    auth_service: AuthService = Depends(get_auth_service)
):
    state = secrets.token_urlsafe(16)
    request.session[SESSION_STATE_KEY] = state
    return RedirectResponse(auth_service.authorization_url(state))


@auth_router.get("/google/callback")
def google_callback(
    request: Request,
    code: Optional[str] = None,
    state: Optional[str] = None,
    auth_service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings)
):
    expected_state = request.session.pop(SESSION_STATE_KEY, None)
    if not code or not state or not expected_state or not secrets.compare_digest(state, expected_state):
        raise HTTPException(status_code=400, detail="Invalid OAuth state")

    try:
        user = auth_service.login_with_google(code)
    except OAuthError as e:
        logger.warning(f"Google login failed: {e}")
        raise HTTPException(status_code=400, detail="Google login failed")

    request.session[SESSION_USER_KEY] = user["user_id"]
    logger.info(f"User {user['user_id']} logged in")
    return RedirectResponse(settings.CLIENT_URL)


@auth_router.get("/me", response_model=UserResponse)
def get_current_user(
    request: Request,
    data_access: DynamoDataAccess = Depends(require_data_access)
):
    user_id = request.session.get(SESSION_USER_KEY)
    if not user_id:
        raise HTTPException(status_code=401, detail="Not logged in")

    user = data_access.get_user_by_id(user_id)
    if not user:
        request.session.clear()
        raise HTTPException(status_code=401, detail="Not logged in")
    return user


@auth_router.post("/logout")
def logout(request: Request):
    request.session.clear()
    return {"message": "Logged out"}


@upload_router.post("/api/upload", response_model=UploadResponse)
def upload_file(
    file: Optional[UploadFile] = File(None),
    settings: Settings = Depends(get_settings)
):
    if file is None or not file.filename:
        raise HTTPException(status_code=400, detail="No file uploaded")

    contents = file.file.read(settings.MAX_UPLOAD_BYTES + 1)
    if len(contents) > settings.MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=413, detail="File too large")

    upload_dir = Path(settings.UPLOAD_DIR)
    upload_dir.mkdir(parents=True, exist_ok=True)
    filename = f"{int(time.time() * 1000)}-{secrets.token_hex(4)}{Path(file.filename).suffix}"
    (upload_dir / filename).write_bytes(contents)

    logger.info(f"Stored upload {filename} ({len(contents)} bytes)")
    return UploadResponse(message="File uploaded successfully", fileUrl=f"/uploads/{filename}")


@health_router.get("/health", response_model=HealthResponse)
def health():
    return HealthResponse(ok=True, timestamp=int(time.time() * 1000))
