import os
import logging
from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException, Response
from google_auth_oauthlib.flow import Flow

from api.dependencies import get_calendar_gate, get_google_auth_store, get_session
from integration.calendar_integration import CalendarIntegration
from integration.client_ready import CalendarClientGate
from storage.google_auth import GoogleAuthStore
from wizard.session import WizardSession

router = APIRouter()
logger = logging.getLogger(__name__)

# Google Auth Configuration
GOOGLE_CLIENT_ID = os.getenv("GOOGLE_CLIENT_ID")
GOOGLE_CLIENT_SECRET = os.getenv("GOOGLE_CLIENT_SECRET")
GOOGLE_REDIRECT_URI = os.getenv(
    "GOOGLE_REDIRECT_URI", "http://localhost:8000/auth/google/callback"
)
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")

SCOPES = [
    "openid",
    "https://www.googleapis.com/auth/calendar.events",
    "https://www.googleapis.com/auth/calendar.readonly",
    "https://www.googleapis.com/auth/userinfo.email",
]


def _build_flow() -> Flow:
    return Flow.from_client_config(
        {
            "web": {
                "client_id": GOOGLE_CLIENT_ID,
                "client_secret": GOOGLE_CLIENT_SECRET,
                "auth_uri": "https://accounts.google.com/o/oauth2/auth",
                "token_uri": "https://oauth2.googleapis.com/token",
            }
        },
        scopes=SCOPES,
        redirect_uri=GOOGLE_REDIRECT_URI,
        # login and callback use separate Flow objects, so no PKCE verifier
        autogenerate_code_verifier=False,
    )


def _redirect(query: str) -> Response:
    return Response(status_code=307, headers={"Location": f"{FRONTEND_URL}/?{query}"})


@router.get("/auth/google/login")
async def google_login():
    """Initiates the OAuth2 flow - redirects to Google."""
    if not GOOGLE_CLIENT_ID or not GOOGLE_CLIENT_SECRET:
        raise HTTPException(status_code=500, detail="Google credentials not configured")

    authorization_url, _state = _build_flow().authorization_url(
        access_type="offline", include_granted_scopes="true", prompt="consent"
    )
    return Response(status_code=307, headers={"Location": authorization_url})


@router.get("/auth/google/callback")
async def google_callback(
    code: Optional[str] = None,
    error: Optional[str] = None,
    google_auth_store: Optional[GoogleAuthStore] = Depends(get_google_auth_store),
    gate: CalendarClientGate = Depends(get_calendar_gate),
    session: WizardSession = Depends(get_session),
):
    """Handles the OAuth2 callback."""
    if error or not code:
        logger.error(f"OAuth error: {error}")
        return _redirect(f"error={quote(error or 'missing_code')}")

    try:
        flow = _build_flow()
        flow.fetch_token(code=code)
        credentials = flow.credentials

        try:
            user_info = flow.authorized_session().get(
                "https://www.googleapis.com/userinfo/v2/me"
            ).json()
            email = user_info.get("email")
        except Exception as e:
            logger.error(f"Failed to fetch user email: {e}")
            email = None

        if google_auth_store:
            await google_auth_store.save_credentials(credentials, email)
    except Exception as e:
        logger.error(f"OAuth callback failed: {e}")
        return _redirect("error=authentication_failed")

    gate.resolve(CalendarIntegration(credentials))
    session.sign_in()
    return _redirect("success=true")


@router.get("/auth/google/status")
async def google_status(
    google_auth_store: Optional[GoogleAuthStore] = Depends(get_google_auth_store),
    gate: CalendarClientGate = Depends(get_calendar_gate),
) -> dict:
    """Check if user is connected."""
    email = await google_auth_store.get_email() if google_auth_store else None
    return {"connected": gate.is_ready, "email": email}


@router.post("/auth/google/disconnect")
async def google_disconnect(
    google_auth_store: Optional[GoogleAuthStore] = Depends(get_google_auth_store),
    gate: CalendarClientGate = Depends(get_calendar_gate),
    session: WizardSession = Depends(get_session),
) -> dict:
    """Delete stored credentials and reset the wizard to its first step."""
    if google_auth_store:
        await google_auth_store.delete_credentials()
    gate.reset()
    session.sign_out()
    return {"status": "disconnected"}
