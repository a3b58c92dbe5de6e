"""
Authentication router — OAuth sign-in (Google, GitHub) + JWT cookie.

Endpoints:
    GET  /auth/login               → sign-in page (social buttons)
    GET  /auth/login/{provider}    → redirect to OAuth consent screen
    GET  /auth/callback/{provider} → handle OAuth callback, create/login user
    GET  /auth/logout              → clear JWT cookie
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

import httpx
from authlib.integrations.starlette_client import OAuth, OAuthError
from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from jose import JWTError, jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db
from app.models.user import User
from app.services import directory

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])
templates = Jinja2Templates(directory="app/templates")

COOKIE_KEY = "access_token"

SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"

# ═══════════════════════════════════════════════════════════════
#  OAuth client setup
# ═══════════════════════════════════════════════════════════════

oauth = OAuth()

# ── Google ──
oauth.register(
    name="google",
    client_id=settings.GOOGLE_CLIENT_ID,
    client_secret=settings.GOOGLE_CLIENT_SECRET,
    server_metadata_url="https://accounts.google.com/.well-known/openid-configuration",
    client_kwargs={"scope": "openid email profile"},
)

# ── GitHub ──
oauth.register(
    name="github",
    client_id=settings.GITHUB_CLIENT_ID,
    client_secret=settings.GITHUB_CLIENT_SECRET,
    access_token_url="https://github.com/login/oauth/access_token",
    authorize_url="https://github.com/login/oauth/authorize",
    api_base_url="https://api.github.com/",
    client_kwargs={"scope": "user:email"},
)

VALID_PROVIDERS = {"google", "github"}


# ═══════════════════════════════════════════════════════════════
#  Session-change listeners
# ═══════════════════════════════════════════════════════════════

AuthStateListener = Callable[[str, Optional[User]], None]
_listeners: List[AuthStateListener] = []


def on_auth_state_change(callback: AuthStateListener) -> Callable[[], None]:
    """
    Register ``callback(event, user)`` for sign-in / sign-out events.
    Returns a function that unsubscribes it again.
    """
    _listeners.append(callback)

    def unsubscribe() -> None:
        if callback in _listeners:
            _listeners.remove(callback)

    return unsubscribe


def _emit(event: str, user: Optional[User]) -> None:
    for listener in list(_listeners):
        try:
            listener(event, user)
        except Exception:
            logger.exception(f"Auth state listener failed on {event}")


# ═══════════════════════════════════════════════════════════════
#  Helpers
# ═══════════════════════════════════════════════════════════════

def create_access_token(data: dict) -> str:
    """Create a signed JWT with an expiry claim."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(
        minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def _set_auth_cookie(response: RedirectResponse, user_id: int) -> RedirectResponse:
    """Attach the JWT cookie to a response."""
    token = create_access_token({"sub": str(user_id)})
    response.set_cookie(
        key=COOKIE_KEY,
        value=token,
        httponly=True,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        samesite="lax",
    )
    return response


def get_session_user_id(request: Request) -> Optional[int]:
    """Decode the cookie JWT; ``None`` when absent, expired or tampered."""
    token = request.cookies.get(COOKIE_KEY)
    if not token:
        return None
    try:
        payload = jwt.decode(
            token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM]
        )
        user_id = int(payload.get("sub", 0))
    except (JWTError, ValueError):
        return None
    return user_id or None


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> Optional[User]:
    """
    Extract the JWT from the cookie, decode it, and return the User.
    Returns None when no valid token is present (allows public pages).
    """
    user_id = get_session_user_id(request)
    if not user_id:
        return None
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


def sign_in(response: RedirectResponse, user: User) -> RedirectResponse:
    """Attach the session cookie for ``user`` and notify listeners."""
    _set_auth_cookie(response, user.id)
    _emit(SIGNED_IN, user)
    return response


async def _get_oauth_user_info(provider: str, token: dict, client) -> dict:
    """
    Fetch the user's profile from the OAuth provider.
    Returns dict with keys: email, name, picture, oauth_id
    """
    if provider == "google":
        userinfo = token.get("userinfo", {})
        return {
            "email": userinfo.get("email"),
            "name": userinfo.get("name", ""),
            "picture": userinfo.get("picture"),
            "oauth_id": userinfo.get("sub"),
        }

    elif provider == "github":
        resp = await client.get("user", token=token)
        profile = resp.json()

        # GitHub may not include email in profile — fetch from /user/emails
        email = profile.get("email")
        if not email:
            emails_resp = await client.get("user/emails", token=token)
            emails = emails_resp.json()
            primary = next((e for e in emails if e.get("primary")), None)
            email = primary["email"] if primary else None

        return {
            "email": email,
            "name": profile.get("name") or profile.get("login", ""),
            "picture": profile.get("avatar_url"),
            "oauth_id": str(profile.get("id")),
        }

    return {}


# ═══════════════════════════════════════════════════════════════
#  Page routes
# ═══════════════════════════════════════════════════════════════

@router.get("/login", response_class=HTMLResponse)
async def login_page(request: Request):
    """Render the sign-in page with social buttons."""
    return templates.TemplateResponse(
        request,
        "login.html",
        {
            "current_user": None,
            "providers": sorted(VALID_PROVIDERS),
            "errors": [],
            "success": request.query_params.get("success", ""),
        },
    )


# ═══════════════════════════════════════════════════════════════
#  OAuth flow
# ═══════════════════════════════════════════════════════════════

@router.get("/login/{provider}")
async def oauth_login(provider: str, request: Request):
    """Redirect the user to the provider's OAuth consent screen."""
    if provider not in VALID_PROVIDERS:
        raise HTTPException(status_code=400, detail=f"Unknown provider: {provider}")

    client = oauth.create_client(provider)
    redirect_uri = request.url_for("oauth_callback", provider=provider)
    return await client.authorize_redirect(request, str(redirect_uri))


@router.get("/callback/{provider}")
async def oauth_callback(
    provider: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    """Handle the OAuth callback — find or create the user, set JWT cookie."""
    if provider not in VALID_PROVIDERS:
        raise HTTPException(status_code=400, detail=f"Unknown provider: {provider}")

    try:
        client = oauth.create_client(provider)
        token = await client.authorize_access_token(request)
        user_info = await _get_oauth_user_info(provider, token, client)
    except (OAuthError, httpx.HTTPError, AttributeError, KeyError, TypeError, ValueError) as e:
        logger.warning(f"OAuth callback from {provider} failed: {e!r}")
        detail = getattr(e, "description", None) or str(e) or type(e).__name__
        return templates.TemplateResponse(
            request,
            "login.html",
            {
                "current_user": None,
                "providers": sorted(VALID_PROVIDERS),
                "errors": [f"Authentication failed: {detail}"],
            },
        )

    email = user_info.get("email")
    oauth_id = user_info.get("oauth_id")

    if not email or not oauth_id:
        return templates.TemplateResponse(
            request,
            "login.html",
            {
                "current_user": None,
                "providers": sorted(VALID_PROVIDERS),
                "errors": ["Could not retrieve your email from the provider. Please try a different sign-in method."],
            },
        )

    # ── Find existing user by oauth_provider + oauth_id ──
    result = await db.execute(
        select(User).where(User.oauth_provider == provider, User.oauth_id == oauth_id)
    )
    user = result.scalar_one_or_none()

    if not user:
        # Same email under a different provider is the same identity
        result = await db.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()

        if user:
            user.oauth_provider = provider
            user.oauth_id = oauth_id
            if user_info.get("picture"):
                user.avatar_url = user_info["picture"]
        else:
            user = User(
                email=email,
                display_name=user_info.get("name") or email.split("@")[0],
                oauth_provider=provider,
                oauth_id=oauth_id,
                avatar_url=user_info.get("picture"),
            )
            db.add(user)

        await db.commit()
        await db.refresh(user)

    # First sign-in goes straight to the setup form
    profile = await directory.get_profile(db, user.id)
    target = "/?success=Signed+in" if profile else "/profile/setup"

    response = RedirectResponse(url=target, status_code=status.HTTP_303_SEE_OTHER)
    return sign_in(response, user)


# ═══════════════════════════════════════════════════════════════
#  Logout
# ═══════════════════════════════════════════════════════════════

@router.get("/logout")
async def logout(request: Request):
    """Clear the auth cookie and redirect to the sign-in page."""
    response = RedirectResponse(
        url="/auth/login?success=Logged+out+successfully",
        status_code=status.HTTP_303_SEE_OTHER,
    )
    response.delete_cookie(key=COOKIE_KEY)
    if get_session_user_id(request):
        _emit(SIGNED_OUT, None)
    return response
