"""
SkillHub — FastAPI application entry-point.

Run with:
    uvicorn app.main:app --reload
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.middleware.sessions import SessionMiddleware
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from app.config import settings
from app.database import create_tables, get_db
from app.models.user import User
from app.routers import api, auth, profile, search
from app.routers.auth import get_current_user, on_auth_state_change, sign_in
from app.services import directory

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


def _log_auth_event(event: str, user: Optional[User]) -> None:
    if user is not None:
        logger.info(f"{event}: user {user.id} ({user.email})")
    else:
        logger.info(event)


# ── Lifespan: create tables on startup ──
@asynccontextmanager
async def lifespan(app: FastAPI):
    await create_tables()
    unsubscribe = on_auth_state_change(_log_auth_event)
    yield
    unsubscribe()


app = FastAPI(
    title=settings.APP_NAME,
    description="Student skill directory — publish a profile, find classmates by skill.",
    version="0.1.0",
    lifespan=lifespan,
)

# ── Session middleware (required for OAuth state) ──
app.add_middleware(SessionMiddleware, secret_key=settings.SECRET_KEY, https_only=not settings.DEBUG)
app.add_middleware(ProxyHeadersMiddleware, trusted_hosts=("*",))

# ── Static files & templates ──
app.mount("/static", StaticFiles(directory="app/static"), name="static")
templates = Jinja2Templates(directory="app/templates")

# ── Register routers ──
app.include_router(auth.router)
app.include_router(profile.router)
app.include_router(search.router)
app.include_router(api.router)


if settings.ENVIRONMENT != "production":

    @app.get("/mock-login/{user_id}")
    async def mock_login(user_id: int, db: AsyncSession = Depends(get_db)):
        """Sign in as an existing identity without going through OAuth."""
        result = await db.execute(select(User).where(User.id == user_id))
        user = result.scalar_one_or_none()
        if not user:
            return RedirectResponse(url="/?error=User+not+found", status_code=status.HTTP_303_SEE_OTHER)
        resp = RedirectResponse(url="/profile", status_code=status.HTTP_303_SEE_OTHER)
        return sign_in(resp, user)


# ── Landing page ──
@app.get("/", response_class=HTMLResponse)
async def homepage(
    request: Request,
    current_user: Optional[User] = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    trending = await directory.list_trending_skills(db, settings.TRENDING_SKILLS_LIMIT)

    return templates.TemplateResponse(
        request,
        "home.html",
        {
            "current_user": current_user,
            "trending": trending,
            "errors": [],
            "success": request.query_params.get("success", ""),
            "error": request.query_params.get("error", ""),
        },
    )
