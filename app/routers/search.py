"""Search router — find students by skill keyword."""

from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.user import User
from app.routers.auth import get_current_user
from app.services import directory

router = APIRouter(prefix="/search", tags=["search"])
templates = Jinja2Templates(directory="app/templates")


@router.get("", response_class=HTMLResponse)
async def search_page(
    request: Request,
    q: str = "",
    current_user: Optional[User] = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Render matching students for ``q``; an empty query shows just the box."""
    query = q.strip()
    results = await directory.search_profiles_by_skill(db, query) if query else []

    return templates.TemplateResponse(
        request,
        "search.html",
        {
            "current_user": current_user,
            "query": query,
            "results": results,
            "errors": [],
        },
    )
