"""
Profile router — view, set up and edit directory profiles.

Endpoints:
    GET  /profile                → own profile (setup form if none yet)
    GET  /profile/setup          → profile creation form
    POST /profile/setup          → create profile + link selected skills
    POST /profile/setup/skills   → add a custom skill, re-render the form
    GET  /profile/edit           → edit form for the owner
    POST /profile/edit           → update profile fields
    GET  /profile/{user_id}      → another student's profile
"""

import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.profile import Profile, YearOfStudyEnum
from app.models.user import User
from app.routers.auth import get_current_user
from app.schemas.profile import FIELD_LABELS, ProfileForm, form_errors
from app.services import directory
from app.services.directory import BackendError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/profile", tags=["profile"])
templates = Jinja2Templates(directory="app/templates")

LOGIN_URL = "/auth/login"
NO_SKILLS_SELECTED = "Select at least one skill or add your own"


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url=url, status_code=status.HTTP_303_SEE_OTHER)


def _form_values(form) -> Dict[str, str]:
    """Raw submitted values, echoed back into the form on re-render."""
    return {name: (form.get(name) or "").strip() for name in FIELD_LABELS}


def _selected_skill_ids(form) -> List[int]:
    ids = []
    for raw in form.getlist("skill_ids"):
        try:
            skill_id = int(str(raw))
        except ValueError:
            continue
        if skill_id > 0 and skill_id not in ids:
            ids.append(skill_id)
    return ids


async def _render_setup(
    request: Request,
    db: AsyncSession,
    current_user: User,
    values: Dict[str, str],
    selected: List[int],
    errors: Optional[List[str]] = None,
    success: str = "",
) -> HTMLResponse:
    skills = await directory.list_skills(db)
    return templates.TemplateResponse(
        request,
        "profile_setup.html",
        {
            "current_user": current_user,
            "values": values,
            "skills": skills,
            "selected": selected,
            "years": [y.value for y in YearOfStudyEnum],
            "errors": errors or [],
            "success": success,
        },
    )


def _render_edit(
    request: Request,
    current_user: User,
    values: Dict[str, str],
    errors: Optional[List[str]] = None,
) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "profile_edit.html",
        {
            "current_user": current_user,
            "values": values,
            "years": [y.value for y in YearOfStudyEnum],
            "errors": errors or [],
        },
    )


async def _render_profile(
    request: Request,
    db: AsyncSession,
    current_user: User,
    profile_id: int,
):
    is_owner = profile_id == current_user.id
    profile = await directory.get_profile(db, profile_id)

    if not profile:
        if is_owner:
            return _redirect("/profile/setup")
        logger.info(f"Profile {profile_id} requested by user {current_user.id} does not exist")
        return _redirect("/?error=Profile+not+found")

    skills = await directory.get_profile_skills(db, profile_id)
    return templates.TemplateResponse(
        request,
        "profile.html",
        {
            "current_user": current_user,
            "profile": profile,
            "skills": skills,
            "is_owner": is_owner,
            "errors": [],
            "success": request.query_params.get("success", ""),
        },
    )


# ═══════════════════════════════════════════════════════════════
#  GET /profile — own profile
# ═══════════════════════════════════════════════════════════════

@router.get("", response_class=HTMLResponse)
async def own_profile(
    request: Request,
    current_user: Optional[User] = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if not current_user:
        return _redirect(LOGIN_URL)
    return await _render_profile(request, db, current_user, current_user.id)


# ═══════════════════════════════════════════════════════════════
#  Profile setup
# ═══════════════════════════════════════════════════════════════

@router.get("/setup", response_class=HTMLResponse)
async def setup_form(
    request: Request,
    current_user: Optional[User] = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if not current_user:
        return _redirect(LOGIN_URL)
    if await directory.get_profile(db, current_user.id):
        return _redirect("/profile")

    values = {name: "" for name in FIELD_LABELS}
    values["email"] = current_user.email or ""
    return await _render_setup(request, db, current_user, values, selected=[])


@router.post("/setup", response_class=HTMLResponse)
async def create_profile(
    request: Request,
    current_user: Optional[User] = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if not current_user:
        return _redirect(LOGIN_URL)

    form = await request.form()
    values = _form_values(form)
    selected = _selected_skill_ids(form)

    errors: List[str] = []
    data = None
    try:
        data = ProfileForm.from_form(form)
    except ValidationError as exc:
        errors.extend(form_errors(exc))
    if not selected:
        errors.append(NO_SKILLS_SELECTED)
    if errors:
        return await _render_setup(request, db, current_user, values, selected, errors)

    # Profile first, then its skill links. No transaction spans both: a
    # failed link insert leaves the profile in place.
    try:
        await directory.create_profile(db, current_user.id, data)
        await directory.link_skills(db, current_user.id, selected)
    except BackendError as exc:
        return await _render_setup(
            request, db, current_user, values, selected, [exc.message]
        )

    return _redirect("/profile?success=Profile+created%21+Welcome+to+SkillHub%21")


@router.post("/setup/skills", response_class=HTMLResponse)
async def add_custom_skill(
    request: Request,
    current_user: Optional[User] = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if not current_user:
        return _redirect(LOGIN_URL)

    form = await request.form()
    values = _form_values(form)
    selected = _selected_skill_ids(form)
    name = (form.get("new_skill") or "").strip()

    if not name:
        return await _render_setup(request, db, current_user, values, selected)

    try:
        skill = await directory.add_skill(db, name)
    except BackendError as exc:
        return await _render_setup(
            request, db, current_user, values, selected, [exc.message]
        )

    selected.append(skill.id)
    return await _render_setup(
        request, db, current_user, values, selected,
        success=f"{skill.name} has been added to your skills.",
    )


# ═══════════════════════════════════════════════════════════════
#  Profile edit (owner only)
# ═══════════════════════════════════════════════════════════════

def _profile_values(profile: Profile) -> Dict[str, str]:
    values = {}
    for name in FIELD_LABELS:
        value = getattr(profile, name)
        values[name] = getattr(value, "value", value) or ""
    return values


@router.get("/edit", response_class=HTMLResponse)
async def edit_form(
    request: Request,
    current_user: Optional[User] = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if not current_user:
        return _redirect(LOGIN_URL)
    profile = await directory.get_profile(db, current_user.id)
    if not profile:
        return _redirect("/profile/setup")
    return _render_edit(request, current_user, _profile_values(profile))


@router.post("/edit", response_class=HTMLResponse)
async def update_profile(
    request: Request,
    current_user: Optional[User] = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if not current_user:
        return _redirect(LOGIN_URL)
    profile = await directory.get_profile(db, current_user.id)
    if not profile:
        return _redirect("/profile/setup")

    form = await request.form()
    values = _form_values(form)
    try:
        data = ProfileForm.from_form(form)
    except ValidationError as exc:
        return _render_edit(request, current_user, values, form_errors(exc))

    try:
        await directory.update_profile(db, profile, data)
    except BackendError as exc:
        return _render_edit(request, current_user, values, [exc.message])

    return _redirect("/profile?success=Profile+updated")


# ═══════════════════════════════════════════════════════════════
#  GET /profile/{user_id} — another student's profile
# ═══════════════════════════════════════════════════════════════

@router.get("/{user_id}", response_class=HTMLResponse)
async def view_profile(
    user_id: int,
    request: Request,
    current_user: Optional[User] = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if not current_user:
        return _redirect(LOGIN_URL)
    return await _render_profile(request, db, current_user, user_id)
