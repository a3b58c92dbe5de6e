"""JSON API — read-only access to skills, profiles and skill search."""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db
from app.models.user import User
from app.routers.auth import get_current_user
from app.schemas.profile import ProfileOut, ProfileWithSkillsOut, SearchResultOut
from app.schemas.skill import SkillOut, TrendingSkillOut
from app.schemas.user import UserOut
from app.services import directory

router = APIRouter(prefix="/api", tags=["api"])


@router.get("/me", response_model=UserOut)
async def read_me(
    current_user: Optional[User] = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Return the signed-in identity."""
    if not current_user:
        raise HTTPException(status_code=401, detail="Not authenticated")
    out = UserOut.model_validate(current_user)
    out.has_profile = await directory.get_profile(db, current_user.id) is not None
    return out


@router.get("/skills", response_model=List[SkillOut])
async def read_skills(db: AsyncSession = Depends(get_db)):
    return await directory.list_skills(db)


@router.get("/skills/trending", response_model=List[TrendingSkillOut])
async def read_trending_skills(db: AsyncSession = Depends(get_db)):
    trending = await directory.list_trending_skills(db, settings.TRENDING_SKILLS_LIMIT)
    return [
        TrendingSkillOut(
            id=t.skill.id,
            name=t.skill.name,
            category=t.skill.category,
            student_count=t.student_count,
        )
        for t in trending
    ]


@router.get("/search", response_model=List[SearchResultOut])
async def search(q: str = "", db: AsyncSession = Depends(get_db)):
    """Students holding a skill whose name contains ``q``."""
    results = await directory.search_profiles_by_skill(db, q)
    return [
        SearchResultOut(profile=ProfileOut.model_validate(r.profile), skills=r.skills)
        for r in results
    ]


@router.get("/profiles/{profile_id}", response_model=ProfileWithSkillsOut)
async def read_profile(
    profile_id: int,
    current_user: Optional[User] = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if not current_user:
        raise HTTPException(status_code=401, detail="Not authenticated")
    profile = await directory.get_profile(db, profile_id)
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")
    skills = await directory.get_profile_skills(db, profile_id)
    return ProfileWithSkillsOut(
        **ProfileOut.model_validate(profile).model_dump(),
        skills=[SkillOut.model_validate(s) for s in skills],
    )
