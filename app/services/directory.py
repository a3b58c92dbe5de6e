"""
Directory service — every query the pages issue against the store.

Reads degrade to "no data": store failures are logged and an empty result
is returned. Inserts raise ``BackendError`` carrying the store's own message
so the page can show it to the user unchanged.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.profile import Profile
from app.models.skill import DEFAULT_CATEGORY, Skill
from app.models.user_skill import UserSkill
from app.schemas.profile import ProfileForm

logger = logging.getLogger(__name__)


class BackendError(Exception):
    """A write rejected by the store (constraint, uniqueness, connection)."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


@dataclass
class TrendingSkill:
    skill: Skill
    student_count: int = 0


@dataclass
class SearchResult:
    profile: Profile
    skills: List[str] = field(default_factory=list)


async def _commit(db: AsyncSession, action: str) -> None:
    """Commit pending writes, turning store errors into ``BackendError``."""
    try:
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        message = str(getattr(exc, "orig", None) or exc)
        logger.warning(f"{action} rejected by the store: {message}")
        raise BackendError(message) from exc


# ═══════════════════════════════════════════════════════════════
#  Reads
# ═══════════════════════════════════════════════════════════════

async def list_trending_skills(db: AsyncSession, limit: int = 8) -> List[TrendingSkill]:
    """Up to ``limit`` skills, each with the number of profiles listing it."""
    try:
        result = await db.execute(
            select(Skill, func.count(UserSkill.user_id))
            .outerjoin(UserSkill, UserSkill.skill_id == Skill.id)
            .group_by(Skill.id)
            .limit(limit)
        )
        rows = result.all()
    except SQLAlchemyError as exc:
        logger.error(f"Could not load trending skills: {exc}")
        return []
    return [TrendingSkill(skill=skill, student_count=count) for skill, count in rows]


async def list_skills(db: AsyncSession) -> List[Skill]:
    """Every skill, alphabetically, for the setup form picker."""
    try:
        result = await db.execute(select(Skill).order_by(Skill.name))
        return list(result.scalars().all())
    except SQLAlchemyError as exc:
        logger.error(f"Could not load skills: {exc}")
        return []


async def search_skills(db: AsyncSession, query: str) -> List[Skill]:
    """Skills whose name contains ``query``, ignoring case."""
    query = (query or "").strip()
    if not query:
        return []
    try:
        result = await db.execute(
            select(Skill).where(Skill.name.icontains(query, autoescape=True))
        )
        return list(result.scalars().all())
    except SQLAlchemyError as exc:
        logger.error(f"Skill search for {query!r} failed: {exc}")
        return []


async def search_profiles_by_skill(db: AsyncSession, query: str) -> List[SearchResult]:
    """
    Profiles holding any skill that matches ``query``.

    Join rows for the matching skills are grouped by profile, so a student
    with two matching skills appears once with both badges. Order is the
    order in which the store returned the join rows.
    """
    skills = await search_skills(db, query)
    if not skills:
        return []

    try:
        result = await db.execute(
            select(UserSkill)
            .options(selectinload(UserSkill.profile), selectinload(UserSkill.skill))
            .where(UserSkill.skill_id.in_([s.id for s in skills]))
        )
        rows = result.scalars().all()
    except SQLAlchemyError as exc:
        logger.error(f"Profile search for {query!r} failed: {exc}")
        return []

    grouped: Dict[int, SearchResult] = {}
    for row in rows:
        if row.profile is None:
            continue
        entry = grouped.setdefault(row.profile.id, SearchResult(profile=row.profile))
        entry.skills.append(row.skill.name)
    return list(grouped.values())


async def get_profile(db: AsyncSession, profile_id: int) -> Optional[Profile]:
    try:
        result = await db.execute(select(Profile).where(Profile.id == profile_id))
        return result.scalar_one_or_none()
    except SQLAlchemyError as exc:
        logger.error(f"Could not load profile {profile_id}: {exc}")
        return None


async def get_profile_skills(db: AsyncSession, profile_id: int) -> List[Skill]:
    try:
        result = await db.execute(
            select(Skill)
            .join(UserSkill, UserSkill.skill_id == Skill.id)
            .where(UserSkill.user_id == profile_id)
            .order_by(Skill.name)
        )
        return list(result.scalars().all())
    except SQLAlchemyError as exc:
        logger.error(f"Could not load skills for profile {profile_id}: {exc}")
        return []


# ═══════════════════════════════════════════════════════════════
#  Writes
# ═══════════════════════════════════════════════════════════════

async def create_profile(db: AsyncSession, user_id: int, data: ProfileForm) -> Profile:
    """Insert the profile row for ``user_id``. Committed on return."""
    profile = Profile(id=user_id, **data.model_dump())
    db.add(profile)
    await _commit(db, f"Profile insert for user {user_id}")
    logger.info(f"Profile created for user {user_id}")
    return profile


async def update_profile(db: AsyncSession, profile: Profile, data: ProfileForm) -> Profile:
    for name, value in data.model_dump().items():
        setattr(profile, name, value)
    await _commit(db, f"Profile update for user {profile.id}")
    return profile


async def add_skill(db: AsyncSession, name: str, category: str = DEFAULT_CATEGORY) -> Skill:
    """Insert a new shared skill and return the stored row."""
    skill = Skill(name=name.strip(), category=category)
    db.add(skill)
    await _commit(db, f"Skill insert {name!r}")
    logger.info(f"Skill {skill.name!r} added with id {skill.id}")
    return skill


async def link_skills(db: AsyncSession, user_id: int, skill_ids: Iterable[int]) -> List[UserSkill]:
    """Bulk-insert join rows linking ``user_id`` to each skill."""
    links = [
        UserSkill(user_id=user_id, skill_id=skill_id)
        for skill_id in dict.fromkeys(skill_ids)
    ]
    if not links:
        return []
    db.add_all(links)
    await _commit(db, f"Skill links for user {user_id}")
    return links
