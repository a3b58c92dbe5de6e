"""Skill Pydantic schemas."""

from pydantic import BaseModel


class SkillOut(BaseModel):
    id: int
    name: str
    category: str

    model_config = {"from_attributes": True}


class TrendingSkillOut(SkillOut):
    """A skill plus how many profiles list it."""
    student_count: int = 0
