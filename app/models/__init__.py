"""
SkillHub – SQLAlchemy ORM models package.

Imports all model classes so ``app.database.create_tables`` registers
every table with a single ``from app import models``.
"""

from app.models.user import User                   # noqa: F401
from app.models.profile import Profile, YearOfStudyEnum  # noqa: F401
from app.models.skill import Skill                 # noqa: F401
from app.models.user_skill import UserSkill        # noqa: F401
