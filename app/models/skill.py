"""Skill model — global, shared skill tags."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base

DEFAULT_CATEGORY = "Other"


class Skill(Base):
    __tablename__ = "skills"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(150), unique=True, nullable=False)
    category: Mapped[str] = mapped_column(
        String(50), nullable=False, default=DEFAULT_CATEGORY
    )
