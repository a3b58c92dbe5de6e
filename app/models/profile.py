"""Profile model — a student's published directory entry."""

import enum
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Enum, ForeignKey, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class YearOfStudyEnum(str, enum.Enum):
    FIRST = "1st Year"
    SECOND = "2nd Year"
    THIRD = "3rd Year"
    FOURTH = "4th Year"
    MASTERS = "Masters"
    PHD = "PhD"


class Profile(Base):
    __tablename__ = "profiles"

    # Same id as the owning identity
    id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )

    # ── Directory entry ──
    full_name: Mapped[str] = mapped_column(String(200), nullable=False)
    department: Mapped[str] = mapped_column(String(150), nullable=False)
    year_of_study: Mapped[YearOfStudyEnum] = mapped_column(
        Enum(
            YearOfStudyEnum,
            name="year_of_study",
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
    )
    bio: Mapped[Optional[str]] = mapped_column(Text)

    # ── Contact ──
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(50))
    linkedin_url: Mapped[Optional[str]] = mapped_column(String(500))

    # ── Timestamps ──
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    @property
    def initials(self) -> str:
        """Up to two upper-case initials for the avatar."""
        return "".join(part[0] for part in self.full_name.split() if part)[:2].upper()
