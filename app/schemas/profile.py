"""Profile Pydantic schemas — setup / edit form input and API output."""

from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, ValidationError, field_validator

from app.models.profile import YearOfStudyEnum
from app.schemas.skill import SkillOut

# Form field -> label shown next to validation messages
FIELD_LABELS = {
    "full_name": "Full name",
    "department": "Department",
    "year_of_study": "Year of study",
    "bio": "Bio",
    "email": "Email",
    "phone": "Phone",
    "linkedin_url": "LinkedIn URL",
}


class ProfileForm(BaseModel):
    """Fields submitted on the profile setup and edit forms."""

    model_config = {"str_strip_whitespace": True}

    full_name: str = Field(min_length=1, max_length=200)
    department: str = Field(min_length=1, max_length=150)
    year_of_study: YearOfStudyEnum
    bio: Optional[str] = None
    email: EmailStr
    phone: Optional[str] = Field(default=None, max_length=50)
    linkedin_url: Optional[str] = Field(default=None, max_length=500)

    @field_validator("bio", "phone", "linkedin_url", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("linkedin_url")
    @classmethod
    def _must_be_http_url(cls, value: Optional[str]) -> Optional[str]:
        if value and not value.startswith(("http://", "https://")):
            raise ValueError("must start with http:// or https://")
        return value

    @classmethod
    def from_form(cls, form) -> "ProfileForm":
        """Build from a submitted form; raises ``ValidationError``."""
        return cls(**{name: form.get(name) or "" for name in FIELD_LABELS})


def form_errors(exc: ValidationError) -> List[str]:
    """Flatten a ValidationError into one readable line per field."""
    errors = []
    for err in exc.errors():
        field = err["loc"][0] if err["loc"] else ""
        label = FIELD_LABELS.get(field, str(field))
        errors.append(f"{label}: {err['msg']}")
    return errors


class ProfileOut(BaseModel):
    """Public profile representation returned by the API."""
    id: int
    full_name: str
    department: str
    year_of_study: YearOfStudyEnum
    bio: Optional[str] = None
    email: str
    phone: Optional[str] = None
    linkedin_url: Optional[str] = None

    model_config = {"from_attributes": True}


class ProfileWithSkillsOut(ProfileOut):
    skills: List[SkillOut] = []


class SearchResultOut(BaseModel):
    """One search hit: a profile and the names of its matching skills."""
    profile: ProfileOut
    skills: List[str]
