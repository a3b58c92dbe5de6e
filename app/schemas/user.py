"""User Pydantic schemas — identity output."""

from typing import Optional

from pydantic import BaseModel


class UserOut(BaseModel):
    """Public identity representation returned by the API."""
    id: int
    email: str
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None
    has_profile: bool = False

    model_config = {"from_attributes": True}
