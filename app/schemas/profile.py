from datetime import date, datetime
from typing import ClassVar, Dict, Optional

from pydantic import BaseModel, ConfigDict, constr


class Profile(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: Optional[str] = None
    user_id: str
    full_name: Optional[str] = None
    username: Optional[str] = None
    bio: Optional[str] = None
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    avatar_url: Optional[str] = None
    updated_at: Optional[datetime] = None


class ProfileUpdate(BaseModel):
    """Editable profile fields; only the ones sent are written."""

    full_name: Optional[constr(max_length=100)] = None
    username: Optional[constr(strip_whitespace=True, min_length=3, max_length=50)] = None
    bio: Optional[str] = None
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    avatar_url: Optional[str] = None

    messages: ClassVar[Dict[str, str]] = {
        "username": "Username must be at least 3 characters",
    }
