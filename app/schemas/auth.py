from typing import ClassVar, Dict, Optional

from pydantic import BaseModel, EmailStr, constr


class LoginRequest(BaseModel):
    email: EmailStr
    password: constr(min_length=6)

    messages: ClassVar[Dict[str, str]] = {
        "email": "Invalid email address",
        "password": "Password must be at least 6 characters long",
    }


class SignupRequest(LoginRequest):
    username: constr(strip_whitespace=True, min_length=3)

    messages: ClassVar[Dict[str, str]] = {
        **LoginRequest.messages,
        "username": "Username must be at least 3 characters",
    }


class AuthTokens(BaseModel):
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None
    user_id: str
    email: Optional[str] = None
