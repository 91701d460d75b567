from pydantic import BaseModel, Field
from typing import Optional


class LoginRequest(BaseModel):
    email: str
    password: str


class SignupRequest(BaseModel):
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=6)
    full_name: str = Field(..., min_length=1, alias="fullName")

    class Config:
        populate_by_name = True


class MeResponse(BaseModel):
    id: str
    email: str
    full_name: str
    role: Optional[str] = None
    home_path: Optional[str] = None


class TokenResponse(MeResponse):
    access_token: str
    token_type: str = "bearer"
