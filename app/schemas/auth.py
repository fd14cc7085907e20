from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field

from app.models.enum import UserRole


class TokenUser(BaseModel):
    """Identity embedded in the token response"""
    id: int
    email: str
    username: str
    firstname: str | None = None
    lastname: str | None = None
    role: UserRole

    model_config = ConfigDict(from_attributes=True)


class TokenOut(BaseModel):
    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field("Bearer", description="Token type")
    expires_in: int = Field(..., description="Token lifetime in seconds")
    expires_at: datetime = Field(..., description="Token expiration date")
    user: TokenUser


class TokenValidation(BaseModel):
    message: str = "Token is valid"
    valid: bool = True
