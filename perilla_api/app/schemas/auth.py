"""Login payloads."""

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1, examples=["Administrator"])
    password: str = Field(..., min_length=1)


class TokenRead(BaseModel):
    access_token: str
    token_type: str = "bearer"
