from pydantic import BaseModel

from .user import UserPublic


class SignupResponse(BaseModel):
    user: UserPublic


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserPublic
