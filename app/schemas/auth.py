from pydantic import BaseModel, EmailStr, Field
from app.schemas.user import NOT_BLANK, UserOut


class LoginIn(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, pattern=NOT_BLANK)


class TokenOut(BaseModel):
    access_token: str
    token_type: str = "Bearer"
    user: UserOut


class LogoutOut(BaseModel):
    status: bool
    message: str
