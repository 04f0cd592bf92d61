from pydantic import BaseModel, ConfigDict, EmailStr, Field, StringConstraints, ValidationInfo, field_validator
from typing import Annotated, Any, Dict, List, Optional
from datetime import datetime
from app.core.enums import UserRole

# rejects strings made only of whitespace without altering the value
NOT_BLANK = r"^\s*\S"

TrimmedName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]


class UserCreate(BaseModel):
    name: TrimmedName
    email: EmailStr
    role: UserRole
    # declared before password so the confirmation is available to its validator
    password_confirmation: Optional[str] = None
    password: str = Field(min_length=6, pattern=NOT_BLANK)

    @field_validator("password")
    @classmethod
    def password_confirmed(cls, value: str, info: ValidationInfo) -> str:
        if info.data.get("password_confirmation") != value:
            raise ValueError("The password field confirmation does not match.")
        return value


class BulkCreateIn(BaseModel):
    users: List[Dict[str, Any]]


class BulkCreateOut(BaseModel):
    status: bool
    message: str
    inserted_count: int


class UserUpdate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[UserRole] = None
    password: Optional[str] = None


class BatchDeleteIn(BaseModel):
    ids: List[int] = []


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    role: UserRole
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None


class UserPage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_page: int
    data: List[UserOut]
    first_page_url: str
    from_: Optional[int] = Field(None, alias="from")
    last_page: int
    last_page_url: str
    next_page_url: Optional[str] = None
    path: str
    per_page: int
    prev_page_url: Optional[str] = None
    to: Optional[int] = None
    total: int


class UserListOut(BaseModel):
    status: bool
    data: UserPage


class MessageOut(BaseModel):
    message: str
