from datetime import datetime
from typing import Annotated, List, Optional

from pydantic import BaseModel, EmailStr, StringConstraints

from jobboard.models.user import Role, UserStatus

NonEmpty = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
Password = Annotated[str, StringConstraints(min_length=1)]


# 1. For Registration (Input)
class UserCreate(BaseModel):
    name: NonEmpty
    email: EmailStr
    password: Password


class EmployeeCreate(UserCreate):
    """Admin-created employee that skips approval and verification."""
    position: NonEmpty


# 2. For Login (Input)
class UserLogin(BaseModel):
    email: NonEmpty
    password: Password


# 3. Partial updates: absent fields are left untouched
class EmployeeUpdate(BaseModel):
    name: Optional[NonEmpty] = None
    position: Optional[NonEmpty] = None
    password: Optional[str] = None


class AdminUpdate(BaseModel):
    name: Optional[NonEmpty] = None
    email: Optional[EmailStr] = None
    password: Optional[str] = None


# 4. For Responses (Output) - never includes the password
class UserResponse(BaseModel):
    id: str
    name: str
    email: str
    role: Role
    status: UserStatus
    email_verified: bool
    company_id: Optional[str] = None
    position: Optional[str] = None
    approved_by: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_document(cls, user: dict) -> "UserResponse":
        return cls(
            id=str(user["_id"]),
            name=user["name"],
            email=user["email"],
            role=user["role"],
            status=user["status"],
            email_verified=user.get("email_verified", False),
            company_id=str(user["company_id"]) if user.get("company_id") else None,
            position=user.get("position") or None,
            approved_by=str(user["approved_by"]) if user.get("approved_by") else None,
            created_at=user.get("created_at"),
        )


class UserSummary(BaseModel):
    name: str
    email: str
    role: Role


class MessageResponse(BaseModel):
    message: str


class RegisterResponse(MessageResponse):
    user: UserResponse
    email_verification_link: Optional[str] = None


class UserMessageResponse(MessageResponse):
    user: UserResponse


class LoginResponse(MessageResponse):
    token: str
    user: UserResponse


class UserListResponse(BaseModel):
    users: List[UserResponse]


def user_list(users: List[dict]) -> UserListResponse:
    return UserListResponse(users=[UserResponse.from_document(u) for u in users])
