from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field


class UserStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Role(str, Enum):
    SUPERADMIN = "superadmin"
    ADMIN = "admin"
    EMPLOYEE = "employee"
    CANDIDATE = "candidate"

    @property
    def default_status(self) -> UserStatus:
        if self in (Role.SUPERADMIN, Role.CANDIDATE):
            return UserStatus.APPROVED
        return UserStatus.PENDING

    @property
    def default_email_verified(self) -> bool:
        return self is Role.SUPERADMIN


def normalize_email(email: str) -> str:
    return email.strip().lower()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(BaseModel):
    """A users-collection document (without its ``_id``)."""
    model_config = ConfigDict(arbitrary_types_allowed=True, use_enum_values=True)

    name: str
    email: str
    password: str  # argon2 hash
    role: Role
    status: UserStatus
    email_verified: bool
    company_id: Optional[ObjectId] = None
    position: str = ""
    approved_by: Optional[ObjectId] = None
    created_at: datetime = Field(default_factory=utcnow)

    @classmethod
    def new(cls, role: Role, name: str, email: str, password_hash: str, **overrides) -> "User":
        """Build a user with the role's default status/verification unless overridden."""
        fields = {
            "status": role.default_status,
            "email_verified": role.default_email_verified,
        }
        fields.update(overrides)
        return cls(
            name=name.strip(),
            email=normalize_email(email),
            password=password_hash,
            role=role,
            **fields,
        )

    def to_document(self) -> dict:
        return self.model_dump()
