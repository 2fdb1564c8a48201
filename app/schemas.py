"""
Request and response schemas.

JSON bodies and query strings use camelCase names (`dueDate`, `isArchived`,
`sortBy`); Python code uses the snake_case attribute names. Every response is
wrapped in the `ApiResponse` envelope.
"""

import re
from datetime import datetime
from typing import Annotated, Any, Generic, Literal, TypeVar
from uuid import UUID

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StringConstraints,
    field_serializer,
    field_validator,
)
from pydantic.alias_generators import to_camel

from app.config import settings
from app.models.base import as_utc

TaskStatus = Literal["pending", "in-progress", "completed", "cancelled"]
TaskPriority = Literal["low", "medium", "high", "urgent"]
SortField = Literal[
    "createdAt",
    "updatedAt",
    "dueDate",
    "completedAt",
    "title",
    "status",
    "priority",
    "category",
]
SortOrder = Literal["asc", "desc"]

# Fields a client may change, enumerated once and shared by validation and mutation
PROFILE_UPDATABLE_FIELDS = ("name", "email", "avatar")
TASK_UPDATABLE_FIELDS = (
    "title",
    "description",
    "status",
    "priority",
    "category",
    "due_date",
    "tags",
    "is_archived",
)

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

# Largest page whose row offset still fits a signed 64-bit integer
MAX_PAGE_NUMBER = (2**63 - 1) // settings.max_page_size

TagName = Annotated[str, StringConstraints(min_length=1, max_length=30)]

DataT = TypeVar("DataT")


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        extra="ignore",
    )


def validate_email_address(value: str) -> str:
    value = value.strip().lower()
    if not EMAIL_PATTERN.match(value):
        raise ValueError("Please provide a valid email")
    return value


def validate_password_strength(value: str) -> str:
    if len(value) < 6:
        raise ValueError("Password must be at least 6 characters long")
    if not (
        re.search(r"[a-z]", value)
        and re.search(r"[A-Z]", value)
        and re.search(r"\d", value)
    ):
        raise ValueError(
            "Password must contain at least one lowercase letter, one uppercase letter, and one number"
        )
    return value


# ===== Envelope =====


class ApiResponse(BaseModel, Generic[DataT]):
    success: bool = True
    message: str | None = None
    data: DataT | None = None


class FieldError(BaseModel):
    field: str
    message: str


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    errors: list[FieldError] | None = None


def error_responses(*status_codes: int) -> dict[int, dict[str, Any]]:
    """OpenAPI `responses` entries documenting the error envelope."""
    return {code: {"model": ErrorResponse} for code in (*status_codes, 500)}


# ===== Users =====


class UserRegister(BaseModel):
    name: str = Field(..., min_length=2, max_length=50, description="Display name")
    email: str = Field(..., max_length=255, description="Login email")
    password: str = Field(..., max_length=128, description="Account password")

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return validate_email_address(v)

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        return validate_password_strength(v)


class UserLogin(BaseModel):
    email: str = Field(..., description="Login email")
    password: str = Field(..., min_length=1, description="Account password")

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class ProfileUpdate(BaseModel):
    """Only the allow-listed profile fields; any other key is dropped."""

    model_config = ConfigDict(extra="ignore")

    name: str | None = Field(None, min_length=2, max_length=50)
    email: str | None = Field(None, max_length=255)
    avatar: str | None = Field(None, max_length=500)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("name", "email")
    @classmethod
    def not_null(cls, v: str | None, info) -> str | None:
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return validate_email_address(v)

    def changes(self) -> dict[str, Any]:
        data = self.model_dump(exclude_unset=True)
        return {k: v for k, v in data.items() if k in PROFILE_UPDATABLE_FIELDS}


class PasswordChange(CamelModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., max_length=128)

    @field_validator("new_password")
    @classmethod
    def check_password(cls, v: str) -> str:
        return validate_password_strength(v)


class UserOut(CamelModel):
    id: UUID
    name: str
    email: str
    role: str
    avatar: str | None = None
    is_active: bool
    last_login: datetime | None = None
    created_at: datetime

    @field_serializer("last_login", "created_at")
    def serialize_utc(self, value: datetime | None) -> datetime | None:
        return as_utc(value)


class OwnerSummary(CamelModel):
    id: UUID
    name: str
    email: str


class AuthPayload(CamelModel):
    token: str
    token_type: str = "bearer"
    user: UserOut


class UserSummary(CamelModel):
    name: str
    email: str
    joined_at: datetime
    last_login: datetime | None = None

    @field_serializer("joined_at", "last_login")
    def serialize_utc(self, value: datetime | None) -> datetime | None:
        return as_utc(value)


# ===== Tasks =====


class _TaskFields(CamelModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    @field_validator("due_date", check_fields=False)
    @classmethod
    def normalize_due_date(cls, v: datetime | None) -> datetime | None:
        # Naive datetimes are taken to be UTC
        try:
            return as_utc(v)
        except OverflowError as e:
            raise ValueError("dueDate is out of range") from e

    @field_validator("tags", check_fields=False)
    @classmethod
    def dedupe_tags(cls, v: list[str] | None) -> list[str] | None:
        if v is None:
            return v
        return list(dict.fromkeys(v))


class TaskCreate(_TaskFields):
    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = Field(None, max_length=1000)
    status: TaskStatus = "pending"
    priority: TaskPriority = "medium"
    category: str | None = Field(None, max_length=50)
    due_date: datetime | None = None
    tags: list[TagName] = Field(default_factory=list)


class TaskUpdate(_TaskFields):
    """Partial update; unknown keys (including any owner field) are dropped."""

    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, max_length=1000)
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    category: str | None = Field(None, max_length=50)
    due_date: datetime | None = None
    tags: list[TagName] | None = None
    is_archived: bool | None = None

    @field_validator("title", "status", "priority", "tags", "is_archived")
    @classmethod
    def not_null(cls, v: Any, info) -> Any:
        if v is None:
            raise ValueError(f"{to_camel(info.field_name)} cannot be null")
        return v

    def changes(self) -> dict[str, Any]:
        data = self.model_dump(exclude_unset=True)
        return {k: v for k, v in data.items() if k in TASK_UPDATABLE_FIELDS}


class TaskOut(CamelModel):
    id: UUID
    title: str
    description: str | None = None
    status: TaskStatus
    priority: TaskPriority
    category: str | None = None
    due_date: datetime | None = None
    completed_at: datetime | None = None
    tags: list[str] = Field(default_factory=list)
    is_archived: bool
    owner: OwnerSummary
    created_at: datetime
    updated_at: datetime

    @field_validator("tags", mode="before")
    @classmethod
    def materialize_tags(cls, v: Any) -> list[str]:
        # The ORM exposes tags through an association proxy, not a plain list
        return list(v) if v is not None else []

    @field_serializer("due_date", "completed_at", "created_at", "updated_at")
    def serialize_utc(self, value: datetime | None) -> datetime | None:
        return as_utc(value)


class TaskListParams(CamelModel):
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    category: str | None = None
    search: str | None = None
    sort_by: SortField = "createdAt"
    sort_order: SortOrder = "desc"
    page: int = Field(1, ge=1, le=MAX_PAGE_NUMBER)
    limit: int = Field(
        settings.default_page_size, ge=1, le=settings.max_page_size
    )
    include_archived: bool = False


class Pagination(CamelModel):
    current: int
    total: int
    count: int
    total_records: int


class TaskListResponse(ApiResponse[list[TaskOut]]):
    pagination: Pagination


class BulkUpdateRequest(CamelModel):
    task_ids: list[Any] | None = None
    updates: dict[str, Any] | None = None


class BulkUpdateResult(CamelModel):
    matched: int
    modified: int


class DeleteResult(CamelModel):
    deleted: bool = True


class TaskStats(CamelModel):
    total: int
    archived: int
    by_status: dict[str, int]
    by_priority: dict[str, int]
    overdue: int
    due_today: int


class UserStats(CamelModel):
    user: UserSummary
    tasks: TaskStats
