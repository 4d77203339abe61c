from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


CATEGORIES = ("Work", "Personal", "Errand", "Study", "Other")
PRIORITIES = ("Low", "Medium", "High")

DEFAULT_CATEGORY = "Other"
DEFAULT_PRIORITY = "Medium"

# Task attributes a patch may change but never clear
NOT_NULLABLE = ("user_id", "title", "description", "category", "priority", "completed")


class Account(BaseModel):
    id: int
    email: str
    password_hash: str
    created_at: Optional[datetime] = None


class Task(BaseModel):
    id: int
    user_id: int
    title: str
    description: str = ""
    category: str = DEFAULT_CATEGORY
    priority: str = DEFAULT_PRIORITY

    estimated_time_hours: Optional[float] = None
    due_date: Optional[datetime] = None
    completed: bool = False

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Credentials(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = ""
    due_date: Optional[datetime] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        v2 = v.strip()
        if not v2:
            raise ValueError("title must not be blank")
        return v2

    @field_validator("description")
    @classmethod
    def description_default(cls, v: Optional[str]) -> str:
        return v or ""


class TaskPatch(BaseModel):
    """
    Partial update. Every attribute except ``id`` may be overwritten,
    the owner reference included; unknown keys are dropped.
    Only due_date and estimated_time_hours may be cleared with null.
    """
    model_config = ConfigDict(extra="ignore")

    user_id: Optional[int] = None
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    priority: Optional[str] = None
    estimated_time_hours: Optional[float] = None
    due_date: Optional[datetime] = None
    completed: Optional[bool] = None

    @model_validator(mode="after")
    def required_fields_not_null(self) -> "TaskPatch":
        cleared = sorted(f for f in NOT_NULLABLE if f in self.model_fields_set and getattr(self, f) is None)
        if cleared:
            raise ValueError(f"fields cannot be null: {', '.join(cleared)}")
        return self

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


class AuthResult(BaseModel):
    token: str
    account_id: int
    email: str


class UserOut(BaseModel):
    id: int
    email: str


class AuthOut(BaseModel):
    token: str
    user: UserOut

    @classmethod
    def from_result(cls, result: AuthResult) -> "AuthOut":
        return cls(token=result.token, user=UserOut(id=result.account_id, email=result.email))


class EstimateOut(BaseModel):
    estimate: Optional[float] = None


class ProcedureOut(BaseModel):
    procedure: str


class CategoryCount(BaseModel):
    category: str
    count: int = Field(..., ge=0)
