"""Task models."""

from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


PHONE_PATTERN = r"^[0-9]{10}$"


class TaskStatus(str, Enum):
    """Task lifecycle status."""
    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"


class CanonicalTask(BaseModel):
    """Validated, normalized task prior to persistence."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    first_name: str = Field(..., min_length=1, description="Contact first name (trimmed)")
    phone: str = Field(..., pattern=PHONE_PATTERN, description="Exactly 10 digits, no formatting")
    notes: str = Field(default="", description="Free-form notes (trimmed)")

    @field_validator("first_name", mode="before")
    @classmethod
    def _strip_first_name(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("notes", mode="before")
    @classmethod
    def _strip_notes(cls, value: Any) -> Any:
        if value is None:
            return ""
        return value.strip() if isinstance(value, str) else value


class Task(CanonicalTask):
    """Persisted task assigned to exactly one agent."""
    model_config = ConfigDict(frozen=False)

    id: str = Field(..., description="Task ID (ULID text)")
    assigned_to: str = Field(..., description="Assigned agent ID (text FK)")
    status: TaskStatus = Field(default=TaskStatus.PENDING, description="Pending, In Progress or Completed")
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class TaskUpdate(BaseModel):
    """Fields an admin or the assigned agent may change after distribution."""
    model_config = ConfigDict(extra="forbid")

    status: Optional[TaskStatus] = None
    notes: Optional[str] = None
