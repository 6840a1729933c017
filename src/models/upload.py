"""Upload payload and result models."""

import os
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.models.task import Task


class UploadedFile(BaseModel):
    """A file part received in a multipart upload."""
    filename: str = Field(..., description="Client-supplied file name")
    content: bytes = Field(..., description="Raw file bytes")
    content_type: Optional[str] = Field(None, description="Declared MIME type")

    @property
    def extension(self) -> str:
        return os.path.splitext(self.filename)[1].lower()

    @property
    def size(self) -> int:
        return len(self.content)


class RowStats(BaseModel):
    """Row counters accumulated while validating an upload."""
    total: int = 0
    invalid: int = 0
    rejections: dict[str, int] = Field(default_factory=dict, description="Rejection reason -> count")

    def record_rejection(self, reason: str) -> None:
        self.invalid += 1
        self.rejections[reason] = self.rejections.get(reason, 0) + 1


class AgentTaskCount(BaseModel):
    """Number of tasks one agent received in a distribution run."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    agent_name: str
    task_count: int = Field(..., ge=1)


class UploadSummary(BaseModel):
    """Aggregate counts describing one upload's outcome."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_tasks: int = Field(..., ge=0)
    total_rows: int = Field(..., ge=0)
    invalid_rows: int = Field(..., ge=0)
    distribution: list[AgentTaskCount] = Field(default_factory=list)


class UploadResult(BaseModel):
    """Summary plus the persisted tasks of a successful upload."""
    summary: UploadSummary
    tasks: list[Task]
