"""
Pydantic Schemas - Task Export Models

Defines the models that flow through the export pipeline:
- Task listing entries (RawTask)
- Task item details (TaskDetails, TaskItem)
- Questionnaire answers (QuestionAnswer)
- Merged task records (EnrichedTask)
- Spreadsheet rows (OutputRow)

Remote payloads are parsed best-effort: unknown fields are ignored and
missing fields fall back to defaults.

Usage:
    from utils.schemas import TaskDetails

    details = TaskDetails.model_validate(response_json)
"""

from typing import Any, Optional

import orjson
from pydantic import BaseModel, ConfigDict, Field, field_validator

OUTPUT_HEADERS: list[str] = [
    "Job ID",
    "Task ID",
    "Submit Date",
    "Name",
    "Class",
    "File Name",
    "Answer",
]


class RawTask(BaseModel):
    """One entry from a page of a task-listing endpoint.

    `jobId` is not part of the listing response; the fetcher injects it.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    user_task_id: Any = Field(default=None, description="User task ID")
    jobId: str = Field(..., description="Owning job ID")


class TaskItem(BaseModel):
    """A single file/content unit within a task."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    job_id: Any = Field(default=None)
    user_task_id: Any = Field(default=None)
    filename: Any = Field(default=None)
    tags: Any = Field(default=None, description="Tags/answer payload")


class TrackingInfo(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    submitted_at: Any = Field(default=None)


class TaskDetails(BaseModel):
    """Response of the user task items endpoint."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    assigned_at: Any = Field(default=None)
    tracking_info: Optional[TrackingInfo] = Field(default=None)
    items: list[TaskItem] = Field(default_factory=list)

    @field_validator("tracking_info", mode="before")
    @classmethod
    def normalize_tracking_info(cls, v: Any) -> Any:
        return v if isinstance(v, (dict, TrackingInfo)) else None

    @field_validator("items", mode="before")
    @classmethod
    def normalize_items(cls, v: Any) -> Any:
        """Non-list payloads become empty; non-object entries are dropped."""
        if not isinstance(v, list):
            return []
        return [item for item in v if isinstance(item, dict)]

    @property
    def submitted_at(self) -> Any:
        return self.tracking_info.submitted_at if self.tracking_info else None


class QuestionAnswer(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    title: Any = Field(default=None)
    answer: Any = Field(default=None)


class EnrichedTask(BaseModel):
    """Task details merged with the task's questionnaire answers.

    `items` and `task_question_answers` are always lists, possibly empty.
    """

    model_config = ConfigDict(frozen=True)

    submitted_at: Any = Field(default=None)
    assigned_at: Any = Field(default=None)
    items: list[TaskItem] = Field(default_factory=list)
    task_question_answers: list[QuestionAnswer] = Field(default_factory=list)

    @field_validator("items", "task_question_answers", mode="before")
    @classmethod
    def normalize_lists(cls, v: Any) -> Any:
        """Absent or falsy collections become empty lists."""
        return v if v else []

    def find_answer(self, title: str) -> str:
        """Return the answer of the first question with `title`, or ''."""
        for qa in self.task_question_answers:
            if qa.title == title:
                return qa.answer if qa.answer else ""
        return ""


class OutputRow(BaseModel):
    """One spreadsheet row per task item."""

    model_config = ConfigDict(frozen=True)

    job_id: Any = Field(default="")
    task_id: Any = Field(default="")
    submit_date: str = Field(default="")
    name: Any = Field(default="")
    class_name: Any = Field(default="")
    file_name: Any = Field(default="")
    answer: Any = Field(default="")

    def to_values(self) -> list[Any]:
        """Cell values in OUTPUT_HEADERS order."""
        return [
            _cell(self.job_id),
            _cell(self.task_id),
            self.submit_date,
            _cell(self.name),
            _cell(self.class_name),
            _cell(self.file_name),
            _cell(self.answer),
        ]


def _cell(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, (dict, list, tuple)):
        return orjson.dumps(value).decode("utf-8")
    return value
