# tests/fakes.py

from __future__ import annotations

import asyncio
from typing import Any

from apps.exporter.task_api import TaskListEndpoint
from utils.errors import SpreadsheetNotFoundError
from utils.schemas import QuestionAnswer, TaskDetails


class FakeTaskApi:
    """
    In-memory TaskApi.

    Serves listing pages per endpoint and job, and builds one-item task
    details per user_task_id. Tracks how many tasks are being enriched at the
    same time so batching can be asserted.
    """

    def __init__(
        self,
        pages: dict[tuple[TaskListEndpoint, str], list[dict[str, Any]]] | None = None,
        answers: dict[Any, list[dict[str, Any]]] | None = None,
        failing_task_ids: set[Any] | None = None,
        delay: float = 0.01,
    ) -> None:
        self.pages = pages or {}
        self.answers = answers or {}
        self.failing_task_ids = failing_task_ids or set()
        self.delay = delay

        self.page_calls: list[dict[str, Any]] = []
        self.detail_calls: list[Any] = []
        self.completed_details: list[Any] = []
        self.questionnaire_calls: list[tuple[Any, Any]] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.concurrency_samples: list[int] = []

    async def list_tasks_page(
        self,
        endpoint: TaskListEndpoint,
        job_id: str,
        page: int,
        limit: int,
        status: str | None = None,
    ) -> dict[str, Any]:
        self.page_calls.append(
            {"endpoint": endpoint, "job_id": job_id, "page": page, "limit": limit, "status": status}
        )
        pages = self.pages.get((endpoint, job_id), [])
        if page - 1 < len(pages):
            return pages[page - 1]
        return {"data": [], "paginate": {"pages": {"next": False}}}

    async def get_task_details(self, user_task_id: Any) -> TaskDetails:
        self.detail_calls.append(user_task_id)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        self.concurrency_samples.append(self.in_flight)
        try:
            if user_task_id in self.failing_task_ids:
                raise RuntimeError(f"details failed for {user_task_id}")
            await asyncio.sleep(self.delay)
            self.completed_details.append(user_task_id)
            return TaskDetails.model_validate(
                {
                    "assigned_at": "2024-09-19T10:01:41.985Z",
                    "tracking_info": {"submitted_at": "2024-09-19T10:02:09.615Z"},
                    "items": [
                        {
                            "job_id": "101",
                            "user_task_id": user_task_id,
                            "filename": f"{user_task_id}.jpg",
                            "tags": ["cat"],
                        }
                    ],
                }
            )
        finally:
            self.in_flight -= 1

    async def get_questionnaire(self, job_id: Any, user_task_id: Any) -> list[QuestionAnswer]:
        self.questionnaire_calls.append((job_id, user_task_id))
        await asyncio.sleep(0)
        return [QuestionAnswer.model_validate(a) for a in self.answers.get(user_task_id, [])]


def listing_page(task_ids: list[Any], has_next: bool) -> dict[str, Any]:
    paginate: dict[str, Any] = {"pages": {"next": 2}} if has_next else {"pages": {}}
    return {"data": [{"user_task_id": task_id} for task_id in task_ids], "paginate": paginate}


class FakeSheetSink:
    """Records writes instead of talking to Google Sheets."""

    def __init__(self, sheet_names: set[str], exists: bool = True) -> None:
        self.sheet_names = sheet_names
        self.exists = exists
        self.writes: dict[str, list[list[Any]]] = {}
        self.ensure_calls = 0

    def ensure_spreadsheet(self) -> None:
        self.ensure_calls += 1
        if not self.exists:
            raise SpreadsheetNotFoundError("Spreadsheet with ID sheet-123 does not exist. Stopping.")

    def sheet_exists(self, sheet_name: str) -> bool:
        return sheet_name in self.sheet_names

    def write_rows(self, sheet_name: str, header: list[str], values: list[list[Any]]) -> int:
        self.writes[sheet_name] = [list(header), *values]
        return len(values) + 1
