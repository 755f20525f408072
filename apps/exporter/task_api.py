"""
Task API lookups: listing pages, task item details and questionnaire answers.

Detail and questionnaire lookups each run under their own RetryPolicy. By
default details are retried 10 times with a fixed 1s delay and questionnaire
lookups are not retried at all.
"""

import logging
from enum import Enum
from typing import Any, Optional

from utils.errors import InvalidInputError
from utils.http import ApiClient
from utils.retry import RetryPolicy
from utils.schemas import QuestionAnswer, TaskDetails

logger = logging.getLogger(__name__)

TASK_DETAILS_PATH = "/tasks/user-task-items"
QUESTIONNAIRE_PATH = "/admin/task-questionnaire/user-submit"


class TaskListEndpoint(str, Enum):
    """Task-listing endpoint variants. Paging mechanics are identical."""

    PENDING = "/admin/coins/preview"
    RESOLVED = "/admin/coins/resolved"


class TaskApi:
    """Task API operations over an authenticated ApiClient."""

    def __init__(
        self,
        client: ApiClient,
        detail_retry: Optional[RetryPolicy] = None,
        questionnaire_retry: Optional[RetryPolicy] = None,
    ) -> None:
        self.client = client
        self.detail_retry = detail_retry or RetryPolicy(
            max_retries=10, delay_seconds=1.0, operation="task_details"
        )
        self.questionnaire_retry = questionnaire_retry or RetryPolicy(
            max_retries=0, operation="task_questionnaire"
        )

    async def list_tasks_page(
        self,
        endpoint: TaskListEndpoint,
        job_id: str,
        page: int,
        limit: int,
        status: Optional[str] = None,
    ) -> dict[str, Any]:
        """Fetch one page of a task-listing endpoint.

        Returns:
            Raw page body: {"data": [...], "paginate": {"pages": {"next": ...}}}
        """
        params = {"status": status, "limit": limit, "page": page, "job_id": job_id}
        return await self.client.get(endpoint.value, params=params)

    async def get_task_details(self, user_task_id: Any) -> TaskDetails:
        """
        Fetch item details for a user task, retrying on any failure.

        Raises:
            InvalidInputError: If user_task_id is empty
            Exception: The last request error once retries are exhausted
        """
        if not user_task_id:
            raise InvalidInputError("user_task_id must be provided")

        async def fetch() -> Any:
            return await self.client.get(
                TASK_DETAILS_PATH, params={"user_task_id": user_task_id}
            )

        data = await self.detail_retry.run(fetch)
        return TaskDetails.model_validate(data or {})

    async def get_questionnaire(self, job_id: Any, user_task_id: Any) -> list[QuestionAnswer]:
        """
        Fetch the questionnaire submission of a user task.

        Returns:
            Question answers, empty when the submission has none

        Raises:
            InvalidInputError: If user_task_id or job_id is empty
        """
        if not user_task_id:
            raise InvalidInputError("user_task_id must be provided")
        if not job_id:
            raise InvalidInputError("job_id must be provided")

        async def fetch() -> Any:
            return await self.client.get(
                QUESTIONNAIRE_PATH,
                params={"user_task_id": user_task_id, "job_id": job_id},
            )

        data = await self.questionnaire_retry.run(fetch)
        answers = data.get("data") if isinstance(data, dict) else None
        if not answers or not isinstance(answers, list):
            return []

        # entries that are not objects carry no title/answer
        return [QuestionAnswer.model_validate(answer) for answer in answers if isinstance(answer, dict)]
