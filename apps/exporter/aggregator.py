"""
Task Detail Aggregator

Enriches task-listing entries with their item details and questionnaire
answers. Entries are processed in sequential batches; inside a batch every
task's two lookups run concurrently, so at most `batch_size` tasks are in
flight at any time. Output order matches input order.
"""

import asyncio
import logging
from collections.abc import Coroutine, Sequence
from typing import Any

from apps.exporter.task_api import TaskApi
from utils.schemas import EnrichedTask, RawTask

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 5


async def run_all(coros: list[Coroutine[Any, Any, Any]]) -> list[Any]:
    """Run coroutines concurrently and return their results in order.

    The first failure cancels the remaining coroutines and is re-raised as is,
    not wrapped in an ExceptionGroup.
    """
    try:
        async with asyncio.TaskGroup() as tg:
            tasks = [tg.create_task(coro) for coro in coros]
    except BaseExceptionGroup as eg:
        raise eg.exceptions[0]

    return [task.result() for task in tasks]


class TaskDetailAggregator:
    """Merges task details and questionnaire answers per raw task."""

    def __init__(self, api: TaskApi, batch_size: int = DEFAULT_BATCH_SIZE) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self.api = api
        self.batch_size = batch_size

    async def enrich(self, raw_tasks: Sequence[RawTask]) -> list[EnrichedTask]:
        """
        Enrich every raw task, one batch at a time.

        Args:
            raw_tasks: Listing entries tagged with their job id

        Returns:
            One EnrichedTask per raw task, in input order

        Raises:
            Exception: The first unrecovered lookup error; aborts the whole call
        """
        enriched: list[EnrichedTask] = []

        for start in range(0, len(raw_tasks), self.batch_size):
            batch = raw_tasks[start:start + self.batch_size]
            try:
                results = await run_all([self.enrich_task(task) for task in batch])
            except Exception as e:
                logger.error(
                    "Task enrichment failed",
                    extra={
                        "batch_start": start,
                        "batch_size": len(batch),
                        "error": repr(e),
                    },
                )
                raise
            enriched.extend(results)

        return enriched

    async def enrich_task(self, task: RawTask) -> EnrichedTask:
        details, answers = await run_all(
            [
                self.api.get_task_details(task.user_task_id),
                self.api.get_questionnaire(task.jobId, task.user_task_id),
            ]
        )

        return EnrichedTask(
            submitted_at=details.submitted_at,
            assigned_at=details.assigned_at,
            items=details.items,
            task_question_answers=answers,
        )
