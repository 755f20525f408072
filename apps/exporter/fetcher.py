"""
Paginated Task Fetcher

Walks a task-listing endpoint page by page until the server stops signaling a
next page. Each page is enriched before the next one is requested, so pages
are strictly sequential.
"""

import logging
from typing import Any, Optional

from apps.exporter.aggregator import TaskDetailAggregator
from apps.exporter.task_api import TaskApi, TaskListEndpoint
from utils.schemas import EnrichedTask, RawTask

logger = logging.getLogger(__name__)


def has_next_page(page_body: Any) -> bool:
    """Read `paginate.pages.next` from a listing response."""
    if not isinstance(page_body, dict):
        return False
    paginate = page_body.get("paginate")
    if not isinstance(paginate, dict):
        return False
    pages = paginate.get("pages")
    if not isinstance(pages, dict):
        return False
    return bool(pages.get("next"))


class PaginatedTaskFetcher:
    """Fetches and enriches every task of a job from one listing endpoint."""

    def __init__(
        self,
        api: TaskApi,
        aggregator: TaskDetailAggregator,
        max_pages: Optional[int] = None,
    ) -> None:
        """
        Args:
            api: Task API bound to the authenticated session
            aggregator: Enriches each page's entries
            max_pages: Optional safety bound on pages per fetch, None for unbounded
        """
        self.api = api
        self.aggregator = aggregator
        self.max_pages = max_pages

    async def fetch_tasks(
        self,
        endpoint: TaskListEndpoint,
        job_id: str,
        status: Optional[str] = None,
        limit: int = 10,
        start_page: int = 1,
    ) -> list[EnrichedTask]:
        """
        Fetch all pages of `endpoint` for a job, enriching each page.

        Returns:
            Enriched tasks across every visited page, in page order
        """
        results: list[EnrichedTask] = []
        page = start_page
        pages_fetched = 0

        while True:
            body = await self.api.list_tasks_page(
                endpoint, job_id=job_id, page=page, limit=limit, status=status
            )
            pages_fetched += 1

            entries = (body.get("data") if isinstance(body, dict) else None) or []
            raw_tasks = [RawTask.model_validate({**entry, "jobId": job_id}) for entry in entries]

            logger.debug(
                "Fetched task page",
                extra={
                    "endpoint": endpoint.name.lower(),
                    "job_id": job_id,
                    "page": page,
                    "entries": len(raw_tasks),
                },
            )

            results.extend(await self.aggregator.enrich(raw_tasks))

            if not has_next_page(body):
                return results

            if self.max_pages is not None and pages_fetched >= self.max_pages:
                logger.warning(
                    "Page limit reached before last page, stopping",
                    extra={
                        "endpoint": endpoint.name.lower(),
                        "job_id": job_id,
                        "max_pages": self.max_pages,
                    },
                )
                return results

            page += 1

    async def fetch_pending(self, job_id: str, **kwargs: Any) -> list[EnrichedTask]:
        return await self.fetch_tasks(TaskListEndpoint.PENDING, job_id, **kwargs)

    async def fetch_resolved(self, job_id: str, **kwargs: Any) -> list[EnrichedTask]:
        return await self.fetch_tasks(TaskListEndpoint.RESOLVED, job_id, **kwargs)
