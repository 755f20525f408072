"""
Export Job - one full task export run.

Flow:
1. Verify the destination spreadsheet exists
2. Log in to the task API
3. For each configured sheet: fetch resolved then pending tasks for every job,
   flatten them into rows and overwrite the sheet

Any unrecovered error aborts the run. Sheets missing from the spreadsheet are
skipped with a warning.
"""

import asyncio
import logging
from typing import Any, Optional, Protocol

import httpx

from apps.exporter.aggregator import TaskDetailAggregator
from apps.exporter.fetcher import PaginatedTaskFetcher
from apps.exporter.flattener import flatten_tasks
from apps.exporter.session import login
from apps.exporter.sheets import GoogleSheetsWriter
from apps.exporter.task_api import TaskApi
from utils.config import Settings, settings as default_settings
from utils.http import ApiClient
from utils.retry import RetryPolicy
from utils.schemas import OUTPUT_HEADERS, EnrichedTask

logger = logging.getLogger(__name__)


class SheetSink(Protocol):
    def ensure_spreadsheet(self) -> None: ...

    def sheet_exists(self, sheet_name: str) -> bool: ...

    def write_rows(self, sheet_name: str, header: list[str], values: list[list[Any]]) -> int: ...


def build_task_api(client: ApiClient, cfg: Settings) -> TaskApi:
    return TaskApi(
        client,
        detail_retry=RetryPolicy(
            max_retries=cfg.DETAIL_MAX_RETRIES,
            delay_seconds=cfg.RETRY_DELAY_SECONDS,
            operation="task_details",
        ),
        questionnaire_retry=RetryPolicy(
            max_retries=cfg.QUESTIONNAIRE_MAX_RETRIES,
            delay_seconds=cfg.RETRY_DELAY_SECONDS,
            operation="task_questionnaire",
        ),
    )


async def fetch_job_tasks(
    fetcher: PaginatedTaskFetcher, job_id: str, limit: int
) -> list[EnrichedTask]:
    """Fetch resolved tasks, then pending tasks, for one job."""
    logger.info("Starting on job", extra={"job_id": job_id})

    resolved = await fetcher.fetch_resolved(job_id, limit=limit, start_page=1)
    logger.info(
        "Resolved tasks fetched",
        extra={"job_id": job_id, "resolved_count": len(resolved)},
    )

    pending = await fetcher.fetch_pending(job_id, limit=limit, start_page=1)
    logger.info(
        "Pending tasks fetched",
        extra={"job_id": job_id, "pending_count": len(pending)},
    )

    return [*resolved, *pending]


async def run_export(
    cfg: Optional[Settings] = None,
    sink: Optional[SheetSink] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> dict[str, int]:
    """
    Run one export.

    Args:
        cfg: Settings, defaults to the global settings instance
        sink: Sheet sink, defaults to a GoogleSheetsWriter built from cfg
        transport: Optional httpx transport for the task API client (tests)

    Returns:
        Rows written per sheet, header row excluded

    Raises:
        SpreadsheetNotFoundError: If the spreadsheet does not exist
        Exception: Any unrecovered fetch or write error
    """
    cfg = cfg or default_settings
    mapping = cfg.sheet_job_mapping()
    if not mapping:
        logger.warning("No sheets or jobs configured, nothing to export")
        return {}

    if sink is None:
        sink = GoogleSheetsWriter.from_key_file(cfg.SPREADSHEET_ID, cfg.GAUTH_KEY_FILE_PATH)

    await asyncio.to_thread(sink.ensure_spreadsheet)

    written: dict[str, int] = {}

    async with ApiClient(cfg.BASE_URL, timeout=cfg.API_TIMEOUT, transport=transport) as client:
        await login(client, cfg.API_USERNAME, cfg.API_PASSWORD)

        api = build_task_api(client, cfg)
        aggregator = TaskDetailAggregator(api, batch_size=cfg.DETAIL_BATCH_SIZE)
        fetcher = PaginatedTaskFetcher(api, aggregator, max_pages=cfg.MAX_PAGES)

        for sheet_name, job_ids in mapping.items():
            if not await asyncio.to_thread(sink.sheet_exists, sheet_name):
                logger.warning(
                    "Sheet does not exist, skipping",
                    extra={"sheet_name": sheet_name},
                )
                continue

            tasks: list[EnrichedTask] = []
            for job_id in job_ids:
                tasks.extend(await fetch_job_tasks(fetcher, job_id, cfg.PAGE_LIMIT))

            rows = flatten_tasks(
                tasks,
                cfg.TQ_QUESTIONTITLE_NAME,
                cfg.TQ_QUESTIONTITLE_CLASS,
                cfg.DISPLAY_TIMEZONE,
            )

            await asyncio.to_thread(
                sink.write_rows,
                sheet_name,
                OUTPUT_HEADERS,
                [row.to_values() for row in rows],
            )
            written[sheet_name] = len(rows)

            logger.info(
                "Sheet export completed",
                extra={"sheet_name": sheet_name, "tasks": len(tasks), "rows": len(rows)},
            )

    return written
