"""
Row Flattener

Expands enriched tasks into one spreadsheet row per task item. Name and Class
come from the task's questionnaire answers; Submit Date is rendered in a
fixed display timezone as an en-GB short date (dd/mm/yyyy).
"""

import logging
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any
from zoneinfo import ZoneInfo

from utils.schemas import EnrichedTask, OutputRow

logger = logging.getLogger(__name__)

DEFAULT_DISPLAY_TIMEZONE = "Asia/Singapore"
INVALID_DATE = "Invalid Date"
DATE_FORMAT = "%d/%m/%Y"


def format_date(value: Any, tz: str = DEFAULT_DISPLAY_TIMEZONE) -> str:
    """
    Format an ISO-8601 timestamp as a dd/mm/yyyy date in `tz`.

    Naive timestamps are read as UTC.

    Returns:
        '' for a missing value, 'Invalid Date' when it cannot be parsed
    """
    if not value:
        return ""

    try:
        parsed = datetime.fromisoformat(str(value).strip())
    except (TypeError, ValueError):
        logger.debug("Unparsable timestamp", extra={"value": value})
        return INVALID_DATE

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)

    try:
        return parsed.astimezone(ZoneInfo(tz)).strftime(DATE_FORMAT)
    except (OverflowError, ValueError):
        # instant falls outside the datetime range once shifted to `tz`
        logger.debug("Timestamp out of range", extra={"value": value})
        return INVALID_DATE


def flatten_task(
    task: EnrichedTask,
    name_question_title: str,
    class_question_title: str,
    tz: str = DEFAULT_DISPLAY_TIMEZONE,
) -> list[OutputRow]:
    name = task.find_answer(name_question_title)
    class_name = task.find_answer(class_question_title)
    submit_date = format_date(task.submitted_at, tz)

    return [
        OutputRow(
            job_id=item.job_id,
            task_id=item.user_task_id,
            submit_date=submit_date,
            name=name,
            class_name=class_name,
            file_name=item.filename,
            answer=item.tags,
        )
        for item in task.items
    ]


def flatten_tasks(
    tasks: Iterable[EnrichedTask],
    name_question_title: str,
    class_question_title: str,
    tz: str = DEFAULT_DISPLAY_TIMEZONE,
) -> list[OutputRow]:
    """
    Flatten enriched tasks into output rows, preserving task and item order.

    Args:
        tasks: Enriched tasks
        name_question_title: Question title holding the Name answer
        class_question_title: Question title holding the Class answer
        tz: IANA timezone for Submit Date

    Returns:
        One OutputRow per item across all tasks
    """
    rows: list[OutputRow] = []
    for task in tasks:
        rows.extend(flatten_task(task, name_question_title, class_question_title, tz))
    return rows
