# tests/test_export_job.py

from __future__ import annotations

import httpx
import pytest
from httpx import Response

from apps.exporter.export_job import run_export
from utils.config import Settings
from utils.errors import ApiError, SpreadsheetNotFoundError
from utils.schemas import OUTPUT_HEADERS

from .fakes import FakeSheetSink


def details_for(request: httpx.Request) -> Response:
    task_id = request.url.params["user_task_id"]
    return Response(
        200,
        json={
            "assigned_at": "2024-09-19T10:01:41.985Z",
            "tracking_info": {"submitted_at": "2024-09-19T10:02:09.615Z"},
            "items": [
                {"job_id": "101", "user_task_id": task_id, "filename": f"{task_id}-{n}.wav", "tags": "ok"}
                for n in range(2)
            ],
        },
    )


def questionnaire_for(request: httpx.Request) -> Response:
    task_id = request.url.params["user_task_id"]
    return Response(
        200,
        json={"data": [{"title": "Name", "answer": f"student-{task_id}"}, {"title": "Class", "answer": "5A"}]},
    )


def mock_task_api(api_mock, questionnaire=questionnaire_for) -> None:
    api_mock.post("/auth/login").mock(return_value=Response(200, json={"access_token": "tok"}))
    api_mock.get("/admin/coins/resolved").mock(
        side_effect=[
            Response(200, json={"data": [{"user_task_id": "r1"}], "paginate": {"pages": {"next": 2}}}),
            Response(200, json={"data": [{"user_task_id": "r2"}], "paginate": {"pages": {}}}),
        ]
    )
    api_mock.get("/admin/coins/preview").mock(
        return_value=Response(200, json={"data": [{"user_task_id": "p1"}], "paginate": {"pages": {}}})
    )
    api_mock.get("/tasks/user-task-items").mock(side_effect=details_for)
    api_mock.get("/admin/task-questionnaire/user-submit").mock(side_effect=questionnaire)


@pytest.mark.asyncio
async def test_run_export_writes_rows_and_skips_missing_sheets(settings: Settings, api_mock) -> None:
    mock_task_api(api_mock)
    sink = FakeSheetSink(sheet_names={"Batch A"})

    written = await run_export(settings, sink=sink)

    assert written == {"Batch A": 6}
    assert "Missing" not in sink.writes

    values = sink.writes["Batch A"]
    assert values[0] == OUTPUT_HEADERS
    # resolved tasks first, then pending
    assert [row[1] for row in values[1:]] == ["r1", "r1", "r2", "r2", "p1", "p1"]
    assert values[1] == ["101", "r1", "19/09/2024", "student-r1", "5A", "r1-0.wav", "ok"]


@pytest.mark.asyncio
async def test_run_export_authenticates_before_fetching(settings: Settings, api_mock) -> None:
    mock_task_api(api_mock)

    await run_export(settings, sink=FakeSheetSink(sheet_names={"Batch A"}))

    requests = [call.request for call in api_mock.calls]
    assert requests[0].url.path == "/auth/login"
    assert all(r.headers["Authorization"] == "Bearer tok" for r in requests[1:])


@pytest.mark.asyncio
async def test_run_export_stops_when_spreadsheet_missing(settings: Settings, api_mock) -> None:
    login_route = api_mock.post("/auth/login")

    with pytest.raises(SpreadsheetNotFoundError):
        await run_export(settings, sink=FakeSheetSink(sheet_names=set(), exists=False))

    assert login_route.call_count == 0


@pytest.mark.asyncio
async def test_run_export_aborts_on_unrecovered_error(settings: Settings, api_mock) -> None:
    mock_task_api(api_mock, questionnaire=lambda request: Response(500, json={"message": "boom"}))
    sink = FakeSheetSink(sheet_names={"Batch A"})

    with pytest.raises(ApiError, match="boom"):
        await run_export(settings, sink=sink)

    assert sink.writes == {}


@pytest.mark.asyncio
async def test_sheet_without_tasks_gets_header_only(settings: Settings, api_mock) -> None:
    api_mock.post("/auth/login").mock(return_value=Response(200, json={"access_token": "tok"}))
    empty = Response(200, json={"data": [], "paginate": {"pages": {}}})
    api_mock.get("/admin/coins/resolved").mock(return_value=empty)
    api_mock.get("/admin/coins/preview").mock(return_value=empty)
    sink = FakeSheetSink(sheet_names={"Batch A"})

    written = await run_export(settings, sink=sink)

    assert written == {"Batch A": 0}
    assert sink.writes["Batch A"] == [OUTPUT_HEADERS]


@pytest.mark.asyncio
async def test_nothing_configured_is_a_no_op(api_mock) -> None:
    cfg = Settings(_env_file=None, BASE_URL="https://labeling.example.test")
    sink = FakeSheetSink(sheet_names=set())

    assert await run_export(cfg, sink=sink) == {}
    assert sink.ensure_calls == 0
    assert api_mock.calls.call_count == 0
