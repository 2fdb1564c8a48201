import uuid
from datetime import UTC, datetime
from zoneinfo import ZoneInfo

import pytest
from pydantic import ValidationError as PydanticValidationError

from app.config import settings
from app.exceptions import ValidationError, errors_from_pydantic
from app.models import Task
from app.schemas import MAX_PAGE_NUMBER, TaskListParams
from app.services.task_mutations import apply_task_changes, sync_completed_at
from app.services.task_query import build_task_ordering, page_count, page_offset
from app.services.task_stats import day_bounds, resolve_timezone

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)


def _task(**fields) -> Task:
    fields.setdefault("title", "Task")
    fields.setdefault("status", "pending")
    fields.setdefault("priority", "medium")
    return Task(owner_id=uuid.uuid4(), **fields)


@pytest.mark.parametrize(
    "total,limit,expected",
    [(23, 5, 5), (20, 5, 4), (0, 5, 0), (1, 100, 1)],
)
def test_page_count(total, limit, expected):
    assert page_count(total, limit) == expected


def test_page_offset():
    assert page_offset(1, 10) == 0
    assert page_offset(3, 5) == 10


def test_day_bounds_utc():
    start, end = day_bounds(NOW, ZoneInfo("UTC"))
    assert start == datetime(2026, 10, 19, tzinfo=UTC)
    assert end == datetime(2026, 10, 20, tzinfo=UTC)


def test_day_bounds_ahead_of_utc():
    start, end = day_bounds(NOW, ZoneInfo("Asia/Tokyo"))
    assert start == datetime(2026, 10, 18, 15, 0, tzinfo=UTC)
    assert end == datetime(2026, 10, 19, 15, 0, tzinfo=UTC)


def test_day_bounds_across_dst_change():
    # Clocks go back on 2026-11-01 in New York, so that local day lasts 25 hours
    now = datetime(2026, 11, 1, 15, 0, tzinfo=UTC)
    start, end = day_bounds(now, ZoneInfo("America/New_York"))
    assert (end - start).total_seconds() == 25 * 3600


def test_resolve_timezone_defaults_and_rejects_unknown():
    assert resolve_timezone(None).key == "UTC"
    with pytest.raises(ValidationError) as exc_info:
        resolve_timezone("Nowhere/Special")
    assert exc_info.value.errors[0]["field"] == "tz"


def test_sync_completed_at_stamps_once_and_clears():
    task = _task(status="completed")
    sync_completed_at(task, NOW)
    assert task.completed_at == NOW

    sync_completed_at(task, datetime(2030, 1, 1, tzinfo=UTC))
    assert task.completed_at == NOW

    task.status = "cancelled"
    sync_completed_at(task, NOW)
    assert task.completed_at is None


def test_apply_task_changes_reports_modification():
    task = _task(title="Same")
    assert apply_task_changes(task, {"title": "Same"}, NOW) is False
    assert apply_task_changes(task, {"title": "Other"}, NOW) is True
    assert task.title == "Other"


def test_apply_task_changes_ignores_owner_and_unknown_keys():
    task = _task()
    owner_id = task.owner_id
    changed = apply_task_changes(
        task, {"owner_id": uuid.uuid4(), "id": uuid.uuid4(), "created_at": NOW}, NOW
    )
    assert changed is False
    assert task.owner_id == owner_id


def test_apply_task_changes_maintains_completed_at():
    task = _task()
    assert apply_task_changes(task, {"status": "completed"}, NOW) is True
    assert task.completed_at == NOW

    assert apply_task_changes(task, {"status": "pending"}, NOW) is True
    assert task.completed_at is None


def test_apply_task_changes_compares_tags_and_due_dates():
    task = _task(due_date=datetime(2026, 10, 20, 9, 0))
    task.set_tags(["a", "b"])

    assert apply_task_changes(task, {"tags": ["a", "b"]}, NOW) is False
    assert apply_task_changes(
        task, {"due_date": datetime(2026, 10, 20, 9, 0, tzinfo=UTC)}, NOW
    ) is False
    assert apply_task_changes(task, {"tags": ["b"]}, NOW) is True
    assert list(task.tags) == ["b"]


def test_model_rejects_unknown_status():
    with pytest.raises(ValueError):
        _task(status="bogus")


def test_ordering_appends_tie_breakers():
    ordering = build_task_ordering(TaskListParams(sort_by="priority", sort_order="asc"))
    assert len(ordering) == 3

    ordering = build_task_ordering(TaskListParams())
    assert len(ordering) == 2


def test_errors_from_pydantic_strips_request_location():
    errors = errors_from_pydantic(
        [
            {"loc": ("body", "title"), "msg": "too short"},
            {"loc": ("query", "sortBy"), "msg": "bad sort"},
            {"loc": ("body", "tags", 0), "msg": "too long"},
            {"loc": ("body",), "msg": "missing body"},
        ]
    )
    assert errors == [
        {"field": "title", "message": "too short"},
        {"field": "sortBy", "message": "bad sort"},
        {"field": "tags.0", "message": "too long"},
        {"field": "body", "message": "missing body"},
    ]


def test_list_params_default_to_configured_page_size():
    assert TaskListParams().limit == settings.default_page_size


@pytest.mark.parametrize(
    "fields",
    [
        {"limit": settings.max_page_size + 1},
        {"limit": 0},
        {"page": 0},
        {"page": MAX_PAGE_NUMBER + 1},
    ],
)
def test_list_params_enforce_bounds_when_built_directly(fields):
    with pytest.raises(PydanticValidationError):
        TaskListParams(**fields)
