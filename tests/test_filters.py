from __future__ import annotations

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from sqlalchemy.dialects import sqlite

from task_tracker.core.config import Settings
from task_tracker.services.filters import TaskFilterBuilder, TaskQueryParams


def _sql(clause) -> str:
    return str(clause.compile(dialect=sqlite.dialect(), compile_kwargs={"literal_binds": True}))


def test_build_defaults_scope_to_creator_and_sort_newest_first() -> None:
    builder = TaskFilterBuilder()

    task_filter = builder.build(TaskQueryParams(), user_id=7)

    assert len(task_filter.conditions) == 1
    assert _sql(task_filter.conditions[0]) == "tasks.created_by_id = 7"
    assert [_sql(clause) for clause in task_filter.order_by] == ["tasks.created_at DESC", "tasks.id DESC"]
    assert (task_filter.page, task_filter.limit, task_filter.offset) == (1, 10, 0)


def test_page_and_limit_are_normalised() -> None:
    builder = TaskFilterBuilder(max_page_size=50)

    assert builder.build(TaskQueryParams(page=-3, limit=0), user_id=1).limit == 1
    assert builder.build(TaskQueryParams(page=-3, limit=0), user_id=1).page == 1
    assert builder.build(TaskQueryParams(page=3, limit=500), user_id=1).limit == 50
    assert builder.build(TaskQueryParams(page=3, limit=20), user_id=1).offset == 40


def test_all_and_empty_values_disable_filters() -> None:
    builder = TaskFilterBuilder()

    task_filter = builder.build(
        TaskQueryParams(status="all", priority="", assignee="all", search=""),
        user_id=1,
    )

    assert len(task_filter.conditions) == 1


def test_unknown_values_match_nothing() -> None:
    builder = TaskFilterBuilder()

    task_filter = builder.build(
        TaskQueryParams(status="archived", priority="urgent", assignee="bob", due_date="tomorrow"),
        user_id=1,
    )

    assert [_sql(condition) for condition in task_filter.conditions[1:]] == ["0", "0", "0", "0"]


def test_search_escapes_like_wildcards() -> None:
    task_filter = TaskFilterBuilder().build(TaskQueryParams(search="50%_off"), user_id=1)

    rendered = _sql(task_filter.conditions[1])
    assert "tasks.title" in rendered
    assert "tasks.description" in rendered
    assert "tasks.assignee_name" in rendered
    assert "50/%/_off" in rendered


def test_unknown_sort_field_falls_back_to_created_at() -> None:
    builder = TaskFilterBuilder()

    ascending = builder.build(TaskQueryParams(sort_by="hashed_password", sort_order="asc"), user_id=1)
    by_due_date = builder.build(TaskQueryParams(sort_by="dueDate", sort_order="sideways"), user_id=1)

    assert [_sql(clause) for clause in ascending.order_by] == ["tasks.created_at ASC", "tasks.id ASC"]
    assert _sql(by_due_date.order_by[0]) == "tasks.due_date DESC"


def test_due_date_expands_to_local_calendar_day() -> None:
    builder = TaskFilterBuilder(zone=ZoneInfo("America/New_York"))

    condition = builder.due_date_condition("2024-07-04")

    bounds = [clause.right.value for clause in condition.clauses]
    assert bounds == [
        datetime(2024, 7, 4, 4, 0, tzinfo=timezone.utc),
        datetime(2024, 7, 5, 4, 0, tzinfo=timezone.utc),
    ]


def test_due_date_accepts_full_timestamps() -> None:
    builder = TaskFilterBuilder(zone=ZoneInfo("UTC"))

    condition = builder.due_date_condition("2024-01-15T22:30:00Z")

    bounds = [clause.right.value for clause in condition.clauses]
    assert bounds[0] == datetime(2024, 1, 15, tzinfo=timezone.utc)
    assert bounds[1] == datetime(2024, 1, 16, tzinfo=timezone.utc)


def test_from_settings_reads_page_sizes_and_timezone() -> None:
    settings = Settings(default_page_size=5, max_page_size=20, local_timezone="Europe/Berlin")

    builder = TaskFilterBuilder.from_settings(settings)
    task_filter = builder.build(TaskQueryParams(), user_id=1)

    assert task_filter.limit == 5
    condition = builder.due_date_condition("2024-01-15")
    assert condition.clauses[0].right.value == datetime(2024, 1, 14, 23, 0, tzinfo=timezone.utc)
