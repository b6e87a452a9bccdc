"""Routes handling task CRUD, statistics, bulk updates and export."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Query, Response, status

from ...deps import (
    CurrentUserDependency,
    DatabaseSessionDependency,
    PrivilegedUserDependency,
    TaskFilterBuilderDependency,
)
from ...models import Task
from ...schemas import (
    BulkTaskUpdate,
    BulkUpdateSummary,
    Envelope,
    MessageResponse,
    Pagination,
    TaskCreate,
    TaskDetail,
    TaskExport,
    TaskListData,
    TaskRead,
    TaskStatistics,
    TaskUpdate,
)
from ...services import TaskQueryParams, TaskService
from ...services.export import CSV_FILENAME, CSV_MEDIA_TYPE, ExportFormat, tasks_to_csv

router = APIRouter(prefix="/tasks", tags=["tasks"])

PageQuery = Annotated[int, Query(description="1-based page number.")]
LimitQuery = Annotated[
    int | None,
    Query(description="Maximum number of tasks per page; defaults to the configured page size."),
]
FilterQuery = Annotated[str | None, Query(description="Exact match; `all` disables the filter.")]
SearchQuery = Annotated[
    str | None,
    Query(description="Case-insensitive match on title, description or assignee name."),
]
SortByQuery = Annotated[str | None, Query(alias="sortBy", description="Field to sort by.")]
SortOrderQuery = Annotated[str | None, Query(alias="sortOrder", description="`asc` or `desc`.")]
DueDateQuery = Annotated[
    str | None,
    Query(alias="dueDate", description="Calendar date (YYYY-MM-DD) the task is due on."),
]


def _map_task(task: Task) -> TaskRead:
    return TaskRead.model_validate(task)


def _map_task_detail(task: Task) -> TaskDetail:
    return TaskDetail.model_validate(task)


@router.get(
    "",
    response_model=Envelope[TaskListData],
    summary="List tasks created by the current user",
)
async def list_tasks(
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
    filter_builder: TaskFilterBuilderDependency,
    page: PageQuery = 1,
    limit: LimitQuery = None,
    status_filter: Annotated[str | None, Query(alias="status")] = None,
    priority: FilterQuery = None,
    assignee: FilterQuery = None,
    search: SearchQuery = None,
    sort_by: SortByQuery = None,
    sort_order: SortOrderQuery = None,
    due_date: DueDateQuery = None,
) -> Envelope[TaskListData]:
    params = TaskQueryParams(
        page=page,
        limit=limit,
        status=status_filter,
        priority=priority,
        assignee=assignee,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
        due_date=due_date,
    )
    result = await TaskService(session, filter_builder).list_tasks(params, user_id=current_user.id)
    pagination = Pagination(
        current=result.page,
        total=result.total_pages,
        count=result.count,
        total_count=result.total_count,
    )
    return Envelope[TaskListData](
        data=TaskListData(tasks=[_map_task(task) for task in result.tasks], pagination=pagination)
    )


@router.get(
    "/stats",
    response_model=Envelope[TaskStatistics],
    summary="Aggregate statistics over tasks visible to the current user",
)
async def read_task_statistics(
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
) -> Envelope[TaskStatistics]:
    stats = await TaskService(session).get_statistics(user_id=current_user.id)
    return Envelope[TaskStatistics](
        data=TaskStatistics(
            total=stats.total,
            completed=stats.completed,
            pending=stats.pending,
            in_progress=stats.in_progress,
            overdue=stats.overdue,
            high_priority=stats.high_priority,
            completion_rate=stats.completion_rate,
        )
    )


@router.get(
    "/export",
    response_model=TaskExport,
    summary="Export tasks visible to the current user as JSON or CSV",
    responses={status.HTTP_200_OK: {"content": {CSV_MEDIA_TYPE: {}}}},
)
async def export_tasks(
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
    export_format: Annotated[str | None, Query(alias="format")] = None,
) -> TaskExport | Response:
    tasks = await TaskService(session).export_tasks(user_id=current_user.id)
    if ExportFormat.parse(export_format) is ExportFormat.CSV:
        return Response(
            content=tasks_to_csv(tasks),
            media_type=CSV_MEDIA_TYPE,
            headers={"Content-Disposition": f'attachment; filename="{CSV_FILENAME}"'},
        )
    return TaskExport(data=[_map_task_detail(task) for task in tasks], count=len(tasks))


@router.patch(
    "/bulk",
    response_model=Envelope[BulkUpdateSummary],
    summary="Apply one update to many tasks (admin and manager only)",
)
async def bulk_update_tasks(
    payload: BulkTaskUpdate,
    session: DatabaseSessionDependency,
    current_user: PrivilegedUserDependency,
) -> Envelope[BulkUpdateSummary]:
    result = await TaskService(session).bulk_update(
        payload.task_ids,
        user_id=current_user.id,
        changes=payload.updates.as_changes(),
    )
    return Envelope[BulkUpdateSummary](
        data=BulkUpdateSummary(
            matched_count=result.matched_count,
            modified_count=result.modified_count,
        ),
        message=f"{result.modified_count} tasks updated successfully",
    )


@router.get(
    "/{task_id}",
    response_model=Envelope[TaskDetail],
    summary="Retrieve a task the current user created or is assigned to",
)
async def read_task(
    task_id: int,
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
) -> Envelope[TaskDetail]:
    task = await TaskService(session).get_task(task_id, user_id=current_user.id)
    return Envelope[TaskDetail](data=_map_task_detail(task))


@router.post(
    "",
    response_model=Envelope[TaskDetail],
    status_code=status.HTTP_201_CREATED,
    summary="Create a task",
)
async def create_task(
    payload: TaskCreate,
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
) -> Envelope[TaskDetail]:
    task = await TaskService(session).create_task(
        user_id=current_user.id,
        title=payload.title,
        description=payload.description,
        status=payload.status,
        priority=payload.priority,
        due_date=payload.due_date,
        assignee_email=payload.assignee_email,
        tags=payload.tags,
        estimated_hours=payload.estimated_hours,
        actual_hours=payload.actual_hours,
    )
    return Envelope[TaskDetail](data=_map_task_detail(task), message="Task created successfully")


@router.api_route(
    "/{task_id}",
    methods=["PUT", "PATCH"],
    response_model=Envelope[TaskDetail],
    summary="Partially update a task created by the current user",
)
async def update_task(
    task_id: int,
    payload: TaskUpdate,
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
) -> Envelope[TaskDetail]:
    task = await TaskService(session).update_task(
        task_id,
        user_id=current_user.id,
        changes=payload.model_dump(exclude_unset=True),
    )
    return Envelope[TaskDetail](data=_map_task_detail(task), message="Task updated successfully")


@router.delete(
    "/{task_id}",
    response_model=MessageResponse,
    summary="Delete a task created by the current user",
)
async def delete_task(
    task_id: int,
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
) -> MessageResponse:
    await TaskService(session).delete_task(task_id, user_id=current_user.id)
    return MessageResponse(message="Task deleted successfully")
