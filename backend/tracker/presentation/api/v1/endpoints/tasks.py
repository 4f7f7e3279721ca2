"""Task CRUD and workload endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from tracker.application.schemas.tracker import TaskCreate, TaskResponse, WorkloadResponse
from tracker.application.services import TaskService, TrackerDirectoryService
from tracker.domain.entities import TaskFilters, TaskStatus
from tracker.domain.exceptions import EntityNotFoundError
from tracker.infrastructure.dependencies import (
    get_task_service,
    get_tracker_directory_service,
)

router = APIRouter(prefix="/tasks", tags=["Tasks"])


@router.get("", response_model=list[TaskResponse])
async def list_tasks(
    assignee_name: str | None = Query(None, description="Filter by assignee (case-insensitive)"),
    task_status: TaskStatus | None = Query(None, alias="status", description="Filter by status"),
    overdue: bool | None = Query(None, description="Only tasks past due and not completed"),
    project_id: str | None = Query(None, description="Filter by project ID"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    service: TaskService = Depends(get_task_service),
) -> list[TaskResponse]:
    """Retrieve a filtered, paginated list of tasks ordered by due date."""
    filters = TaskFilters(
        assignee_name=assignee_name,
        status=task_status,
        overdue=overdue,
        project_id=project_id,
    )
    tasks = await service.list_tasks(filters, skip=skip, limit=limit)
    return [TaskResponse.model_validate(t, from_attributes=True) for t in tasks]


@router.get("/workload/{assignee}", response_model=WorkloadResponse)
async def get_workload(
    assignee: str,
    directory: TrackerDirectoryService = Depends(get_tracker_directory_service),
) -> WorkloadResponse:
    """Workload analysis for one assignee."""
    record = await directory.get_workload_analysis(assignee)
    return WorkloadResponse.model_validate(record.to_dict())


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: str,
    service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    """Retrieve a single task by ID."""
    try:
        task = await service.get_task(task_id)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return TaskResponse.model_validate(task, from_attributes=True)


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    data: TaskCreate,
    service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    """Create a new task inside an existing project."""
    try:
        task = await service.create_task(data)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return TaskResponse.model_validate(task, from_attributes=True)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(
    task_id: str,
    service: TaskService = Depends(get_task_service),
) -> None:
    """Delete a task by ID."""
    try:
        await service.delete_task(task_id)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
