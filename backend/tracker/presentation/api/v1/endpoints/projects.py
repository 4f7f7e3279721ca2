"""Project CRUD and risk assessment endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from tracker.application.schemas.tracker import (
    ProjectCreate,
    ProjectResponse,
    RiskAssessmentResponse,
)
from tracker.application.services import ProjectService, TrackerDirectoryService
from tracker.domain.exceptions import EntityNotFoundError
from tracker.infrastructure.dependencies import (
    get_project_service,
    get_tracker_directory_service,
)

router = APIRouter(prefix="/projects", tags=["Projects"])


@router.get("", response_model=list[ProjectResponse])
async def list_projects(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    service: ProjectService = Depends(get_project_service),
) -> list[ProjectResponse]:
    """Retrieve a paginated list of projects ordered by name."""
    projects = await service.list_projects(skip=skip, limit=limit)
    return [ProjectResponse.model_validate(p, from_attributes=True) for p in projects]


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: str,
    service: ProjectService = Depends(get_project_service),
) -> ProjectResponse:
    """Retrieve a single project by ID."""
    try:
        project = await service.get_project(project_id)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return ProjectResponse.model_validate(project, from_attributes=True)


@router.get("/{project_id}/risk", response_model=RiskAssessmentResponse)
async def get_project_risk(
    project_id: str,
    directory: TrackerDirectoryService = Depends(get_tracker_directory_service),
) -> RiskAssessmentResponse:
    """Delivery risk assessment for one project."""
    try:
        record = await directory.get_risk_assessment(project_id)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return RiskAssessmentResponse.model_validate(record.to_dict())


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(
    data: ProjectCreate,
    service: ProjectService = Depends(get_project_service),
) -> ProjectResponse:
    """Create a new project."""
    project = await service.create_project(data)
    return ProjectResponse.model_validate(project, from_attributes=True)


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(
    project_id: str,
    service: ProjectService = Depends(get_project_service),
) -> None:
    """Delete a project and its tasks."""
    try:
        await service.delete_project(project_id)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
