"""Projects — CRUD over the "TestProjects" table.

Invariants:
    - /api/test and /api/test/ behave identically (no redirect)
    - Missing rows raise ResourceNotFoundError (404), never a bare 500
    - Non-integer ids are rejected by FastAPI validation (400 via error handler)
    - Every query is parameterized through the ORM

Design Decisions:
    - Trailing-slash aliases hidden from the OpenAPI document
    - Handlers return plain dicts shaped by ProjectResponse aliases
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ResourceNotFoundError
from app.infrastructure.database import get_db
from app.models.project import Project
from app.schemas.project import MessageResponse, ProjectInput, ProjectResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/test", tags=["projects"])


def _to_response(project: Project) -> ProjectResponse:
    return ProjectResponse(id=project.id, name=project.name)


async def get_project_or_404(project_id: int, db: AsyncSession) -> Project:
    result = await db.execute(select(Project).where(Project.id == project_id))
    project = result.scalar_one_or_none()
    if project is None:
        raise ResourceNotFoundError("Project", str(project_id))
    return project


@router.get("", response_model=list[ProjectResponse])
@router.get("/", response_model=list[ProjectResponse], include_in_schema=False)
async def list_projects(db: AsyncSession = Depends(get_db)):
    """Get all test projects, ordered by Id."""
    result = await db.execute(select(Project).order_by(Project.id))
    return [_to_response(p) for p in result.scalars().all()]


@router.post(
    "", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED,
)
@router.post(
    "/", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED,
    include_in_schema=False,
)
async def create_project(body: ProjectInput, db: AsyncSession = Depends(get_db)):
    """Create a new test project."""
    project = Project(name=body.name)
    db.add(project)
    await db.commit()
    await db.refresh(project)
    logger.info(f"Project {project.id} created")
    return _to_response(project)


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(project_id: int, db: AsyncSession = Depends(get_db)):
    """Get test project by ID."""
    return _to_response(await get_project_or_404(project_id, db))


@router.put("/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: int, body: ProjectInput, db: AsyncSession = Depends(get_db),
):
    """Update test project."""
    project = await get_project_or_404(project_id, db)
    project.name = body.name
    await db.commit()
    return ProjectResponse(id=project_id, name=body.name)


@router.delete("/{project_id}", response_model=MessageResponse)
async def delete_project(project_id: int, db: AsyncSession = Depends(get_db)):
    """Delete test project."""
    project = await get_project_or_404(project_id, db)
    await db.delete(project)
    await db.commit()
    logger.info(f"Project {project_id} deleted")
    return MessageResponse(message="Deleted successfully")
