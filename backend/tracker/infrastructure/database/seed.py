"""Demo data for local development.

Idempotent: does nothing when any project already exists.
"""

import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tracker.domain.entities import Project, ProjectStatus, Task, TaskStatus
from tracker.infrastructure.database.repositories import (
    SQLAlchemyProjectRepository,
    SQLAlchemyTaskRepository,
)

logger = logging.getLogger(__name__)

# (title, assignee, status, due in days from today, project index)
_DEMO_TASKS: tuple[tuple[str, str, TaskStatus, int, int], ...] = (
    ("Design user interface", "Alice", TaskStatus.IN_PROGRESS, -10, 0),
    ("Implement authentication", "Alice", TaskStatus.IN_PROGRESS, -5, 0),
    ("API integration", "Alice", TaskStatus.TODO, 7, 0),
    ("Mobile app design", "Alice", TaskStatus.TODO, 14, 1),
    ("Database schema design", "Alice", TaskStatus.COMPLETED, -20, 2),
    ("Write landing page copy", "Bob", TaskStatus.COMPLETED, -15, 0),
    ("Set up CI pipeline", "Bob", TaskStatus.COMPLETED, -8, 1),
    ("Push notification service", "Bob", TaskStatus.IN_PROGRESS, 5, 1),
    ("Vendor contract review", "Carol", TaskStatus.BLOCKED, -3, 1),
    ("Data export scripts", "Carol", TaskStatus.BLOCKED, 3, 2),
    ("Migration dry run", "Carol", TaskStatus.TODO, 21, 2),
)


async def seed_demo_data(session_factory: async_sessionmaker[AsyncSession]) -> int:
    """Insert three projects and a spread of tasks. Returns the number of tasks created."""
    now = datetime.now(timezone.utc)
    async with session_factory() as session:
        project_repo = SQLAlchemyProjectRepository(session)
        if await project_repo.get_all(limit=1):
            logger.debug("Demo data skipped: projects already exist")
            return 0

        projects = [
            Project(
                name="Website Redesign",
                description="Complete overhaul of company website",
                status=ProjectStatus.IN_PROGRESS,
                start_date=now - timedelta(days=60),
                end_date=now + timedelta(days=30),
            ),
            Project(
                name="Mobile App Development",
                description="New mobile application for iOS and Android",
                status=ProjectStatus.IN_PROGRESS,
                start_date=now - timedelta(days=30),
                end_date=now + timedelta(days=90),
            ),
            Project(
                name="Database Migration",
                description="Migrate from MySQL to PostgreSQL",
                status=ProjectStatus.PLANNED,
                start_date=now,
                end_date=now + timedelta(days=45),
            ),
        ]
        for project in projects:
            await project_repo.create(project)

        task_repo = SQLAlchemyTaskRepository(session)
        for title, assignee, task_status, due_in_days, project_index in _DEMO_TASKS:
            await task_repo.create(
                Task(
                    title=title,
                    assignee_name=assignee,
                    status=task_status,
                    due_date=now + timedelta(days=due_in_days),
                    project_id=projects[project_index].id,
                )
            )

        await session.commit()
    logger.info("Seeded demo data: %d projects, %d tasks", len(projects), len(_DEMO_TASKS))
    return len(_DEMO_TASKS)
