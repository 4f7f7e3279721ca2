"""FastAPI dependency injection — wires infrastructure to application layer."""

from collections.abc import AsyncGenerator
from functools import lru_cache

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tracker.config import get_settings
from tracker.application.interfaces import KeyValueCache, TaskDirectory
from tracker.application.services import (
    ConditionExtractor,
    ConfidenceScorer,
    EntityDirectoryCache,
    EntityDiscovery,
    FuzzyMatcher,
    IntentClassifier,
    ProjectService,
    QueryParser,
    QueryProcessor,
    TaskService,
    TrackerDirectoryService,
)
from tracker.infrastructure.cache import InMemoryKeyValueCache, RedisKeyValueCache
from tracker.infrastructure.database.session import get_db_session
from tracker.infrastructure.database.repositories import (
    SQLAlchemyProjectRepository,
    SQLAlchemyTaskRepository,
)
from tracker.infrastructure.http import TrackerApiClient


@lru_cache
def get_key_value_cache() -> KeyValueCache:
    """Process-wide cache shared by every request.

    ``cache_backend=redis`` shares entries across worker processes; the
    in-memory default is private to this process.
    """
    settings = get_settings()
    if settings.cache_backend == "redis":
        return RedisKeyValueCache.from_url(
            settings.redis_url, key_prefix=settings.cache_key_prefix
        )
    return InMemoryKeyValueCache()


async def get_tracker_directory_service(
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[TrackerDirectoryService, None]:
    """Provides the repository-backed directory (workload and risk analyses)."""
    yield TrackerDirectoryService(
        task_repo=SQLAlchemyTaskRepository(session),
        project_repo=SQLAlchemyProjectRepository(session),
    )


async def get_task_directory(
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[TaskDirectory, None]:
    """Provides the directory the query pipeline reads from.

    ``directory_backend=http`` points the pipeline at a remote tracker API;
    otherwise it reads the local database.
    """
    settings = get_settings()
    if settings.directory_backend == "http":
        yield TrackerApiClient(
            base_url=settings.tracker_api_base_url,
            timeout=settings.tracker_api_timeout,
        )
        return

    yield TrackerDirectoryService(
        task_repo=SQLAlchemyTaskRepository(session),
        project_repo=SQLAlchemyProjectRepository(session),
    )


async def get_entity_directory_cache(
    directory: TaskDirectory = Depends(get_task_directory),
) -> AsyncGenerator[EntityDirectoryCache, None]:
    """Provides the cached people/project lists over the active directory."""
    settings = get_settings()
    yield EntityDirectoryCache(
        directory,
        get_key_value_cache(),
        ttl_seconds=settings.entity_cache_ttl_seconds,
        stale_ttl_seconds=settings.entity_cache_stale_ttl_seconds,
    )


async def get_query_parser(
    directory_cache: EntityDirectoryCache = Depends(get_entity_directory_cache),
) -> AsyncGenerator[QueryParser, None]:
    """Provides a QueryParser with the full intent pipeline wired up."""
    settings = get_settings()
    yield QueryParser(
        classifier=IntentClassifier(),
        discovery=EntityDiscovery(
            directory_cache,
            FuzzyMatcher(threshold=settings.fuzzy_match_threshold),
        ),
        conditions=ConditionExtractor(),
        scorer=ConfidenceScorer(),
        debug_mode=settings.query_debug_mode,
    )


async def get_query_processor(
    parser: QueryParser = Depends(get_query_parser),
    directory: TaskDirectory = Depends(get_task_directory),
    directory_cache: EntityDirectoryCache = Depends(get_entity_directory_cache),
) -> AsyncGenerator[QueryProcessor, None]:
    """Provides a QueryProcessor bound to the active directory."""
    yield QueryProcessor(parser, directory, directory_cache)


async def get_project_service(
    session: AsyncSession = Depends(get_db_session),
    directory_cache: EntityDirectoryCache = Depends(get_entity_directory_cache),
) -> AsyncGenerator[ProjectService, None]:
    """Provides a ProjectService instance with its repository wired up."""
    yield ProjectService(SQLAlchemyProjectRepository(session), directory_cache)


async def get_task_service(
    session: AsyncSession = Depends(get_db_session),
    directory_cache: EntityDirectoryCache = Depends(get_entity_directory_cache),
) -> AsyncGenerator[TaskService, None]:
    """Provides a TaskService instance with its repositories wired up."""
    yield TaskService(
        SQLAlchemyTaskRepository(session),
        SQLAlchemyProjectRepository(session),
        directory_cache,
    )
