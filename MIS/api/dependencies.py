from functools import lru_cache
from typing import Tuple

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from packages.mis_core.config import MISConfig
from packages.mis_providers.generator import SessionGenerator
from packages.mis_providers.http_clients import HttpScoringService, HttpSessionGenerator
from packages.mis_providers.mock_generator import MockSessionGenerator
from packages.mis_providers.mock_scoring import MockScoringService
from packages.mis_providers.profile import MemoryProfileRepository, ProfileRepository
from packages.mis_providers.results import MemoryResultRepository, ResultRepository
from packages.mis_providers.scoring import ScoringService
from packages.mis_service.bootstrap import SessionBootstrapper
from packages.mis_service.session_service import SessionService
from packages.mis_service.submission import SubmissionController
from packages.mis_session.infrastructure.file_repo import FileKeyedStore
from packages.mis_session.infrastructure.memory_repo import MemoryKeyedStore
from packages.mis_session.persistence import SessionPersistence
from packages.mis_session.repository import KeyedStore
from packages.mis_storage.db import create_engine_and_sessionmaker
from packages.mis_storage.repositories import SqlProfileRepository, SqlResultRepository


@lru_cache
def get_config() -> MISConfig:
    return MISConfig.load()

# --- Repositories (Persistence) ---

@lru_cache
def get_snapshot_store() -> KeyedStore:
    """
    Singleton snapshot store selected by SNAPSHOT_BACKEND.
    """
    config = get_config()
    if config.SNAPSHOT_BACKEND == "redis":
        from packages.mis_session.infrastructure.redis_repo import RedisKeyedStore
        return RedisKeyedStore(
            host=config.REDIS_HOST,
            port=config.REDIS_PORT,
            ttl_sec=config.SNAPSHOT_TTL_SEC
        )
    if config.SNAPSHOT_BACKEND == "memory":
        return MemoryKeyedStore()
    return FileKeyedStore(base_dir=config.SNAPSHOT_DIR)

@lru_cache
def get_database() -> Tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    return create_engine_and_sessionmaker(get_config().DATABASE_URL)

@lru_cache
def get_profile_repository() -> ProfileRepository:
    config = get_config()
    if config.USE_DATABASE:
        return SqlProfileRepository(get_database()[1])
    return MemoryProfileRepository(set(config.PROFILE_USER_IDS))

@lru_cache
def get_result_repository() -> ResultRepository:
    if get_config().USE_DATABASE:
        return SqlResultRepository(get_database()[1])
    return MemoryResultRepository()

# --- Providers (External Adapters) ---

@lru_cache
def get_session_generator() -> SessionGenerator:
    config = get_config()
    if config.SESSION_GENERATOR_URL:
        return HttpSessionGenerator(config.SESSION_GENERATOR_URL, timeout_sec=config.HTTP_TIMEOUT_SEC)
    return MockSessionGenerator()

@lru_cache
def get_scoring_service() -> ScoringService:
    config = get_config()
    if config.SCORING_URL:
        return HttpScoringService(config.SCORING_URL, timeout_sec=config.HTTP_TIMEOUT_SEC)
    return MockScoringService()

# --- Domain Services (Application Logic) ---

@lru_cache
def get_persistence() -> SessionPersistence:
    return SessionPersistence(get_snapshot_store())

@lru_cache
def get_session_service() -> SessionService:
    """
    Singleton Session Service.
    Must be shared across requests: it owns the live engines and their timers.
    """
    persistence = get_persistence()
    result_repo = get_result_repository()
    return SessionService(
        persistence=persistence,
        bootstrapper=SessionBootstrapper(
            persistence=persistence,
            profile_repo=get_profile_repository(),
            generator=get_session_generator(),
            result_repo=result_repo
        ),
        submission=SubmissionController(
            persistence=persistence,
            scoring=get_scoring_service(),
            result_repo=result_repo
        ),
        result_repo=result_repo,
        tick_seconds=get_config().TIMER_TICK_SECONDS
    )
