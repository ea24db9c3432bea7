from typing import List, Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict
from packages.mis_core.errors import ConfigurationError


class MISConfig(BaseSettings):
    """
    Application wide settings.
    Values are read from the environment and the .env file.
    """
    PROJECT_NAME: str = "MIS Interview Session Engine"
    VERSION: str = "0.1.0"

    # Snapshot store (in-progress sessions)
    SNAPSHOT_BACKEND: Literal["memory", "file", "redis"] = "file"
    SNAPSHOT_DIR: str = "data/sessions"
    SNAPSHOT_TTL_SEC: Optional[int] = None
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379

    # Profiles and results
    USE_DATABASE: bool = False
    # Candidates treated as having a profile when no database is used
    PROFILE_USER_IDS: List[str] = ["demo-user"]
    DATABASE_URL: str = "sqlite+aiosqlite:///./mis.db"

    # External collaborators (mock implementations are used when unset)
    SESSION_GENERATOR_URL: Optional[str] = None
    SCORING_URL: Optional[str] = None
    HTTP_TIMEOUT_SEC: float = 60.0

    TIMER_TICK_SECONDS: float = 1.0
    LOG_DIR: str = "logs"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @classmethod
    def load(cls) -> "MISConfig":
        """
        Load settings, wrapping any validation failure in ConfigurationError.
        """
        try:
            return cls()
        except Exception as e:
            raise ConfigurationError(f"Failed to load configuration: {str(e)}") from e
