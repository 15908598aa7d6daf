from typing import Literal
from pydantic_settings import BaseSettings, SettingsConfigDict
from packages.ivs_core.errors import ConfigurationError

class IVSConfig(BaseSettings):
    """
    Application-wide settings.
    Loaded from environment variables and the .env file.
    """
    PROJECT_NAME: str = "IVS Mock Interview"
    VERSION: str = "0.1.0"

    # Remote interview service (question generation, evaluation, coding challenge)
    INTERVIEW_API_BASE_URL: str = "http://localhost:8000/api"
    HTTP_TIMEOUT_SEC: float = 120.0

    # Use in-process mock providers instead of the remote service
    USE_MOCK_PROVIDERS: bool = True
    MOCK_LATENCY_MS: int = 0

    # Session defaults, frozen into SessionConfig at setup
    CODING_STAGE_ENABLED: bool = True
    QUESTION_MODE: Literal["DYNAMIC", "FIXED"] = "DYNAMIC"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @classmethod
    def load(cls) -> "IVSConfig":
        """
        Load settings, wrapping any failure in a ConfigurationError.
        """
        try:
            return cls()
        except Exception as e:
            raise ConfigurationError(f"Failed to load configuration: {str(e)}") from e
