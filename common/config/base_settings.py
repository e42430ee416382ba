"""
Environment-driven settings shared by the API and the maintenance jobs.

Values come from the process environment or a local ``.env`` file; names are
case-sensitive. Applications subclass ``BaseAppSettings`` to add their own keys.

Example:
    class Settings(BaseAppSettings):
        CHECKIN_MAX_DAILY_MINUTES: int = 720

    settings = Settings()
    app.add_middleware(CORSMiddleware, allow_origins=settings.get_cors_origins())
"""

from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseAppSettings(BaseSettings):
    """Connection, server and CORS settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="allow",
    )

    # ==========================================================================
    # MongoDB
    # ==========================================================================
    MONGODB_URI: str = "mongodb://localhost:27017"
    MONGODB_DATABASE: str = "studypods"

    # ==========================================================================
    # Server
    # ==========================================================================
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    ENVIRONMENT: str = "development"  # development | staging | production
    LOG_LEVEL: str = "INFO"

    # ==========================================================================
    # CORS
    # ==========================================================================
    CORS_ORIGINS: str = "*"  # "*" or comma-separated origins
    CORS_ALLOW_CREDENTIALS: bool = True

    def get_cors_origins(self) -> List[str]:
        """
        Parse CORS_ORIGINS.

        Returns:
            ["*"] for the wildcard, otherwise the comma-separated origins
        """
        if self.CORS_ORIGINS.strip() == "*":
            return ["*"]
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    def is_development(self) -> bool:
        return self.ENVIRONMENT.lower() == "development"
