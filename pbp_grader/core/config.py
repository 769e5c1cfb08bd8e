"""
Application configuration with environment-specific overrides.

Supported environment files (loaded in order of precedence):
1. .env.{ENVIRONMENT} (e.g., .env.production, .env.development)
2. .env (fallback)

Nothing here is required: every setting has a working default so the
grading core can run from a bare checkout.
"""
import os
import logging
from pathlib import Path
from typing import Dict, Literal
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

# Get the project root directory (2 levels up from this file)
PROJECT_ROOT = Path(__file__).parent.parent.parent

logger = logging.getLogger(__name__)


# Game-data payloads identify teams by a lowercase site key ("nwe", "oti").
# Keys missing from this table fall back to the upper-cased key itself.
DEFAULT_TEAM_MAP: Dict[str, Dict[str, str]] = {
    "nwe": {"code": "NWE", "name": "New England Patriots"},
    "oti": {"code": "TEN", "name": "Tennessee Titans"},
}


class Settings(BaseSettings):
    """Application settings with environment-specific configuration."""

    # Environment
    ENVIRONMENT: Literal["development", "production", "test"] = "development"

    model_config = SettingsConfigDict(
        env_file=str(PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"  # Allow extra fields from .env
    )

    # Application
    APP_NAME: str = "NFL Play-by-Play Bet Grader"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8001

    # CORS - comma-separated string for env var parsing
    CORS_ORIGINS_STR: str = ""

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    # Roster lookup: minimum RapidFuzz WRatio score for a fuzzy name hit
    PLAYER_FUZZY_MATCH_THRESHOLD: int = Field(90, ge=0, le=100)

    # Anytime-TD wagers without a parsable count need this many touchdowns
    DEFAULT_TD_COUNT: int = Field(1, ge=1)

    # Payload team key -> {code, name}
    TEAM_MAP: Dict[str, Dict[str, str]] = Field(default_factory=lambda: dict(DEFAULT_TEAM_MAP))

    @property
    def CORS_ORIGINS(self) -> list[str]:
        """Get CORS origins with environment-aware defaults."""
        if self.CORS_ORIGINS_STR:
            origins = [o.strip() for o in self.CORS_ORIGINS_STR.split(",") if o.strip()]
            if origins:
                if self.is_production() and "*" in origins:
                    logger.warning(
                        "Wildcard CORS origins (*) are not allowed in production. "
                        "Please set explicit origins in CORS_ORIGINS_STR environment variable."
                    )
                    return []
                return origins

        if self.is_production():
            return []

        # Development defaults to the local visualizer
        return [
            "http://localhost:3000",
            "http://localhost:5173",
            "http://127.0.0.1:3000",
            "http://127.0.0.1:5173",
        ]

    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.ENVIRONMENT == "production"


def _load_env_file() -> Path:
    """
    Load the appropriate environment file based on ENVIRONMENT variable.

    Loads in order of precedence:
    1. .env.{ENVIRONMENT} (e.g., .env.production, .env.development)
    2. .env (fallback)
    """
    environment = os.getenv("ENVIRONMENT", "development")

    env_file = PROJECT_ROOT / f".env.{environment}"
    if env_file.exists():
        logger.info(f"Loading environment from {env_file.name}")
        return env_file

    default_env = PROJECT_ROOT / ".env"
    if default_env.exists():
        logger.info(f"Loading environment from .env (environment: {environment})")
        return default_env

    logger.debug(f"No environment file found for '{environment}' (checked .env.{environment}, .env)")
    return default_env


# Auto-detect and load environment file
_env_file = _load_env_file()


class _SettingsWithEnvFile(Settings):
    model_config = SettingsConfigDict(
        env_file=str(_env_file),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )


settings = _SettingsWithEnvFile()


def get_team_descriptor(team_key: str) -> Dict[str, str]:
    """
    Resolve a payload team key to a {code, name} descriptor.

    Args:
        team_key: Site key from the game-data payload (e.g. "nwe", "oti season")

    Returns:
        Descriptor dict; unknown keys map to their upper-cased code

    Examples:
        >>> get_team_descriptor("oti")
        {'code': 'TEN', 'name': 'Tennessee Titans'}
        >>> get_team_descriptor("buf")
        {'code': 'BUF', 'name': 'BUF'}
    """
    raw = str(team_key or "").strip().lower()
    key = raw.split()[0] if raw else ""
    known = settings.TEAM_MAP.get(key)
    if known:
        return {"code": known["code"].upper(), "name": known.get("name", known["code"])}
    code = key.upper()
    return {"code": code, "name": code}
