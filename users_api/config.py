import os
from pathlib import Path

from dotenv import load_dotenv

from .errors import ConfigurationError

# Project root (users_api/ -> project root)
PROJECT_DIR = Path(__file__).parent.parent

DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:3001",
]

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def load_env_file(env_path: Path | None = None) -> bool:
    """Load variables from the project's .env file without overriding the real environment."""
    return load_dotenv(dotenv_path=env_path or PROJECT_DIR / ".env", override=False)


class Settings:
    """Application settings read from environment variables on access."""

    def __init__(self, overrides: dict[str, str] | None = None):
        # Explicit values (used by tests and scripts) take precedence over os.environ
        self._overrides = dict(overrides or {})

    def _get(self, key: str, default: str = "") -> str:
        if key in self._overrides:
            return self._overrides[key]
        return os.getenv(key, default)

    @property
    def app_name(self) -> str:
        return "Users API"

    @property
    def environment(self) -> str:
        env = self._get("ENV").lower()
        if env == "production":
            return "production"
        return "development"

    @property
    def database_url(self) -> str:
        url = self._get("DATABASE_URL").strip()
        if not url:
            raise ConfigurationError(
                "DATABASE_URL is not set. Refusing to start without an explicit database connection string."
            )
        return url

    @property
    def cors_origins(self) -> list[str]:
        origins = list(DEFAULT_CORS_ORIGINS)
        for origin in self._get("CORS_ORIGIN").split(","):
            origin = origin.strip()
            if origin and origin not in origins:
                origins.append(origin)
        # Without an explicit CORS_ORIGIN, production accepts any origin
        if self.environment == "production" and not self._get("CORS_ORIGIN").strip():
            return ["*"]
        return origins

    @property
    def bcrypt_rounds(self) -> int:
        raw = self._get("BCRYPT_ROUNDS", "10").strip()
        try:
            rounds = int(raw)
        except ValueError:
            raise ConfigurationError(f"BCRYPT_ROUNDS must be an integer, got {raw!r}")
        if not 4 <= rounds <= 31:
            raise ConfigurationError(f"BCRYPT_ROUNDS must be between 4 and 31, got {rounds}")
        return rounds

    @property
    def sql_echo(self) -> bool:
        return self._get("SQL_ECHO").strip().lower() in ("1", "true", "yes", "on")

    @property
    def log_level(self) -> str:
        level = self._get("LOG_LEVEL", "INFO").strip().upper() or "INFO"
        if level not in LOG_LEVELS:
            raise ConfigurationError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {level!r}")
        return level


_settings_instance = None


def get_settings() -> Settings:
    """Return the process Settings instance, loading .env on first use."""
    global _settings_instance
    if _settings_instance is None:
        load_env_file()
        _settings_instance = Settings()
    return _settings_instance


def clear_settings_cache():
    """Drop the cached Settings so the next get_settings() re-reads .env."""
    global _settings_instance
    _settings_instance = None
