"""Process configuration for lockbox.

Settings come from, highest precedence first: keyword overrides passed to
``load_settings()``, OS environment variables, one static .env file, and
field defaults. The .env file is the one named by LOCKBOX_ENV_FILE, else
config/.env.dev, else config/.env.

Settings are loaded once when the process starts and handed explicitly to
the factories that need them.
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import SecretStr, ValidationError, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid.

    This is a fatal startup condition, never a per-request failure.
    """

    def __init__(self, message: str = "Invalid configuration"):
        self.message = message
        super().__init__(self.message)


ROOT_MARKERS = ("config", ".git", "pyproject.toml")
ENV_FILE_CANDIDATES = (".env.dev", ".env")


def _find_project_root() -> Path:
    """Walk up from this file to the first directory holding a root marker."""
    here = Path(__file__).resolve()
    for directory in here.parents:
        if any((directory / marker).exists() for marker in ROOT_MARKERS):
            return directory
    return Path.cwd()


def get_config_dir() -> Path:
    """Directory searched for the static .env files."""
    return _find_project_root() / "config"


def _resolve_env_file_path() -> Path | None:
    """Pick the single .env file to read, if any exists."""
    explicit = os.environ.get("LOCKBOX_ENV_FILE")
    if explicit:
        candidate = Path(explicit)
        if not candidate.is_absolute():
            candidate = _find_project_root() / candidate
        if candidate.is_file():
            return candidate

    config_dir = get_config_dir()
    return next(
        (config_dir / name for name in ENV_FILE_CANDIDATES if (config_dir / name).is_file()),
        None,
    )


class Settings(BaseSettings):
    """Immutable application configuration.

    Field names map to upper-case environment variables (``jwt_secret`` is
    read from ``JWT_SECRET``).
    """

    model_config = SettingsConfigDict(
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # Security (MUST be set - startup fails without it)
    jwt_secret: SecretStr  # Secret for signing session tokens

    # Application
    app_name: str = "Lockbox"
    log_level: str = "INFO"

    # Session tokens
    jwt_session_expire_hours: int = 24

    # Database (POSTGRES_ prefix); DATABASE_URL overrides the components
    database_url: str | None = None
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "postgres"
    postgres_password: SecretStr = SecretStr("")
    postgres_db: str = "lockbox"

    # SMTP (SMTP_ prefix)
    smtp_enabled: bool = False
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: SecretStr | None = None
    smtp_from_email: str = ""
    smtp_from_name: str = "Lockbox"
    smtp_use_tls: bool = True
    smtp_starttls: bool = True

    # Public URL used to build the links sent by email
    public_base_url: str = "http://localhost:8000"

    @field_validator("jwt_secret")
    @classmethod
    def _validate_jwt_secret(cls, v: SecretStr) -> SecretStr:
        if not v.get_secret_value().strip():
            msg = "JWT_SECRET cannot be empty"
            raise ValueError(msg)
        return v

    @computed_field  # type: ignore[prop-decorator]
    @property
    def sqlalchemy_url(self) -> str:
        """Construct the database URL from components unless overridden."""
        if self.database_url:
            return self.database_url
        return (
            f"postgresql+asyncpg://{self.postgres_user}:"
            f"{self.postgres_password.get_secret_value()}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )


def load_settings(**overrides) -> Settings:
    """Load settings once at process start.

    Keyword overrides take precedence over the environment and are mainly
    useful for tests and the CLI.

    Raises
    ------
    ConfigurationError
        If a required setting (such as JWT_SECRET) is missing or invalid
    """
    try:
        return Settings(_env_file=_resolve_env_file_path(), **overrides)  # type: ignore[call-arg]
    except ValidationError as e:
        fields = ", ".join(
            ".".join(str(part) for part in error["loc"]).upper() or "settings"
            for error in e.errors()
        )
        msg = f"Missing or invalid configuration: {fields}"
        raise ConfigurationError(msg) from e
