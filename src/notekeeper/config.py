"""Application configuration via environment variables.

Uses pydantic-settings to load config from env vars with NOTEKEEPER_ prefix.
No YAML files, no file-based config — just env vars (12-factor app style).

Learn: the Settings object is built once at process start and handed to
create_app(). Nothing else reads the environment, so tests can build an
app from an explicit Settings(...) without touching os.environ.
"""

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings

DEFAULT_JWT_SECRET = "change-me-in-production"


class Settings(BaseSettings):
    """All app configuration. Set via NOTEKEEPER_* env vars."""

    # Database
    database_url: str = "sqlite+aiosqlite:///./notekeeper.db"
    database_echo: bool = False

    # Auth
    jwt_secret: str = DEFAULT_JWT_SECRET
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = Field(60, gt=0)
    token_header: str = "Authorization"  # carries the raw token
    bcrypt_rounds: int = Field(12, ge=4, le=31)

    # Server
    environment: str = "development"
    host: str = "0.0.0.0"
    port: int = 4000

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    # CORS
    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]

    model_config = {"env_prefix": "NOTEKEEPER_"}

    @model_validator(mode="after")
    def validate_production_settings(self):
        """Ensure the signing secret is changed in non-development environments."""
        if (
            self.environment not in ("development", "test")
            and self.jwt_secret == DEFAULT_JWT_SECRET
        ):
            raise ValueError(
                "NOTEKEEPER_JWT_SECRET must be set to a secure value in "
                "non-development environments. Generate one with: "
                'python -c "import secrets; print(secrets.token_urlsafe(32))"'
            )
        return self


def get_settings() -> Settings:
    """Build settings from the current environment."""
    return Settings()
