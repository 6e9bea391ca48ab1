from urllib.parse import quote_plus

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from user_orders.core.exceptions import ConfigurationError


class Settings(BaseSettings):
    # Server settings
    HOST: str = "0.0.0.0"  # Interface uvicorn binds to
    PORT: int = 3000  # Port the API listens on

    # Connection string template, e.g.
    # postgresql://<username>:<password>@localhost:5432/users
    # The placeholders are filled from DB_USER / DB_PASSWORD
    DB_URI: str
    DB_USER: str
    DB_PASSWORD: str

    # bcrypt cost factor used when hashing user passwords
    # Each step doubles the hashing time; 4 is the lowest bcrypt accepts
    BCRYPT_SALT_ROUNDS: int = Field(default=12, ge=4, le=31)

    # Comma-separated list, "*" allows every origin
    CORS_ORIGINS: str = "*"

    # Root log level, also passed on to uvicorn
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",  # Read from .env when present, real env vars take precedence
        case_sensitive=True,  # Variable names must match exactly
        extra="ignore",  # Unrelated variables in .env are not an error
        frozen=True,  # Settings are read once at startup and never changed
    )

    @property
    def database_url(self) -> str:
        """DB_URI with the credential placeholders substituted"""
        return self.DB_URI.replace("<username>", quote_plus(self.DB_USER)).replace(
            "<password>", quote_plus(self.DB_PASSWORD)
        )

    def get_cors_origins(self) -> list[str]:
        """Parse CORS_ORIGINS string into list"""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


def load_settings(**overrides) -> Settings:
    """
    Build the settings from the environment (and .env, if present).

    Missing or malformed required variables are fatal at startup, so they are
    reported as a single ConfigurationError naming every offending variable.
    """
    try:
        return Settings(**overrides)
    except ValidationError as exc:
        names = sorted({str(error["loc"][0]) for error in exc.errors() if error["loc"]})
        raise ConfigurationError(
            f"Invalid or missing configuration: {', '.join(names)}"
        ) from exc
