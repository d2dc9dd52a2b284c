from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL, make_url

PLACEHOLDER_PASSWORD = "YOUR_PASSWORD_HERE"

_DEFAULTS = {
    "DB_URL": "postgresql://localhost:5432/student_db",
    "DB_USERNAME": "postgres",
    "DB_PASSWORD": PLACEHOLDER_PASSWORD,
}


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    All settings can be configured via .env file or environment variables.
    The database fallbacks are placeholders for local development only;
    the default password will never authenticate against a real server.
    """

    # =============================================================================
    # APPLICATION
    # =============================================================================
    PROJECT_NAME: str = "Student Records"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # =============================================================================
    # DATABASE - URL/credential triple
    # =============================================================================
    DB_URL: str = _DEFAULTS["DB_URL"]
    DB_USERNAME: Optional[str] = _DEFAULTS["DB_USERNAME"]
    DB_PASSWORD: Optional[str] = _DEFAULTS["DB_PASSWORD"]

    # =============================================================================
    # DATABASE CONNECTION SETTINGS
    # =============================================================================
    DB_CONNECT_TIMEOUT: int = 10  # Seconds to wait for the driver to connect
    DB_ECHO_SQL: bool = False

    # =============================================================================
    # LOGGING
    # =============================================================================
    LOG_LEVEL: str = "INFO"

    @field_validator("DB_URL", "DB_USERNAME", "DB_PASSWORD", mode="before")
    @classmethod
    def fallback_on_blank(cls, v: Optional[str], info) -> Optional[str]:
        """
        Treat blank environment values as unset.

        Priority:
        1. Use the value from the environment / .env if it is non-blank
        2. Fall back to the built-in placeholder default
        """
        # Stricter than "unset only": an exported-but-empty variable also
        # falls back, since an empty URL or user can never connect.
        if isinstance(v, str):
            v = v.strip()
        if v is None or v == "":
            return _DEFAULTS[info.field_name]
        return v

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        if isinstance(v, str):
            return v.strip().upper() or "INFO"
        return v

    @property
    def uses_placeholder_credentials(self) -> bool:
        return self.DB_PASSWORD == PLACEHOLDER_PASSWORD

    def get_database_url(self) -> URL:
        """
        Merge username/password into DB_URL.

        SQLite URLs are file paths and reject credentials, so they are
        returned untouched.
        """
        url = make_url(self.DB_URL)
        if url.get_backend_name() == "sqlite":
            return url
        if self.DB_USERNAME:
            url = url.set(username=self.DB_USERNAME)
        if self.DB_PASSWORD:
            url = url.set(password=self.DB_PASSWORD)
        return url

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


def get_settings(**overrides) -> Settings:
    """Build the settings once at process start; pass the instance around."""
    return Settings(**overrides)


def print_config(settings: Settings):
    """Print current configuration (hide sensitive data)."""
    password = settings.DB_PASSWORD or ""
    print("=" * 80)
    print("📋 CURRENT CONFIGURATION")
    print("=" * 80)
    print(f"Project Name: {settings.PROJECT_NAME}")
    print(f"Version: {settings.APP_VERSION}")
    print(f"Debug Mode: {settings.DEBUG}")
    print("-" * 80)
    print(f"Database URL: {settings.get_database_url().render_as_string(hide_password=True)}")
    print(f"Database User: {settings.DB_USERNAME}")
    print(f"Database Password: {'*' * len(password)}")
    if settings.uses_placeholder_credentials:
        print("⚠️ Using placeholder password - set DB_PASSWORD before connecting")
    print("-" * 80)
    print(f"Connect Timeout: {settings.DB_CONNECT_TIMEOUT}s")
    print(f"Echo SQL: {settings.DB_ECHO_SQL}")
    print(f"Log Level: {settings.LOG_LEVEL}")
    print("=" * 80)


if __name__ == "__main__":
    # Test config loading
    print_config(get_settings())
