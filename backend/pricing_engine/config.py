"""Application configuration module."""

from pathlib import Path
from pydantic_settings import BaseSettings

# Resolve paths relative to this file so startup directory does not matter
_THIS_DIR = Path(__file__).parent  # backend/pricing_engine/
_BACKEND_ROOT = _THIS_DIR.parent  # backend/
_PROJECT_ROOT = _BACKEND_ROOT.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file."""

    # Backend Configuration
    backend_host: str = "localhost"
    backend_port: int = 8000
    backend_debug: bool = False

    # Pricing profiles (manufacturing table, fallback fabric, default allowances)
    profiles_dir: str = str(_THIS_DIR / "profiles")
    default_profile: str = "default"

    # Quote defaults used when a request omits them
    default_currency: str = "GBP"
    default_tax_rate: float = 0.20

    # Logging
    log_level: str = "INFO"

    @property
    def profiles_dir_path(self) -> Path:
        """Get profiles directory path as Path object (always absolute)."""
        path = Path(self.profiles_dir)
        if not path.is_absolute():
            path = _PROJECT_ROOT / path
        return path

    model_config = {
        "env_file": str(_ENV_FILE),
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }


def get_settings() -> Settings:
    """Get application settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
