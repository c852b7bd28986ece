from pydantic_settings import BaseSettings
from pathlib import Path

# Get the repository root directory (parent of simap directory)
REPO_ROOT = Path(__file__).parent.parent.absolute()

class Settings(BaseSettings):
    """Application settings."""

    # API settings
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 3000
    API_RELOAD: bool = True

    # Version and environment
    VERSION: str = "0.1.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # Storage settings
    STORAGE_TYPE: str = "filesystem"  # "filesystem" or "s3"
    SESSION_STORAGE_DIR: str = str(REPO_ROOT / "data")

    # S3 settings (only used if STORAGE_TYPE = "s3")
    AWS_ACCESS_KEY_ID: str = ""
    AWS_SECRET_ACCESS_KEY: str = ""
    AWS_REGION: str = "us-east-1"
    S3_BUCKET: str = "simap-sessions"
    S3_PREFIX: str = "sessions"

    # Client settings
    API_BASE_URL: str = "http://localhost:3000"
    CLIENT_CACHE_DIR: str = str(REPO_ROOT / "storage" / "client_cache")
    SAVE_DEBOUNCE_SECONDS: float = 0.5

    class Config:
        env_file = ".env"

settings = Settings()
