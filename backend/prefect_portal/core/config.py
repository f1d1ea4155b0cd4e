from pydantic_settings import BaseSettings
from typing import List, Any, Optional
import json
from pathlib import Path


def parse_cors_origins(v: Any) -> List[str]:
    """Parse CORS origins from string or list"""
    if isinstance(v, list):
        return v
    if isinstance(v, str):
        # JSON array first, then comma-separated
        if v.startswith('['):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                pass
        return [origin.strip() for origin in v.split(',') if origin.strip()]
    return []


def parse_csv(v: Any) -> List[str]:
    """Parse a comma-separated setting into a list of lowercase values"""
    if isinstance(v, list):
        return [str(item).lower() for item in v]
    if isinstance(v, str):
        return [item.strip().lower() for item in v.split(',') if item.strip()]
    return []


class Settings(BaseSettings):
    """Application settings - all configurable via environment variables"""

    # ==========================================
    # Application
    # ==========================================
    APP_NAME: str = "Prefect Portal"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    SECRET_KEY: str
    API_VERSION: str = "v1"

    # Server Configuration
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 8000

    # ==========================================
    # Database
    # ==========================================
    DATABASE_URL: str
    DB_POOL_SIZE: int = 20
    DB_MAX_OVERFLOW: int = 0
    DB_ECHO: bool = False

    # Upper bound for a single store round trip (seconds)
    REQUEST_TIMEOUT_SECONDS: float = 10.0

    # ==========================================
    # Authentication
    # ==========================================
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 720  # 12 hours
    REFRESH_TOKEN_EXPIRE_DAYS: int = 30
    BCRYPT_ROUNDS: int = 12  # 4 is fine for tests
    DEFAULT_SIGNUP_ROLE: str = "student"

    # ==========================================
    # Realtime
    # ==========================================
    # Empty means in-process fan-out only (single worker)
    REALTIME_REDIS_URL: str = ""
    REALTIME_CHANNEL_PREFIX: str = "portal:conversation"

    # ==========================================
    # Storage Configuration
    # ==========================================
    STORAGE_BACKEND: str = "local"  # "local", "s3", or "minio"
    STORAGE_LOCAL_PATH: str = "media"
    STORAGE_PUBLIC_URL: str = "http://localhost:8000/media"

    # AWS S3 / MinIO
    AWS_ACCESS_KEY_ID: str = ""
    AWS_SECRET_ACCESS_KEY: str = ""
    AWS_REGION: str = "us-east-1"
    S3_BUCKET_NAME: str = "prefect-portal"
    MINIO_ENDPOINT: str = "localhost:9000"

    # Avatars
    AVATAR_MAX_BYTES: int = 2 * 1024 * 1024  # 2MB
    AVATAR_ALLOWED_EXTENSIONS_STR: str = "png,jpg,jpeg,gif,webp"

    @property
    def AVATAR_ALLOWED_EXTENSIONS(self) -> List[str]:
        return parse_csv(self.AVATAR_ALLOWED_EXTENSIONS_STR)

    # ==========================================
    # CORS (stored as comma-separated string, parsed to list)
    # ==========================================
    CORS_ORIGINS_STR: str = "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173"

    @property
    def CORS_ORIGINS(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        return parse_cors_origins(self.CORS_ORIGINS_STR)

    # ==========================================
    # Rate Limiting
    # ==========================================
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_STORAGE_URI: str = "memory://"  # e.g. redis://localhost:6379/2
    RATE_LIMIT_PER_MINUTE: int = 120
    RATE_LIMIT_PER_HOUR: int = 3000
    RATE_LIMIT_SIGNIN: str = "10/minute"
    RATE_LIMIT_SIGNUP: str = "5/minute"

    # ==========================================
    # Request limits
    # ==========================================
    MAX_REQUEST_SIZE: int = 10 * 1024 * 1024  # 10MB

    # ==========================================
    # Logging
    # ==========================================
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/app.log"  # empty disables the file handler
    LOG_JSON: Optional[bool] = None  # None means JSON only in production

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        if self.LOG_FILE:
            Path(self.LOG_FILE).parent.mkdir(exist_ok=True, parents=True)

    @property
    def STORAGE_LOCAL_DIR(self) -> Path:
        return Path(self.STORAGE_LOCAL_PATH)

    @property
    def use_json_logs(self) -> bool:
        if self.LOG_JSON is not None:
            return self.LOG_JSON
        return self.ENVIRONMENT == "production"

    def is_dev_mode(self) -> bool:
        """Check if running in development mode"""
        return self.ENVIRONMENT == "development" or self.DEBUG

    def is_testing(self) -> bool:
        return self.ENVIRONMENT == "testing"


# Create settings instance
settings = Settings()
