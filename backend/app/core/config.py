from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Any
import json
from pathlib import Path


def parse_csv_list(v: Any) -> List[str]:
    """Parse a list setting from JSON array text or a comma-separated string"""
    if isinstance(v, list):
        return v
    if isinstance(v, str):
        # Try JSON parsing first
        if v.startswith('['):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                pass
        # Fall back to comma-separated
        return [item.strip() for item in v.split(',') if item.strip()]
    return []


class Settings(BaseSettings):
    """Application settings - all configurable via environment variables"""

    # ==========================================
    # Application
    # ==========================================
    APP_NAME: str = "RoomRoster"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    API_PREFIX: str = "/api"

    # Server Configuration
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 3000

    # ==========================================
    # Database
    # ==========================================
    DATABASE_URL: str = "sqlite+aiosqlite:///./roomroster.db"
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800  # 30 minutes
    DB_ECHO: bool = False

    # ==========================================
    # Authentication
    # ==========================================
    JWT_SECRET_KEY: str = "CHANGE_ME"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440  # 24 hours
    BCRYPT_ROUNDS: int = 10  # 4 for tests (fast), 12 for prod (secure)

    # ==========================================
    # CORS (stored as comma-separated string, parsed to list)
    # ==========================================
    CORS_ORIGINS_STR: str = "http://localhost:5173,http://localhost:3000,http://127.0.0.1:5173,http://127.0.0.1:3000"

    @property
    def CORS_ORIGINS(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        return parse_csv_list(self.CORS_ORIGINS_STR)

    # ==========================================
    # Rate Limiting
    # ==========================================
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_PER_MINUTE: int = 120
    LOGIN_RATE_LIMIT: str = "10/minute"
    REGISTER_RATE_LIMIT: str = "5/minute"

    # ==========================================
    # File Upload (avatars)
    # ==========================================
    UPLOAD_PATH: str = "uploads"
    MAX_REQUEST_SIZE: int = 10 * 1024 * 1024  # 10MB
    MAX_AVATAR_SIZE: int = 2 * 1024 * 1024  # 2MB
    ALLOWED_AVATAR_TYPES_STR: str = "image/jpeg,image/png,image/webp,image/gif"

    @property
    def ALLOWED_AVATAR_TYPES(self) -> List[str]:
        """Parse allowed avatar MIME types from comma-separated string"""
        return parse_csv_list(self.ALLOWED_AVATAR_TYPES_STR)

    @property
    def UPLOAD_DIR(self) -> Path:
        return Path(self.UPLOAD_PATH)

    @property
    def AVATAR_DIR(self) -> Path:
        return self.UPLOAD_DIR / "avatars"

    # ==========================================
    # Logging
    # ==========================================
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = ""

    # ==========================================
    # Seeding
    # ==========================================
    SEED_ON_STARTUP: bool = True
    DEFAULT_ADMIN_EMAIL: str = "admin@roomroster.local"
    DEFAULT_ADMIN_PASSWORD: str = ""  # Empty disables admin seeding

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",  # Ignore extra fields in .env that aren't defined in Settings
    )

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"


# Create settings instance
settings = Settings()
