from pydantic_settings import BaseSettings
from typing import List, Any
import json
from pathlib import Path


# Folder that receives evidence when DRIVE_FOLDER_ID is not configured
DEFAULT_DRIVE_FOLDER_ID = "1ZlVeuiyT5jk8E8peOwO06pAJT_qelnWZ"


def parse_cors_origins(v: Any) -> List[str]:
    """Parse CORS origins from string or list"""
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
        return [origin.strip() for origin in v.split(',') if origin.strip()]
    return []


class Settings(BaseSettings):
    """Application settings - all configurable via environment variables"""

    # ==========================================
    # Application
    # ==========================================
    APP_NAME: str = "School Self-Evaluation Tracker"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    API_PREFIX: str = "/api"

    # Server Configuration
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 3000

    # ==========================================
    # Database
    # ==========================================
    DATABASE_URL: str = "sqlite+aiosqlite:///./school_eval.db"
    DB_ECHO: bool = False

    # ==========================================
    # CORS ("*" or comma-separated origins)
    # ==========================================
    CORS_ORIGIN: str = "*"

    # ==========================================
    # Google Drive (remote evidence storage)
    # ==========================================
    GOOGLE_CLIENT_EMAIL: str = ""
    GOOGLE_PRIVATE_KEY: str = ""
    DRIVE_FOLDER_ID: str = ""
    DRIVE_SHARE_WITH_EMAIL: str = ""
    DRIVE_MAKE_PUBLIC: bool = False
    DRIVE_REQUEST_TIMEOUT: float = 60.0  # seconds

    # ==========================================
    # Local evidence storage
    # ==========================================
    UPLOAD_PATH: str = ""  # Empty means <backend>/uploads
    MAX_UPLOAD_SIZE_MB: int = 10

    # ==========================================
    # Seed data
    # ==========================================
    SEED_DATA_PATH: str = ""  # Empty means <repo>/school_standards_indicators.json

    # ==========================================
    # Logging
    # ==========================================
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = ""

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env that aren't defined in Settings

    @property
    def CORS_ORIGINS(self) -> List[str]:
        """Parse CORS_ORIGIN into a list ("*" allows every origin)"""
        origins = parse_cors_origins(self.CORS_ORIGIN)
        return origins or ["*"]

    @property
    def BASE_DIR(self) -> Path:
        return Path(__file__).resolve().parent.parent.parent

    @property
    def UPLOAD_DIR(self) -> Path:
        if self.UPLOAD_PATH:
            return Path(self.UPLOAD_PATH)
        return self.BASE_DIR / "uploads"

    @property
    def SEED_DATA_FILE(self) -> Path:
        if self.SEED_DATA_PATH:
            return Path(self.SEED_DATA_PATH)
        return self.BASE_DIR.parent / "school_standards_indicators.json"

    @property
    def MAX_UPLOAD_SIZE_BYTES(self) -> int:
        return self.MAX_UPLOAD_SIZE_MB * 1024 * 1024

    @property
    def drive_private_key(self) -> str:
        """Private key with literal \\n sequences turned into newlines"""
        return self.GOOGLE_PRIVATE_KEY.replace("\\n", "\n")

    @property
    def effective_drive_folder_id(self) -> str:
        return self.DRIVE_FOLDER_ID or DEFAULT_DRIVE_FOLDER_ID

    def missing_drive_credentials(self) -> List[str]:
        """Names of the Drive credential variables that are not set"""
        return [
            name for name in ("GOOGLE_CLIENT_EMAIL", "GOOGLE_PRIVATE_KEY")
            if not getattr(self, name)
        ]

    def is_drive_configured(self) -> bool:
        return not self.missing_drive_credentials()

    def is_dev_mode(self) -> bool:
        return self.ENVIRONMENT == "development"


# Create settings instance
settings = Settings()
