from typing import List
from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator

# Get the backend directory path
BASE_DIR = Path(__file__).resolve().parent.parent.parent
ENV_FILE = BASE_DIR / ".env"


class Settings(BaseSettings):
    """Application settings and configuration - loads from .env file"""

    # Application
    APP_NAME: str = "Nagrik Seva API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Database
    ASYNC_DATABASE_URL: str = f"sqlite+aiosqlite:///{BASE_DIR / 'nagrik.db'}"

    # CORS
    BACKEND_CORS_ORIGINS: List[str] = ["*"]

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: str | List[str]) -> List[str]:
        if isinstance(v, str):
            return [i.strip() for i in v.split(",")]
        return v

    # Google Gemini API (image relevance check)
    GOOGLE_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-2.5-flash"
    CLASSIFICATION_TIMEOUT_SECONDS: float = 20.0

    # File Upload
    MAX_UPLOAD_SIZE: int = 10 * 1024 * 1024
    ALLOWED_IMAGE_TYPES: List[str] = ["image/jpeg", "image/png", "image/webp", "image/gif"]
    ALLOWED_AUDIO_TYPES: List[str] = ["audio/webm", "audio/ogg", "audio/mpeg", "audio/wav", "audio/mp4"]

    # Firebase Storage (Optional)
    FIREBASE_CREDENTIALS_PATH: str = ""
    FIREBASE_STORAGE_BUCKET: str = ""
    MEDIA_FOLDER: str = "complaints"

    # Complaint intake
    AUTO_ROUTING_ENABLED: bool = True
    COMPLAINT_CODE_PREFIX: str = "NGR"
    COMPLAINT_CODE_ATTEMPTS: int = 5

    # Lifecycle notifications (seconds after submission)
    NOTIFICATION_ACKNOWLEDGEMENT_DELAY_SECONDS: float = 5.0
    NOTIFICATION_RESOLUTION_DELAY_SECONDS: float = 30.0
    NOTIFICATION_POLL_SECONDS: float = 1.0

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="allow"
    )


settings = Settings()

if settings.DEBUG:
    print(f"✅ Loaded .env from: {ENV_FILE}")
    print(f"   ASYNC_DATABASE_URL: {settings.ASYNC_DATABASE_URL}")
    print(f"   CORS_ORIGINS: {settings.BACKEND_CORS_ORIGINS}")
