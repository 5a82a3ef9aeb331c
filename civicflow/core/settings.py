"""
Core settings and environment variables for CivicFlow.
Uses pydantic-settings for type-safe environment variable loading.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Create a .env file in the root directory to configure these.
    """

    # Application
    APP_NAME: str = "CivicFlow"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False

    # CORS - Frontend URLs allowed to access this API
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    # Persistence backend: "memory", "file" (local development) or "firestore"
    STORAGE_BACKEND: str = "file"
    DATA_DIR: str = "./civicflow_data"

    # Firebase/Firestore (only used when STORAGE_BACKEND=firestore)
    FIREBASE_PROJECT_ID: Optional[str] = None
    FIREBASE_CREDENTIALS_PATH: Optional[str] = None  # Path to service account JSON
    FIRESTORE_COLLECTION: str = "civicflow_blobs"

    # Authentication collaborator: "local" (offline) or "firebase"
    AUTH_PROVIDER: str = "local"
    FIREBASE_WEB_API_KEY: Optional[str] = None  # Required when AUTH_PROVIDER=firebase
    AUTH_TIMEOUT_SECONDS: float = 10.0

    # Account rules
    MIN_PASSWORD_LENGTH: int = 6
    SEED_EXAMPLE_PROFILES: bool = True

    @property
    def cors_origins_list(self) -> list:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "allow"  # Allow extra env vars to prevent crashes


# Global settings instance
settings = Settings()
