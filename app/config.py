"""
Application Configuration
Loads settings from environment variables
"""

from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from .env file"""

    # Application
    APP_ENV: str = "development"
    APP_NAME: str = "CertForge"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./certforge.db"

    # File Upload
    UPLOAD_DIR: str = "uploads"
    MAX_UPLOAD_SIZE: int = 10485760  # 10MB
    ALLOWED_IMAGE_TYPES: str = "image/jpeg,image/png,image/jpg,image/gif,image/webp,image/bmp"

    # Template image fetching
    IMAGE_FETCH_TIMEOUT: float = 10.0

    # Fonts (comma separated directories searched before system fonts)
    FONT_DIRS: str = "fonts"
    DEFAULT_FONT_FAMILY: str = "Arial"

    # Display scaling caps (editor canvas, preview pane)
    EDITOR_MAX_SCALE: float = 1.0
    PREVIEW_MAX_SCALE: float = 0.9

    # PDF container
    PDF_DPI: int = 96

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def allowed_image_types(self) -> List[str]:
        return [t.strip() for t in self.ALLOWED_IMAGE_TYPES.split(",") if t.strip()]

    @property
    def font_dirs(self) -> List[str]:
        return [d.strip() for d in self.FONT_DIRS.split(",") if d.strip()]


# Create global settings instance
settings = Settings()
