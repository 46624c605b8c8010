from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import field_validator, model_validator, ValidationError
import logging
import sys

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

class Settings(BaseSettings):
    """
    Application Settings

    Required Environment Variables:
    - DATABASE_URL, or POSTGRES_SERVER, POSTGRES_USER, POSTGRES_PASSWORD, POSTGRES_DB
    - GEMINI_API_KEY
    """

    PROJECT_NAME: str = "Screenshot Diff Service"
    API_V1_STR: str = "/api/v1"

    # Database Configuration
    POSTGRES_SERVER: Optional[str] = None
    POSTGRES_USER: Optional[str] = None
    POSTGRES_PASSWORD: Optional[str] = None
    POSTGRES_DB: Optional[str] = None
    POSTGRES_PORT: int = 5432
    DATABASE_URL: Optional[str] = None
    DB_ECHO: bool = False

    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        """Build database URI from components or use DATABASE_URL directly"""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    # Vision model configuration
    GEMINI_API_KEY: str
    GEMINI_MODEL: str = "gemini-2.0-flash"
    MODEL_MAX_OUTPUT_TOKENS: int = 4096
    MODEL_TIMEOUT_SECONDS: float = 120.0

    # Image pipeline
    MAX_IMAGE_DIMENSION: int = 1568
    UPLOADS_DIR: str = "uploads"
    OUTPUT_DIR: str = "output"
    HIGHLIGHT_STROKE_COLOR: str = "#FF0000"
    HIGHLIGHT_STROKE_WIDTH: int = 3
    HIGHLIGHT_FILL_COLOR: str = "#FF000050"

    # Application Configuration
    ENV_MODE: str = "dev"

    @field_validator('GEMINI_API_KEY')
    @classmethod
    def validate_credentials(cls, v: str) -> str:
        """Ensure credentials are not empty"""
        if not v or v.strip() == '':
            raise ValueError("Credential cannot be empty")
        return v

    @field_validator('MAX_IMAGE_DIMENSION', 'HIGHLIGHT_STROKE_WIDTH')
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be a positive integer")
        return v

    @model_validator(mode="after")
    def validate_database(self) -> "Settings":
        if self.DATABASE_URL:
            return self
        missing = [
            name for name in ("POSTGRES_SERVER", "POSTGRES_USER", "POSTGRES_PASSWORD", "POSTGRES_DB")
            if not getattr(self, name)
        ]
        if missing:
            raise ValueError(f"DATABASE_URL is unset and {', '.join(missing)} missing")
        return self

    class Config:
        env_file = ".env"
        env_file_encoding = 'utf-8'
        extra = "ignore"
        case_sensitive = True


def get_settings() -> Settings:
    """
    Get application settings with detailed error reporting.

    Raises:
        SystemExit: If required environment variables are missing
    """
    try:
        settings = Settings()
        logger.info("✅ Configuration loaded successfully")
        logger.info(f"📊 Environment: {settings.ENV_MODE}")
        logger.info(f"🤖 Model: {settings.GEMINI_MODEL}")
        logger.info(f"📐 Max image dimension: {settings.MAX_IMAGE_DIMENSION}")
        return settings
    except ValidationError as e:
        logger.error("❌ Configuration validation failed!")
        logger.error("=" * 60)
        logger.error("MISSING OR INVALID ENVIRONMENT VARIABLES:")
        logger.error("=" * 60)

        for error in e.errors():
            field = error['loc'][0] if error['loc'] else "settings"
            logger.error(f"  ❌ {field}")
            logger.error(f"     Type: {error['type']}")
            logger.error(f"     Message: {error['msg']}")
            logger.error("")

        logger.error("=" * 60)
        logger.error("REQUIRED ENVIRONMENT VARIABLES:")
        logger.error("=" * 60)
        logger.error("Database (either):")
        logger.error("  - DATABASE_URL")
        logger.error("  - POSTGRES_SERVER, POSTGRES_USER, POSTGRES_PASSWORD, POSTGRES_DB")
        logger.error("")
        logger.error("AI/ML:")
        logger.error("  - GEMINI_API_KEY")
        logger.error("=" * 60)
        logger.error("Please set these variables in your .env file or environment")
        logger.error("=" * 60)
        sys.exit(1)


# Singleton settings instance
settings: Optional[Settings] = None

def init_settings() -> Settings:
    """Initialize settings (called once at startup)"""
    global settings
    if settings is None:
        settings = get_settings()
    return settings
