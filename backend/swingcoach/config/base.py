"""
Base configuration settings
"""

import os
from typing import List, Optional
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Base settings configuration"""

    # Application settings
    APP_NAME: str = "SwingCoach AI"
    VERSION: str = "1.0.0"
    DEBUG: bool = False

    # API settings
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    ALLOWED_ORIGINS_STR: str = "http://localhost:3000,http://127.0.0.1:3000"

    # Redis settings (document store for feedback, reference models, adjustment factors)
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_PASSWORD: str = ""
    REDIS_DB: int = 0

    # In-process document store instead of Redis
    USE_LOCAL_STORAGE: bool = False

    # Analysis history (per video signature)
    HISTORY_FILE: str = "./swing-history.json"
    HISTORY_MAX_ENTRIES: int = 3

    # AWS S3 settings (temporary display URLs for uploaded swings)
    AWS_ACCESS_KEY_ID: str = ""
    AWS_SECRET_ACCESS_KEY: str = ""
    AWS_REGION: str = "us-east-1"
    S3_BUCKET: str = ""
    AWS_ENDPOINT_URL: Optional[str] = None
    TEMP_URL_EXPIRES: int = 3600

    # LLM settings (any OpenAI-compatible multimodal endpoint)
    OPENAI_API_KEY: str = ""
    OPENAI_BASE_URL: Optional[str] = "https://generativelanguage.googleapis.com/v1beta/openai/"
    OPENAI_MODEL: str = "gemini-2.0-flash"
    MODEL_VERSION_TAG: str = "gemini-2.0-flash/v1"

    SCORING_TEMPERATURE: float = 0.5
    SCORING_MAX_TOKENS: int = 2048
    SCORING_TIMEOUT: float = 120.0

    INSIGHT_TEMPERATURE: float = 0.2
    INSIGHT_MAX_TOKENS: int = 1024
    INSIGHT_TIMEOUT: float = 45.0

    # Pipeline toggles
    USE_MOCK_ANALYSIS: bool = False
    ENABLE_MINIMAL_VARIATION: bool = False
    STRICT_INVARIANTS: bool = False

    # File upload settings
    MAX_FILE_SIZE: int = 120 * 1024 * 1024  # 120MB
    ALLOWED_EXTENSIONS_STR: str = ".mp4,.mov,.avi,.webm,.m4v"

    # Insight notices for swings the caller does not own
    INSIGHT_SIGNUP_NOTICE: str = (
        "Create a free account to unlock the full deep-dive analysis for this swing."
    )
    INSIGHT_SIGNUP_RECOMMENDATION: str = (
        "Sign up to get personalised drills based on your own swing history."
    )

    # Logging settings
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "swingcoach-ai.log"

    # Worker settings (for Celery/Redis)
    BROKER_URL: str = "redis://localhost:6379/0"
    RESULT_BACKEND: str = "redis://localhost:6379/0"
    FEEDBACK_PROCESS_INTERVAL_HOURS: int = 6
    FEEDBACK_WINDOW_DAYS: int = 14

    @property
    def ALLOWED_ORIGINS(self) -> List[str]:
        """Parse allowed CORS origins from string"""
        origins_str = os.getenv('ALLOWED_ORIGINS', self.ALLOWED_ORIGINS_STR)
        return [origin.strip() for origin in origins_str.split(',') if origin.strip()]

    @property
    def ALLOWED_EXTENSIONS(self) -> List[str]:
        """Parse allowed extensions from string"""
        ext_str = os.getenv('ALLOWED_EXTENSIONS', self.ALLOWED_EXTENSIONS_STR)
        return [ext.strip() for ext in ext_str.split(',')]

    @property
    def S3_ENABLED(self) -> bool:
        return bool(self.AWS_ACCESS_KEY_ID and self.AWS_SECRET_ACCESS_KEY and self.S3_BUCKET)

    model_config = {
        "env_file": ".env",
        "case_sensitive": True,
        "extra": "ignore"  # Ignore extra fields from .env
    }


# Create settings instance
settings = Settings()
