from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    """
    model_config = SettingsConfigDict(env_file='.env', env_file_encoding='utf-8', extra='ignore')

    # --- Core App Settings ---
    APP_NAME: str = "Nexus"
    FLASK_ENV: str = "production"
    DEBUG: bool = False

    # --- AI Services ---
    OPENAI_API_KEY: str = ""
    GEMINI_API_KEY: str = ""

    # AI Model Configuration
    NX_OPENAI_MODEL: str = "gpt-4o-mini"
    NX_GEMINI_MODEL: str = "gemini-1.5-flash"
    NX_DEFAULT_PROVIDER: str = "gemini"
    NX_BASE_URL: str = ""
    NX_AI_TIMEOUT: float = 60.0
    NX_AI_MAX_ATTEMPTS: int = 1  # no automatic retries unless raised

    # "ai" sends PDFs to Gemini, "local" parses them with PyPDF2
    NX_PDF_EXTRACTOR: str = "ai"
    NX_QUIZ_TEXT_LIMIT: int = 30000

    # --- HTTP ---
    NX_API_PREFIX: str = "/api"
    NX_CORS_ORIGINS: str = "*"
    MAX_UPLOAD_MB: int = 10

    # --- Logging ---
    LOG_LEVEL: str = "INFO"

    # --- Version for cache busting ---
    VERSION: str = "2026.10.19"


# Load settings
settings = Settings()

# Production readiness checks
if settings.FLASK_ENV == "production" and settings.DEBUG:
    raise ValueError("CRITICAL: DEBUG mode must be disabled in production.")
