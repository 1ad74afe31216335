"""
Test configuration settings to ensure all required fields are present.
"""


def test_nx_config_fields_exist():
    """Test that all NX_* configuration fields are present in Settings."""
    from nexus.infrastructure.config import Settings

    settings = Settings(_env_file=None)

    assert settings.NX_OPENAI_MODEL == "gpt-4o-mini", "Default OpenAI model should be gpt-4o-mini"
    assert settings.NX_GEMINI_MODEL == "gemini-1.5-flash", "Default Gemini model should be gemini-1.5-flash"
    assert settings.NX_BASE_URL == "", "Default base URL should be empty string"
    assert settings.NX_API_PREFIX == "/api"
    assert settings.NX_PDF_EXTRACTOR == "ai"
    assert settings.MAX_UPLOAD_MB == 10


def test_retries_are_disabled_by_default(monkeypatch):
    """Nothing is retried automatically unless an operator opts in."""
    monkeypatch.delenv('NX_AI_MAX_ATTEMPTS', raising=False)
    from nexus.infrastructure.config import Settings

    assert Settings(_env_file=None).NX_AI_MAX_ATTEMPTS == 1


def test_settings_read_from_environment(monkeypatch):
    monkeypatch.setenv('NX_DEFAULT_PROVIDER', 'openai')
    monkeypatch.setenv('MAX_UPLOAD_MB', '25')
    from nexus.infrastructure.config import Settings

    settings = Settings(_env_file=None)
    assert settings.NX_DEFAULT_PROVIDER == 'openai'
    assert settings.MAX_UPLOAD_MB == 25


def test_ai_client_initialization():
    """Test that AIClient can be initialized with the settings."""
    from nexus.infrastructure.config import settings
    from nexus.services.ai_client import AIClient

    client = AIClient(provider=settings.NX_DEFAULT_PROVIDER)
    assert client.provider == "gemini", "Client provider should be gemini"
