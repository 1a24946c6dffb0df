"""Tests for configuration settings."""


def test_settings_loads_from_env():
    """Test that settings loads from environment variables."""
    # Import after env vars are set in conftest
    from practice_desk.config.settings import get_settings

    get_settings.cache_clear()

    settings = get_settings()

    assert settings.username == "test@example.com"
    assert settings.password.get_secret_value() == "testpassword"


def test_settings_has_defaults(monkeypatch):
    """Test that settings has sensible defaults."""
    from practice_desk.config.settings import get_settings

    for name in ("PRACTICE_API_URL", "PRACTICE_MAX_RETRIES", "COMPLIANCE_END_OF_DAY"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    settings = get_settings()

    assert settings.api_url == "http://localhost:5000"
    assert settings.api_prefix == "/api/v1"
    assert settings.timeout == 30.0
    assert settings.max_retries == 0
    assert settings.compliance_end_of_day is True


def test_env_overrides(monkeypatch):
    from practice_desk.config.settings import get_settings

    monkeypatch.setenv("PRACTICE_MAX_RETRIES", "2")
    monkeypatch.setenv("COMPLIANCE_END_OF_DAY", "false")
    get_settings.cache_clear()

    settings = get_settings()

    assert settings.max_retries == 2
    assert settings.compliance_end_of_day is False
    get_settings.cache_clear()


def test_settings_are_cached():
    """Test that get_settings returns cached instance."""
    from practice_desk.config.settings import get_settings

    get_settings.cache_clear()

    settings1 = get_settings()
    settings2 = get_settings()

    assert settings1 is settings2
