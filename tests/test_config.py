from columnlens.config import Settings, get_settings


def test_defaults(monkeypatch):
    monkeypatch.delenv("COLUMNLENS_PORT", raising=False)
    settings = Settings()
    assert settings.port == 8000
    assert settings.strip_comments is True
    assert settings.debug_logging is False
    assert settings.cors_origins == ["*"]


def test_environment_override(monkeypatch):
    monkeypatch.setenv("COLUMNLENS_PORT", "9001")
    monkeypatch.setenv("COLUMNLENS_STRIP_COMMENTS", "false")
    monkeypatch.setenv("COLUMNLENS_CORS_ORIGINS", '["http://localhost:3000"]')
    settings = Settings()
    assert settings.port == 9001
    assert settings.strip_comments is False
    assert settings.cors_origins == ["http://localhost:3000"]


def test_get_settings_is_cached():
    assert get_settings() is get_settings()
