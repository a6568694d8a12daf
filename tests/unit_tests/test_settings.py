import pydantic
import pytest

from uploads_api.settings import Settings, get_settings

ENV_VARS = ("HOST", "PORT", "BASE_URL", "VOLUME_PATH", "AUTH_TOKEN", "LOG_LEVEL", "APP_ENV", "CORS_ALLOW_ORIGINS")


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # keep a developer's .env out of the picture
    monkeypatch.chdir(tmp_path)
    return monkeypatch


def test_defaults(clean_env):
    settings = Settings()

    assert settings.port == 3000
    assert settings.base_url == "http://localhost:3000"
    assert settings.volume_path == "uploads"
    assert settings.auth_token is None
    assert settings.log_level == "info"
    assert settings.cors_allow_origins == []


def test_environment_overrides(clean_env):
    clean_env.setenv("PORT", "8080")
    clean_env.setenv("BASE_URL", "https://files.example.com/")
    clean_env.setenv("VOLUME_PATH", "/data/uploads")
    clean_env.setenv("AUTH_TOKEN", "s3cret")
    clean_env.setenv("LOG_LEVEL", "DEBUG")
    clean_env.setenv("CORS_ALLOW_ORIGINS", '["http://localhost:5173"]')

    settings = Settings()

    assert settings.port == 8080
    assert settings.base_url == "https://files.example.com"
    assert settings.volume_path == "/data/uploads"
    assert settings.auth_token == "s3cret"
    assert settings.log_level == "debug"
    assert settings.cors_allow_origins == ["http://localhost:5173"]


def test_dotenv_file(clean_env, tmp_path):
    (tmp_path / ".env").write_text("AUTH_TOKEN=from-dotenv\nPORT=4000\n")

    settings = Settings()

    assert settings.auth_token == "from-dotenv"
    assert settings.port == 4000


def test_invalid_log_level(clean_env):
    with pytest.raises(pydantic.ValidationError):
        Settings(log_level="chatty")


def test_settings_are_frozen(clean_env):
    settings = Settings(auth_token="a")

    with pytest.raises(pydantic.ValidationError):
        settings.auth_token = "b"


def test_summary_redacts_token(clean_env):
    assert Settings(auth_token="s3cret").summary()["auth_token"] == "***"
    assert Settings().summary()["auth_token"] == "<unset>"


def test_get_settings_is_cached(clean_env):
    get_settings.cache_clear()
    try:
        assert get_settings() is get_settings()
    finally:
        get_settings.cache_clear()
