from app.core.config import DEFAULT_VOICEFLOW_BASE_URL, Settings
from app.models.enums import CrisisExitPolicy


def test_defaults_without_env(monkeypatch):
    for key in ("VOICEFLOW_BASE_URL", "CRISIS_EXIT_POLICY", "COACH_PROXY_MAX_RETRIES"):
        monkeypatch.delenv(key, raising=False)
    settings = Settings(_env_file=None)
    assert settings.VOICEFLOW_BASE_URL == DEFAULT_VOICEFLOW_BASE_URL
    assert settings.VOICEFLOW_VERSION_ID == "production"
    assert settings.CRISIS_EXIT_POLICY == CrisisExitPolicy.MANUAL
    assert settings.COACH_PROXY_MAX_RETRIES == 1
    assert settings.AUTH_JWT_AUDIENCE == "authenticated"


def test_cors_origins_accepts_comma_separated():
    settings = Settings(_env_file=None, CORS_ORIGINS="https://a.example, https://b.example")
    assert settings.CORS_ORIGINS == ["https://a.example", "https://b.example"]


def test_crisis_policy_from_env(monkeypatch):
    monkeypatch.setenv("CRISIS_EXIT_POLICY", "timeout")
    assert Settings(_env_file=None).CRISIS_EXIT_POLICY == CrisisExitPolicy.TIMEOUT


def test_cors_origins_from_env(monkeypatch):
    monkeypatch.setenv("CORS_ORIGINS", "https://a.example,https://b.example")
    assert Settings(_env_file=None).CORS_ORIGINS == ["https://a.example", "https://b.example"]
