from typing import Annotated

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from app.models.enums import CrisisExitPolicy

DEFAULT_PROJECT_NAME = "Quit Coach API"
DEFAULT_API_V1_PREFIX = "/api/v1"
DEFAULT_VOICEFLOW_BASE_URL = "https://general-runtime.voiceflow.com"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file='.env', extra='ignore')

    PROJECT_NAME: str = DEFAULT_PROJECT_NAME
    API_V1_PREFIX: str = DEFAULT_API_V1_PREFIX
    ENV: str = 'development'
    DEBUG: bool = False

    LOG_LEVEL: str = 'INFO'
    CORS_ORIGINS: Annotated[list[str], NoDecode] = ['*']

    AUTH_JWT_SECRET: str = 'change-me'
    AUTH_JWT_ALGORITHM: str = 'HS256'
    AUTH_JWT_AUDIENCE: str = 'authenticated'
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    VOICEFLOW_API_KEY: str = ''
    VOICEFLOW_BASE_URL: str = DEFAULT_VOICEFLOW_BASE_URL
    VOICEFLOW_VERSION_ID: str = 'production'
    VOICEFLOW_PROJECT_ID: str = '689cbc694a6d0113b8ffd747'
    VOICEFLOW_TIMEOUT_SECONDS: float = 20.0

    COACH_PROXY_URL: str = 'http://127.0.0.1:8000/api/v1/coach/interact'
    COACH_PROXY_TIMEOUT_SECONDS: float = 15.0
    COACH_PROXY_MAX_RETRIES: int = 1
    COACH_PROXY_RETRY_JITTER_SECONDS: float = 0.5

    CRISIS_EXIT_POLICY: CrisisExitPolicy = CrisisExitPolicy.MANUAL
    CRISIS_TIMEOUT_SECONDS: int = 15 * 60

    @field_validator('CORS_ORIGINS', mode='before')
    @classmethod
    def parse_cors_origins(cls, value):  # type: ignore[override]
        if isinstance(value, str):
            value = value.strip()
            if not value:
                return []
            if value == '*':
                return ['*']
            return [item.strip() for item in value.split(',') if item.strip()]
        return value


settings = Settings()
