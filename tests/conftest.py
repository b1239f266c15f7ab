import os

import httpx
import pytest

os.environ["AUTH_JWT_SECRET"] = "test-jwt-secret"
os.environ["VOICEFLOW_API_KEY"] = "VF.DM.test-key"
os.environ["VOICEFLOW_BASE_URL"] = "https://runtime.voiceflow.test"
os.environ["COACH_PROXY_RETRY_JITTER_SECONDS"] = "0"

from app.core.config import settings
from app.main import app
from app.services.voiceflow_gateway import VoiceflowGateway, get_voiceflow_gateway, reset_voiceflow_gateway
from tests.helpers import TEST_JWT_SECRET, TEST_VOICEFLOW_BASE_URL, TEST_VOICEFLOW_KEY

settings.AUTH_JWT_SECRET = TEST_JWT_SECRET
settings.VOICEFLOW_API_KEY = TEST_VOICEFLOW_KEY
settings.VOICEFLOW_BASE_URL = TEST_VOICEFLOW_BASE_URL
settings.COACH_PROXY_RETRY_JITTER_SECONDS = 0


@pytest.fixture(autouse=True)
def _reset_gateway():
    reset_voiceflow_gateway()
    yield
    app.dependency_overrides.pop(get_voiceflow_gateway, None)
    reset_voiceflow_gateway()


@pytest.fixture
def upstream_requests() -> list[httpx.Request]:
    return []


@pytest.fixture
def use_gateway():
    def _install(gateway: VoiceflowGateway) -> VoiceflowGateway:
        app.dependency_overrides[get_voiceflow_gateway] = lambda: gateway
        return gateway

    return _install


@pytest.fixture
def anyio_backend():
    return 'asyncio'
