import httpx

from app.services.voiceflow_gateway import VoiceflowGateway

TEST_JWT_SECRET = "test-jwt-secret"
TEST_VOICEFLOW_KEY = "VF.DM.test-key"
TEST_VOICEFLOW_BASE_URL = "https://runtime.voiceflow.test"


def build_gateway(handler, api_key: str = TEST_VOICEFLOW_KEY) -> VoiceflowGateway:
    return VoiceflowGateway(
        api_key=api_key,
        base_url=TEST_VOICEFLOW_BASE_URL,
        version_id="production",
        timeout=5,
        transport=httpx.MockTransport(handler),
    )
