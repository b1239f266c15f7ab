import json

import httpx
import pytest

from app.core.errors import AuthError, UpstreamError
from app.schemas.coach import UserContext
from app.services.coach_client import CoachProxyClient

PROXY_URL = 'https://proxy.test/api/v1/coach/interact'


def _client(handler, **kwargs) -> CoachProxyClient:
    kwargs.setdefault('access_token', 'user-token')
    return CoachProxyClient(
        url=PROXY_URL,
        retry_jitter=0,
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


@pytest.mark.anyio
async def test_send_text_posts_envelope_and_parses_reply():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={'success': True, 'messages': ['A', 'B'], 'isEnding': False})

    async with _client(handler) as client:
        reply = await client.send_text('user-1', 'hi', UserContext(days_since_quit=3, motivation='health'))

    assert [item.content for item in reply.texts] == ['A', 'B']
    request = seen[0]
    assert request.method == 'POST'
    assert request.headers['Authorization'] == 'Bearer user-token'
    assert json.loads(request.content) == {
        'action': {'type': 'text', 'payload': 'hi'},
        'userId': 'user-1',
        'userContext': {'motivation': 'health', 'daysSinceQuit': 3},
    }


@pytest.mark.anyio
async def test_token_provider_is_awaited():
    async def provider() -> str:
        return 'fresh-token'

    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.headers['Authorization'])
        return httpx.Response(200, json={'success': True, 'messages': [], 'isEnding': True})

    async with _client(handler, access_token=None, token_provider=provider) as client:
        reply = await client.launch('user-1')

    assert seen == ['Bearer fresh-token']
    assert reply.is_ending is True


@pytest.mark.anyio
async def test_server_error_is_retried_once():
    statuses = iter([503, 200])
    calls: list[int] = []

    def handler(request: httpx.Request) -> httpx.Response:
        status = next(statuses)
        calls.append(status)
        if status == 200:
            return httpx.Response(200, json={'success': True, 'messages': ['back'], 'isEnding': False})
        return httpx.Response(status, json={'error': 'Internal server error'})

    async with _client(handler) as client:
        reply = await client.send_text('user-1', 'hi')

    assert calls == [503, 200]
    assert reply.texts[0].content == 'back'


@pytest.mark.anyio
async def test_persistent_server_error_raises_after_one_retry():
    calls: list[int] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(1)
        return httpx.Response(500, json={'error': 'Voiceflow API error', 'details': {'status': 502}})

    async with _client(handler) as client:
        with pytest.raises(UpstreamError) as excinfo:
            await client.send_text('user-1', 'hi')

    assert len(calls) == 2
    assert excinfo.value.message == 'Voiceflow API error'
    assert excinfo.value.status_code == 500


@pytest.mark.anyio
async def test_transport_errors_are_retried_then_raised():
    calls: list[int] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(1)
        raise httpx.ConnectTimeout('timed out', request=request)

    async with _client(handler) as client:
        with pytest.raises(UpstreamError):
            await client.send_text('user-1', 'hi')

    assert len(calls) == 2


@pytest.mark.anyio
async def test_client_errors_are_not_retried():
    calls: list[int] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(1)
        return httpx.Response(403, json={'error': 'User ID mismatch'})

    async with _client(handler) as client:
        with pytest.raises(AuthError) as excinfo:
            await client.send_text('user-1', 'hi')

    assert calls == [1]
    assert excinfo.value.status_code == 403


@pytest.mark.anyio
async def test_retries_can_be_disabled():
    calls: list[int] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(1)
        return httpx.Response(500, text='down')

    async with _client(handler, max_retries=0) as client:
        with pytest.raises(UpstreamError):
            await client.send_text('user-1', 'hi')

    assert calls == [1]


@pytest.mark.anyio
async def test_retries_are_capped_at_one():
    calls: list[int] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(1)
        return httpx.Response(503, text='down')

    async with _client(handler, max_retries=5) as client:
        assert client.max_retries == 1
        with pytest.raises(UpstreamError):
            await client.send_text('user-1', 'hi')

    assert calls == [1, 1]


@pytest.mark.anyio
@pytest.mark.parametrize(
    'response',
    [
        httpx.Response(200, json={'success': False, 'messages': ['x']}),
        httpx.Response(200, json={'messages': ['x']}),
        httpx.Response(200, text='not json'),
    ],
)
async def test_unsuccessful_envelopes_raise(response):
    async with _client(lambda request: response) as client:
        with pytest.raises(UpstreamError):
            await client.send_text('user-1', 'hi')


def test_requires_credentials():
    with pytest.raises(ValueError):
        CoachProxyClient(url=PROXY_URL)
