from __future__ import annotations

import asyncio
import random
from collections.abc import Awaitable, Callable
from typing import Any, Optional

import httpx
from loguru import logger

from app.core.config import settings
from app.core.errors import AuthError, UpstreamError
from app.models.enums import ProxyActionType
from app.schemas.coach import ProxyAction, ProxyRequest, UserContext
from app.services.coach_replies import CoachReply, parse_traces

TokenProvider = Callable[[], Awaitable[str]]


class CoachProxyClient:
    """Calls the coach proxy endpoint on behalf of the signed-in user.

    Every call is bounded by ``timeout``. Transport failures and 5xx answers
    are retried at most ``max_retries`` times (capped at one) after a random
    delay of up to ``retry_jitter`` seconds; 4xx answers are never retried.
    """

    def __init__(
        self,
        *,
        access_token: Optional[str] = None,
        token_provider: Optional[TokenProvider] = None,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        retry_jitter: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if access_token is None and token_provider is None:
            raise ValueError('access_token or token_provider is required')
        self._access_token = access_token
        self._token_provider = token_provider
        self.url = url or settings.COACH_PROXY_URL
        self.max_retries = min(
            1, max(0, settings.COACH_PROXY_MAX_RETRIES if max_retries is None else max_retries)
        )
        self.retry_jitter = settings.COACH_PROXY_RETRY_JITTER_SECONDS if retry_jitter is None else retry_jitter
        self._client = httpx.AsyncClient(
            timeout=settings.COACH_PROXY_TIMEOUT_SECONDS if timeout is None else timeout,
            transport=transport,
        )

    async def __aenter__(self) -> 'CoachProxyClient':
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _bearer(self) -> str:
        if self._token_provider is not None:
            return await self._token_provider()
        return self._access_token or ''

    async def _post(self, body: dict[str, Any]) -> httpx.Response:
        headers = {'Authorization': f"Bearer {await self._bearer()}"}
        attempt = 0
        while True:
            try:
                response = await self._client.post(self.url, json=body, headers=headers)
            except httpx.HTTPError as exc:
                if attempt >= self.max_retries:
                    raise UpstreamError('Coach proxy unreachable', details={'message': str(exc)}) from exc
                logger.warning('coach.client.retry', reason='transport', error=str(exc))
            else:
                if response.status_code < 500 or attempt >= self.max_retries:
                    return response
                logger.warning('coach.client.retry', reason='status', status=response.status_code)
            attempt += 1
            await asyncio.sleep(random.uniform(0, self.retry_jitter))

    async def interact(
        self,
        user_id: str,
        action: ProxyAction,
        user_context: Optional[UserContext] = None,
    ) -> CoachReply:
        request = ProxyRequest(action=action, user_id=user_id, user_context=user_context)
        body = request.model_dump(mode='json', by_alias=True, exclude_none=True)
        response = await self._post(body)

        try:
            data = response.json()
        except ValueError:
            data = None

        if not response.is_success:
            error = data.get('error') if isinstance(data, dict) else None
            message = error or f"Coach proxy error: {response.status_code}"
            if response.status_code in (401, 403):
                raise AuthError(message, status_code=response.status_code)
            raise UpstreamError(message, details=data, status_code=response.status_code)
        if not isinstance(data, dict) or data.get('success') is not True:
            raise UpstreamError('Coach proxy returned an unsuccessful response', details=data)

        messages = data.get('messages')
        return parse_traces(
            messages if isinstance(messages, list) else [],
            is_ending=bool(data.get('isEnding')),
        )

    async def launch(self, user_id: str, user_context: Optional[UserContext] = None) -> CoachReply:
        return await self.interact(user_id, ProxyAction(type=ProxyActionType.LAUNCH), user_context)

    async def send_text(
        self,
        user_id: str,
        text: str,
        user_context: Optional[UserContext] = None,
    ) -> CoachReply:
        return await self.interact(user_id, ProxyAction(type=ProxyActionType.TEXT, payload=text), user_context)

    async def send_choice(
        self,
        user_id: str,
        request: dict[str, Any],
        user_context: Optional[UserContext] = None,
    ) -> CoachReply:
        return await self.interact(user_id, ProxyAction(type=ProxyActionType.CHOICE, payload=request), user_context)
