from __future__ import annotations

import json
from functools import lru_cache
from typing import Any, Optional

import httpx
from loguru import logger

from app.core.config import settings
from app.core.errors import UpstreamError
from app.core.logging import redact_headers, truncate


class VoiceflowGateway:
    """Server-side client of the conversational runtime's interact endpoint."""

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str,
        version_id: str,
        timeout: float,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip('/')
        self._version_id = version_id
        self._timeout = timeout
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    def interact_url(self, user_id: str) -> str:
        return f"{self._base_url}/state/user/{user_id}/interact"

    def _headers(self) -> dict[str, str]:
        return {
            'Content-Type': 'application/json',
            'Authorization': self._api_key,
            'versionID': self._version_id,
        }

    def _build_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    async def interact(self, user_id: str, action: dict[str, Any]) -> list[Any]:
        if not self.is_configured:
            raise UpstreamError('Voiceflow service not configured')
        url = self.interact_url(user_id)
        headers = self._headers()
        logger.debug(
            'voiceflow.request',
            url=url,
            headers=redact_headers(headers),
            action_type=action.get('type'),
        )
        async with self._build_client() as client:
            try:
                response = await client.post(url, headers=headers, json={'action': action})
            except httpx.HTTPError as exc:
                logger.error('voiceflow.transport_failed', user_id=user_id, error=str(exc))
                raise UpstreamError('Voiceflow request failed', details={'message': str(exc)}) from exc

        body = response.text
        logger.info(
            'voiceflow.response',
            status=response.status_code,
            body=truncate(body),
        )
        if not response.is_success:
            logger.error(
                'voiceflow.api_error',
                status=response.status_code,
                status_text=response.reason_phrase,
                body=truncate(body),
            )
            raise UpstreamError(
                'Voiceflow API error',
                details={
                    'status': response.status_code,
                    'statusText': response.reason_phrase,
                    'message': body,
                },
            )
        try:
            traces = json.loads(body) if body else []
        except json.JSONDecodeError as exc:
            logger.error('voiceflow.invalid_json', error=str(exc))
            raise UpstreamError('Invalid response from Voiceflow') from exc
        if traces is None:
            return []
        if not isinstance(traces, list):
            raise UpstreamError('Invalid response from Voiceflow')
        return traces


@lru_cache
def get_voiceflow_gateway() -> VoiceflowGateway:
    return VoiceflowGateway(
        api_key=settings.VOICEFLOW_API_KEY,
        base_url=settings.VOICEFLOW_BASE_URL,
        version_id=settings.VOICEFLOW_VERSION_ID,
        timeout=settings.VOICEFLOW_TIMEOUT_SECONDS,
    )


def reset_voiceflow_gateway() -> None:
    get_voiceflow_gateway.cache_clear()
