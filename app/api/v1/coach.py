from fastapi import APIRouter, Depends, Request, status
from loguru import logger

from app.core.errors import AuthError, ChatValidationError, CoachError, UpstreamError
from app.schemas.coach import ProxyErrorOut, ProxyResponse
from app.services.auth_service import get_current_user_id
from app.services.coach_proxy import MISSING_FIELDS_ERROR, forward_interaction, parse_proxy_request
from app.services.voiceflow_gateway import VoiceflowGateway, get_voiceflow_gateway

router = APIRouter(prefix='/coach', tags=['coach'])


ERROR_RESPONSES = {
    status.HTTP_400_BAD_REQUEST: {'model': ProxyErrorOut},
    status.HTTP_401_UNAUTHORIZED: {'model': ProxyErrorOut},
    status.HTTP_403_FORBIDDEN: {'model': ProxyErrorOut},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ProxyErrorOut},
}


@router.post('/interact', response_model=ProxyResponse, responses=ERROR_RESPONSES)
async def interact(
    request: Request,
    user_id: str = Depends(get_current_user_id),
    gateway: VoiceflowGateway = Depends(get_voiceflow_gateway),
) -> ProxyResponse:
    try:
        body = await request.json()
    except ValueError as exc:
        raise ChatValidationError(MISSING_FIELDS_ERROR) from exc
    payload = parse_proxy_request(body)

    if payload.user_id != user_id:
        logger.warning('coach.proxy.user_mismatch', token_user_id=user_id, body_user_id=payload.user_id)
        raise AuthError('User ID mismatch', status_code=status.HTTP_403_FORBIDDEN)

    try:
        return await forward_interaction(gateway, payload)
    except CoachError:
        raise
    except Exception as error:  # noqa: BLE001
        logger.exception('coach.proxy.unexpected_error')
        raise UpstreamError('Internal server error', details={'message': str(error)}) from error
