from typing import Any, Optional

from loguru import logger
from pydantic import ValidationError

from app.core.errors import ChatValidationError
from app.models.enums import ProxyActionType
from app.schemas.coach import ProxyAction, ProxyRequest, ProxyResponse, UserContext
from app.services.voiceflow_gateway import VoiceflowGateway

MISSING_FIELDS_ERROR = 'Missing required fields: action, userId'


def parse_proxy_request(body: Any) -> ProxyRequest:
    if not isinstance(body, dict) or not body.get('action') or not body.get('userId'):
        raise ChatValidationError(MISSING_FIELDS_ERROR)
    try:
        return ProxyRequest.model_validate(body)
    except ValidationError as exc:
        raise ChatValidationError(
            'Invalid request body',
            details=exc.errors(include_url=False, include_context=False, include_input=False),
        ) from exc


def enrich_action(
    action: ProxyAction,
    user_id: str,
    user_context: Optional[UserContext],
) -> dict[str, Any]:
    """Serialise ``action`` for the runtime, folding the quit profile into launches."""
    wire = action.model_dump(mode='json', exclude_none=True)
    if action.type != ProxyActionType.LAUNCH or user_context is None:
        return wire
    payload = dict(action.payload) if isinstance(action.payload, dict) else {}
    payload.update(
        {
            'user_id': user_id,
            'quit_date': user_context.quit_date,
            'motivation': user_context.motivation,
            'substance_type': user_context.substance_type,
            'usage_amount': user_context.usage_amount,
            'triggers': user_context.triggers,
            'days_since_quit': user_context.days_since_quit or 0,
        }
    )
    wire['payload'] = payload
    return wire


def has_end_trace(traces: list[Any]) -> bool:
    return any(isinstance(trace, dict) and trace.get('type') == 'end' for trace in traces)


async def forward_interaction(gateway: VoiceflowGateway, request: ProxyRequest) -> ProxyResponse:
    logger.info(
        'coach.proxy.request',
        user_id=request.user_id,
        action_type=request.action.type.value,
        has_user_context=request.user_context is not None,
    )
    action = enrich_action(request.action, request.user_id, request.user_context)
    traces = await gateway.interact(request.user_id, action)
    logger.info('coach.proxy.success', user_id=request.user_id, trace_count=len(traces))
    return ProxyResponse(success=True, messages=traces, is_ending=has_end_trace(traces))
