from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.models.enums import ProxyActionType


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProxyAction(BaseModel):
    type: ProxyActionType
    payload: Optional[Any] = None


class UserContext(_CamelModel):
    quit_date: Optional[str] = None
    motivation: Optional[str] = None
    substance_type: Optional[str] = None
    usage_amount: Optional[str] = None
    triggers: Optional[str] = None
    days_since_quit: Optional[int] = None


class ProxyRequest(_CamelModel):
    action: ProxyAction
    user_id: str = Field(..., min_length=1)
    user_context: Optional[UserContext] = None


class ProxyResponse(_CamelModel):
    success: bool = True
    messages: list[Any] = Field(default_factory=list)
    is_ending: bool = False


class ProxyErrorOut(BaseModel):
    error: str
    details: Optional[Any] = None
