"""Chat platform interaction data models."""

from enum import IntEnum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class InteractionType(IntEnum):
    """Kind of inbound interaction."""

    PING = 1
    APPLICATION_COMMAND = 2
    MESSAGE_COMPONENT = 3


class InteractionResponseType(IntEnum):
    """Kind of interaction response."""

    PONG = 1
    CHANNEL_MESSAGE = 4
    DEFERRED_CHANNEL_MESSAGE = 5
    DEFERRED_UPDATE_MESSAGE = 6
    UPDATE_MESSAGE = 7


class InteractionData(BaseModel):
    """Command name or clicked component of an interaction."""

    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    custom_id: Optional[str] = None


class Interaction(BaseModel):
    """Inbound interaction envelope."""

    model_config = ConfigDict(extra="ignore")

    type: int
    token: str = ""
    data: Optional[InteractionData] = None


class MessagePayload(BaseModel):
    """Message body used for responses and follow-up edits."""

    content: Optional[str] = None
    embeds: Optional[List[Dict[str, Any]]] = None
    components: Optional[List[Dict[str, Any]]] = None


class InteractionResponse(BaseModel):
    """Synchronous answer to an interaction."""

    type: InteractionResponseType
    data: Optional[MessagePayload] = None

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)
