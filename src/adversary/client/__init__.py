from .conversation import (
    ConversationBusy,
    ConversationClient,
    ConversationNotStarted,
    GatewayResponseError,
)

__all__ = [
    "ConversationBusy",
    "ConversationClient",
    "ConversationNotStarted",
    "GatewayResponseError",
]
