"""Use cases de envio de mensagens."""

from .send_message import MEDIA_TYPES, MessageService, SendResult

__all__ = [
    "MEDIA_TYPES",
    "MessageService",
    "SendResult",
]
