from .service import ChatError, ChatService

__all__ = ["ChatError", "ChatService"]
