"""In-memory chat, review and emergency alert stores."""

from .chat import ChatStore, Chat, ChatMessage, ChatType, MessageType, DELETED_PLACEHOLDER
from .reviews import ReviewStore, Review, ReviewCategories, AverageRating, ReviewSummary
from .emergency import (
    EmergencyAlertStore,
    EmergencyAlert,
    AlertLocation,
    AlertType,
    AlertSeverity,
    AlertStatus,
    default_message,
    instructions,
)

__all__ = [
    "ChatStore",
    "Chat",
    "ChatMessage",
    "ChatType",
    "MessageType",
    "DELETED_PLACEHOLDER",
    "ReviewStore",
    "Review",
    "ReviewCategories",
    "AverageRating",
    "ReviewSummary",
    "EmergencyAlertStore",
    "EmergencyAlert",
    "AlertLocation",
    "AlertType",
    "AlertSeverity",
    "AlertStatus",
    "default_message",
    "instructions",
]
