"""
In-memory chat store for matches and groups.

A chat is opened for a match (two participants) or a group (any number).
Messages are append-only per chat; edits and deletions change a message in
place and deletions leave a placeholder so conversation order is preserved.

Delivery is simulated: every sent message is logged instead of pushed over a
real-time transport.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Any, List, Optional, Set, Sequence

from ..schema.entities import coerce_enum
from .base import InMemoryStore, Clock

logger = logging.getLogger(__name__)

DELETED_PLACEHOLDER = "This message has been deleted"
DEFAULT_MESSAGE_LIMIT = 50


class ChatType(Enum):
    MATCH = "match"
    GROUP = "group"


class MessageType(Enum):
    TEXT = "text"
    IMAGE = "image"
    LOCATION = "location"
    FILE = "file"


@dataclass
class Reaction:
    emoji: str
    user_id: str

    def to_dict(self) -> Dict[str, Any]:
        return {"emoji": self.emoji, "user_id": self.user_id}


@dataclass
class ChatMessage:
    """
    One message in a chat.

    Attributes:
        read_by: Users who have read the message (the sender always has)
        reactions: At most one reaction per user
        is_deleted: Soft-deleted; text holds the placeholder
    """
    message_id: str
    chat_id: str
    sender_id: str
    text: str
    timestamp: datetime
    message_type: MessageType = MessageType.TEXT
    is_edited: bool = False
    edited_at: Optional[datetime] = None
    is_deleted: bool = False
    read_by: List[str] = field(default_factory=list)
    reactions: List[Reaction] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message_id": self.message_id,
            "chat_id": self.chat_id,
            "sender_id": self.sender_id,
            "text": self.text,
            "timestamp": self.timestamp.isoformat(),
            "message_type": self.message_type.value,
            "is_edited": self.is_edited,
            "edited_at": self.edited_at.isoformat() if self.edited_at else None,
            "is_deleted": self.is_deleted,
            "read_by": list(self.read_by),
            "reactions": [r.to_dict() for r in self.reactions],
        }


@dataclass
class Chat:
    chat_id: str
    participants: List[str]
    chat_type: ChatType
    created_at: datetime
    match_id: Optional[str] = None
    group_id: Optional[str] = None
    is_active: bool = True
    last_message: Optional[ChatMessage] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "chat_id": self.chat_id,
            "participants": list(self.participants),
            "chat_type": self.chat_type.value,
            "created_at": self.created_at.isoformat(),
            "match_id": self.match_id,
            "group_id": self.group_id,
            "is_active": self.is_active,
            "last_message": self.last_message.to_dict() if self.last_message else None,
        }


class ChatStore(InMemoryStore):
    """
    Owns chats, their messages and typing indicators.

    Unknown chat or message ids raise KeyError; acting on a chat the user
    is not part of, or on someone else's message, raises PermissionError.
    """

    def __init__(self, clock: Optional[Clock] = None):
        super().__init__(clock)
        self._chats: Dict[str, Chat] = {}
        self._messages: Dict[str, List[ChatMessage]] = {}
        self._typing: Dict[str, Set[str]] = {}

    def create_chat(
        self,
        participants: Sequence[str],
        chat_type: ChatType = ChatType.MATCH,
        match_id: Optional[str] = None,
        group_id: Optional[str] = None
    ) -> Chat:
        """
        Open a chat between participants.

        Args:
            participants: User ids; duplicates are dropped, order kept
            chat_type: "match" or "group"
            match_id: Match the chat belongs to (match chats)
            group_id: Group the chat belongs to (group chats)

        Raises:
            ValueError: If fewer than two distinct participants are given
        """
        members = list(dict.fromkeys(participants))
        if len(members) < 2:
            raise ValueError(f"A chat needs at least 2 participants, got {len(members)}")

        chat = Chat(
            chat_id=self._next_id("chat"),
            participants=members,
            chat_type=coerce_enum(ChatType, chat_type),
            created_at=self.clock(),
            match_id=match_id,
            group_id=group_id,
        )
        self._chats[chat.chat_id] = chat
        self._messages[chat.chat_id] = []
        self._typing[chat.chat_id] = set()
        logger.info(f"Created {chat.chat_type.value} chat {chat.chat_id} for {members}")
        return chat

    def _require_chat(self, chat_id: str) -> Chat:
        if chat_id not in self._chats:
            raise KeyError(f"Chat not found: {chat_id}")
        return self._chats[chat_id]

    def _require_message(self, chat_id: str, message_id: str) -> ChatMessage:
        self._require_chat(chat_id)
        for message in self._messages[chat_id]:
            if message.message_id == message_id:
                return message
        raise KeyError(f"Message {message_id} not found in chat {chat_id}")

    def send_message(
        self,
        chat_id: str,
        sender_id: str,
        text: str,
        message_type: MessageType = MessageType.TEXT
    ) -> ChatMessage:
        """
        Append a message to a chat and simulate delivery.

        Raises:
            KeyError: If the chat does not exist
            PermissionError: If the sender is not a participant
            ValueError: If the text is blank
        """
        chat = self._require_chat(chat_id)
        if sender_id not in chat.participants:
            raise PermissionError(f"User {sender_id} is not a participant of chat {chat_id}")
        if not text or not text.strip():
            raise ValueError("Message text cannot be empty")

        message = ChatMessage(
            message_id=self._next_id("msg"),
            chat_id=chat_id,
            sender_id=sender_id,
            text=text,
            timestamp=self.clock(),
            message_type=coerce_enum(MessageType, message_type),
            read_by=[sender_id],
        )
        self._messages[chat_id].append(message)
        chat.last_message = message
        self._typing[chat_id].discard(sender_id)

        recipients = [p for p in chat.participants if p != sender_id]
        logger.info(f"Delivered {message.message_id} in {chat_id} from {sender_id} to {recipients}")
        return message

    def send_location_message(
        self,
        chat_id: str,
        sender_id: str,
        latitude: float,
        longitude: float,
        address: Optional[str] = None
    ) -> ChatMessage:
        """Share a location as a message; coordinates are shown when no address is given."""
        place = address or f"{latitude:.6f}, {longitude:.6f}"
        return self.send_message(
            chat_id, sender_id, f"\U0001F4CD Location: {place}", MessageType.LOCATION
        )

    def edit_message(
        self,
        chat_id: str,
        message_id: str,
        sender_id: str,
        new_text: str
    ) -> ChatMessage:
        """
        Replace a message's text. Only the author may edit.

        Raises:
            KeyError: If the chat or message does not exist
            PermissionError: If sender_id is not the author
            ValueError: If the message was deleted or the new text is blank
        """
        message = self._require_message(chat_id, message_id)
        if message.sender_id != sender_id:
            raise PermissionError(f"User {sender_id} cannot edit message {message_id}")
        if message.is_deleted:
            raise ValueError(f"Message {message_id} has been deleted")
        if not new_text or not new_text.strip():
            raise ValueError("Message text cannot be empty")

        message.text = new_text
        message.is_edited = True
        message.edited_at = self.clock()
        return message

    def delete_message(self, chat_id: str, message_id: str, sender_id: str) -> ChatMessage:
        """
        Soft-delete a message, keeping its slot with placeholder text.

        Raises:
            KeyError: If the chat or message does not exist
            PermissionError: If sender_id is not the author
        """
        message = self._require_message(chat_id, message_id)
        if message.sender_id != sender_id:
            raise PermissionError(f"User {sender_id} cannot delete message {message_id}")

        message.text = DELETED_PLACEHOLDER
        message.message_type = MessageType.TEXT
        message.is_edited = True
        message.is_deleted = True
        message.edited_at = self.clock()
        logger.debug(f"Deleted message {message_id} in {chat_id}")
        return message

    def mark_as_read(self, chat_id: str, user_id: str) -> int:
        """Mark every message in the chat as read by user_id; returns how many changed."""
        self._require_chat(chat_id)
        changed = 0
        for message in self._messages[chat_id]:
            if user_id not in message.read_by:
                message.read_by.append(user_id)
                changed += 1
        return changed

    def add_reaction(self, chat_id: str, message_id: str, user_id: str, emoji: str) -> ChatMessage:
        """Set user_id's reaction, replacing any earlier one."""
        message = self._require_message(chat_id, message_id)
        if not self.is_user_in_chat(chat_id, user_id):
            raise PermissionError(f"User {user_id} is not a participant of chat {chat_id}")
        message.reactions = [r for r in message.reactions if r.user_id != user_id]
        message.reactions.append(Reaction(emoji=emoji, user_id=user_id))
        return message

    def remove_reaction(self, chat_id: str, message_id: str, user_id: str) -> ChatMessage:
        message = self._require_message(chat_id, message_id)
        message.reactions = [r for r in message.reactions if r.user_id != user_id]
        return message

    def set_typing(self, chat_id: str, user_id: str, is_typing: bool) -> None:
        self._require_chat(chat_id)
        if is_typing:
            self._typing[chat_id].add(user_id)
        else:
            self._typing[chat_id].discard(user_id)

    def get_typing_users(self, chat_id: str, current_user_id: str) -> List[str]:
        """Users typing in the chat, excluding the caller, sorted."""
        typing = self._typing.get(chat_id, set())
        return sorted(u for u in typing if u != current_user_id)

    def get_chat(self, chat_id: str) -> Optional[Chat]:
        return self._chats.get(chat_id)

    def get_chat_participants(self, chat_id: str) -> List[str]:
        """Participant ids of a chat; raises KeyError for an unknown chat."""
        if chat_id not in self._chats:
            raise KeyError(f"Chat not found: {chat_id}")
        return list(self._chats[chat_id].participants)

    def get_messages(self, chat_id: str, limit: int = DEFAULT_MESSAGE_LIMIT) -> List[ChatMessage]:
        """The most recent `limit` messages, oldest first."""
        messages = self._messages.get(chat_id, [])
        if limit <= 0:
            return []
        return list(messages[-limit:])

    def get_user_chats(self, user_id: str) -> List[Chat]:
        """Active chats the user participates in, in creation order."""
        return [
            chat for chat in self._chats.values()
            if chat.is_active and user_id in chat.participants
        ]

    def get_unread_count(self, chat_id: str, user_id: str) -> int:
        return sum(
            1 for m in self._messages.get(chat_id, [])
            if m.sender_id != user_id and user_id not in m.read_by
        )

    def get_total_unread_count(self, user_id: str) -> int:
        return sum(
            self.get_unread_count(chat.chat_id, user_id)
            for chat in self.get_user_chats(user_id)
        )

    def search_messages(self, chat_id: str, query: str) -> List[ChatMessage]:
        """Case-insensitive substring search over message text."""
        needle = query.lower()
        return [m for m in self._messages.get(chat_id, []) if needle in m.text.lower()]

    def is_user_in_chat(self, chat_id: str, user_id: str) -> bool:
        chat = self._chats.get(chat_id)
        return chat is not None and user_id in chat.participants
