"""In-memory conversation storage for CatGPT."""

import logging
import uuid
from collections import OrderedDict, deque
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any

from ..config import settings

logger = logging.getLogger(__name__)


class Role(Enum):
    """Author of a message."""

    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class Message:
    """A finalized message in a conversation."""

    role: Role
    content: str
    created_at: datetime = field(default_factory=datetime.now)
    streaming: bool = False

    def to_wire(self) -> dict[str, Any]:
        """Serialize for the realtime protocol."""
        return {
            "role": self.role.value,
            "content": self.content,
            "createdAt": self.created_at.isoformat(),
            "streaming": self.streaming,
        }


class ConversationStore:
    """Keeps conversations in memory with LRU eviction and idle cleanup."""

    def __init__(
        self,
        max_conversations: int = 1000,
        max_messages: int = 500,
        cleanup_interval_hours: int = 24,
    ):
        """
        Initialize the store with memory management.

        Args:
            max_conversations: Maximum number of conversations to track (LRU eviction)
            max_messages: Messages kept per conversation (oldest dropped first)
            cleanup_interval_hours: Hours before inactive conversations are cleaned up
        """
        self.max_conversations = max_conversations
        self.max_messages = max_messages
        self.cleanup_interval = timedelta(hours=cleanup_interval_hours)

        # OrderedDict for LRU behavior
        self._conversations: OrderedDict[str, deque[Message]] = OrderedDict()
        self._last_activity: dict[str, datetime] = {}
        self._created_count = 0

        logger.info(
            f"Initialized conversation store: max_conversations={max_conversations}, "
            f"max_messages={max_messages}, cleanup_interval={cleanup_interval_hours}h"
        )

    def create(self) -> str:
        """Create an empty conversation and return its id."""
        if len(self._conversations) >= self.max_conversations:
            self._evict_least_recently_used()

        conversation_id = uuid.uuid4().hex
        self._conversations[conversation_id] = deque(maxlen=self.max_messages)
        self._last_activity[conversation_id] = datetime.now()
        self._created_count += 1

        # Trigger cleanup occasionally
        if self._created_count % 100 == 0:
            self._cleanup_inactive_conversations()

        logger.debug(f"Created conversation {conversation_id}")
        return conversation_id

    def append(self, conversation_id: str | None, message: Message) -> bool:
        """
        Append a message to a conversation.

        Returns:
            False if the conversation does not exist
        """
        if not conversation_id or conversation_id not in self._conversations:
            logger.warning(f"Cannot append to unknown conversation {conversation_id!r}")
            return False

        self._touch(conversation_id)
        self._conversations[conversation_id].append(message)
        logger.debug(f"Added {message.role.value} message to conversation {conversation_id}")
        return True

    def get(self, conversation_id: str | None) -> list[Message] | None:
        """Get the messages of a conversation, or None if it is unknown."""
        if not conversation_id or conversation_id not in self._conversations:
            return None

        self._touch(conversation_id)
        return list(self._conversations[conversation_id])

    def __contains__(self, conversation_id: object) -> bool:
        return conversation_id in self._conversations

    def get_conversation_count(self) -> int:
        """Get the number of stored conversations."""
        return len(self._conversations)

    def clear_conversation(self, conversation_id: str) -> None:
        """Remove a conversation."""
        if conversation_id in self._conversations:
            del self._conversations[conversation_id]
            self._last_activity.pop(conversation_id, None)
            logger.info(f"Cleared conversation {conversation_id}")

    def clear(self) -> None:
        """Remove every conversation."""
        self._conversations.clear()
        self._last_activity.clear()

    def _touch(self, conversation_id: str) -> None:
        self._conversations.move_to_end(conversation_id)
        self._last_activity[conversation_id] = datetime.now()

    def _evict_least_recently_used(self) -> None:
        """Evict the least recently used conversation to make space."""
        if not self._conversations:
            return

        # First item is the least recently used
        lru_id = next(iter(self._conversations))
        self.clear_conversation(lru_id)
        logger.info(f"Evicted LRU conversation {lru_id} due to memory limit")

    def _cleanup_inactive_conversations(self) -> None:
        """Remove conversations that haven't been active recently."""
        now = datetime.now()
        inactive = [
            conversation_id
            for conversation_id, last_activity in self._last_activity.items()
            if now - last_activity > self.cleanup_interval
        ]

        for conversation_id in inactive:
            self.clear_conversation(conversation_id)

        if inactive:
            logger.info(f"Cleaned up {len(inactive)} inactive conversations")

    def get_memory_stats(self) -> dict[str, Any]:
        """Get memory usage statistics."""
        total_messages = sum(len(messages) for messages in self._conversations.values())

        return {
            "active_conversations": len(self._conversations),
            "max_conversations": self.max_conversations,
            "total_messages": total_messages,
            "max_messages": self.max_messages,
            "memory_usage_percent": (len(self._conversations) / self.max_conversations) * 100,
            "cleanup_interval_hours": self.cleanup_interval.total_seconds() / 3600,
        }

    def force_cleanup(self) -> dict[str, int]:
        """Force cleanup of inactive conversations and return statistics."""
        initial_count = len(self._conversations)
        self._cleanup_inactive_conversations()
        cleaned_count = initial_count - len(self._conversations)

        return {
            "initial_conversations": initial_count,
            "cleaned_conversations": cleaned_count,
            "remaining_conversations": len(self._conversations),
        }


# Global conversation store instance
conversation_store = ConversationStore(
    max_conversations=settings.max_conversations,
    max_messages=settings.max_messages_per_conversation,
    cleanup_interval_hours=settings.conversation_ttl_hours,
)
