"""Unit tests for the in-memory conversation store."""

from datetime import datetime, timedelta

from catgpt.chat.store import ConversationStore, Message, Role


def user_message(text: str) -> Message:
    return Message(role=Role.USER, content=text)


class TestMessage:
    """Test cases for Message."""

    def test_to_wire(self) -> None:
        """Test wire serialization."""
        created = datetime(2024, 5, 1, 12, 30, 0)
        message = Message(role=Role.ASSISTANT, content="meow!", created_at=created)

        assert message.to_wire() == {
            "role": "assistant",
            "content": "meow!",
            "createdAt": "2024-05-01T12:30:00",
            "streaming": False,
        }

    def test_streaming_placeholder(self) -> None:
        """Test the streaming flag is carried through."""
        message = Message(role=Role.ASSISTANT, content="", streaming=True)
        assert message.to_wire()["streaming"] is True


class TestConversationStore:
    """Test cases for ConversationStore."""

    def test_initialization(self) -> None:
        """Test store initialization."""
        store = ConversationStore(max_conversations=10, max_messages=5)
        assert store.max_conversations == 10
        assert store.max_messages == 5
        assert store.get_conversation_count() == 0

    def test_create_returns_unique_ids(self) -> None:
        """Test that every conversation gets a fresh id."""
        store = ConversationStore()
        ids = {store.create() for _ in range(50)}

        assert len(ids) == 50
        assert store.get_conversation_count() == 50
        for conversation_id in ids:
            assert conversation_id in store
            assert store.get(conversation_id) == []

    def test_append_and_get(self) -> None:
        """Test messages are returned in insertion order."""
        store = ConversationStore()
        conversation_id = store.create()

        assert store.append(conversation_id, user_message("hi"))
        assert store.append(conversation_id, Message(role=Role.ASSISTANT, content="mew."))

        messages = store.get(conversation_id)
        assert [m.content for m in messages] == ["hi", "mew."]
        assert [m.role for m in messages] == [Role.USER, Role.ASSISTANT]

    def test_get_returns_copy(self) -> None:
        """Test callers cannot mutate stored history."""
        store = ConversationStore()
        conversation_id = store.create()
        store.append(conversation_id, user_message("hi"))

        store.get(conversation_id).clear()
        assert len(store.get(conversation_id)) == 1

    def test_unknown_conversation(self) -> None:
        """Test appending to and reading an unknown conversation."""
        store = ConversationStore()

        assert store.append("does-not-exist", user_message("hi")) is False
        assert store.append(None, user_message("hi")) is False
        assert store.get("does-not-exist") is None
        assert store.get(None) is None
        assert store.get_conversation_count() == 0

    def test_message_limit(self) -> None:
        """Test that only the newest messages are kept."""
        store = ConversationStore(max_messages=3)
        conversation_id = store.create()

        for i in range(5):
            store.append(conversation_id, user_message(f"Message {i}"))

        assert [m.content for m in store.get(conversation_id)] == ["Message 2", "Message 3", "Message 4"]

    def test_lru_eviction(self) -> None:
        """Test the least recently used conversation is evicted at capacity."""
        store = ConversationStore(max_conversations=3)
        first = store.create()
        second = store.create()
        third = store.create()

        # Reading the first conversation makes the second one the oldest
        store.get(first)
        fourth = store.create()

        assert store.get_conversation_count() == 3
        assert second not in store
        assert first in store
        assert third in store
        assert fourth in store

    def test_append_refreshes_recency(self) -> None:
        """Test writes count as activity for eviction."""
        store = ConversationStore(max_conversations=2)
        first = store.create()
        second = store.create()

        store.append(first, user_message("still here"))
        store.create()

        assert first in store
        assert second not in store

    def test_cleanup_inactive_conversations(self) -> None:
        """Test idle conversations are removed."""
        store = ConversationStore(cleanup_interval_hours=24)
        stale = store.create()
        fresh = store.create()
        store._last_activity[stale] = datetime.now() - timedelta(hours=25)

        result = store.force_cleanup()

        assert result == {
            "initial_conversations": 2,
            "cleaned_conversations": 1,
            "remaining_conversations": 1,
        }
        assert stale not in store
        assert fresh in store

    def test_periodic_cleanup_on_create(self) -> None:
        """Test cleanup runs every hundred conversations."""
        store = ConversationStore(max_conversations=1000, cleanup_interval_hours=1)
        stale = store.create()
        store._last_activity[stale] = datetime.now() - timedelta(hours=2)

        for _ in range(98):
            store.create()
        assert stale in store

        store.create()
        assert stale not in store

    def test_clear_conversation(self) -> None:
        """Test removing a single conversation."""
        store = ConversationStore()
        conversation_id = store.create()
        other = store.create()

        store.clear_conversation(conversation_id)
        store.clear_conversation("never-existed")

        assert conversation_id not in store
        assert other in store

    def test_clear(self) -> None:
        """Test removing every conversation."""
        store = ConversationStore()
        for _ in range(5):
            store.create()

        store.clear()
        assert store.get_conversation_count() == 0

    def test_memory_stats(self) -> None:
        """Test memory statistics."""
        store = ConversationStore(max_conversations=10, max_messages=50, cleanup_interval_hours=12)
        conversation_id = store.create()
        store.append(conversation_id, user_message("one"))
        store.append(conversation_id, user_message("two"))
        store.create()

        stats = store.get_memory_stats()

        assert stats["active_conversations"] == 2
        assert stats["max_conversations"] == 10
        assert stats["total_messages"] == 2
        assert stats["max_messages"] == 50
        assert stats["memory_usage_percent"] == 20.0
        assert stats["cleanup_interval_hours"] == 12.0
