"""Realtime chat endpoint for CatGPT."""

import asyncio
import json
import logging
import traceback
from datetime import datetime
from typing import Any

from fastapi import APIRouter, HTTPException, Request, WebSocket, WebSocketDisconnect
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from slowapi import Limiter
from slowapi.util import get_remote_address

from ..config import settings
from .generator import ResponseGenerator, response_generator
from .store import ConversationStore, Message, Role, conversation_store

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])

# Create rate limiter for HTTP endpoints
limiter = Limiter(key_func=get_remote_address)


class ClientTime(BaseModel):
    """Local time reported by the browser."""

    hour: int | None = Field(default=None, ge=0, le=23)
    timezone: str | None = None
    timestamp: float | str | None = None


class SendMessagePayload(BaseModel):
    """Payload of a ``send-message`` event."""

    model_config = ConfigDict(populate_by_name=True)

    message: str
    conversation_id: str | None = Field(default=None, alias="conversationId")
    client_time: ClientTime | None = Field(default=None, alias="clientTime")


class ClientEvent(BaseModel):
    """Envelope of every frame sent by the client."""

    event: str
    data: Any = None


# Error tracking
class ErrorTracker:
    """Simple error tracking for monitoring session issues."""

    def __init__(self) -> None:
        self.error_counts: dict[str, int] = {}
        self.recent_errors: list[dict[str, Any]] = []
        self.max_recent_errors = 50

    def track_error(self, error_type: str, error_message: str, context: dict[str, Any] | None = None) -> None:
        """Track an error occurrence."""
        self.error_counts[error_type] = self.error_counts.get(error_type, 0) + 1

        error_info = {
            "timestamp": datetime.now().isoformat(),
            "type": error_type,
            "message": error_message,
            "context": context or {},
        }

        self.recent_errors.append(error_info)

        # Keep only recent errors
        if len(self.recent_errors) > self.max_recent_errors:
            self.recent_errors = self.recent_errors[-self.max_recent_errors:]

        if error_type in ["session_failure", "stream_failure"]:
            logger.error(f"CRITICAL ERROR [{error_type}]: {error_message}", extra={"context": context})

    def get_error_stats(self) -> dict[str, Any]:
        """Get error statistics."""
        return {
            "error_counts": self.error_counts,
            "recent_errors": self.recent_errors[-10:],  # Last 10 errors
            "total_errors": sum(self.error_counts.values()),
        }

    def reset_stats(self) -> None:
        """Reset error statistics."""
        self.error_counts.clear()
        self.recent_errors.clear()
        logger.info("Error statistics reset")


# Global error tracker
error_tracker = ErrorTracker()


class ChatSession:
    """One connected client: its conversation and its in-flight replies."""

    def __init__(
        self,
        websocket: WebSocket,
        store: ConversationStore | None = None,
        generator: ResponseGenerator | None = None,
        max_pending_replies: int = 4,
    ):
        self.websocket = websocket
        self.store = store or conversation_store
        self.generator = generator or response_generator
        self.conversation_id: str | None = None
        self.closed = False
        self.max_pending_replies = max_pending_replies

        # Replies on one connection are streamed one after another
        self._reply_lock = asyncio.Lock()
        self._tasks: set[asyncio.Task[None]] = set()

    async def emit(self, event: str, data: Any) -> None:
        """Send one event frame to the client."""
        await self.websocket.send_json({"event": event, "data": data})

    async def start(self) -> None:
        """Assign a fresh conversation and greet the client."""
        self.conversation_id = self.store.create()
        await self.emit("conversation-id", self.conversation_id)
        await self.emit("welcome-meows", self.generator.welcome_meows())

    async def run(self) -> None:
        """Serve the connection until the client goes away."""
        try:
            await self.start()
            while True:
                text = await self.websocket.receive_text()
                try:
                    frame = json.loads(text)
                except json.JSONDecodeError:
                    await self._reject("invalid_frame", "Frame is not valid JSON")
                    continue
                await self.dispatch(frame)
        except WebSocketDisconnect:
            logger.info(f"Client disconnected from conversation {self.conversation_id}")
        except Exception as e:
            error_tracker.track_error(
                "session_failure",
                str(e),
                {"traceback": traceback.format_exc(), "conversation_id": self.conversation_id},
            )
        finally:
            await self.close()

    async def close(self) -> None:
        """Stop every in-flight reply."""
        self.closed = True
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.info(f"Cancelled {len(tasks)} in-flight replies for {self.conversation_id}")

    async def dispatch(self, frame: Any) -> None:
        """Route one client frame to its handler."""
        try:
            event = ClientEvent.model_validate(frame)
        except ValidationError as e:
            await self._reject("invalid_frame", f"Invalid event frame: {e.error_count()} errors")
            return

        if event.event == "send-message":
            await self._on_send_message(event.data)
        elif event.event == "get-conversation":
            await self._on_get_conversation(event.data)
        elif event.event == "request-welcome-meows":
            await self.emit("welcome-meows", self.generator.welcome_meows())
        else:
            logger.debug(f"Ignoring unknown event {event.event!r}")

    async def _reject(self, error_type: str, message: str) -> None:
        error_tracker.track_error(error_type, message, {"conversation_id": self.conversation_id})
        logger.warning(message)
        await self.emit("error", {"message": message})

    async def _on_send_message(self, data: Any) -> None:
        try:
            payload = SendMessagePayload.model_validate(data)
        except ValidationError as e:
            await self._reject("invalid_payload", f"Invalid send-message payload: {e.error_count()} errors")
            return

        if len(self._tasks) >= self.max_pending_replies:
            await self._reject(
                "reply_queue_full",
                f"Too many pending replies ({len(self._tasks)}), message dropped",
            )
            return

        task = asyncio.create_task(self._reply(payload))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _on_get_conversation(self, data: Any) -> None:
        conversation_id = data if isinstance(data, str) else None
        history = self.store.get(conversation_id)
        if history is None:
            logger.warning(f"History requested for unknown conversation {conversation_id!r}")
            history = []
        await self.emit("conversation-history", [message.to_wire() for message in history])

    async def _reply(self, payload: SendMessagePayload) -> None:
        async with self._reply_lock:
            try:
                await self.stream_reply(payload)
            except asyncio.CancelledError:
                logger.info(f"Reply cancelled for conversation {payload.conversation_id}")
                raise
            except WebSocketDisconnect:
                self.closed = True
                logger.info(f"Client left mid-stream in conversation {payload.conversation_id}")
            except Exception as e:
                self.closed = True
                error_tracker.track_error(
                    "stream_failure",
                    str(e),
                    {"conversation_id": payload.conversation_id},
                )

    async def stream_reply(self, payload: SendMessagePayload) -> Message | None:
        """
        Echo the user message and stream the generated reply word by word.

        Args:
            payload: Validated send-message payload

        Returns:
            The finalized assistant message, or None if the stream was aborted
        """
        conversation_id = payload.conversation_id
        user_message = Message(role=Role.USER, content=payload.message)

        # Only the connection that created a conversation may write to it
        if conversation_id is None or conversation_id != self.conversation_id:
            logger.warning(
                f"Conversation {conversation_id!r} is not owned by this connection, reply will not be stored"
            )
            persist = False
        else:
            persist = self.store.append(conversation_id, user_message)
            if not persist:
                logger.warning(f"Message for unknown conversation {conversation_id!r} will not be stored")
        await self.emit("user-message", user_message.to_wire())

        hour = payload.client_time.hour if payload.client_time else None
        response = self.generator.generate(payload.message, hour=hour)
        words = response.stream_words

        started_at = datetime.now()
        await self.emit(
            "ai-message-start",
            Message(role=Role.ASSISTANT, content="", created_at=started_at, streaming=True).to_wire(),
        )

        content = ""
        for i, word in enumerate(words):
            if self.closed:
                # Partial replies are never stored
                logger.info(f"Stream aborted after {i}/{len(words)} tokens")
                return None

            delay_ms = self.generator.token_delay(word, i, len(words), response.complexity)
            await asyncio.sleep(delay_ms / 1000 * settings.stream_delay_scale)

            content = f"{content} {word}" if content else word
            await self.emit(
                "ai-message-chunk",
                {"content": content, "isComplete": i == len(words) - 1},
            )

        ai_message = Message(role=Role.ASSISTANT, content=content, created_at=started_at)
        if persist:
            self.store.append(conversation_id, ai_message)
        await self.emit("ai-message-complete", ai_message.to_wire())
        return ai_message


@router.websocket("/ws")
async def chat_websocket(websocket: WebSocket) -> None:
    """Realtime chat connection, one conversation per connection."""
    await websocket.accept()
    logger.info(f"Client connected: {websocket.client}")
    await ChatSession(websocket).run()


@router.get("/chat/conversations/{conversation_id}")
@limiter.limit("60/minute")
async def get_conversation(request: Request, conversation_id: str) -> list[dict[str, Any]]:
    """Get the history of a conversation."""
    history = conversation_store.get(conversation_id)
    if history is None:
        raise HTTPException(status_code=404, detail="Conversation not found")
    return [message.to_wire() for message in history]


@router.get("/chat/stats")
@limiter.limit("60/minute")
async def get_generation_stats(request: Request) -> dict[str, Any]:
    """Get reply generation statistics."""
    return response_generator.get_usage_stats()


@router.get("/chat/errors")
@limiter.limit("30/minute")  # Limit error stats access
async def get_error_stats(request: Request) -> dict[str, Any]:
    """Get error statistics for monitoring."""
    return error_tracker.get_error_stats()


@router.post("/chat/errors/reset")
@limiter.limit("10/hour")  # Strict limit for reset operations
async def reset_error_stats(request: Request) -> dict[str, str]:
    """Reset error statistics (admin endpoint)."""
    error_tracker.reset_stats()
    return {"status": "reset", "message": "Error statistics have been reset"}


@router.get("/chat/memory")
@limiter.limit("60/minute")  # Allow frequent memory monitoring
async def get_memory_stats(request: Request) -> dict[str, Any]:
    """Get memory usage statistics."""
    return conversation_store.get_memory_stats()


@router.post("/chat/memory/cleanup")
@limiter.limit("5/hour")  # Limited cleanup operations
async def force_memory_cleanup(request: Request) -> dict[str, Any]:
    """Force cleanup of inactive conversations."""
    return conversation_store.force_cleanup()
