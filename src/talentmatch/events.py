"""EventBus and event types for document change notifications."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable

    from talentmatch.models.records import DocumentType

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Changes to a job or candidate profile that affect its index entry."""

    DOCUMENT_WRITTEN = "document_written"
    DOCUMENT_DELETED = "document_deleted"


@dataclass(frozen=True, slots=True)
class DocumentEvent:
    """Immutable record of a change to a source document.

    Attributes:
        event_type: The kind of change.
        document_id: Job id or candidate user id.
        document_type: Kind of document.
        user_id: Who made the change, when known.
    """

    event_type: EventType
    document_id: str
    document_type: DocumentType
    user_id: str | None = None


class EventBus:
    """Dispatches document events to registered handlers.

    Handlers are called sequentially in registration order.
    Exceptions are logged but never propagated; a failing handler
    leaves the document unindexed, it does not fail the producer.
    """

    def __init__(self) -> None:
        self._handlers: dict[EventType, list[Callable[..., Any]]] = {et: [] for et in EventType}

    def register(self, event_type: EventType, handler: Callable[..., Any]) -> None:
        """Append *handler* to the list for *event_type*."""
        self._handlers[event_type].append(handler)

    def unregister(self, event_type: EventType, handler: Callable[..., Any]) -> bool:
        """Remove first occurrence of *handler*. Return True if found."""
        handlers = self._handlers[event_type]
        try:
            handlers.remove(handler)
            return True
        except ValueError:
            return False

    async def emit(self, event: DocumentEvent) -> None:
        """Dispatch *event* to all registered handlers for its type."""
        for handler in self._handlers[event.event_type]:
            try:
                await handler(event)
            except Exception:
                logger.warning(
                    "Handler %r failed for %s on %s %s",
                    handler,
                    event.event_type.value,
                    event.document_type.value,
                    event.document_id,
                    exc_info=True,
                )

    @property
    def handler_count(self) -> int:
        """Total number of registered handlers across all event types."""
        return sum(len(h) for h in self._handlers.values())

    def clear(self) -> None:
        """Remove all registered handlers."""
        for handlers in self._handlers.values():
            handlers.clear()
