"""Abstract base class for event source adapters."""

from __future__ import annotations

from abc import ABC, abstractmethod

from cropalert.models.events import DomainEvent


class EventSource(ABC):
    """Produces domain events when polled. Polled by the scheduler on its own cadence."""

    source_type: str = "unknown"

    @abstractmethod
    async def poll(self) -> list[DomainEvent]:
        """Return the events produced since the last poll (possibly none)."""
        ...
