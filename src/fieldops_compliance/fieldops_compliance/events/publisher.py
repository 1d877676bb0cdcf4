from __future__ import annotations

from typing import Protocol, Sequence

from .model import DomainEvent


class EventPublisher(Protocol):
    """Host collaborator that persists / forwards emitted domain events."""

    def publish(self, events: Sequence[DomainEvent]) -> None:
        raise NotImplementedError
