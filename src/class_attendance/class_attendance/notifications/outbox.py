from __future__ import annotations

from typing import Protocol

from .model import NotificationEvent


class NotificationOutbox(Protocol):
    def publish(self, event: NotificationEvent) -> bool:
        """Enqueue for delivery; False when an event with the same dedup_key exists."""

        raise NotImplementedError
