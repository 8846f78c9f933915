"""Downstream event channel for follow changes."""

from .publisher import EventPublisher, EventStreamPublisher, NullEventPublisher

__all__ = ["EventPublisher", "EventStreamPublisher", "NullEventPublisher"]
