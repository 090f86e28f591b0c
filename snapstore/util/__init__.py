"""Internal helpers for snapstore."""

from .listener_set import ListenerEntry, ListenerSet

__all__ = ["ListenerEntry", "ListenerSet"]
