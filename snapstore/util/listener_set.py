"""
Listener Set
============

Ordered listener storage that can be mutated while a notification pass is
iterating over it.

Notification iterates a frozen tuple of entries taken at the start of the pass
(copy-on-write: the tuple is shared between passes until the set changes).
Removing an entry marks it inactive, so a listener unsubscribed mid-pass is
skipped if its turn has not come yet. Entries added mid-pass are not in the
frozen tuple and first run on the next pass.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

Listener = Callable[[], None]


@dataclass(eq=False)
class ListenerEntry:
    """One registration of a listener. Identity is per registration, not per callback."""

    callback: Listener
    active: bool = True


class ListenerSet:
    """Insertion-ordered set of listener registrations."""

    __slots__ = ("_entries", "_frozen")

    def __init__(self):
        self._entries: Dict[ListenerEntry, None] = {}
        self._frozen: Optional[Tuple[ListenerEntry, ...]] = ()

    def add(self, callback: Listener) -> ListenerEntry:
        """Register a callback and return the entry that identifies this registration."""
        entry = ListenerEntry(callback)
        self._entries[entry] = None
        self._frozen = None
        return entry

    def discard(self, entry: ListenerEntry) -> bool:
        """
        Remove a registration. Returns True if it was present.

        Removing an entry twice, or one from another set, does nothing.
        """
        if entry not in self._entries:
            return False
        entry.active = False
        del self._entries[entry]
        self._frozen = None
        return True

    def clear(self) -> None:
        for entry in self._entries:
            entry.active = False
        self._entries.clear()
        self._frozen = ()

    def snapshot(self) -> Tuple[ListenerEntry, ...]:
        """Entries registered right now, in registration order."""
        if self._frozen is None:
            self._frozen = tuple(self._entries)
        return self._frozen

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, entry: object) -> bool:
        return entry in self._entries
