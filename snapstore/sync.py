"""
Snapstore Synchronizer - Reference External-Store Consumer
==========================================================

``Synchronizer`` is the consumer side of a ``(subscribe, get_snapshot)`` pair:
it reads a snapshot, subscribes, and on every notification reads the snapshot
again, calling ``on_change`` only when the new snapshot is a different object
from the last one. This is the contract a rendering layer follows; the class
exists so that the engine can be driven and tested without one.

```python
from snapstore import Synchronizer, bind, create_store

store = create_store({"count": 0, "name": "a"})
with Synchronizer.from_binding(bind(store, lambda s: s["count"]), print) as sync:
    store.set_state({"count": 1})   # prints 1
    store.set_state({"name": "b"})  # prints nothing
```
"""

from typing import Any, Callable, Optional

from .selector import Binding
from .store import Unsubscribe


class Synchronizer:
    """
    Keep a snapshot in step with a store and report identity changes.

    Attributes:
        snapshot: The last snapshot read.
        render_count: Number of times ``on_change`` has been called.
    """

    def __init__(
        self,
        subscribe: Callable[[Callable[[], None]], Unsubscribe],
        get_snapshot: Callable[[], Any],
        on_change: Callable[[Any], None],
    ):
        self._get_snapshot = get_snapshot
        self._on_change = on_change
        self.snapshot = get_snapshot()
        self.render_count = 0
        self._unsubscribe: Optional[Unsubscribe] = subscribe(self._handle_change)

    @classmethod
    def from_binding(
        cls, binding: Binding, on_change: Callable[[Any], None]
    ) -> "Synchronizer":
        return cls(binding.subscribe, binding.get_snapshot, on_change)

    @property
    def closed(self) -> bool:
        return self._unsubscribe is None

    def _handle_change(self) -> None:
        snapshot = self._get_snapshot()
        if snapshot is self.snapshot:
            return
        self.snapshot = snapshot
        self.render_count += 1
        self._on_change(snapshot)

    def close(self) -> None:
        """Stop listening. Safe to call more than once."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def __enter__(self) -> "Synchronizer":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
