"""
Snapstore Store - State Container with Synchronous Notification
===============================================================

This module provides the store core: a container that owns one state mapping
and a set of zero-argument listeners, plus the ``create_store`` factory that
builds independent instances of it.

Write Protocol
--------------

``set_state`` shallow-merges a partial mapping into the current state, commits
the result as a new read-only mapping, bumps the store's ``version`` and then
calls every listener that was registered when the pass started, in
registration order. The new state is visible through ``get_state()`` before
the first listener runs, so a listener always reads the state it is being
notified about.

Published states are never mutated. Each write produces a fresh mapping, which
is what lets selector bindings compare derived values between versions.

Re-entrant Writes
-----------------

A ``set_state`` issued from inside a listener of the same store does not run
immediately. It is queued and applied after the current pass completes, and
then gets its own full pass. Every listener in a pass therefore sees the same
state version. The nested call returns at once.

A listener that keeps writing on every notification would never settle, so the
number of queued writes handled by one outer ``set_state`` is capped by
``max_queued_updates``; going past it raises ``UpdateLoopError``.

Listener Failures
-----------------

A listener that raises does not stop the pass. Each failure is logged and
collected; once the pass (and any queued writes) finish, the outermost
``set_state`` raises ``ListenerInvocationError`` carrying all of them. If
draining queued writes fails after listeners already failed, that error is
chained as the cause.

Updates that are not mappings (or callables) are rejected with ``TypeError``
at the ``set_state`` call that issued them, including writes made from
inside a listener.

Basic Usage
-----------

```python
from snapstore import create_store

counter = create_store({"count": 0, "label": "clicks"})

unsubscribe = counter.subscribe(lambda: print(counter.get_state()["count"]))
counter.set_state({"count": 1})                       # prints 1
counter.set_state(lambda s: {"count": s["count"] + 1})  # prints 2
unsubscribe()
```

Batching
--------

```python
with counter.batch():
    counter.set_state({"count": 10})
    counter.set_state({"label": "taps"})
# listeners run once here
```
"""

import itertools
import logging
import threading
from collections import deque
from contextlib import contextmanager
from types import MappingProxyType
from typing import (
    Any,
    Callable,
    Deque,
    Iterator,
    List,
    Mapping,
    Optional,
    Protocol,
    Tuple,
    Type,
    Union,
    runtime_checkable,
)

from .errors import ListenerInvocationError, UpdateLoopError
from .util.listener_set import Listener, ListenerSet

StoreState = Mapping[str, Any]
StateUpdate = Union[StoreState, Callable[[StoreState], StoreState]]
Unsubscribe = Callable[[], None]

DEFAULT_MAX_QUEUED_UPDATES = 100

_store_ids = itertools.count(1)


def _check_mapping(partial: Any) -> None:
    if not isinstance(partial, Mapping):
        raise TypeError(f"State update must be a mapping, got {type(partial).__name__}")


# ============================================================================
# STORE CORE PROTOCOL
# ============================================================================


@runtime_checkable
class StoreCore(Protocol):
    """
    Contract shared by every store implementation.

    Selector bindings, the scope registry and the synchronizer only talk to
    stores through this interface, so implementations can be swapped when the
    store is constructed.
    """

    @property
    def version(self) -> int:
        """Number of writes committed so far."""
        ...

    def get_state(self) -> StoreState:
        """Return the current state without side effects."""
        ...

    def set_state(self, partial: StateUpdate, replace: bool = False) -> None:
        """Merge ``partial`` into the state and notify listeners."""
        ...

    def subscribe(self, listener: Listener) -> Unsubscribe:
        """Register ``listener`` and return a function that removes it."""
        ...

    def destroy(self) -> None:
        """Drop every listener without notifying it."""
        ...


# ============================================================================
# STORE IMPLEMENTATIONS
# ============================================================================


class Store:
    """
    Single-threaded store core.

    Owns the current state mapping, its version counter and the listener set.
    None of these are reachable from outside except through the methods below;
    ``get_state()`` hands out a read-only view.
    """

    def __init__(
        self,
        initial_state: Optional[StoreState] = None,
        *,
        name: Optional[str] = None,
        max_queued_updates: int = DEFAULT_MAX_QUEUED_UPDATES,
    ):
        if max_queued_updates < 0:
            raise ValueError("max_queued_updates must be >= 0")

        self._name = name or f"store${next(_store_ids)}"
        self._state: StoreState = MappingProxyType(dict(initial_state or {}))
        self._version = 0
        self._listeners = ListenerSet()
        self._max_queued_updates = max_queued_updates

        # Notification pass bookkeeping
        self._notifying = False
        self._pending: Deque[Tuple[StateUpdate, bool]] = deque()

        # Batch bookkeeping
        self._batch_depth = 0
        self._batch_dirty = False

    @property
    def name(self) -> str:
        return self._name

    @property
    def version(self) -> int:
        return self._version

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def get_state(self) -> StoreState:
        return self._state

    def set_state(self, partial: StateUpdate, replace: bool = False) -> None:
        """
        Commit a new state and notify listeners.

        Args:
            partial: Mapping of fields to overwrite, or a function taking the
                current state and returning such a mapping.
            replace: Use ``partial`` as the whole next state instead of merging.

        Raises:
            TypeError: ``partial`` (or what the function returned) is not a mapping.
            ListenerInvocationError: One or more listeners raised during notification.
            UpdateLoopError: Listeners queued more than ``max_queued_updates`` writes.
                If listeners also failed, ``ListenerInvocationError`` is raised
                instead, chained to this error.
        """
        if not callable(partial):
            _check_mapping(partial)

        if self._notifying:
            logging.debug(f"{self._name}: queueing write issued during notification")
            self._pending.append((partial, replace))
            return

        self._commit(partial, replace)

        if self._batch_depth:
            self._batch_dirty = True
            return

        self._flush()

    def subscribe(self, listener: Listener) -> Unsubscribe:
        """
        Register a zero-argument listener.

        The returned function removes exactly this registration. Calling it
        again, or calling it from inside a notification pass, is safe.
        """
        if not callable(listener):
            raise TypeError(f"Listener must be callable, got {type(listener).__name__}")

        entry = self._listeners.add(listener)

        def unsubscribe() -> None:
            self._listeners.discard(entry)

        return unsubscribe

    def destroy(self) -> None:
        """Drop all listeners silently. The state itself stays readable and writable."""
        logging.debug(f"{self._name}: destroyed with {len(self._listeners)} listener(s)")
        self._listeners.clear()

    @contextmanager
    def batch(self) -> Iterator["Store"]:
        """
        Defer notification until the outermost batch exits.

        Writes inside the block are committed right away, so ``get_state()``
        reflects them, but listeners run once, after the block. Notification
        happens even if the block raises.
        """
        self._batch_depth += 1
        try:
            yield self
        finally:
            self._batch_depth -= 1
            if self._batch_depth == 0 and self._batch_dirty:
                self._batch_dirty = False
                if not self._notifying:
                    self._flush()

    # ------------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------------

    def _commit(self, partial: StateUpdate, replace: bool) -> None:
        if callable(partial):
            partial = partial(self._state)
            _check_mapping(partial)

        if replace:
            next_state = dict(partial)
        else:
            next_state = {**self._state, **partial}

        self._state = MappingProxyType(next_state)
        self._version += 1

    def _flush(self) -> None:
        """
        Run one notification pass, then drain writes queued by listeners.

        If draining fails (a queued update function raises, or the queue limit
        is hit) after listeners have already failed, the listener errors are
        still reported: ``ListenerInvocationError`` is raised chained to the
        drain failure.
        """
        errors: List[Exception] = []
        self._notifying = True
        try:
            self._notify(errors)

            queued = 0
            while self._pending:
                queued += 1
                if queued > self._max_queued_updates:
                    raise UpdateLoopError(
                        f"{self._name}: listeners queued more than "
                        f"{self._max_queued_updates} writes in one update"
                    )
                partial, replace = self._pending.popleft()
                self._commit(partial, replace)
                self._notify(errors)
        except Exception as e:
            if errors:
                raise ListenerInvocationError(errors) from e
            raise
        finally:
            self._notifying = False
            self._pending.clear()

        if errors:
            raise ListenerInvocationError(errors) from errors[0]

    def _notify(self, errors: List[Exception]) -> None:
        for entry in self._listeners.snapshot():
            # Unsubscribed earlier in this pass
            if not entry.active:
                continue
            try:
                entry.callback()
            except Exception as e:
                logging.error(f"{self._name}: listener {entry.callback!r} failed: {e}")
                errors.append(e)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(name={self._name!r}, version={self._version}, "
            f"listeners={len(self._listeners)})"
        )


class LockedStore(Store):
    """
    Store core whose writes and subscription changes hold a re-entrant lock.

    Writes from different threads are serialized: a write waits until any
    notification pass running on another thread has finished. Writes issued
    by a listener on the notifying thread are queued as usual.

    Listeners run while the lock is held, so a listener must not block on a
    thread that is itself waiting to write to the same store.
    """

    def __init__(
        self,
        initial_state: Optional[StoreState] = None,
        *,
        name: Optional[str] = None,
        max_queued_updates: int = DEFAULT_MAX_QUEUED_UPDATES,
    ):
        super().__init__(
            initial_state, name=name, max_queued_updates=max_queued_updates
        )
        self._lock = threading.RLock()

    def set_state(self, partial: StateUpdate, replace: bool = False) -> None:
        with self._lock:
            super().set_state(partial, replace)

    def subscribe(self, listener: Listener) -> Unsubscribe:
        with self._lock:
            remove = super().subscribe(listener)

        def unsubscribe() -> None:
            with self._lock:
                remove()

        return unsubscribe

    def destroy(self) -> None:
        with self._lock:
            super().destroy()

    @contextmanager
    def batch(self) -> Iterator["Store"]:
        with self._lock:
            with super().batch() as store:
                yield store


# ============================================================================
# FACTORY
# ============================================================================


def create_store(
    initial_state: Optional[StoreState] = None,
    *,
    store_class: Type[Store] = Store,
    **options: Any,
) -> Store:
    """
    Create an independent store.

    Every call returns a new instance with its own copy of ``initial_state``
    and an empty listener set; instances never see each other's writes.

    Args:
        initial_state: Starting fields. Copied, so later changes to the passed
            mapping do not leak into the store.
        store_class: Concrete implementation to construct, e.g. ``LockedStore``.
        **options: Forwarded to the implementation (``name``,
            ``max_queued_updates``).
    """
    store = store_class(initial_state, **options)
    logging.debug(f"Created {store!r}")
    return store
