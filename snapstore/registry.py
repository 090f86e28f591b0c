"""
Snapstore Scope Registry
========================

Maps scopes to store instances so that separate groups of consumers can hold
separate state without a process-wide store. A scope is any hashable handle
(a string, a widget, a request object) that the caller threads through to the
code that needs the store.

```python
from snapstore import ScopeRegistry

registry = ScopeRegistry()

with registry.provide("sidebar", {"count": 0}) as sidebar_store:
    assert registry.resolve("sidebar") is sidebar_store
# released and destroyed here
```
"""

import logging
import threading
from contextlib import contextmanager
from typing import Any, Dict, Hashable, Iterator, List, Optional

from .errors import DuplicateScopeError, NotBoundError
from .store import StoreCore, StoreState, create_store


class ScopeRegistry:
    """
    Scope -> store mapping.

    For as long as a scope is registered, ``resolve`` returns the same store
    instance for it. Releasing a scope drops only the mapping; listeners on
    the store are left alone (``provide`` destroys stores it created itself).
    """

    def __init__(self):
        self._stores: Dict[Hashable, StoreCore] = {}
        self._lock = threading.Lock()

    def resolve(self, scope: Hashable) -> StoreCore:
        """
        Return the store bound to ``scope``.

        Raises:
            NotBoundError: Nothing is registered for ``scope``.
        """
        try:
            return self._stores[scope]
        except KeyError:
            raise NotBoundError(scope) from None

    def register(self, scope: Hashable, store: StoreCore) -> None:
        """
        Bind ``store`` to ``scope``.

        Registering the store already bound to the scope again does nothing.

        Raises:
            DuplicateScopeError: ``scope`` is bound to a different store.
        """
        with self._lock:
            current = self._stores.get(scope)
            if current is store:
                return
            if current is not None:
                raise DuplicateScopeError(scope)
            self._stores[scope] = store
        logging.debug(f"Registered {store!r} for scope {scope!r}")

    def release(self, scope: Hashable) -> Optional[StoreCore]:
        """Unbind ``scope`` and return its store, or None if it was not bound."""
        with self._lock:
            store = self._stores.pop(scope, None)
        if store is not None:
            logging.debug(f"Released scope {scope!r}")
        return store

    @contextmanager
    def provide(
        self,
        scope: Hashable,
        initial_state: Optional[StoreState] = None,
        *,
        store: Optional[StoreCore] = None,
        **factory_options: Any,
    ) -> Iterator[StoreCore]:
        """
        Bind a store to ``scope`` for the duration of the block.

        A new store is built with ``create_store(initial_state,
        **factory_options)`` unless ``store`` is given. On exit the scope is
        released, and a store built here is destroyed.
        """
        owned = store is None
        if owned:
            store = create_store(initial_state, **factory_options)
        elif initial_state is not None or factory_options:
            raise TypeError("initial_state and factory options cannot be combined with store=")

        self.register(scope, store)
        try:
            yield store
        finally:
            if self._stores.get(scope) is store:
                self.release(scope)
            if owned:
                store.destroy()

    def scopes(self) -> List[Hashable]:
        with self._lock:
            return list(self._stores)

    def __contains__(self, scope: object) -> bool:
        return scope in self._stores

    def __len__(self) -> int:
        return len(self._stores)

    def __repr__(self) -> str:
        return f"ScopeRegistry(scopes={self.scopes()!r})"
