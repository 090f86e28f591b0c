"""
Snapstore Selectors - Derived Snapshots with Memoized Equality
==============================================================

A selector is a plain function from the full state to a derived value.
``bind`` pairs a store with a selector and returns the two functions an
external-store consumer needs:

- ``subscribe(on_change)`` registers ``on_change`` with the store. Every store
  notification calls it; nothing is filtered here.
- ``get_snapshot()`` returns the selected value. When the newly computed
  value is equal to the cached one (by the binding's equality predicate; by
  default identity for objects and value for immutable scalars) the cached
  object is returned instead, so a consumer comparing snapshots by identity
  sees "no change" even though the state moved on.

```python
from snapstore import bind, create_store, shallow_equal

store = create_store({"todos": ("a", "b"), "filter": "all"})
subscribe, get_snapshot = bind(store, lambda s: s["todos"])

first = get_snapshot()
store.set_state({"filter": "done"})
assert get_snapshot() is first
```

``create_selector`` builds a memoized selector out of input selectors and a
combiner, recomputing only when one of the inputs is a different object.
"""

from typing import Any, Callable, NamedTuple, Optional, Tuple

from cachetools import LRUCache

from .equality import EqualityFn, strict_equal
from .errors import SelectorEvaluationError
from .store import StoreCore, StoreState, Unsubscribe

Selector = Callable[[StoreState], Any]


class Binding(NamedTuple):
    """The ``(subscribe, get_snapshot)`` pair handed to a synchronizing consumer."""

    subscribe: Callable[[Callable[[], None]], Unsubscribe]
    get_snapshot: Callable[[], Any]


class SelectorBinding:
    """
    One store, one selector, one cached result.

    The cache holds the last returned value and the store version it was
    valid for. Reading at the same version never calls the selector again.
    Selectors must return the same result for the same state; the cache is
    meaningless otherwise.
    """

    def __init__(
        self,
        store: StoreCore,
        selector: Selector,
        equality: EqualityFn = strict_equal,
    ):
        if not callable(selector):
            raise TypeError(f"Selector must be callable, got {type(selector).__name__}")
        self._store = store
        self._selector = selector
        self._equality = equality

        self._has_cache = False
        self._cached_version = -1
        self._cached: Any = None

    @property
    def store(self) -> StoreCore:
        return self._store

    def get_snapshot(self) -> Any:
        version = self._store.version
        if self._has_cache and version == self._cached_version:
            return self._cached

        # Raises straight through; the cache stays as it was
        selected = self._selector(self._store.get_state())

        if self._has_cache and self._equality(self._cached, selected):
            self._cached_version = version
            return self._cached

        self._cached = selected
        self._cached_version = version
        self._has_cache = True
        return selected

    def subscribe(self, on_change: Callable[[], None]) -> Unsubscribe:
        def listener() -> None:
            on_change()

        return self._store.subscribe(listener)

    def as_binding(self) -> Binding:
        return Binding(self.subscribe, self.get_snapshot)

    def __repr__(self) -> str:
        return f"SelectorBinding(store={self._store!r}, selector={self._selector!r})"


def bind(
    store: StoreCore,
    selector: Selector,
    equality: EqualityFn = strict_equal,
) -> Binding:
    """
    Bind ``selector`` to ``store``.

    Args:
        store: Store to read from and subscribe to.
        selector: Deterministic function of the state.
        equality: Predicate deciding whether a fresh result may be replaced by
            the cached one. Defaults to ``strict_equal``.

    Returns:
        ``Binding(subscribe, get_snapshot)``.
    """
    return SelectorBinding(store, selector, equality).as_binding()


class MemoizedSelector:
    """
    Selector composed from input selectors and a combiner.

    The combiner runs only when the tuple of input results contains an object
    not seen in a cached call. Up to ``cache_size`` distinct input tuples are
    remembered, least recently used evicted first.
    """

    def __init__(
        self,
        input_selectors: Tuple[Selector, ...],
        combiner: Callable[..., Any],
        cache_size: int = 1,
    ):
        self._inputs = input_selectors
        self._combiner = combiner
        # key: ids of the input results -> (input results, combined value)
        self._cache: LRUCache = LRUCache(maxsize=cache_size)
        self._recomputations = 0

    @property
    def recomputations(self) -> int:
        """How many times the combiner has run."""
        return self._recomputations

    def clear_cache(self) -> None:
        self._cache.clear()

    def __call__(self, state: StoreState) -> Any:
        inputs = tuple(select(state) for select in self._inputs)
        # Cached entries keep their inputs alive, so these ids cannot be reused
        key = tuple(id(value) for value in inputs)

        hit: Optional[Tuple[Tuple[Any, ...], Any]] = self._cache.get(key)
        if hit is not None:
            return hit[1]

        result = self._combiner(*inputs)
        self._recomputations += 1
        self._cache[key] = (inputs, result)
        return result


def create_selector(
    *input_selectors: Selector,
    combiner: Callable[..., Any],
    cache_size: int = 1,
) -> MemoizedSelector:
    """
    Compose ``input_selectors`` with ``combiner`` into a memoized selector.

    ```python
    visible = create_selector(
        lambda s: s["todos"],
        lambda s: s["filter"],
        combiner=lambda todos, f: tuple(t for t in todos if f == "all" or t.done),
    )
    ```

    Raises:
        SelectorEvaluationError: No input selectors were given, or one of the
            inputs or the combiner is not callable.
        ValueError: ``cache_size`` is smaller than 1.
    """
    if not input_selectors:
        raise SelectorEvaluationError("create_selector needs at least one input selector")
    for select in input_selectors:
        if not callable(select):
            raise SelectorEvaluationError(
                f"Input selector {select!r} is not callable", selector=select
            )
    if not callable(combiner):
        raise SelectorEvaluationError(
            f"Combiner {combiner!r} is not callable", selector=combiner
        )
    if cache_size < 1:
        raise ValueError("cache_size must be >= 1")

    return MemoizedSelector(tuple(input_selectors), combiner, cache_size)
