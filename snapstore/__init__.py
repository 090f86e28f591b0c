"""
Snapstore - External State Stores with Selector Snapshots

A small state engine for rendering layers that synchronize with an external
store: stores notify on every write, selector bindings turn that into stable
snapshots, and a scope registry lets independent store instances coexist.
"""

__version__ = "0.1.0"

from .equality import shallow_equal, strict_equal
from .errors import (
    DuplicateScopeError,
    ListenerInvocationError,
    NotBoundError,
    SelectorEvaluationError,
    SnapstoreError,
    UpdateLoopError,
)
from .registry import ScopeRegistry
from .selector import (
    Binding,
    MemoizedSelector,
    SelectorBinding,
    bind,
    create_selector,
)
from .store import LockedStore, Store, StoreCore, create_store
from .sync import Synchronizer

__all__ = [
    # Stores
    "StoreCore",
    "Store",
    "LockedStore",
    "create_store",
    # Selectors
    "bind",
    "Binding",
    "SelectorBinding",
    "create_selector",
    "MemoizedSelector",
    # Equality predicates
    "strict_equal",
    "shallow_equal",
    # Scopes
    "ScopeRegistry",
    # Consumer
    "Synchronizer",
    # Exceptions
    "SnapstoreError",
    "NotBoundError",
    "DuplicateScopeError",
    "ListenerInvocationError",
    "SelectorEvaluationError",
    "UpdateLoopError",
]
