"""
Snapstore Errors
================

Exception taxonomy for stores, selector bindings and the scope registry.

Registry errors are raised synchronously at the call site. Selector errors are
never wrapped: whatever the selector raises reaches the caller of
``get_snapshot()`` unchanged.
"""

from typing import Any, Hashable, List


class SnapstoreError(Exception):
    """Base class for all snapstore errors."""

    pass


# ============================================================================
# SCOPE REGISTRY
# ============================================================================


class NotBoundError(SnapstoreError, LookupError):
    """Raised when a scope is resolved before any store was registered for it."""

    def __init__(self, scope: Hashable):
        self.scope = scope
        super().__init__(f"No store is bound to scope {scope!r}")


class DuplicateScopeError(SnapstoreError):
    """Raised when a live scope is registered again with a different store."""

    def __init__(self, scope: Hashable):
        self.scope = scope
        super().__init__(f"Scope {scope!r} is already bound to another store")


# ============================================================================
# NOTIFICATION
# ============================================================================


class ListenerInvocationError(SnapstoreError):
    """
    Raised after a notification pass in which one or more listeners failed.

    Every listener in the pass still ran. The individual exceptions are kept
    in ``errors`` in the order they occurred.
    """

    def __init__(self, errors: List[BaseException]):
        self.errors = list(errors)
        count = len(self.errors)
        noun = "listener" if count == 1 else "listeners"
        super().__init__(f"{count} {noun} raised during notification: {self.errors[0]!r}")


class UpdateLoopError(SnapstoreError):
    """Raised when listeners keep queueing writes past the configured limit."""

    pass


# ============================================================================
# SELECTORS
# ============================================================================


class SelectorEvaluationError(SnapstoreError):
    """
    Raised for a malformed selector composition.

    Exceptions raised by a selector while it runs are not converted to this
    type; they propagate as-is.
    """

    def __init__(self, message: str, selector: Any = None):
        self.selector = selector
        super().__init__(message)
