"""
Shared pytest fixtures for snapstore tests.
"""

import pytest

from snapstore import ScopeRegistry, create_store


@pytest.fixture
def counter_store():
    """Provide a fresh store holding a count and a name."""
    return create_store({"count": 0, "name": "a"})


@pytest.fixture
def registry():
    """Provide an empty scope registry."""
    return ScopeRegistry()


@pytest.fixture
def call_log():
    """Provide a list plus a factory for listeners that append a tag to it."""
    log = []

    def recorder(tag):
        def listener():
            log.append(tag)

        return listener

    return log, recorder
