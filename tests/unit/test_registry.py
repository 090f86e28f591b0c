"""Unit tests for the scope registry."""

import pytest

from snapstore import (
    DuplicateScopeError,
    LockedStore,
    NotBoundError,
    ScopeRegistry,
    create_store,
)


@pytest.mark.unit
@pytest.mark.registry
def test_resolve_unknown_scope_raises_not_bound(registry):
    """Resolving a scope nobody registered fails with NotBoundError"""
    with pytest.raises(NotBoundError) as exc_info:
        registry.resolve("missing-scope")

    assert exc_info.value.scope == "missing-scope"
    assert isinstance(exc_info.value, LookupError)


@pytest.mark.unit
@pytest.mark.registry
def test_resolve_returns_registered_store_every_time(registry):
    """A registered scope resolves to the exact same store on each call"""
    # Arrange
    store = create_store({"count": 0})

    # Act
    registry.register("s", store)

    # Assert
    assert registry.resolve("s") is store
    assert registry.resolve("s") is store
    assert "s" in registry
    assert len(registry) == 1


@pytest.mark.unit
@pytest.mark.registry
def test_registering_same_store_twice_is_allowed(registry):
    store = create_store()

    registry.register("s", store)
    registry.register("s", store)

    assert registry.scopes() == ["s"]


@pytest.mark.unit
@pytest.mark.registry
def test_registering_different_store_on_live_scope_fails(registry):
    """A live scope cannot be rebound to another store"""
    # Arrange
    original = create_store()
    registry.register("s", original)

    # Act & Assert
    with pytest.raises(DuplicateScopeError):
        registry.register("s", create_store())

    assert registry.resolve("s") is original


@pytest.mark.unit
@pytest.mark.registry
def test_release_drops_mapping_without_notifying(registry):
    """release() unbinds the scope and leaves listeners untouched"""
    # Arrange
    store = create_store({"count": 0})
    calls = []
    store.subscribe(lambda: calls.append(True))
    registry.register("s", store)

    # Act
    released = registry.release("s")

    # Assert
    assert released is store
    assert calls == []
    assert store.listener_count == 1
    with pytest.raises(NotBoundError):
        registry.resolve("s")


@pytest.mark.unit
@pytest.mark.registry
def test_release_unknown_scope_returns_none(registry):
    assert registry.release("nothing") is None


@pytest.mark.unit
@pytest.mark.registry
def test_scope_can_be_rebound_after_release(registry):
    registry.register("s", create_store())
    registry.release("s")
    replacement = create_store()

    registry.register("s", replacement)

    assert registry.resolve("s") is replacement


@pytest.mark.unit
@pytest.mark.registry
def test_scopes_map_to_independent_stores(registry):
    """Different scopes hold different, non-interfering stores"""
    # Arrange
    registry.register("left", create_store({"count": 0}))
    registry.register("right", create_store({"count": 0}))

    # Act
    registry.resolve("left").set_state({"count": 3})

    # Assert
    assert registry.resolve("right").get_state()["count"] == 0


@pytest.mark.unit
@pytest.mark.registry
def test_provide_binds_a_new_store_for_the_block(registry):
    """provide() creates, registers, then releases and destroys its store"""
    # Act
    with registry.provide("panel", {"count": 1}) as store:
        calls = []
        store.subscribe(lambda: calls.append(True))
        assert registry.resolve("panel") is store
        assert store.get_state()["count"] == 1

    # Assert
    assert "panel" not in registry
    assert store.listener_count == 0


@pytest.mark.unit
@pytest.mark.registry
def test_provide_forwards_factory_options(registry):
    with registry.provide("panel", {}, store_class=LockedStore, name="panel") as store:
        assert isinstance(store, LockedStore)
        assert store.name == "panel"


@pytest.mark.unit
@pytest.mark.registry
def test_provide_with_existing_store_does_not_destroy_it(registry):
    """A store passed in to provide() keeps its listeners after the block"""
    store = create_store()
    store.subscribe(lambda: None)

    with registry.provide("panel", store=store) as provided:
        assert provided is store

    assert "panel" not in registry
    assert store.listener_count == 1


@pytest.mark.unit
@pytest.mark.registry
def test_provide_rejects_state_together_with_store(registry):
    with pytest.raises(TypeError):
        with registry.provide("panel", {"count": 0}, store=create_store()):
            pass


@pytest.mark.unit
@pytest.mark.registry
def test_provide_releases_scope_when_block_raises(registry):
    with pytest.raises(RuntimeError):
        with registry.provide("panel"):
            raise RuntimeError("render failed")

    assert "panel" not in registry


@pytest.mark.unit
@pytest.mark.registry
def test_nested_provide_on_same_scope_fails(registry):
    """Providing a scope that is already live is a duplicate registration"""
    with registry.provide("panel") as outer:
        with pytest.raises(DuplicateScopeError):
            with registry.provide("panel"):
                pass
        assert registry.resolve("panel") is outer


@pytest.mark.unit
@pytest.mark.registry
def test_registries_do_not_share_scopes():
    first = ScopeRegistry()
    second = ScopeRegistry()

    first.register("s", create_store())

    assert "s" not in second
