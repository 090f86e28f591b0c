"""
Two counters living in separate provider scopes.

Each counter is rendered by a Synchronizer that only repaints when the slice
it reads changes. Run with ``pip install -e .[examples]``.
"""

from rich.console import Console
from rich.table import Table

from snapstore import ScopeRegistry, Synchronizer, bind

console = Console()
registry = ScopeRegistry()


def render_counter(scope):
    def render(count):
        table = Table(title=f"[bold]{scope}[/bold]")
        table.add_column("count", justify="right")
        table.add_row(str(count))
        console.print(table)

    return render


def mount(scope):
    """Attach a counter display to the store provided for ``scope``."""
    store = registry.resolve(scope)
    binding = bind(store, lambda s: s["count"])
    sync = Synchronizer.from_binding(binding, render_counter(scope))
    render_counter(scope)(sync.snapshot)
    return sync


def increment(scope):
    registry.resolve(scope).set_state(lambda s: {"count": s["count"] + 1})


with registry.provide("left", {"count": 0, "clicks": 0}), registry.provide(
    "right", {"count": 0, "clicks": 0}
):
    left = mount("left")
    right = mount("right")

    console.rule("increment left twice")
    increment("left")
    increment("left")

    console.rule("touch an unrelated field on right (no repaint)")
    registry.resolve("right").set_state({"clicks": 1})

    console.rule("increment right")
    increment("right")

    console.print(
        f"left rendered {left.render_count} time(s), right rendered {right.render_count} time(s)"
    )

    left.close()
    right.close()
