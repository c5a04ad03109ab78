from __future__ import annotations

import threading

from eventstream.services.closed_registry import ClosedConnectionRegistry


def test_toggle_marks_then_clears(registry: ClosedConnectionRegistry):
    assert registry.is_marked_closed("abc") is False

    assert registry.toggle_closed("abc") is True
    assert registry.is_marked_closed("abc") is True
    assert "abc" in registry
    assert len(registry) == 1

    assert registry.toggle_closed("abc") is False
    assert registry.is_marked_closed("abc") is False
    assert len(registry) == 0


def test_allow_resume_is_one_way(registry: ClosedConnectionRegistry):
    registry.toggle_closed("abc")
    assert registry.allow_resume("abc") is True
    assert registry.is_marked_closed("abc") is False
    assert registry.allow_resume("abc") is False
    assert registry.is_marked_closed("abc") is False


def test_registries_are_isolated():
    first = ClosedConnectionRegistry()
    second = ClosedConnectionRegistry()
    first.toggle_closed("abc")
    assert second.is_marked_closed("abc") is False


def test_concurrent_toggles_on_same_id_are_not_lost(registry: ClosedConnectionRegistry):
    # An even number of toggles in total must leave the id unmarked.
    toggles_per_thread = 200
    threads = [
        threading.Thread(
            target=lambda: [registry.toggle_closed("shared") for _ in range(toggles_per_thread)]
        )
        for _ in range(8)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=10)

    assert registry.is_marked_closed("shared") is False
    assert len(registry) == 0


def test_concurrent_marks_on_distinct_ids(registry: ClosedConnectionRegistry):
    def _mark(prefix: str) -> None:
        for idx in range(100):
            registry.toggle_closed(f"{prefix}-{idx}")

    threads = [threading.Thread(target=_mark, args=(f"t{n}",)) for n in range(6)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=10)

    assert len(registry) == 600
    assert registry.is_marked_closed("t3-42") is True
