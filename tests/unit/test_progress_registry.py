from __future__ import annotations

import threading

import pytest

from continuum.domain.models import ProgressEvent
from continuum.domain.services.progress import ProgressCallbackRegistry
from continuum.domain.types import ProgressPhase, Severity
from tests.fakes_ports import CollectingLogger, CollectingProgress


def _event(phase: ProgressPhase = ProgressPhase.START) -> ProgressEvent:
    return ProgressEvent(phase=phase, session_id="sess-1", attempt_number=0)


@pytest.mark.unit
def test_registry_invokes_callbacks_in_registration_order() -> None:
    order: list[str] = []
    registry = ProgressCallbackRegistry()
    registry.register(lambda e: order.append("a"))
    registry.register(lambda e: order.append("b"))
    registry.emit(_event())
    assert order == ["a", "b"]


@pytest.mark.unit
def test_failing_callback_is_logged_and_does_not_stop_others() -> None:
    collected = CollectingProgress()
    logger = CollectingLogger()

    def broken(event: ProgressEvent) -> None:
        raise RuntimeError("callback bug")

    registry = ProgressCallbackRegistry([broken, collected])
    registry.emit(_event(ProgressPhase.MERGE), logger=logger)

    assert collected.phases == ["merge"]
    errors = logger.notices_at(Severity.ERROR)
    assert len(errors) == 1
    assert "callback bug" in errors[0].message
    assert errors[0].session_id == "sess-1"


@pytest.mark.unit
def test_unregister_and_combined_with() -> None:
    a = CollectingProgress()
    b = CollectingProgress()
    registry = ProgressCallbackRegistry([a])
    combined = registry.combined_with(b, None)
    assert len(combined) == 2
    assert len(registry) == 1

    assert registry.unregister(a) is True
    assert registry.unregister(a) is False
    assert len(registry) == 0


@pytest.mark.unit
def test_register_rejects_non_callables() -> None:
    with pytest.raises(TypeError, match="callable"):
        ProgressCallbackRegistry().register("nope")  # type: ignore[arg-type]


@pytest.mark.unit
def test_callback_can_register_another_callback_without_deadlock() -> None:
    registry = ProgressCallbackRegistry()
    late = CollectingProgress()

    def registers_late(event: ProgressEvent) -> None:
        registry.register(late)

    registry.register(registers_late)
    registry.emit(_event())
    assert late.events == []
    registry.emit(_event(ProgressPhase.END))
    assert late.phases == ["end"]


@pytest.mark.unit
def test_concurrent_registration_and_emission() -> None:
    registry = ProgressCallbackRegistry()
    sinks = [CollectingProgress() for _ in range(20)]
    barrier = threading.Barrier(len(sinks))

    def worker(sink: CollectingProgress) -> None:
        barrier.wait()
        registry.register(sink)
        registry.emit(_event())

    threads = [threading.Thread(target=worker, args=(sink,)) for sink in sinks]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(registry) == len(sinks)
    assert all(sink.events for sink in sinks)


@pytest.mark.unit
def test_combined_registry_sees_later_parent_registrations_without_leaking_back() -> None:
    parent = ProgressCallbackRegistry()
    extra = CollectingProgress()
    child = parent.combined_with(extra)

    late = CollectingProgress()
    parent.register(late)
    child.emit(_event())

    assert late.phases == ["start"]
    assert extra.phases == ["start"]
    assert parent.snapshot() == (late,)

    parent.unregister(late)
    child.emit(_event(ProgressPhase.END))
    assert late.phases == ["start"]
    assert extra.phases == ["start", "end"]
