from __future__ import annotations

import threading
from collections.abc import Callable

from continuum.domain.models.events import Notice, ProgressEvent
from continuum.domain.ports import LoggerPort
from continuum.domain.types import Severity

ProgressCallback = Callable[[ProgressEvent], None]


class ProgressCallbackRegistry:
    """
    Thread-safe list of progress callbacks.

    One lock guards the list. `emit()` copies the list under the lock and
    invokes callbacks after releasing it, so a slow callback never blocks
    registration or other sessions. A callback that raises is logged and
    skipped; it never aborts the session that emitted the event.
    """

    __slots__ = ("_callbacks", "_lock", "_parent")

    def __init__(
        self,
        callbacks: list[ProgressCallback] | None = None,
        *,
        parent: ProgressCallbackRegistry | None = None,
    ) -> None:
        self._lock = threading.Lock()
        self._callbacks: list[ProgressCallback] = list(callbacks or [])
        self._parent = parent

    def register(self, callback: ProgressCallback, /) -> ProgressCallback:
        if not callable(callback):
            raise TypeError("progress callback must be callable")
        with self._lock:
            self._callbacks.append(callback)
        return callback

    def unregister(self, callback: ProgressCallback, /) -> bool:
        with self._lock:
            try:
                self._callbacks.remove(callback)
            except ValueError:
                return False
        return True

    def snapshot(self) -> tuple[ProgressCallback, ...]:
        """Parent callbacks first, then this registry's own, as of this call."""
        with self._lock:
            own = tuple(self._callbacks)
        if self._parent is None:
            return own
        return (*self._parent.snapshot(), *own)

    def __len__(self) -> int:
        return len(self.snapshot())

    def emit(self, event: ProgressEvent, /, *, logger: LoggerPort | None = None) -> None:
        for callback in self.snapshot():
            try:
                callback(event)
            except Exception as exc:  # noqa: BLE001 - callbacks must not break sessions
                if logger is not None:
                    logger.log_notice(
                        Notice(
                            severity=Severity.ERROR,
                            message=(
                                f"Progress callback failed during {event.phase.value}: "
                                f"{type(exc).__name__}: {exc}"
                            ),
                            session_id=event.session_id,
                        )
                    )

    def combined_with(self, *callbacks: ProgressCallback | None) -> ProgressCallbackRegistry:
        """
        A child registry that adds `callbacks` (Nones skipped) on top of this one.

        The child reads this registry live, so callbacks registered here later
        still fire; registering on the child never touches this registry.
        """
        return ProgressCallbackRegistry([cb for cb in callbacks if cb], parent=self)
