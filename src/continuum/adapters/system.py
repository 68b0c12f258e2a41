from __future__ import annotations

import time
import uuid


class TimeSleeper:
    """`SleeperPort` over `time.sleep`."""

    __slots__ = ()

    def sleep(self, seconds: float, /) -> None:
        if seconds > 0:
            time.sleep(seconds)


class UuidIdGenerator:
    """`IdGeneratorPort` producing 32-char hex UUID4 session IDs."""

    __slots__ = ()

    def new_id(self) -> str:
        return uuid.uuid4().hex
