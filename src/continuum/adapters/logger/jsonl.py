from __future__ import annotations

import json
import threading
from datetime import UTC, datetime
from pathlib import Path
from typing import Any
from uuid import uuid4

from continuum.adapters.base import BaseLoggerAdapter
from continuum.domain.models import AttemptRecord, Notice, SessionMetadata


class JsonlLoggerAdapter(BaseLoggerAdapter):
    """
    Append-only JSONL logger.

    Every line is a JSON object with `type` in {"attempt", "notice", "metadata"}
    and a `schema_version`. With `rotate_per_run=True` (default) each session
    gets its own file, opened lazily on that session's first record; otherwise
    all sessions share one file.

    Lines are written and flushed one at a time under a lock, so concurrent
    sessions sharing the adapter never interleave partial lines.
    """

    __slots__ = (
        "_current_session",
        "_file_name",
        "_lock",
        "_log_dir",
        "_log_file_path",
        "_rotate_per_run",
        "_schema_version",
    )

    def __init__(
        self,
        log_dir: str | Path,
        *,
        file_name: str = "continuum",
        rotate_per_run: bool = True,
        schema_version: int = 1,
    ) -> None:
        if not isinstance(log_dir, (str, Path)) or not str(log_dir).strip():
            raise ValueError("JsonlLoggerAdapter requires a non-empty 'log_dir'")
        if not isinstance(file_name, str) or not file_name.strip():
            raise ValueError("JsonlLoggerAdapter requires a non-empty 'file_name'")
        if not isinstance(rotate_per_run, bool):
            raise ValueError("JsonlLoggerAdapter requires 'rotate_per_run' to be a bool")
        if isinstance(schema_version, bool) or not isinstance(schema_version, int):
            raise ValueError("JsonlLoggerAdapter requires 'schema_version' to be an int")
        if schema_version < 1:
            raise ValueError("JsonlLoggerAdapter requires 'schema_version' >= 1")

        self._log_dir = Path(log_dir)
        self._file_name = file_name
        self._rotate_per_run = rotate_per_run
        self._schema_version = schema_version
        self._lock = threading.Lock()
        self._log_file_path: Path | None = None
        self._current_session: str | None = None

    @property
    def log_file_path(self) -> str | None:
        return str(self._log_file_path) if self._log_file_path is not None else None

    def log_attempt(self, record: AttemptRecord, /) -> None:
        self._write("attempt", record.session_id, record.to_dict())

    def log_notice(self, notice: Notice, /) -> None:
        self._write("notice", notice.session_id, notice.to_dict())

    def log_metadata(self, metadata: SessionMetadata, /) -> None:
        self._write("metadata", metadata.session_id, metadata.to_dict())

    def _path_for(self, session_id: str | None) -> Path:
        if self._log_file_path is not None and (
            not self._rotate_per_run or session_id is None or session_id == self._current_session
        ):
            return self._log_file_path

        self._log_dir.mkdir(parents=True, exist_ok=True)
        if self._rotate_per_run:
            stamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%S")
            suffix = session_id or uuid4().hex[:8]
            path = self._log_dir / f"{self._file_name}_{stamp}_{suffix}.jsonl"
        else:
            path = self._log_dir / f"{self._file_name}.jsonl"
        self._log_file_path = path
        self._current_session = session_id
        return path

    def _write(self, record_type: str, session_id: str | None, body: dict[str, Any]) -> None:
        entry = {
            "type": record_type,
            "schema_version": self._schema_version,
            "timestamp": datetime.now(UTC).isoformat(),
            **body,
        }
        line = json.dumps(entry, ensure_ascii=False, default=str)
        with self._lock:
            path = self._path_for(session_id)
            with path.open("a", encoding="utf-8") as fh:
                fh.write(line + "\n")
