"""JSONL audit stream for improvement lifecycle events."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import IO, Any


class AuditLog:
	"""Append-only JSONL writer for lifecycle events.

	Mirrors the engine's in-memory history in a portable, jq-friendly form.
	Emitting before open() or after close() is a no-op.
	"""

	def __init__(self, path: Path) -> None:
		self._path = path
		self._file: IO[str] | None = None

	@property
	def is_open(self) -> bool:
		return self._file is not None

	def open(self) -> None:
		self._path.parent.mkdir(parents=True, exist_ok=True)
		self._file = self._path.open("a", encoding="utf-8")

	def close(self) -> None:
		if self._file is not None:
			self._file.close()
			self._file = None

	def __enter__(self) -> AuditLog:
		self.open()
		return self

	def __exit__(self, *exc: object) -> None:
		self.close()

	def emit(
		self,
		event_type: str,
		*,
		improvement_id: str = "",
		status: str = "",
		timestamp: str = "",
		details: dict[str, Any] | None = None,
	) -> None:
		if self._file is None:
			return
		record: dict[str, Any] = {
			"timestamp": timestamp or datetime.now(timezone.utc).isoformat(),
			"event_type": event_type,
			"improvement_id": improvement_id,
			"status": status,
			"details": details or {},
		}
		self._file.write(json.dumps(record, separators=(",", ":"), default=str) + "\n")
		self._file.flush()


def read_audit_log(path: Path) -> list[dict[str, Any]]:
	"""Load every record from an audit file, skipping blank lines."""
	if not path.exists():
		return []
	with path.open(encoding="utf-8") as f:
		return [json.loads(line) for line in f if line.strip()]
