"""Tests for the JSONL audit stream."""

from __future__ import annotations

import json
from pathlib import Path

from agentic.audit_log import AuditLog, read_audit_log


class TestAuditLog:
	def test_emit_writes_one_line_per_event(self, tmp_path: Path) -> None:
		path = tmp_path / "logs" / "audit.jsonl"
		with AuditLog(path) as audit:
			audit.emit("detected", improvement_id="abc", status="detected", timestamp="t1", details={"x": 1})
			audit.emit("executed", improvement_id="abc", status="completed", timestamp="t2")

		lines = path.read_text().splitlines()
		assert len(lines) == 2
		first = json.loads(lines[0])
		assert first == {
			"timestamp": "t1",
			"event_type": "detected",
			"improvement_id": "abc",
			"status": "detected",
			"details": {"x": 1},
		}
		assert json.loads(lines[1])["details"] == {}

	def test_emit_when_closed_is_noop(self, tmp_path: Path) -> None:
		path = tmp_path / "audit.jsonl"
		audit = AuditLog(path)
		audit.emit("detected")
		assert not path.exists()

		audit.open()
		assert audit.is_open
		audit.close()
		audit.emit("detected")
		assert not audit.is_open
		assert path.read_text() == ""

	def test_appends_across_sessions(self, tmp_path: Path) -> None:
		path = tmp_path / "audit.jsonl"
		for event in ("detected", "approved"):
			with AuditLog(path) as audit:
				audit.emit(event)
		assert [r["event_type"] for r in read_audit_log(path)] == ["detected", "approved"]

	def test_default_timestamp(self, tmp_path: Path) -> None:
		path = tmp_path / "audit.jsonl"
		with AuditLog(path) as audit:
			audit.emit("feedback")
		assert read_audit_log(path)[0]["timestamp"]


class TestReadAuditLog:
	def test_missing_file(self, tmp_path: Path) -> None:
		assert read_audit_log(tmp_path / "none.jsonl") == []

	def test_skips_blank_lines(self, tmp_path: Path) -> None:
		path = tmp_path / "audit.jsonl"
		path.write_text('{"event_type": "a"}\n\n{"event_type": "b"}\n')
		assert [r["event_type"] for r in read_audit_log(path)] == ["a", "b"]
