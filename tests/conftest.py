"""Shared fixtures: a controllable clock, snapshot builders, and a scripted analyzer."""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

import pytest

from agentic.clock import FixedClock
from agentic.models import (
	AgentAnalysis,
	Finding,
	ImprovementSuggestion,
	PerformanceMetrics,
	SystemSnapshot,
	UserAction,
	_new_id,
)

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture()
def clock() -> FixedClock:
	return FixedClock(NOW)


def make_snapshot(
	records: list[dict[str, Any]] | None = None,
	actions: list[UserAction] | None = None,
	**metrics: float,
) -> SystemSnapshot:
	return SystemSnapshot(
		records=tuple(records or []),
		user_actions=tuple(actions or []),
		metrics=PerformanceMetrics(**metrics),
		timestamp=NOW.isoformat(),
	)


def full_record(updated: datetime = NOW, **overrides: Any) -> dict[str, Any]:
	"""A record with every expected field filled in."""
	record: dict[str, Any] = {
		"companyName": "Acme",
		"industry": "retail",
		"state": "NY",
		"priorityScore": 80,
		"defaultDate": "2024-01-01",
		"estimatedRevenue": 1_000_000,
		"narrative": "Growing fast",
		"healthScore": {"grade": "A", "lastUpdated": updated.isoformat()},
		"uccFilings": [{"lienAmount": 50_000}],
		"growthSignals": ["hiring"],
	}
	record.update(overrides)
	return record


def stale_snapshot() -> SystemSnapshot:
	"""Every record is 10 days old; otherwise healthy."""
	return make_snapshot([full_record(NOW - timedelta(days=10)) for _ in range(5)])


def actions(kind: str, count: int, at: datetime = NOW) -> list[UserAction]:
	return [UserAction(type=kind, timestamp=at.isoformat()) for _ in range(count)]


def suggestion(
	category: str = "performance",
	safety_score: float = 90,
	automatable: bool = True,
	title: str = "",
	priority: str = "medium",
) -> ImprovementSuggestion:
	return ImprovementSuggestion(
		category=category,
		priority=priority,  # type: ignore[arg-type]
		title=title or f"{category} fix {_new_id()}",
		automatable=automatable,
		safety_score=safety_score,
	)


class ScriptedAnalyzer:
	"""Analyzer double: builds fresh suggestions per call, can fail or stall."""

	def __init__(
		self,
		role: str,
		factory: Callable[[], list[ImprovementSuggestion]] | None = None,
		findings: list[Finding] | None = None,
		error: Exception | None = None,
		delay: float = 0.0,
	) -> None:
		self.id = _new_id()
		self.role = role
		self.name = f"Scripted {role}"
		self.capabilities = ("testing",)
		self._factory = factory or (lambda: [])
		self._findings = findings or []
		self._error = error
		self._delay = delay
		self.calls = 0

	async def analyze(self, snapshot: SystemSnapshot) -> AgentAnalysis:
		self.calls += 1
		if self._delay:
			await asyncio.sleep(self._delay)
		if self._error is not None:
			raise self._error
		return AgentAnalysis(
			agent_id=self.id,
			role=self.role,
			findings=list(self._findings),
			suggestions=self._factory(),
		)
