"""Analyzer interface and the shared Finding/Suggestion builders."""

from __future__ import annotations

from collections import Counter
from typing import Any, Protocol, Sequence

from agentic.clock import Clock, SystemClock
from agentic.models import (
	AgentAnalysis,
	Finding,
	ImplementationPlan,
	ImprovementSuggestion,
	Priority,
	Severity,
	SystemSnapshot,
	UserAction,
	_new_id,
)


class Analyzer(Protocol):
	"""Anything the council can run: fixed identity plus one async analyze()."""

	id: str
	role: str
	name: str
	capabilities: tuple[str, ...]

	async def analyze(self, snapshot: SystemSnapshot) -> AgentAnalysis: ...


def make_finding(category: str, severity: Severity, description: str, evidence: Any = None) -> Finding:
	return Finding(category=category, severity=severity, description=description, evidence=evidence)


def make_plan(
	steps: Sequence[str] = (),
	risks: Sequence[str] = (),
	rollback: Sequence[str] = (),
	validation: Sequence[str] = (),
) -> ImplementationPlan:
	return ImplementationPlan(
		steps=tuple(steps),
		risks=tuple(risks),
		rollback_plan=tuple(rollback),
		validation_criteria=tuple(validation),
	)


def make_suggestion(
	category: str,
	priority: Priority,
	title: str,
	description: str,
	reasoning: str,
	estimated_impact: str,
	*,
	automatable: bool,
	safety_score: float,
	plan: ImplementationPlan | None = None,
) -> ImprovementSuggestion:
	return ImprovementSuggestion(
		category=category,
		priority=priority,
		title=title,
		description=description,
		reasoning=reasoning,
		estimated_impact=estimated_impact,
		automatable=automatable,
		safety_score=safety_score,
		implementation=plan,
	)


def as_float(value: Any, default: float = 0.0) -> float:
	if isinstance(value, bool):
		return default
	try:
		return float(value)
	except (TypeError, ValueError):
		return default


def has_value(record: dict[str, Any], key: str) -> bool:
	"""True when the field is present and non-empty."""
	value = record.get(key)
	if isinstance(value, (list, tuple, dict, str)):
		return len(value) > 0
	return bool(value)


def action_counts(actions: Sequence[UserAction]) -> Counter[str]:
	return Counter(a.type for a in actions if isinstance(a, UserAction) and a.type)


class BaseAnalyzer:
	"""Identity plus clock; subclasses only implement analyze()."""

	role: str = ""
	name: str = ""
	capabilities: tuple[str, ...] = ()

	def __init__(self, clock: Clock | None = None) -> None:
		self.id = _new_id()
		self._clock = clock or SystemClock()

	def _analysis(self, findings: list[Finding], suggestions: list[ImprovementSuggestion]) -> AgentAnalysis:
		return AgentAnalysis(
			agent_id=self.id,
			role=self.role,
			findings=findings,
			suggestions=suggestions,
			timestamp=self._clock.now().isoformat(),
		)

	def __repr__(self) -> str:
		return f"{type(self).__name__}(id={self.id!r}, role={self.role!r})"
