"""Data models for the improvement council and engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Literal
from uuid import uuid4

from agentic.constants import (
	ALLOWED_TRANSITIONS,
	CATEGORIES,
	FEEDBACK_TYPES,
	PRIORITIES,
	SEVERITIES,
	STATUS_DETECTED,
	STATUS_ORDER,
	TERMINAL_STATUSES,
)
from agentic.errors import InvalidTransitionError

Severity = Literal["info", "warning", "critical"]
Priority = Literal["critical", "high", "medium", "low"]
FeedbackType = Literal["user-feedback", "system-metrics", "agent-review"]


def _now_iso() -> str:
	return datetime.now(timezone.utc).isoformat()


def _new_id() -> str:
	return uuid4().hex[:12]


# -- Inbound snapshot --


@dataclass(frozen=True)
class UserAction:
	"""A single recent user action."""

	type: str = ""
	timestamp: str = ""
	details: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class PerformanceMetrics:
	avg_response_time: float = 0.0  # ms
	error_rate: float = 0.0  # 0-1
	user_satisfaction_score: float = 10.0  # 0-10
	data_freshness_score: float = 100.0  # 0-100


_METRIC_KEYS = {
	"avg_response_time": ("avg_response_time", "avgResponseTime"),
	"error_rate": ("error_rate", "errorRate"),
	"user_satisfaction_score": ("user_satisfaction_score", "userSatisfactionScore"),
	"data_freshness_score": ("data_freshness_score", "dataFreshnessScore"),
}


def _first_key(data: dict[str, Any], names: tuple[str, ...], default: Any) -> Any:
	for name in names:
		if name in data and data[name] is not None:
			return data[name]
	return default


@dataclass(frozen=True)
class SystemSnapshot:
	"""Read-only system state handed to one council review.

	`records` are opaque business records; analyzers only read the keys they
	understand and skip anything else.
	"""

	records: tuple[dict[str, Any], ...] = ()
	user_actions: tuple[UserAction, ...] = ()
	metrics: PerformanceMetrics = field(default_factory=PerformanceMetrics)
	timestamp: str = field(default_factory=_now_iso)

	@classmethod
	def from_dict(cls, data: dict[str, Any]) -> SystemSnapshot:
		"""Build a snapshot from JSON-shaped data (camelCase or snake_case keys)."""
		records = _first_key(data, ("records", "prospects"), [])
		raw_actions = _first_key(data, ("user_actions", "userActions"), [])
		raw_metrics = _first_key(data, ("metrics", "performance_metrics", "performanceMetrics"), {})

		actions = []
		for a in raw_actions if isinstance(raw_actions, list) else []:
			if not isinstance(a, dict):
				continue
			details = a.get("details")
			actions.append(UserAction(
				type=str(a.get("type") or ""),
				timestamp=str(a.get("timestamp") or ""),
				details=details if isinstance(details, dict) else {},
			))

		defaults = PerformanceMetrics()
		metric_values: dict[str, float] = {}
		for attr, names in _METRIC_KEYS.items():
			value = _first_key(raw_metrics, names, getattr(defaults, attr)) if isinstance(raw_metrics, dict) else None
			try:
				metric_values[attr] = float(value)
			except (TypeError, ValueError):
				metric_values[attr] = getattr(defaults, attr)

		return cls(
			records=tuple(r for r in records if isinstance(r, dict)) if isinstance(records, list) else (),
			user_actions=tuple(actions),
			metrics=PerformanceMetrics(**metric_values),
			timestamp=str(data.get("timestamp") or _now_iso()),
		)


# -- Analyzer output --


@dataclass(frozen=True)
class Finding:
	"""A severity-tagged observation produced by one analyzer."""

	category: str
	severity: Severity
	description: str
	evidence: Any = None
	id: str = field(default_factory=_new_id)

	def __post_init__(self) -> None:
		if self.category not in CATEGORIES:
			raise ValueError(f"Unknown category: {self.category!r}")
		if self.severity not in SEVERITIES:
			raise ValueError(f"Unknown severity: {self.severity!r}")


@dataclass(frozen=True)
class ImplementationPlan:
	steps: tuple[str, ...] = ()
	risks: tuple[str, ...] = ()
	rollback_plan: tuple[str, ...] = ()
	validation_criteria: tuple[str, ...] = ()


@dataclass(frozen=True)
class ImprovementSuggestion:
	"""A proposed corrective or enhancing action."""

	category: str
	priority: Priority
	title: str
	description: str = ""
	reasoning: str = ""
	estimated_impact: str = ""
	automatable: bool = False
	safety_score: float = 0.0  # 0-100, higher is safer
	implementation: ImplementationPlan | None = None
	id: str = field(default_factory=_new_id)

	def __post_init__(self) -> None:
		if self.category not in CATEGORIES:
			raise ValueError(f"Unknown category: {self.category!r}")
		if self.priority not in PRIORITIES:
			raise ValueError(f"Unknown priority: {self.priority!r}")
		if not 0 <= self.safety_score <= 100:
			raise ValueError(f"safety_score must be within [0, 100], got {self.safety_score}")


@dataclass
class AgentAnalysis:
	"""One analyzer's contribution to one review."""

	agent_id: str
	role: str
	findings: list[Finding] = field(default_factory=list)
	suggestions: list[ImprovementSuggestion] = field(default_factory=list)
	timestamp: str = field(default_factory=_now_iso)


@dataclass
class CouncilReview:
	"""Aggregate of every analyzer that ran in one cycle."""

	id: str = field(default_factory=_new_id)
	started_at: str = ""
	completed_at: str = ""
	analyses: list[AgentAnalysis] = field(default_factory=list)
	agents: list[str] = field(default_factory=list)  # roles that contributed
	failed_agents: list[str] = field(default_factory=list)  # roles that raised or timed out

	@property
	def findings(self) -> list[Finding]:
		return [f for a in self.analyses for f in a.findings]

	@property
	def improvements(self) -> list[ImprovementSuggestion]:
		return [s for a in self.analyses for s in a.suggestions]

	def origin_of(self, suggestion_id: str) -> str | None:
		"""Role of the analyzer that proposed the given suggestion."""
		for a in self.analyses:
			if any(s.id == suggestion_id for s in a.suggestions):
				return a.role
		return None


# -- Engine records --


@dataclass
class ImprovementResult:
	"""Outcome reported by the apply-change collaborator."""

	success: bool = False
	changes: list[str] = field(default_factory=list)
	metrics: dict[str, dict[str, Any]] = field(default_factory=lambda: {"before": {}, "after": {}})
	feedback: str = ""


@dataclass
class Improvement:
	"""The engine's lifecycle record for one suggestion."""

	suggestion: ImprovementSuggestion
	status: str = STATUS_DETECTED
	detected_at: str = field(default_factory=_now_iso)
	approved_at: str | None = None
	implemented_at: str | None = None
	completed_at: str | None = None
	result: ImprovementResult | None = None
	reviewed_by: list[str] = field(default_factory=list)
	status_history: list[tuple[str, str]] = field(default_factory=list)  # (status, timestamp)

	@property
	def id(self) -> str:
		return self.suggestion.id

	@property
	def is_terminal(self) -> bool:
		return self.status in TERMINAL_STATUSES

	def advance(self, status: str, at: str) -> None:
		"""Move forward in the lifecycle, refusing regressions and exits from terminal states."""
		if status not in STATUS_ORDER:
			raise ValueError(f"Unknown status: {status!r}")
		if status not in ALLOWED_TRANSITIONS[self.status]:
			raise InvalidTransitionError(self.id, self.status, status)
		self.status = status
		self.status_history.append((status, at))


@dataclass
class ExecutionHistoryEntry:
	improvement_id: str
	timestamp: str
	result: ImprovementResult
	autonomous: bool = False


@dataclass
class FeedbackLoop:
	type: FeedbackType
	data: Any = None
	id: str = field(default_factory=_new_id)
	timestamp: str = field(default_factory=_now_iso)
	processed_by: list[str] = field(default_factory=list)

	def __post_init__(self) -> None:
		if self.type not in FEEDBACK_TYPES:
			raise ValueError(f"Unknown feedback type: {self.type!r}")


@dataclass
class CycleResult:
	"""What one autonomous cycle did."""

	review: CouncilReview
	executed_improvements: list[Improvement] = field(default_factory=list)
	pending_improvements: list[Improvement] = field(default_factory=list)


@dataclass
class SystemHealth:
	total_improvements: int = 0
	implemented: int = 0
	pending: int = 0
	success_rate: float = 0.0
	avg_safety_score: float = 0.0
	executed_today: int = 0
	remaining_daily_quota: int = 0
