"""Analyzer roster: one class per role, constructed by role."""

from __future__ import annotations

from agentic.analyzers.base import Analyzer, BaseAnalyzer, make_finding, make_plan, make_suggestion
from agentic.analyzers.data_quality import DataQualityAnalyzer
from agentic.analyzers.performance import PerformanceAnalyzer
from agentic.analyzers.security import SecurityAnalyzer
from agentic.analyzers.usability import UsabilityAnalyzer
from agentic.clock import Clock
from agentic.constants import AGENT_ROLES

ANALYZER_TYPES: dict[str, type[BaseAnalyzer]] = {
	cls.role: cls
	for cls in (DataQualityAnalyzer, PerformanceAnalyzer, SecurityAnalyzer, UsabilityAnalyzer)
}


def build_analyzer(role: str, clock: Clock | None = None) -> BaseAnalyzer:
	try:
		cls = ANALYZER_TYPES[role]
	except KeyError:
		raise ValueError(f"Unknown analyzer role: {role!r}") from None
	return cls(clock=clock)


def default_analyzers(clock: Clock | None = None) -> list[BaseAnalyzer]:
	"""One analyzer per known role, in roster order."""
	return [build_analyzer(role, clock) for role in AGENT_ROLES]


__all__ = [
	"ANALYZER_TYPES",
	"Analyzer",
	"BaseAnalyzer",
	"DataQualityAnalyzer",
	"PerformanceAnalyzer",
	"SecurityAnalyzer",
	"UsabilityAnalyzer",
	"build_analyzer",
	"default_analyzers",
	"make_finding",
	"make_plan",
	"make_suggestion",
]
