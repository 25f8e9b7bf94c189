"""Apply-change collaborators: the engine's only path to actually changing anything."""

from __future__ import annotations

import asyncio
from typing import Protocol

from agentic.models import ImprovementResult, ImprovementSuggestion, SystemSnapshot


class ChangeApplier(Protocol):
	async def __call__(self, suggestion: ImprovementSuggestion, snapshot: SystemSnapshot) -> ImprovementResult: ...


def _clamp(value: float, low: float, high: float) -> float:
	return max(low, min(high, value))


async def simulate_change(suggestion: ImprovementSuggestion, snapshot: SystemSnapshot) -> ImprovementResult:
	"""Dry-run applier: reports success with projected before/after metrics.

	Used when no real applier is wired in, so cycles can be exercised end to end.
	"""
	await asyncio.sleep(0)
	m = snapshot.metrics
	before = {
		"data_completeness": m.data_freshness_score,
		"performance_score": _clamp(100 - m.avg_response_time / 10, 0, 100),
		"security_score": _clamp(100 - m.error_rate * 100, 0, 100),
		"user_satisfaction": m.user_satisfaction_score,
	}
	after = {
		"data_completeness": min(100.0, before["data_completeness"] + 10),
		"performance_score": min(100.0, before["performance_score"] + 15),
		"security_score": min(100.0, before["security_score"] + 10),
		"user_satisfaction": min(10.0, before["user_satisfaction"] + 1),
	}
	steps = list(suggestion.implementation.steps) if suggestion.implementation else []
	return ImprovementResult(
		success=True,
		changes=[f"Applied {suggestion.title}", *steps],
		metrics={"before": before, "after": after},
		feedback=f"Successfully implemented {suggestion.title}. {suggestion.estimated_impact}".strip(),
	)
