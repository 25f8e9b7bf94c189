"""Council -- runs every enabled analyzer against one snapshot and aggregates the results."""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from typing import Iterable

from agentic.analyzers import Analyzer, default_analyzers
from agentic.clock import Clock, SystemClock
from agentic.constants import AGENT_ROLES, DEFAULT_LIMITS
from agentic.models import AgentAnalysis, CouncilReview, SystemSnapshot

logger = logging.getLogger(__name__)


class Council:
	"""Fan-out/fan-in over the analyzer roster.

	Each enabled analyzer runs as its own task with a timeout. A raise or a
	timeout drops that analyzer from the review; the other analyzers are
	unaffected and the review still completes.
	"""

	def __init__(
		self,
		analyzers: Iterable[Analyzer] | None = None,
		enabled_roles: Iterable[str] | None = None,
		timeout: float = DEFAULT_LIMITS["analyzer_timeout"],
		clock: Clock | None = None,
	) -> None:
		self._clock = clock or SystemClock()
		self._analyzers: list[Analyzer] = (
			list(analyzers) if analyzers is not None else list(default_analyzers(self._clock))
		)
		self._enabled: set[str] = set(enabled_roles) if enabled_roles is not None else set(AGENT_ROLES)
		self.timeout = timeout
		self._current_review: CouncilReview | None = None

	@property
	def analyzers(self) -> list[Analyzer]:
		return list(self._analyzers)

	@property
	def enabled_roles(self) -> frozenset[str]:
		return frozenset(self._enabled)

	@property
	def current_review(self) -> CouncilReview | None:
		"""The most recent completed review, if any."""
		return self._current_review

	def set_enabled_roles(self, roles: Iterable[str]) -> None:
		self._enabled = set(roles)

	def active_analyzers(self) -> list[Analyzer]:
		return [a for a in self._analyzers if a.role in self._enabled]

	def add_analyzer(self, analyzer: Analyzer) -> None:
		self._analyzers.append(analyzer)
		logger.info("Added %s (%s) to the council", analyzer.name, analyzer.role)

	def remove_analyzer(self, role: str) -> None:
		"""Remove the first analyzer with this role. Unknown roles are ignored."""
		for i, a in enumerate(self._analyzers):
			if a.role == role:
				removed = self._analyzers.pop(i)
				logger.info("Removed %s (%s) from the council", removed.name, removed.role)
				return

	async def run_review(self, snapshot: SystemSnapshot) -> CouncilReview:
		"""Run all enabled analyzers concurrently and wait for every one to settle."""
		active = self.active_analyzers()
		review = CouncilReview(started_at=self._clock.now().isoformat())
		logger.info(
			"Council review %s started with %d analyzer(s): %s",
			review.id, len(active), ", ".join(a.role for a in active),
		)

		results = await asyncio.gather(
			*(self._run_one(a, snapshot) for a in active),
			return_exceptions=True,
		)

		# gather returns results in submission order, so roster order is kept.
		for analyzer, result in zip(active, results):
			if isinstance(result, asyncio.TimeoutError):
				logger.warning("Analyzer %s timed out after %.1fs", analyzer.role, self.timeout)
				review.failed_agents.append(analyzer.role)
				continue
			if isinstance(result, (Exception, asyncio.CancelledError)):
				logger.warning("Analyzer %s failed: %r", analyzer.role, result)
				review.failed_agents.append(analyzer.role)
				continue
			if isinstance(result, BaseException):
				raise result
			if not isinstance(result, AgentAnalysis):
				logger.warning("Analyzer %s returned %s, expected AgentAnalysis", analyzer.role, type(result).__name__)
				review.failed_agents.append(analyzer.role)
				continue
			review.analyses.append(result)
			review.agents.append(analyzer.role)

		review.completed_at = self._clock.now().isoformat()
		self._current_review = review
		logger.info(
			"Council review %s completed: %d finding(s), %d suggestion(s), %d failed analyzer(s)",
			review.id, len(review.findings), len(review.improvements), len(review.failed_agents),
		)
		return review

	async def _run_one(self, analyzer: Analyzer, snapshot: SystemSnapshot) -> AgentAnalysis:
		return await asyncio.wait_for(analyzer.analyze(snapshot), timeout=self.timeout)

	def improvement_summary(self) -> dict[str, object]:
		"""Counts of the last review's suggestions by category and priority."""
		if self._current_review is None:
			return {"by_category": {}, "by_priority": {}, "total": 0}
		suggestions = self._current_review.improvements
		return {
			"by_category": dict(Counter(s.category for s in suggestions)),
			"by_priority": dict(Counter(s.priority for s in suggestions)),
			"total": len(suggestions),
		}
