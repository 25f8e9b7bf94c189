"""Performance analyzer -- response time, error rate, dataset size, repeated actions."""

from __future__ import annotations

from agentic.analyzers.base import (
	BaseAnalyzer,
	action_counts,
	as_float,
	make_finding,
	make_plan,
	make_suggestion,
)
from agentic.constants import (
	CATEGORY_PERFORMANCE,
	ERROR_RATE_CRITICAL,
	ERROR_RATE_WARNING,
	PAGINATION_THRESHOLD,
	REPEATED_ACTION_THRESHOLD,
	RESPONSE_TIME_CRITICAL_MS,
	RESPONSE_TIME_WARNING_MS,
	ROLE_OPTIMIZER,
)
from agentic.models import AgentAnalysis, Finding, ImprovementSuggestion, SystemSnapshot


class PerformanceAnalyzer(BaseAnalyzer):
	role = ROLE_OPTIMIZER
	name = "Performance Optimizer"
	capabilities = (
		"Performance analysis",
		"Resource optimization",
		"Caching strategies",
		"Query optimization",
		"Load time improvement",
	)

	async def analyze(self, snapshot: SystemSnapshot) -> AgentAnalysis:
		findings: list[Finding] = []
		suggestions: list[ImprovementSuggestion] = []

		response_time = as_float(snapshot.metrics.avg_response_time)
		error_rate = as_float(snapshot.metrics.error_rate)
		record_count = len(snapshot.records)

		latency = self._check_latency(response_time, error_rate)
		if latency is not None:
			findings.append(latency)

		if record_count > PAGINATION_THRESHOLD:
			findings.append(make_finding(
				CATEGORY_PERFORMANCE,
				"warning",
				f"Large dataset ({record_count} records) rendered without pagination",
				{"count": record_count, "recommended": "pagination"},
			))

		repeated = self._check_repeated_actions(snapshot)
		findings.extend(repeated)

		if response_time > RESPONSE_TIME_WARNING_MS:
			suggestions.append(self._suggest_caching())
		if record_count > PAGINATION_THRESHOLD:
			suggestions.append(self._suggest_pagination())
		if repeated:
			suggestions.append(self._suggest_memoization([f.evidence["action_type"] for f in repeated]))

		return self._analysis(findings, suggestions)

	def _check_latency(self, response_time: float, error_rate: float) -> Finding | None:
		if response_time <= RESPONSE_TIME_WARNING_MS and error_rate <= ERROR_RATE_WARNING:
			return None
		critical = response_time > RESPONSE_TIME_CRITICAL_MS or error_rate > ERROR_RATE_CRITICAL
		return make_finding(
			CATEGORY_PERFORMANCE,
			"critical" if critical else "warning",
			f"Performance issues detected: avg response time {response_time:.0f}ms, "
			f"error rate {error_rate * 100:.1f}%",
			{
				"avg_response_time": response_time,
				"error_rate": error_rate,
				"threshold": {"response_time": RESPONSE_TIME_WARNING_MS, "error_rate": ERROR_RATE_WARNING},
			},
		)

	def _check_repeated_actions(self, snapshot: SystemSnapshot) -> list[Finding]:
		"""One finding per action type that recurs past the threshold."""
		return [
			make_finding(
				CATEGORY_PERFORMANCE,
				"info",
				f"High frequency of {action_type!r} operations ({count}), consider caching",
				{"action_type": action_type, "count": count, "suggestion": "memoization"},
			)
			for action_type, count in sorted(action_counts(snapshot.user_actions).items())
			if count > REPEATED_ACTION_THRESHOLD
		]

	def _suggest_caching(self) -> ImprovementSuggestion:
		return make_suggestion(
			CATEGORY_PERFORMANCE,
			"high",
			"Implement intelligent caching layer",
			"Cache frequently accessed data and computed results to reduce load times",
			"Performance metrics show slow response times that caching can reduce",
			"Reduce average response time by 40-60%",
			automatable=True,
			safety_score=85,
			plan=make_plan(
				steps=[
					"Cache static reference data",
					"Add memory cache for computed filters",
					"Define cache invalidation strategy",
					"Monitor cache hit rates",
				],
				risks=[
					"Stale data if invalidation fails",
					"Increased memory usage",
					"Cache synchronization complexity",
				],
				rollback=["Disable caching layer", "Clear all cache entries", "Revert to direct data access"],
				validation=["Response time reduced by >40%", "Cache hit rate >70%", "No stale data incidents"],
			),
		)

	def _suggest_pagination(self) -> ImprovementSuggestion:
		return make_suggestion(
			CATEGORY_PERFORMANCE,
			"medium",
			"Add pagination for large datasets",
			"Paginate large record lists so rendering and filtering stay fast",
			"Large dataset causing slow rendering and filtering",
			"Improve render performance by 70-80% with large datasets",
			automatable=True,
			safety_score=95,
			plan=make_plan(
				steps=[
					"Add paginated list view",
					"Add page size controls",
					"Make filtering pagination-aware",
				],
				risks=["User workflow disruption", "Selection state across pages"],
				rollback=["Disable pagination", "Show all items in a single view"],
				validation=["Page load time <500ms", "Selection preserved across pages"],
			),
		)

	def _suggest_memoization(self, action_types: list[str]) -> ImprovementSuggestion:
		return make_suggestion(
			CATEGORY_PERFORMANCE,
			"medium",
			"Memoize results of frequently repeated operations",
			f"Cache results for repeated operations: {', '.join(action_types)}",
			f"Operations recur more than {REPEATED_ACTION_THRESHOLD} times in recent activity",
			"Cut redundant recomputation for the most common user operations",
			automatable=True,
			safety_score=90,
			plan=make_plan(
				steps=["Key results by operation parameters", "Invalidate on underlying data change"],
				risks=["Serving outdated results"],
				rollback=["Disable memoization"],
				validation=["Repeated operation latency reduced by >50%"],
			),
		)
