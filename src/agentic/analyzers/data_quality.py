"""Data-quality analyzer -- freshness, missing fields, and completeness of business records."""

from __future__ import annotations

from typing import Any

from agentic.analyzers.base import BaseAnalyzer, has_value, make_finding, make_plan, make_suggestion
from agentic.clock import parse_timestamp
from agentic.constants import (
	CATEGORY_DATA_QUALITY,
	COMPLETENESS_CRITICAL,
	COMPLETENESS_FIELDS,
	COMPLETENESS_WARNING,
	ROLE_DATA_ANALYZER,
	STALE_AFTER_DAYS,
	STALE_CRITICAL_RATIO,
)
from agentic.models import AgentAnalysis, Finding, ImprovementSuggestion, SystemSnapshot


def _last_updated(record: dict[str, Any]) -> Any:
	health = record.get("healthScore")
	if isinstance(health, dict) and health.get("lastUpdated"):
		return health["lastUpdated"]
	return record.get("lastUpdated") or record.get("updatedAt")


class DataQualityAnalyzer(BaseAnalyzer):
	role = ROLE_DATA_ANALYZER
	name = "Data Analyzer"
	capabilities = (
		"Data quality assessment",
		"Pattern detection",
		"Data freshness monitoring",
		"Missing data identification",
		"Anomaly detection",
	)

	async def analyze(self, snapshot: SystemSnapshot) -> AgentAnalysis:
		records = [r for r in snapshot.records if isinstance(r, dict)]
		findings: list[Finding] = []
		suggestions: list[ImprovementSuggestion] = []

		stale = self._check_freshness(records)
		if stale is not None:
			findings.append(stale)
		findings.extend(self._check_missing_fields(records))
		completeness = self._check_completeness(records)
		if completeness is not None:
			findings.append(completeness)

		if any(f.category == CATEGORY_DATA_QUALITY for f in findings):
			suggestions.append(self._suggest_enrichment(findings))
		if stale is not None:
			suggestions.append(self._suggest_refresh())

		return self._analysis(findings, suggestions)

	def _check_freshness(self, records: list[dict[str, Any]]) -> Finding | None:
		"""Records whose freshness timestamp is older than the staleness window."""
		now = self._clock.now()
		stale_count = 0
		for r in records:
			updated = parse_timestamp(_last_updated(r))
			if updated is None:
				continue
			if (now - updated).total_seconds() / 86400 > STALE_AFTER_DAYS:
				stale_count += 1

		if stale_count == 0:
			return None
		ratio = stale_count / len(records)
		return make_finding(
			CATEGORY_DATA_QUALITY,
			"critical" if ratio > STALE_CRITICAL_RATIO else "warning",
			f"Found {stale_count} records with stale data (>{STALE_AFTER_DAYS} days old)",
			{
				"stale_count": stale_count,
				"total_records": len(records),
				"percentage": round(ratio * 100, 1),
			},
		)

	def _check_missing_fields(self, records: list[dict[str, Any]]) -> list[Finding]:
		findings: list[Finding] = []
		missing_revenue = sum(1 for r in records if not has_value(r, "estimatedRevenue"))
		missing_signals = sum(1 for r in records if not has_value(r, "growthSignals"))

		if missing_revenue:
			findings.append(make_finding(
				CATEGORY_DATA_QUALITY,
				"info",
				f"{missing_revenue} records missing revenue estimates",
				{"incomplete_count": missing_revenue, "field": "estimatedRevenue"},
			))
		if missing_signals:
			findings.append(make_finding(
				CATEGORY_DATA_QUALITY,
				"warning",
				f"{missing_signals} records have no growth signals",
				{"missing_signals_count": missing_signals, "field": "growthSignals"},
			))
		return findings

	def _check_completeness(self, records: list[dict[str, Any]]) -> Finding | None:
		"""Average share of expected fields that are filled, as a percentage."""
		if not records:
			return None
		total = 0.0
		for r in records:
			filled = sum(1 for key in COMPLETENESS_FIELDS if has_value(r, key))
			total += filled / len(COMPLETENESS_FIELDS)
		avg = total / len(records) * 100

		if avg >= COMPLETENESS_WARNING:
			return None
		return make_finding(
			CATEGORY_DATA_QUALITY,
			"critical" if avg < COMPLETENESS_CRITICAL else "warning",
			f"Average data completeness is {avg:.1f}%",
			{"avg_completeness": round(avg, 1), "threshold": COMPLETENESS_WARNING},
		)

	def _suggest_enrichment(self, findings: list[Finding]) -> ImprovementSuggestion:
		return make_suggestion(
			CATEGORY_DATA_QUALITY,
			"high",
			"Implement automated data enrichment pipeline",
			"Create a background process to fill missing data fields from external sources and inference",
			"Data quality issues detected: " + "; ".join(f.description for f in findings),
			"Improve data completeness to >90%, enabling better decision-making",
			automatable=True,
			safety_score=75,
			plan=make_plan(
				steps=[
					"Create data enrichment service",
					"Integrate external data sources",
					"Infer missing fields from related records",
					"Schedule periodic enrichment jobs",
				],
				risks=[
					"External API rate limits",
					"Accuracy of third-party data",
					"Increased processing time",
				],
				rollback=[
					"Disable enrichment service",
					"Revert to manual data entry",
					"Clear enriched data flags",
				],
				validation=[
					"Data completeness >90%",
					"No data quality regressions",
					"Enrichment accuracy >85%",
				],
			),
		)

	def _suggest_refresh(self) -> ImprovementSuggestion:
		return make_suggestion(
			CATEGORY_DATA_QUALITY,
			"medium",
			"Enable scheduled refresh of stale records",
			"Run a scheduled job that refreshes records older than the staleness window",
			"Detected stale records affecting decision quality",
			f"Keep all data fresher than {STALE_AFTER_DAYS} days, improving prioritization accuracy",
			automatable=True,
			safety_score=90,
			plan=make_plan(
				steps=[
					"Create refresh scheduler",
					"Recalculate health scores for stale records",
					"Track refresh status per record",
					"Monitor refresh job outcomes",
				],
				risks=["Increased system load", "API rate limits from external sources"],
				rollback=["Disable scheduler", "Revert to manual refresh"],
				validation=[
					f"All records <{STALE_AFTER_DAYS} days old",
					"Refresh job success rate >95%",
					"No performance degradation",
				],
			),
		)
