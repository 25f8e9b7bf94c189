"""Tests for the four analyzer heuristics."""

from __future__ import annotations

from datetime import timedelta

import pytest
from conftest import NOW, actions, full_record, make_snapshot, stale_snapshot

from agentic.analyzers import (
	DataQualityAnalyzer,
	PerformanceAnalyzer,
	SecurityAnalyzer,
	UsabilityAnalyzer,
	build_analyzer,
	default_analyzers,
)
from agentic.clock import FixedClock
from agentic.models import SystemSnapshot


class TestDataQualityAnalyzer:
	@pytest.mark.asyncio
	async def test_all_stale_is_critical(self, clock: FixedClock) -> None:
		analysis = await DataQualityAnalyzer(clock=clock).analyze(stale_snapshot())

		assert analysis.role == "data-analyzer"
		assert len(analysis.findings) == 1
		stale = analysis.findings[0]
		assert stale.severity == "critical"
		assert stale.evidence["stale_count"] == 5
		assert stale.evidence["percentage"] == 100.0
		titles = [s.title for s in analysis.suggestions]
		assert titles == ["Implement automated data enrichment pipeline", "Enable scheduled refresh of stale records"]
		assert [s.safety_score for s in analysis.suggestions] == [75, 90]

	@pytest.mark.asyncio
	async def test_few_stale_is_warning(self, clock: FixedClock) -> None:
		records = [full_record(NOW - timedelta(days=10))] + [full_record() for _ in range(4)]
		analysis = await DataQualityAnalyzer(clock=clock).analyze(make_snapshot(records))
		assert analysis.findings[0].severity == "warning"

	@pytest.mark.asyncio
	async def test_alternate_timestamp_fields(self, clock: FixedClock) -> None:
		old = (NOW - timedelta(days=9)).isoformat()
		records = [
			full_record(healthScore={"grade": "B"}, lastUpdated=old),
			full_record(healthScore={"grade": "B"}, updatedAt=int((NOW - timedelta(days=30)).timestamp() * 1000)),
		]
		analysis = await DataQualityAnalyzer(clock=clock).analyze(make_snapshot(records))
		assert analysis.findings[0].evidence["stale_count"] == 2

	@pytest.mark.asyncio
	async def test_fresh_complete_records_produce_nothing(self, clock: FixedClock) -> None:
		records = [full_record(NOW - timedelta(days=3)) for _ in range(3)]
		analysis = await DataQualityAnalyzer(clock=clock).analyze(make_snapshot(records))
		assert analysis.findings == []
		assert analysis.suggestions == []

	@pytest.mark.asyncio
	async def test_missing_fields(self, clock: FixedClock) -> None:
		records = [full_record(estimatedRevenue=None), full_record(growthSignals=[]), full_record()]
		analysis = await DataQualityAnalyzer(clock=clock).analyze(make_snapshot(records))

		by_field = {f.evidence["field"]: f for f in analysis.findings}
		assert by_field["estimatedRevenue"].severity == "info"
		assert by_field["estimatedRevenue"].evidence["incomplete_count"] == 1
		assert by_field["growthSignals"].severity == "warning"
		assert [s.priority for s in analysis.suggestions] == ["high"]

	@pytest.mark.asyncio
	async def test_completeness_warning(self, clock: FixedClock) -> None:
		records = [full_record(narrative="", defaultDate=None, industry="")]
		analysis = await DataQualityAnalyzer(clock=clock).analyze(make_snapshot(records))

		completeness = [f for f in analysis.findings if "avg_completeness" in (f.evidence or {})]
		assert len(completeness) == 1
		assert completeness[0].severity == "warning"
		assert completeness[0].evidence["avg_completeness"] == 70.0

	@pytest.mark.asyncio
	async def test_completeness_critical(self, clock: FixedClock) -> None:
		analysis = await DataQualityAnalyzer(clock=clock).analyze(make_snapshot([{"companyName": "Solo"}]))
		completeness = [f for f in analysis.findings if "avg_completeness" in (f.evidence or {})]
		assert completeness[0].severity == "critical"
		assert completeness[0].evidence["avg_completeness"] == 10.0

	@pytest.mark.asyncio
	async def test_no_records(self, clock: FixedClock) -> None:
		analysis = await DataQualityAnalyzer(clock=clock).analyze(make_snapshot())
		assert analysis.findings == []
		assert analysis.suggestions == []

	@pytest.mark.asyncio
	async def test_malformed_records_are_skipped(self, clock: FixedClock) -> None:
		records = [
			full_record(healthScore="excellent", lastUpdated="yesterday-ish"),
			full_record(healthScore={"lastUpdated": None}, updatedAt=True),
		]
		analysis = await DataQualityAnalyzer(clock=clock).analyze(make_snapshot(records))
		assert not any("stale_count" in (f.evidence or {}) for f in analysis.findings)


class TestPerformanceAnalyzer:
	@pytest.mark.asyncio
	async def test_healthy_metrics(self, clock: FixedClock) -> None:
		analysis = await PerformanceAnalyzer(clock=clock).analyze(make_snapshot(avg_response_time=400))
		assert analysis.findings == []
		assert analysis.suggestions == []

	@pytest.mark.asyncio
	async def test_slow_response_warning_and_caching(self, clock: FixedClock) -> None:
		analysis = await PerformanceAnalyzer(clock=clock).analyze(make_snapshot(avg_response_time=1500))

		assert [f.severity for f in analysis.findings] == ["warning"]
		assert len(analysis.suggestions) == 1
		caching = analysis.suggestions[0]
		assert caching.title == "Implement intelligent caching layer"
		assert caching.priority == "high"
		assert caching.safety_score == 85
		assert caching.implementation is not None
		assert caching.implementation.rollback_plan

	@pytest.mark.asyncio
	async def test_very_slow_is_critical(self, clock: FixedClock) -> None:
		analysis = await PerformanceAnalyzer(clock=clock).analyze(make_snapshot(avg_response_time=2500))
		assert analysis.findings[0].severity == "critical"

	@pytest.mark.asyncio
	async def test_error_rate_alone_flags_without_caching(self, clock: FixedClock) -> None:
		analysis = await PerformanceAnalyzer(clock=clock).analyze(
			make_snapshot(avg_response_time=300, error_rate=0.08),
		)
		assert [f.severity for f in analysis.findings] == ["warning"]
		assert analysis.suggestions == []

	@pytest.mark.asyncio
	async def test_large_dataset_suggests_pagination(self, clock: FixedClock) -> None:
		records = [{"companyName": str(i)} for i in range(501)]
		analysis = await PerformanceAnalyzer(clock=clock).analyze(make_snapshot(records))

		assert analysis.findings[0].evidence["count"] == 501
		assert [(s.title, s.safety_score) for s in analysis.suggestions] == [
			("Add pagination for large datasets", 95),
		]

	@pytest.mark.asyncio
	async def test_repeated_actions(self, clock: FixedClock) -> None:
		snapshot = make_snapshot(actions=actions("filter", 101) + actions("search", 100))
		analysis = await PerformanceAnalyzer(clock=clock).analyze(snapshot)

		assert [f.evidence["action_type"] for f in analysis.findings] == ["filter"]
		assert analysis.findings[0].severity == "info"
		assert len(analysis.suggestions) == 1
		assert "filter" in analysis.suggestions[0].description


class TestSecurityAnalyzer:
	@pytest.mark.asyncio
	async def test_encryption_always_proposed(self, clock: FixedClock) -> None:
		analysis = await SecurityAnalyzer(clock=clock).analyze(make_snapshot())

		assert analysis.findings == []
		assert [s.title for s in analysis.suggestions] == ["Enable encryption for sensitive data fields"]
		assert analysis.suggestions[0].category == "security"
		assert analysis.suggestions[0].safety_score == 80

	@pytest.mark.asyncio
	async def test_financial_fields(self, clock: FixedClock) -> None:
		records = [full_record(), full_record(estimatedRevenue="lots", uccFilings=[]), {"companyName": "x"}]
		analysis = await SecurityAnalyzer(clock=clock).analyze(make_snapshot(records))

		assert len(analysis.findings) == 1
		finding = analysis.findings[0]
		assert finding.severity == "warning"
		assert finding.evidence == {"count": 1, "fields": ["estimatedRevenue", "lienAmount"]}

	@pytest.mark.asyncio
	async def test_export_burst_warning(self, clock: FixedClock) -> None:
		snapshot = make_snapshot(actions=actions("export", 51, NOW - timedelta(hours=2)))
		analysis = await SecurityAnalyzer(clock=clock).analyze(snapshot)

		assert [f.severity for f in analysis.findings] == ["warning"]
		assert analysis.findings[0].evidence["export_count"] == 51
		assert len(analysis.suggestions) == 1

	@pytest.mark.asyncio
	async def test_export_burst_critical_adds_hardening(self, clock: FixedClock) -> None:
		snapshot = make_snapshot(actions=actions("export", 101))
		analysis = await SecurityAnalyzer(clock=clock).analyze(snapshot)

		assert analysis.findings[0].severity == "critical"
		hardening = analysis.suggestions[0]
		assert hardening.priority == "critical"
		assert hardening.safety_score == 70
		assert analysis.suggestions[1].title == "Enable encryption for sensitive data fields"

	@pytest.mark.asyncio
	async def test_old_exports_ignored(self, clock: FixedClock) -> None:
		snapshot = make_snapshot(actions=actions("export", 80, NOW - timedelta(days=2)) + actions("export", 10))
		analysis = await SecurityAnalyzer(clock=clock).analyze(snapshot)
		assert analysis.findings == []

	@pytest.mark.asyncio
	async def test_window_follows_clock(self, clock: FixedClock) -> None:
		snapshot = make_snapshot(actions=actions("export", 60))
		clock.advance(hours=25)
		analysis = await SecurityAnalyzer(clock=clock).analyze(snapshot)
		assert analysis.findings == []


class TestUsabilityAnalyzer:
	@pytest.mark.asyncio
	async def test_satisfied_users(self, clock: FixedClock) -> None:
		analysis = await UsabilityAnalyzer(clock=clock).analyze(make_snapshot(user_satisfaction_score=7))
		assert analysis.findings == []
		assert analysis.suggestions == []

	@pytest.mark.asyncio
	async def test_low_satisfaction(self, clock: FixedClock) -> None:
		analysis = await UsabilityAnalyzer(clock=clock).analyze(make_snapshot(user_satisfaction_score=5.5))

		assert [f.severity for f in analysis.findings] == ["warning"]
		assert analysis.findings[0].evidence["score"] == 5.5
		assert [s.title for s in analysis.suggestions] == ["Enhance user interface with contextual help"]
		assert analysis.suggestions[0].safety_score == 85

	@pytest.mark.asyncio
	async def test_search_churn(self, clock: FixedClock) -> None:
		analysis = await UsabilityAnalyzer(clock=clock).analyze(make_snapshot(actions=actions("search", 101)))
		assert [(f.severity, f.evidence["count"]) for f in analysis.findings] == [("info", 101)]
		assert analysis.suggestions == []

	@pytest.mark.asyncio
	async def test_claim_export_workflow(self, clock: FixedClock) -> None:
		snapshot = make_snapshot(actions=actions("claim", 21) + actions("export", 21))
		analysis = await UsabilityAnalyzer(clock=clock).analyze(snapshot)
		assert [s.title for s in analysis.suggestions] == ["Add bulk workflow shortcuts"]

	@pytest.mark.asyncio
	async def test_workflow_needs_both_actions(self, clock: FixedClock) -> None:
		snapshot = make_snapshot(actions=actions("claim", 50) + actions("export", 20))
		analysis = await UsabilityAnalyzer(clock=clock).analyze(snapshot)
		assert analysis.suggestions == []


class TestRoster:
	def test_build_by_role(self) -> None:
		assert isinstance(build_analyzer("security"), SecurityAnalyzer)
		assert isinstance(build_analyzer("ux-enhancer"), UsabilityAnalyzer)

	def test_unknown_role(self) -> None:
		with pytest.raises(ValueError, match="oracle"):
			build_analyzer("oracle")

	def test_default_roster(self, clock: FixedClock) -> None:
		roster = default_analyzers(clock)
		assert [a.role for a in roster] == ["data-analyzer", "optimizer", "security", "ux-enhancer"]
		assert len({a.id for a in roster}) == 4

	@pytest.mark.asyncio
	async def test_every_analyzer_tolerates_junk(self, clock: FixedClock) -> None:
		snapshot = SystemSnapshot.from_dict({
			"records": [{"healthScore": 5, "uccFilings": "none", "growthSignals": None}, None, 3],
			"userActions": [{"type": None}, {"timestamp": 12}],
			"metrics": {"avgResponseTime": "n/a"},
		})
		for analyzer in default_analyzers(clock):
			analysis = await analyzer.analyze(snapshot)
			assert analysis.role == analyzer.role
