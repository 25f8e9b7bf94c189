"""Tests for clock helpers and the dry-run applier."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest
from conftest import NOW, make_snapshot, suggestion

from agentic.applier import simulate_change
from agentic.clock import FixedClock, SystemClock, calendar_day, parse_timestamp


class TestParseTimestamp:
	def test_iso_with_z(self) -> None:
		assert parse_timestamp("2026-03-10T12:00:00Z") == NOW

	def test_naive_iso_is_utc(self) -> None:
		assert parse_timestamp("2026-03-10T12:00:00") == NOW

	def test_epoch_millis(self) -> None:
		assert parse_timestamp(NOW.timestamp() * 1000) == NOW

	def test_datetime_passthrough(self) -> None:
		assert parse_timestamp(NOW) is NOW

	@pytest.mark.parametrize("value", ["", "soon", None, True, {}, [], float("inf")])
	def test_unusable(self, value: object) -> None:
		assert parse_timestamp(value) is None


class TestClocks:
	def test_fixed_clock_moves_only_when_told(self) -> None:
		clock = FixedClock(NOW)
		assert clock.now() == NOW
		clock.advance(hours=13)
		assert clock.now() == NOW + timedelta(hours=13)
		clock.set(datetime(2030, 1, 1))
		assert clock.now() == datetime(2030, 1, 1, tzinfo=timezone.utc)

	def test_system_clock_is_aware(self) -> None:
		assert SystemClock().now().tzinfo is not None

	def test_calendar_day_in_zone(self) -> None:
		late = datetime(2026, 3, 10, 23, 30, tzinfo=timezone.utc)
		assert calendar_day(late) == date(2026, 3, 10)
		assert calendar_day(late, timezone(timedelta(hours=2))) == date(2026, 3, 11)


class TestSimulateChange:
	@pytest.mark.asyncio
	async def test_reports_success_with_projection(self) -> None:
		s = suggestion(title="Add caching")
		result = await simulate_change(s, make_snapshot(avg_response_time=1500, user_satisfaction_score=9.5))

		assert result.success is True
		assert result.changes[0] == "Applied Add caching"
		assert result.metrics["before"]["performance_score"] == 0.0
		assert result.metrics["after"]["performance_score"] == 15.0
		assert result.metrics["after"]["user_satisfaction"] == 10.0
		assert "Add caching" in result.feedback
