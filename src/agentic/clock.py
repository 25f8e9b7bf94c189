"""Injectable time source for staleness windows, burst windows and the daily quota."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Protocol


class Clock(Protocol):
	def now(self) -> datetime: ...


class SystemClock:
	"""Reads the wall clock in a fixed timezone (UTC unless told otherwise)."""

	def __init__(self, tz: timezone = timezone.utc) -> None:
		self._tz = tz

	def now(self) -> datetime:
		return datetime.now(self._tz)


class FixedClock:
	"""A clock that only moves when told to."""

	def __init__(self, start: datetime) -> None:
		if start.tzinfo is None:
			start = start.replace(tzinfo=timezone.utc)
		self._now = start

	def now(self) -> datetime:
		return self._now

	def advance(self, **kwargs: float) -> None:
		self._now = self._now + timedelta(**kwargs)

	def set(self, moment: datetime) -> None:
		if moment.tzinfo is None:
			moment = moment.replace(tzinfo=timezone.utc)
		self._now = moment


def parse_timestamp(value: object) -> datetime | None:
	"""Parse an ISO-8601 string, epoch millis, or datetime. Returns None when unusable."""
	if isinstance(value, datetime):
		return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
	if isinstance(value, (int, float)) and not isinstance(value, bool):
		try:
			return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
		except (OverflowError, OSError, ValueError):
			return None
	if isinstance(value, str) and value.strip():
		text = value.strip()
		if text.endswith("Z"):
			text = text[:-1] + "+00:00"
		try:
			parsed = datetime.fromisoformat(text)
		except ValueError:
			return None
		return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
	return None


def calendar_day(moment: datetime, tz: timezone | None = None) -> date:
	"""The calendar day of `moment`, seen from `tz` (moment's own zone when None)."""
	if tz is not None:
		moment = moment.astimezone(tz)
	return moment.date()
