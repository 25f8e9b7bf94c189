"""Exception types raised across the engine boundary."""

from __future__ import annotations


class AgenticError(Exception):
	"""Base class for engine-level errors."""


class ImprovementNotFoundError(AgenticError, KeyError):
	"""No tracked improvement has the requested id."""

	def __init__(self, improvement_id: str) -> None:
		super().__init__(improvement_id)
		self.improvement_id = improvement_id

	def __str__(self) -> str:
		return f"Improvement {self.improvement_id} not found"


class InvalidTransitionError(AgenticError, ValueError):
	"""A status change that would move an improvement backwards or out of a terminal state."""

	def __init__(self, improvement_id: str, current: str, requested: str) -> None:
		super().__init__(f"Improvement {improvement_id}: cannot move from {current!r} to {requested!r}")
		self.improvement_id = improvement_id
		self.current = current
		self.requested = requested


class ProgressHookError(AgenticError):
	"""A progress hook could not deliver an event."""
