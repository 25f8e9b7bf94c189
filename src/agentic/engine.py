"""Agentic engine -- decides which council proposals run without human sign-off.

Every proposal becomes a tracked Improvement. Autonomous execution is gated by
the safety threshold, the review-required categories and a per-day quota;
manual approval bypasses all three. Every execution, successful or not,
appends exactly one history entry.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from agentic.applier import ChangeApplier, simulate_change
from agentic.audit_log import AuditLog
from agentic.clock import Clock, SystemClock, calendar_day, parse_timestamp
from agentic.config import AgenticConfig
from agentic.constants import (
	DEFAULT_LIMITS,
	EVENT_CYCLE_COMPLETED,
	EVENT_CYCLE_STARTED,
	EVENT_IMPROVEMENT_EXECUTED,
	FEEDBACK_AGENT_REVIEW,
	STATUS_ANALYZING,
	STATUS_APPROVED,
	STATUS_COMPLETED,
	STATUS_DETECTED,
	STATUS_IMPLEMENTING,
	STATUS_REJECTED,
	STATUS_TESTING,
	TERMINAL_STATUSES,
)
from agentic.council import Council
from agentic.errors import ImprovementNotFoundError, InvalidTransitionError
from agentic.models import (
	CouncilReview,
	CycleResult,
	ExecutionHistoryEntry,
	FeedbackLoop,
	FeedbackType,
	Improvement,
	ImprovementResult,
	SystemHealth,
	SystemSnapshot,
)
from agentic.notifier import ProgressHook

logger = logging.getLogger(__name__)

ENGINE_ID = "agentic-engine"


def _malformed(reason: str) -> ImprovementResult:
	return ImprovementResult(success=False, feedback=f"Applier returned a malformed result: {reason}")


def _coerce_result(raw: Any) -> ImprovementResult:
	"""Accept an ImprovementResult or a dict shaped like one.

	Only a literal True counts as success. Any shape that cannot be read
	becomes an unsuccessful result instead of raising.
	"""
	if isinstance(raw, ImprovementResult):
		if not isinstance(raw.success, bool):
			return _malformed(f"success is {type(raw.success).__name__}, expected bool")
		return raw
	if not isinstance(raw, dict):
		return _malformed(f"unexpected {type(raw).__name__}")

	success = raw.get("success", False)
	if not isinstance(success, bool):
		return _malformed(f"success is {success!r}, expected true or false")

	changes = raw.get("changes") or []
	if not isinstance(changes, (list, tuple)):
		return _malformed(f"changes is {type(changes).__name__}, expected a list")

	metrics = raw.get("metrics") or {}
	if not isinstance(metrics, dict):
		return _malformed(f"metrics is {type(metrics).__name__}, expected an object")
	before = metrics.get("before") or {}
	after = metrics.get("after") or {}
	if not isinstance(before, dict) or not isinstance(after, dict):
		return _malformed("metrics.before and metrics.after must be objects")

	return ImprovementResult(
		success=success,
		changes=[str(c) for c in changes],
		metrics={"before": dict(before), "after": dict(after)},
		feedback=str(raw.get("feedback") or ""),
	)


class AgenticEngine:
	"""Owns config, the improvement store, history and feedback loops.

	run_autonomous_cycle() and approve_and_execute() share one lock, so their
	check-then-mutate sequences (quota reads, status changes) never interleave.
	"""

	def __init__(
		self,
		config: AgenticConfig | None = None,
		*,
		council: Council | None = None,
		applier: ChangeApplier | None = None,
		clock: Clock | None = None,
		progress_hook: ProgressHook | None = None,
		audit_log: AuditLog | None = None,
		analyzer_timeout: float = DEFAULT_LIMITS["analyzer_timeout"],
		apply_timeout: float = DEFAULT_LIMITS["apply_timeout"],
		hook_timeout: float = DEFAULT_LIMITS["hook_timeout"],
	) -> None:
		self._clock = clock or SystemClock()
		self._config = config or AgenticConfig()
		self._council = council or Council(timeout=analyzer_timeout, clock=self._clock)
		self._council.set_enabled_roles(self._config.enabled_agents)
		self._applier: ChangeApplier = applier or simulate_change
		self._progress_hook = progress_hook
		self._audit = audit_log
		self.apply_timeout = apply_timeout
		self.hook_timeout = hook_timeout

		self._improvements: dict[str, Improvement] = {}
		self._history: list[ExecutionHistoryEntry] = []
		self._feedback_loops: list[FeedbackLoop] = []
		self._lock = asyncio.Lock()

	# -- Configuration --

	def get_config(self) -> AgenticConfig:
		return self._config.model_copy()

	def update_config(self, updates: dict[str, Any] | None = None, /, **kwargs: Any) -> AgenticConfig:
		"""Shallow-merge the given fields into the config; everything else is kept."""
		merged = {**(updates or {}), **kwargs}
		self._config = self._config.merged(merged)
		self._council.set_enabled_roles(self._config.enabled_agents)
		logger.info("Engine configuration updated: %s", ", ".join(sorted(merged)) or "(no changes)")
		return self.get_config()

	def set_progress_hook(self, hook: ProgressHook | None) -> None:
		"""Register a progress hook, or pass None to remove the current one."""
		self._progress_hook = hook

	# -- Cycle --

	async def run_autonomous_cycle(self, snapshot: SystemSnapshot) -> CycleResult:
		"""Review, track new proposals, auto-execute what the gates allow."""
		async with self._lock:
			config = self._config
			logger.info("Starting autonomous improvement cycle")
			await self._notify(EVENT_CYCLE_STARTED, {"timestamp": self._now()})

			review = await self._council.run_review(snapshot)
			new_count = self._track(review)

			executed: list[Improvement] = []
			pending: list[Improvement] = []
			for improvement in list(self._improvements.values()):
				if improvement.status != STATUS_DETECTED:
					continue
				reason = self._blocked_reason(improvement, config)
				if reason is not None:
					logger.debug("Holding %s (%s): %s", improvement.id, improvement.suggestion.title, reason)
					pending.append(improvement)
					continue
				improvement.advance(STATUS_APPROVED, self._now())
				improvement.approved_at = improvement.status_history[-1][1]
				self._emit("approved", improvement, {"autonomous": True})
				await self._execute(improvement, snapshot, autonomous=True)
				executed.append(improvement)

			self._append_feedback(FEEDBACK_AGENT_REVIEW, {
				"review": review,
				"review_id": review.id,
				"new_improvements": new_count,
				"executed": len(executed),
				"pending": len(pending),
				"failed_agents": list(review.failed_agents),
			})
			logger.info(
				"Autonomous cycle complete: %d new, %d executed, %d pending",
				new_count, len(executed), len(pending),
			)
			await self._notify(EVENT_CYCLE_COMPLETED, {
				"review_id": review.id,
				"executed": [i.id for i in executed],
				"pending": [i.id for i in pending],
			})
			return CycleResult(review=review, executed_improvements=executed, pending_improvements=pending)

	def _track(self, review: CouncilReview) -> int:
		"""Create a `detected` Improvement for every suggestion id not seen before."""
		created = 0
		for analysis in review.analyses:
			for suggestion in analysis.suggestions:
				existing = self._improvements.get(suggestion.id)
				if existing is not None:
					if analysis.role not in existing.reviewed_by:
						existing.reviewed_by.append(analysis.role)
					continue
				now = self._now()
				improvement = Improvement(
					suggestion=suggestion,
					detected_at=now,
					reviewed_by=[analysis.role],
					status_history=[(STATUS_DETECTED, now)],
				)
				self._improvements[suggestion.id] = improvement
				self._emit("detected", improvement, {
					"category": suggestion.category,
					"safety_score": suggestion.safety_score,
					"title": suggestion.title,
				})
				created += 1
		return created

	def _blocked_reason(self, improvement: Improvement, config: AgenticConfig) -> str | None:
		"""Why this improvement may not run autonomously right now, or None if it may."""
		suggestion = improvement.suggestion
		if not config.enabled:
			return "engine disabled"
		if not config.autonomous_execution_enabled:
			return "autonomous execution disabled"
		if not suggestion.automatable:
			return "not automatable"
		if suggestion.category in config.review_required:
			return f"category {suggestion.category!r} requires review"
		if suggestion.safety_score < config.safety_threshold:
			return f"safety score {suggestion.safety_score} < {config.safety_threshold}"
		if self.executed_today() >= config.max_daily_improvements:
			return f"daily limit reached ({config.max_daily_improvements})"
		return None

	# -- Manual approval --

	async def approve_and_execute(self, improvement_id: str, snapshot: SystemSnapshot) -> ImprovementResult:
		"""Human sign-off: execute regardless of score, category or quota."""
		async with self._lock:
			improvement = self._improvements.get(improvement_id)
			if improvement is None:
				raise ImprovementNotFoundError(improvement_id)
			if improvement.status not in (STATUS_DETECTED, STATUS_ANALYZING):
				raise InvalidTransitionError(improvement_id, improvement.status, STATUS_APPROVED)

			improvement.advance(STATUS_APPROVED, self._now())
			improvement.approved_at = improvement.status_history[-1][1]
			self._emit("approved", improvement, {"autonomous": False})
			logger.info("Manually approved %s (%s)", improvement.id, improvement.suggestion.title)
			return await self._execute(improvement, snapshot, autonomous=False)

	# -- Execution --

	async def _execute(self, improvement: Improvement, snapshot: SystemSnapshot, *, autonomous: bool) -> ImprovementResult:
		"""approved -> implementing -> testing -> completed|rejected, plus one history entry."""
		improvement.advance(STATUS_IMPLEMENTING, self._now())
		logger.info("Executing improvement %s: %s", improvement.id, improvement.suggestion.title)

		result = await self._apply(improvement, snapshot)
		improvement.implemented_at = self._now()
		improvement.advance(STATUS_TESTING, improvement.implemented_at)

		done_at = self._now()
		improvement.advance(STATUS_COMPLETED if result.success else STATUS_REJECTED, done_at)
		improvement.completed_at = done_at
		improvement.result = result

		self._history.append(ExecutionHistoryEntry(
			improvement_id=improvement.id,
			timestamp=done_at,
			result=result,
			autonomous=autonomous,
		))
		self._emit("executed", improvement, {
			"autonomous": autonomous,
			"success": result.success,
			"feedback": result.feedback,
		})
		if not result.success:
			logger.warning("Improvement %s rejected: %s", improvement.id, result.feedback)
		await self._notify(EVENT_IMPROVEMENT_EXECUTED, {
			"improvement_id": improvement.id,
			"title": improvement.suggestion.title,
			"status": improvement.status,
			"autonomous": autonomous,
		})
		return result

	async def _apply(self, improvement: Improvement, snapshot: SystemSnapshot) -> ImprovementResult:
		"""Call the applier under a timeout; any failure becomes an unsuccessful result."""
		try:
			raw = await asyncio.wait_for(
				self._applier(improvement.suggestion, snapshot),
				timeout=self.apply_timeout,
			)
			return _coerce_result(raw)
		except asyncio.TimeoutError:
			logger.warning("Applier timed out after %.1fs for %s", self.apply_timeout, improvement.id)
			return ImprovementResult(success=False, feedback=f"Execution timed out after {self.apply_timeout}s")
		except Exception as exc:
			logger.warning("Applier failed for %s: %s", improvement.id, exc)
			return ImprovementResult(success=False, feedback=f"Execution failed: {exc}")

	# -- Feedback loops --

	def create_feedback_loop(self, type: FeedbackType, data: Any = None) -> FeedbackLoop:
		return self._append_feedback(type, data)

	def _append_feedback(self, type: FeedbackType, data: Any) -> FeedbackLoop:
		loop = FeedbackLoop(type=type, data=data, timestamp=self._now(), processed_by=[ENGINE_ID])
		self._feedback_loops.append(loop)
		if self._audit is not None:
			self._audit.emit("feedback", timestamp=loop.timestamp, details={"id": loop.id, "type": loop.type})
		return loop

	# -- Read API --

	def get_council(self) -> Council:
		return self._council

	def get_improvements(self) -> list[Improvement]:
		return list(self._improvements.values())

	def get_improvement(self, improvement_id: str) -> Improvement:
		try:
			return self._improvements[improvement_id]
		except KeyError:
			raise ImprovementNotFoundError(improvement_id) from None

	def get_improvements_by_status(self, status: str) -> list[Improvement]:
		return [i for i in self._improvements.values() if i.status == status]

	def get_execution_history(self) -> list[ExecutionHistoryEntry]:
		return list(self._history)

	def get_feedback_loops(self) -> list[FeedbackLoop]:
		return list(self._feedback_loops)

	def executed_today(self) -> int:
		"""Autonomous executions recorded on the clock's current calendar day."""
		now = self._clock.now()
		today = calendar_day(now)
		count = 0
		for entry in self._history:
			if not entry.autonomous:
				continue
			at = parse_timestamp(entry.timestamp)
			if at is not None and calendar_day(at, now.tzinfo) == today:
				count += 1
		return count

	def get_system_health(self) -> SystemHealth:
		improvements = self.get_improvements()
		total = len(improvements)
		successful = sum(1 for h in self._history if h.result.success)
		executed_today = self.executed_today()
		return SystemHealth(
			total_improvements=total,
			implemented=sum(1 for i in improvements if i.status == STATUS_COMPLETED),
			pending=sum(1 for i in improvements if i.status not in TERMINAL_STATUSES),
			success_rate=successful / len(self._history) * 100 if self._history else 0.0,
			avg_safety_score=sum(i.suggestion.safety_score for i in improvements) / total if total else 0.0,
			executed_today=executed_today,
			remaining_daily_quota=max(0, self._config.max_daily_improvements - executed_today),
		)

	# -- Internals --

	def _now(self) -> str:
		return self._clock.now().isoformat()

	def _emit(self, event_type: str, improvement: Improvement, details: dict[str, Any]) -> None:
		if self._audit is None:
			return
		self._audit.emit(
			event_type,
			improvement_id=improvement.id,
			status=improvement.status,
			timestamp=self._now(),
			details=details,
		)

	async def _notify(self, event: str, payload: dict[str, Any]) -> None:
		hook = self._progress_hook
		if hook is None:
			return
		try:
			await asyncio.wait_for(hook.on_event(event, payload), timeout=self.hook_timeout)
		except asyncio.TimeoutError:
			logger.warning("Progress hook timed out after %.1fs on %s", self.hook_timeout, event)
		except Exception as exc:
			logger.warning("Progress hook failed on %s: %s", event, exc)
