"""Closed vocabularies, analyzer thresholds, and default limits."""

from __future__ import annotations

# -- Improvement categories --

CATEGORY_PERFORMANCE = "performance"
CATEGORY_SECURITY = "security"
CATEGORY_USABILITY = "usability"
CATEGORY_DATA_QUALITY = "data-quality"
CATEGORY_FEATURE_ENHANCEMENT = "feature-enhancement"

CATEGORIES: frozenset[str] = frozenset({
	CATEGORY_PERFORMANCE,
	CATEGORY_SECURITY,
	CATEGORY_USABILITY,
	CATEGORY_DATA_QUALITY,
	CATEGORY_FEATURE_ENHANCEMENT,
})

SEVERITIES: frozenset[str] = frozenset({"info", "warning", "critical"})

PRIORITIES: frozenset[str] = frozenset({"critical", "high", "medium", "low"})

# -- Improvement lifecycle --

STATUS_DETECTED = "detected"
STATUS_ANALYZING = "analyzing"
STATUS_APPROVED = "approved"
STATUS_IMPLEMENTING = "implementing"
STATUS_TESTING = "testing"
STATUS_COMPLETED = "completed"
STATUS_REJECTED = "rejected"

STATUS_ORDER: tuple[str, ...] = (
	STATUS_DETECTED,
	STATUS_ANALYZING,
	STATUS_APPROVED,
	STATUS_IMPLEMENTING,
	STATUS_TESTING,
	STATUS_COMPLETED,
	STATUS_REJECTED,
)

TERMINAL_STATUSES: frozenset[str] = frozenset({STATUS_COMPLETED, STATUS_REJECTED})

# Forward-only lifecycle. `rejected` is reachable from any non-terminal state.
ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {
	STATUS_DETECTED: frozenset({STATUS_ANALYZING, STATUS_APPROVED, STATUS_REJECTED}),
	STATUS_ANALYZING: frozenset({STATUS_APPROVED, STATUS_REJECTED}),
	STATUS_APPROVED: frozenset({STATUS_IMPLEMENTING, STATUS_REJECTED}),
	STATUS_IMPLEMENTING: frozenset({STATUS_TESTING, STATUS_REJECTED}),
	STATUS_TESTING: frozenset({STATUS_COMPLETED, STATUS_REJECTED}),
	STATUS_COMPLETED: frozenset(),
	STATUS_REJECTED: frozenset(),
}

# -- Feedback loop types --

FEEDBACK_USER = "user-feedback"
FEEDBACK_SYSTEM_METRICS = "system-metrics"
FEEDBACK_AGENT_REVIEW = "agent-review"

FEEDBACK_TYPES: frozenset[str] = frozenset({FEEDBACK_USER, FEEDBACK_SYSTEM_METRICS, FEEDBACK_AGENT_REVIEW})

# -- Analyzer roles --

ROLE_DATA_ANALYZER = "data-analyzer"
ROLE_OPTIMIZER = "optimizer"
ROLE_SECURITY = "security"
ROLE_UX_ENHANCER = "ux-enhancer"

AGENT_ROLES: tuple[str, ...] = (
	ROLE_DATA_ANALYZER,
	ROLE_OPTIMIZER,
	ROLE_SECURITY,
	ROLE_UX_ENHANCER,
)

# -- Progress hook events --

EVENT_CYCLE_STARTED = "cycle_started"
EVENT_IMPROVEMENT_EXECUTED = "improvement_executed"
EVENT_CYCLE_COMPLETED = "cycle_completed"

# -- Analyzer thresholds --

STALE_AFTER_DAYS = 7
STALE_CRITICAL_RATIO = 0.3
COMPLETENESS_FIELDS: tuple[str, ...] = (
	"companyName",
	"industry",
	"state",
	"priorityScore",
	"defaultDate",
	"estimatedRevenue",
	"narrative",
	"healthScore",
	"uccFilings",
	"growthSignals",
)
COMPLETENESS_WARNING = 80.0
COMPLETENESS_CRITICAL = 60.0

RESPONSE_TIME_WARNING_MS = 1000
RESPONSE_TIME_CRITICAL_MS = 2000
ERROR_RATE_WARNING = 0.05
ERROR_RATE_CRITICAL = 0.1
PAGINATION_THRESHOLD = 500
REPEATED_ACTION_THRESHOLD = 100

EXPORT_BURST_THRESHOLD = 50
EXPORT_BURST_WINDOW_HOURS = 24
FINANCIAL_FIELDS: tuple[str, ...] = ("estimatedRevenue", "lienAmount")

SATISFACTION_THRESHOLD = 7.0
SEARCH_FREQUENCY_THRESHOLD = 100
WORKFLOW_ACTION_THRESHOLD = 20

# Common default limits used across the codebase
DEFAULT_LIMITS: dict[str, float] = {
	"safety_threshold": 80,
	"max_daily_improvements": 3,
	"analyzer_timeout": 30.0,
	"apply_timeout": 60.0,
	"hook_retries": 3,
	"hook_retry_delay": 0.5,
	"hook_timeout": 30.0,
}
