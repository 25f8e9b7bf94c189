"""Autonomous improvement council: analyzers, council review, and a gated execution engine."""

from agentic.config import AgenticConfig, RuntimeConfig, Settings, load_config
from agentic.council import Council
from agentic.engine import AgenticEngine
from agentic.errors import AgenticError, ImprovementNotFoundError, InvalidTransitionError, ProgressHookError
from agentic.models import (
	AgentAnalysis,
	CouncilReview,
	CycleResult,
	Finding,
	Improvement,
	ImprovementResult,
	ImprovementSuggestion,
	PerformanceMetrics,
	SystemSnapshot,
	UserAction,
)

__all__ = [
	"AgentAnalysis",
	"AgenticConfig",
	"AgenticEngine",
	"AgenticError",
	"Council",
	"CouncilReview",
	"CycleResult",
	"Finding",
	"Improvement",
	"ImprovementNotFoundError",
	"ImprovementResult",
	"ImprovementSuggestion",
	"InvalidTransitionError",
	"PerformanceMetrics",
	"ProgressHookError",
	"RuntimeConfig",
	"Settings",
	"SystemSnapshot",
	"UserAction",
	"load_config",
]
