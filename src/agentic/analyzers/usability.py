"""Usability analyzer -- satisfaction, search churn, and repeated multi-step workflows."""

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
	CATEGORY_USABILITY,
	ROLE_UX_ENHANCER,
	SATISFACTION_THRESHOLD,
	SEARCH_FREQUENCY_THRESHOLD,
	WORKFLOW_ACTION_THRESHOLD,
)
from agentic.models import AgentAnalysis, Finding, ImprovementSuggestion, SystemSnapshot


class UsabilityAnalyzer(BaseAnalyzer):
	role = ROLE_UX_ENHANCER
	name = "UX Enhancer"
	capabilities = (
		"User experience analysis",
		"Interaction pattern detection",
		"Usability improvement",
		"Accessibility checking",
		"Interface optimization",
	)

	async def analyze(self, snapshot: SystemSnapshot) -> AgentAnalysis:
		findings: list[Finding] = []
		suggestions: list[ImprovementSuggestion] = []

		counts = action_counts(snapshot.user_actions)
		satisfaction = as_float(snapshot.metrics.user_satisfaction_score, default=10.0)

		searches = counts.get("search", 0)
		if searches > SEARCH_FREQUENCY_THRESHOLD:
			findings.append(make_finding(
				CATEGORY_USABILITY,
				"info",
				f"High frequency of search operations ({searches}), users may struggle to find records",
				{"action_type": "search", "count": searches, "suggestion": "improve-filtering"},
			))

		if satisfaction < SATISFACTION_THRESHOLD:
			findings.append(make_finding(
				CATEGORY_USABILITY,
				"warning",
				f"User satisfaction score is {satisfaction:g}/10",
				{"score": satisfaction, "threshold": SATISFACTION_THRESHOLD},
			))
			suggestions.append(self._suggest_contextual_help())

		if counts.get("claim", 0) > WORKFLOW_ACTION_THRESHOLD and counts.get("export", 0) > WORKFLOW_ACTION_THRESHOLD:
			suggestions.append(self._suggest_bulk_shortcuts())

		return self._analysis(findings, suggestions)

	def _suggest_contextual_help(self) -> ImprovementSuggestion:
		return make_suggestion(
			CATEGORY_USABILITY,
			"high",
			"Enhance user interface with contextual help",
			"Add tooltips, onboarding, and contextual help panels",
			"Low user satisfaction suggests users are struggling with the interface",
			"Increase user satisfaction by 20-30% and reduce support requests",
			automatable=True,
			safety_score=85,
			plan=make_plan(
				steps=[
					"Add tooltips to complex controls",
					"Create interactive onboarding flow",
					"Add contextual help panels",
				],
				risks=["Interface clutter if overdone"],
				rollback=["Disable help features", "Remove tooltips"],
				validation=["User satisfaction score >7.5", "Support tickets reduced >25%"],
			),
		)

	def _suggest_bulk_shortcuts(self) -> ImprovementSuggestion:
		return make_suggestion(
			CATEGORY_USABILITY,
			"medium",
			"Add bulk workflow shortcuts",
			"Create shortcuts for common multi-step operations",
			"Users frequently claim then export records, suggesting a combined action",
			"Reduce clicks by 60% for common workflows",
			automatable=True,
			safety_score=90,
			plan=make_plan(
				steps=[
					"Add a combined claim-and-export bulk action",
					"Add keyboard shortcuts for power users",
					"Support undo for bulk operations",
				],
				risks=["Learning curve for new shortcuts", "Accidental bulk operations"],
				rollback=["Disable shortcuts", "Revert to individual operations"],
				validation=["Workflow time reduced by >50%", "No increase in errors"],
			),
		)
