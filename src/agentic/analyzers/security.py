"""Security analyzer -- sensitive financial data and export bursts.

Encryption at rest is proposed on every run, whether or not any finding
was produced. Findings stay evidence-gated.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any

from agentic.analyzers.base import BaseAnalyzer, make_finding, make_plan, make_suggestion
from agentic.clock import parse_timestamp
from agentic.constants import (
	CATEGORY_SECURITY,
	EXPORT_BURST_THRESHOLD,
	EXPORT_BURST_WINDOW_HOURS,
	ROLE_SECURITY,
)
from agentic.models import AgentAnalysis, Finding, ImprovementSuggestion, SystemSnapshot


def _is_number(value: Any) -> bool:
	return isinstance(value, (int, float)) and not isinstance(value, bool)


def _financial_fields(record: dict[str, Any]) -> set[str]:
	fields: set[str] = set()
	if _is_number(record.get("estimatedRevenue")):
		fields.add("estimatedRevenue")
	filings = record.get("uccFilings")
	if isinstance(filings, list):
		for filing in filings:
			if isinstance(filing, dict) and _is_number(filing.get("lienAmount")):
				fields.add("lienAmount")
				break
	return fields


class SecurityAnalyzer(BaseAnalyzer):
	role = ROLE_SECURITY
	name = "Security Guardian"
	capabilities = (
		"Security vulnerability detection",
		"Data protection assessment",
		"Access control review",
		"Encryption verification",
		"Compliance checking",
	)

	async def analyze(self, snapshot: SystemSnapshot) -> AgentAnalysis:
		findings: list[Finding] = []
		suggestions: list[ImprovementSuggestion] = []

		sensitive = self._check_sensitive_data(snapshot)
		if sensitive is not None:
			findings.append(sensitive)
		burst = self._check_export_burst(snapshot)
		if burst is not None:
			findings.append(burst)

		if any(f.severity == "critical" for f in findings):
			suggestions.append(self._suggest_hardening())
		suggestions.append(self._suggest_encryption())

		return self._analysis(findings, suggestions)

	def _check_sensitive_data(self, snapshot: SystemSnapshot) -> Finding | None:
		count = 0
		seen: set[str] = set()
		for r in snapshot.records:
			if not isinstance(r, dict):
				continue
			fields = _financial_fields(r)
			if fields:
				count += 1
				seen |= fields

		if count == 0:
			return None
		return make_finding(
			CATEGORY_SECURITY,
			"warning",
			f"{count} records contain financial data that should be encrypted",
			{"count": count, "fields": sorted(seen)},
		)

	def _check_export_burst(self, snapshot: SystemSnapshot) -> Finding | None:
		"""Export actions inside the burst window; more than twice the limit is critical."""
		cutoff = self._clock.now() - timedelta(hours=EXPORT_BURST_WINDOW_HOURS)
		exports = 0
		for a in snapshot.user_actions:
			if a.type != "export":
				continue
			at = parse_timestamp(a.timestamp)
			if at is not None and at >= cutoff:
				exports += 1

		if exports <= EXPORT_BURST_THRESHOLD:
			return None
		return make_finding(
			CATEGORY_SECURITY,
			"critical" if exports > 2 * EXPORT_BURST_THRESHOLD else "warning",
			f"Unusual number of export operations in the last {EXPORT_BURST_WINDOW_HOURS}h: {exports}",
			{
				"export_count": exports,
				"threshold": EXPORT_BURST_THRESHOLD,
				"time_window": f"{EXPORT_BURST_WINDOW_HOURS}h",
			},
		)

	def _suggest_hardening(self) -> ImprovementSuggestion:
		return make_suggestion(
			CATEGORY_SECURITY,
			"critical",
			"Implement comprehensive security hardening",
			"Add rate limiting, audit logging, and access controls around sensitive data",
			"Critical security concerns detected that require immediate attention",
			"Significantly reduce security risk and support data-protection compliance",
			automatable=True,
			safety_score=70,
			plan=make_plan(
				steps=[
					"Rate-limit sensitive operations",
					"Audit-log all data access",
					"Introduce role-based access control",
					"Alert on anomalous access",
				],
				risks=["User workflow disruption", "Increased system complexity"],
				rollback=["Disable rate limiting", "Revert to previous access model"],
				validation=[
					"All sensitive operations rate-limited",
					"Audit log coverage >95%",
					"Performance impact <10%",
				],
			),
		)

	def _suggest_encryption(self) -> ImprovementSuggestion:
		return make_suggestion(
			CATEGORY_SECURITY,
			"high",
			"Enable encryption for sensitive data fields",
			"Encrypt financial and personal data at rest and in transit",
			"Financial and personal data should be encrypted at rest",
			"Protect sensitive data from unauthorized access and meet compliance requirements",
			automatable=True,
			safety_score=80,
			plan=make_plan(
				steps=[
					"Implement field-level encryption",
					"Set up key management",
					"Encrypt existing sensitive data",
					"Add decryption layer for authorized access",
				],
				risks=["Key management complexity", "Performance overhead", "Data loss if keys are lost"],
				rollback=["Decrypt all data", "Revert to unencrypted storage"],
				validation=[
					"All sensitive fields encrypted",
					"Key rotation working",
					"Performance impact <5%",
				],
			),
		)
