"""Engine configuration: the mutable gating policy plus runtime settings loaded from TOML."""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from agentic.constants import (
	AGENT_ROLES,
	CATEGORIES,
	CATEGORY_DATA_QUALITY,
	CATEGORY_SECURITY,
	DEFAULT_LIMITS,
)

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "agentic.toml"


class AgenticConfig(BaseModel):
	"""Gating policy for autonomous execution.

	Accepts snake_case or camelCase keys so partial updates can come straight
	from a JSON payload.
	"""

	model_config = ConfigDict(
		alias_generator=to_camel,
		populate_by_name=True,
		extra="forbid",
		frozen=True,
	)

	enabled: bool = True
	autonomous_execution_enabled: bool = False
	safety_threshold: float = Field(default=DEFAULT_LIMITS["safety_threshold"], ge=0, le=100)
	max_daily_improvements: int = Field(default=int(DEFAULT_LIMITS["max_daily_improvements"]), ge=0)
	review_required: frozenset[str] = frozenset({CATEGORY_SECURITY, CATEGORY_DATA_QUALITY})
	enabled_agents: frozenset[str] = frozenset(AGENT_ROLES)

	@field_validator("review_required")
	@classmethod
	def _known_categories(cls, value: frozenset[str]) -> frozenset[str]:
		unknown = sorted(value - CATEGORIES)
		if unknown:
			raise ValueError(f"unknown categories: {', '.join(unknown)}")
		return value

	@field_validator("enabled_agents")
	@classmethod
	def _known_roles(cls, value: frozenset[str]) -> frozenset[str]:
		unknown = sorted(value - set(AGENT_ROLES))
		if unknown:
			raise ValueError(f"unknown agent roles: {', '.join(unknown)}")
		return value

	def merged(self, updates: dict[str, Any]) -> AgenticConfig:
		"""Return a new config with `updates` applied; unspecified fields keep their values."""
		data = self.model_dump()
		fields_by_alias = {to_camel(name): name for name in type(self).model_fields}
		for key, value in updates.items():
			data[fields_by_alias.get(key, key)] = value
		return type(self).model_validate(data)


@dataclass
class RuntimeConfig:
	"""Timeouts and optional side channels."""

	analyzer_timeout: float = DEFAULT_LIMITS["analyzer_timeout"]
	apply_timeout: float = DEFAULT_LIMITS["apply_timeout"]
	audit_log: str = ""  # JSONL path; empty disables the audit stream
	webhook_url: str = ""  # progress hook endpoint; empty disables it
	webhook_retries: int = int(DEFAULT_LIMITS["hook_retries"])
	webhook_retry_delay: float = DEFAULT_LIMITS["hook_retry_delay"]


@dataclass
class Settings:
	"""Everything read from one config file."""

	agentic: AgenticConfig = field(default_factory=AgenticConfig)
	runtime: RuntimeConfig = field(default_factory=RuntimeConfig)


def _build_runtime(data: dict[str, Any]) -> RuntimeConfig:
	rc = RuntimeConfig()
	for key in ("analyzer_timeout", "apply_timeout", "webhook_retry_delay"):
		if key in data:
			setattr(rc, key, float(data[key]))
	if "webhook_retries" in data:
		rc.webhook_retries = int(data["webhook_retries"])
	if "audit_log" in data:
		rc.audit_log = str(data["audit_log"])
	if "webhook_url" in data:
		rc.webhook_url = str(data["webhook_url"])
	return rc


def load_config(path: str | Path) -> Settings:
	"""Load settings from a TOML file with `[agentic]` and `[runtime]` tables."""
	p = Path(path)
	if not p.exists():
		raise FileNotFoundError(f"Config file not found: {p}")
	with open(p, "rb") as f:
		data = tomllib.load(f)

	settings = Settings(
		agentic=AgenticConfig.model_validate(data.get("agentic", {})),
		runtime=_build_runtime(data.get("runtime", {})),
	)
	logger.debug("Loaded config from %s", p)
	return settings


def validate_config(settings: Settings) -> list[tuple[str, str]]:
	"""Return (level, message) pairs for suspicious but loadable settings."""
	issues: list[tuple[str, str]] = []
	cfg = settings.agentic
	rt = settings.runtime

	if rt.analyzer_timeout <= 0:
		issues.append(("error", "runtime.analyzer_timeout must be positive"))
	if rt.apply_timeout <= 0:
		issues.append(("error", "runtime.apply_timeout must be positive"))
	if rt.webhook_retries < 0:
		issues.append(("error", "runtime.webhook_retries must be >= 0"))
	if rt.webhook_url and not rt.webhook_url.startswith(("http://", "https://")):
		issues.append(("error", f"runtime.webhook_url is not an http(s) URL: {rt.webhook_url}"))

	if cfg.autonomous_execution_enabled and cfg.max_daily_improvements == 0:
		issues.append(("warning", "autonomous execution is enabled but max_daily_improvements is 0"))
	if cfg.autonomous_execution_enabled and cfg.safety_threshold < 50:
		issues.append(("warning", f"safety_threshold {cfg.safety_threshold} is low for autonomous execution"))
	if not cfg.enabled_agents:
		issues.append(("warning", "no agents enabled; every review will be empty"))

	return issues


DEFAULT_TOML = """\
[agentic]
enabled = true
autonomous_execution_enabled = false
safety_threshold = 80
max_daily_improvements = 3
review_required = ["security", "data-quality"]
enabled_agents = ["data-analyzer", "optimizer", "security", "ux-enhancer"]

[runtime]
analyzer_timeout = 30.0
apply_timeout = 60.0
audit_log = ""
webhook_url = ""
"""
