"""Command-line entry point: `agentic init|validate|run`."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any

from agentic.audit_log import AuditLog
from agentic.config import DEFAULT_CONFIG_NAME, DEFAULT_TOML, Settings, load_config, validate_config
from agentic.engine import AgenticEngine
from agentic.errors import ImprovementNotFoundError, InvalidTransitionError
from agentic.models import CycleResult, Improvement, SystemSnapshot
from agentic.notifier import LoggingProgressHook, ProgressHook, WebhookProgressHook


def build_parser() -> argparse.ArgumentParser:
	parser = argparse.ArgumentParser(prog="agentic", description="Autonomous improvement council")
	parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
	sub = parser.add_subparsers(dest="command")

	p_init = sub.add_parser("init", help="Write a default config file")
	p_init.add_argument("path", nargs="?", default=".", help="Directory to write the config into")

	p_validate = sub.add_parser("validate", help="Check a config file")
	p_validate.add_argument("--config", default=DEFAULT_CONFIG_NAME, help="Config file path")

	p_run = sub.add_parser("run", help="Run autonomous cycles against a snapshot")
	p_run.add_argument("--config", default=None, help="Config file path (defaults apply when omitted)")
	p_run.add_argument("--snapshot", required=True, help="Snapshot JSON file")
	p_run.add_argument("--cycles", type=int, default=1, help="Number of cycles to run")
	p_run.add_argument(
		"--approve", action="append", default=[],
		help="Pending improvement to approve after the cycles: its number in the pending list, its title, or its id",
	)
	p_run.add_argument(
		"--approve-all-pending", action="store_true", help="Approve every improvement still pending after the cycles",
	)
	p_run.add_argument("--json", action="store_true", help="Print machine-readable output")

	return parser


def cmd_init(args: argparse.Namespace) -> int:
	target = Path(args.path) / DEFAULT_CONFIG_NAME
	if target.exists():
		print(f"{target} already exists", file=sys.stderr)
		return 1
	target.parent.mkdir(parents=True, exist_ok=True)
	target.write_text(DEFAULT_TOML)
	print(f"Wrote {target}")
	return 0


def cmd_validate(args: argparse.Namespace) -> int:
	try:
		settings = load_config(args.config)
	except (FileNotFoundError, ValueError) as exc:
		print(f"Invalid config: {exc}", file=sys.stderr)
		return 1
	issues = validate_config(settings)
	for level, msg in issues:
		print(f"[{level}] {msg}")
	if not issues:
		print("Config OK")
	return 1 if any(level == "error" for level, _ in issues) else 0


def _improvement_row(improvement: Improvement) -> dict[str, Any]:
	s = improvement.suggestion
	return {
		"id": improvement.id,
		"title": s.title,
		"category": s.category,
		"priority": s.priority,
		"safety_score": s.safety_score,
		"status": improvement.status,
	}


def _resolve_approval(ref: str, pending: list[Improvement], engine: AgenticEngine) -> str:
	"""Map an --approve argument (1-based pending position, title, or id) to a tracked id."""
	if ref.isdigit() and 1 <= int(ref) <= len(pending):
		return pending[int(ref) - 1].id
	by_title = [i for i in pending if i.suggestion.title.casefold() == ref.casefold()]
	if by_title:
		return by_title[0].id
	return engine.get_improvement(ref).id


def _build_engine(settings: Settings, audit: AuditLog | None, hook: ProgressHook | None) -> AgenticEngine:
	return AgenticEngine(
		settings.agentic,
		audit_log=audit,
		progress_hook=hook,
		analyzer_timeout=settings.runtime.analyzer_timeout,
		apply_timeout=settings.runtime.apply_timeout,
	)


async def _run_cycles(args: argparse.Namespace, settings: Settings, snapshot: SystemSnapshot) -> dict[str, Any]:
	rt = settings.runtime
	audit = AuditLog(Path(rt.audit_log)) if rt.audit_log else None
	hook: ProgressHook | None = None
	if rt.webhook_url:
		hook = WebhookProgressHook(rt.webhook_url, retries=rt.webhook_retries, retry_delay=rt.webhook_retry_delay)
	elif args.verbose:
		hook = LoggingProgressHook()

	if audit is not None:
		audit.open()
	try:
		engine = _build_engine(settings, audit, hook)
		cycles: list[CycleResult] = []
		for _ in range(max(1, args.cycles)):
			cycles.append(await engine.run_autonomous_cycle(snapshot))
		pending = cycles[-1].pending_improvements
		targets = [i.id for i in pending] if args.approve_all_pending else [
			_resolve_approval(ref, pending, engine) for ref in args.approve
		]
		approvals = []
		for improvement_id in targets:
			result = await engine.approve_and_execute(improvement_id, snapshot)
			approvals.append({"id": improvement_id, "success": result.success, "feedback": result.feedback})
	finally:
		if audit is not None:
			audit.close()
		if isinstance(hook, WebhookProgressHook):
			await hook.close()

	last = cycles[-1]
	return {
		"cycles": len(cycles),
		"agents": last.review.agents,
		"failed_agents": last.review.failed_agents,
		"findings": len(last.review.findings),
		"executed": [_improvement_row(i) for c in cycles for i in c.executed_improvements],
		"pending": [_improvement_row(i) for i in last.pending_improvements],
		"approvals": approvals,
		"health": asdict(engine.get_system_health()),
	}


def _print_summary(summary: dict[str, Any]) -> None:
	print(f"Agentic cycle report ({summary['cycles']} cycle(s))")
	print(f"  Agents: {', '.join(summary['agents']) or '(none)'}")
	if summary["failed_agents"]:
		print(f"  Failed agents: {', '.join(summary['failed_agents'])}")
	print(f"  Findings: {summary['findings']}")
	print(f"  Executed: {len(summary['executed'])}")
	for row in summary["executed"]:
		print(f"    [{row['status']}] {row['id']} {row['title']}")
	print(f"  Pending: {len(summary['pending'])}")
	for n, row in enumerate(summary["pending"], 1):
		print(f"    {n}. [{row['category']}/{row['safety_score']:g}] {row['id']} {row['title']}")
	h = summary["health"]
	print(
		f"  Health: {h['implemented']}/{h['total_improvements']} implemented, "
		f"success rate {h['success_rate']:.1f}%, avg safety {h['avg_safety_score']:.1f}"
	)


def cmd_run(args: argparse.Namespace) -> int:
	try:
		settings = load_config(args.config) if args.config else Settings()
	except (FileNotFoundError, ValueError) as exc:
		print(f"Invalid config: {exc}", file=sys.stderr)
		return 1

	snapshot_path = Path(args.snapshot)
	try:
		data = json.loads(snapshot_path.read_text(encoding="utf-8"))
	except (OSError, json.JSONDecodeError) as exc:
		print(f"Could not read snapshot {snapshot_path}: {exc}", file=sys.stderr)
		return 1
	if not isinstance(data, dict):
		print(f"Snapshot {snapshot_path} must be a JSON object", file=sys.stderr)
		return 1

	try:
		summary = asyncio.run(_run_cycles(args, settings, SystemSnapshot.from_dict(data)))
	except (ImprovementNotFoundError, InvalidTransitionError) as exc:
		print(f"Approval failed: {exc}", file=sys.stderr)
		return 1

	if args.json:
		print(json.dumps(summary, indent=2, default=str))
	else:
		_print_summary(summary)
	return 0


def main(argv: list[str] | None = None) -> int:
	parser = build_parser()
	args = parser.parse_args(argv)
	logging.basicConfig(
		level=logging.DEBUG if args.verbose else logging.WARNING,
		format="%(asctime)s %(levelname)s %(name)s: %(message)s",
	)

	if args.command is None:
		parser.print_help()
		return 0

	handlers = {
		"init": cmd_init,
		"validate": cmd_validate,
		"run": cmd_run,
	}
	return handlers[args.command](args)


if __name__ == "__main__":
	sys.exit(main())
