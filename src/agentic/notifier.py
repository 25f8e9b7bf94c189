"""Progress hooks the engine calls at notable points of a cycle.

The webhook hook uses an async httpx client and retries failed deliveries
with exponential backoff before giving up with ProgressHookError.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Protocol

import httpx

from agentic.constants import DEFAULT_LIMITS
from agentic.errors import ProgressHookError

logger = logging.getLogger(__name__)


class ProgressHook(Protocol):
	async def on_event(self, event: str, payload: dict[str, Any]) -> None: ...


class LoggingProgressHook:
	"""Writes every event to the log. Handy default for the CLI."""

	def __init__(self, level: int = logging.INFO) -> None:
		self._level = level

	async def on_event(self, event: str, payload: dict[str, Any]) -> None:
		logger.log(self._level, "%s: %s", event, json.dumps(payload, default=str, sort_keys=True))


class WebhookProgressHook:
	"""POSTs events as JSON to a configured endpoint."""

	def __init__(
		self,
		url: str,
		retries: int = int(DEFAULT_LIMITS["hook_retries"]),
		retry_delay: float = DEFAULT_LIMITS["hook_retry_delay"],
		headers: dict[str, str] | None = None,
		timeout: float = 10.0,
	) -> None:
		if not url:
			raise ProgressHookError("WebhookProgressHook requires an endpoint URL")
		self._url = url
		self._retries = retries
		self._retry_delay = retry_delay
		self._headers = {"Content-Type": "application/json", **(headers or {})}
		self._timeout = timeout
		self._client: httpx.AsyncClient | None = None

	async def _ensure_client(self) -> httpx.AsyncClient:
		if self._client is None:
			self._client = httpx.AsyncClient(timeout=self._timeout)
		return self._client

	async def on_event(self, event: str, payload: dict[str, Any]) -> None:
		body = json.dumps({"event": event, "payload": payload}, default=str)
		attempt = 0
		while True:
			try:
				client = await self._ensure_client()
				resp = await client.post(self._url, content=body, headers=self._headers)
				resp.raise_for_status()
				return
			except httpx.HTTPError as exc:
				attempt += 1
				logger.warning("Progress webhook attempt %d failed: %s", attempt, exc)
				if attempt > self._retries:
					raise ProgressHookError(
						f"Unable to deliver {event} to {self._url} after {attempt} attempt(s)"
					) from exc
				await asyncio.sleep(self._retry_delay * 2 ** (attempt - 1))

	async def close(self) -> None:
		if self._client is not None:
			await self._client.aclose()
			self._client = None
