"""Health check helpers for liveness and readiness probes."""

from __future__ import annotations

import asyncio
import logging
from time import perf_counter
from typing import Any, Dict, Tuple

from kure.infra import postgres

LOGGER = logging.getLogger(__name__)


async def liveness() -> Dict[str, str]:
	return {"status": "ok"}


async def _postgres_status(timeout: float = 0.3) -> Dict[str, Any]:
	start = perf_counter()
	try:
		pool = await postgres.get_pool()
		async with pool.acquire() as conn:
			await asyncio.wait_for(conn.execute("SELECT 1"), timeout=timeout)
	except Exception as exc:  # pragma: no cover - depends on runtime
		LOGGER.warning("Postgres readiness query failed", exc_info=True)
		return {"ok": False, "error": type(exc).__name__}
	return {"ok": True, "latency_ms": round((perf_counter() - start) * 1000, 2)}


async def readiness() -> Tuple[int, Dict[str, Any]]:
	postgres_status = await _postgres_status()
	ready = bool(postgres_status["ok"])
	payload = {"status": "ok" if ready else "degraded", "postgres": postgres_status}
	return (200 if ready else 503), payload
