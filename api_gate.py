# api_gate.py
"""
Per-client daily quota for the verify endpoint.

Usage is kept as a whole-file JSON snapshot:
    { "<ip>": { "count": 3, "resetTime": 1700000000000 } }
The file is read and fully rewritten on every request. Storage errors are
logged and the request goes through anyway (fail open).
"""

import json
import logging
import os
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Protocol

from fastapi import Request
from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

MAX_REQUESTS_PER_DAY = 100
WINDOW_MS = 24 * 60 * 60 * 1000

QUOTA_MESSAGE = "Too many requests. Please try again after 24 hours."


def now_ms() -> int:
    return int(time.time() * 1000)


class RateLimitRecord(BaseModel):
    count: int
    resetTime: int


class RateLimitStore(Protocol):
    def load(self) -> Dict[str, dict]: ...

    def save(self, records: Dict[str, dict]) -> None: ...


class JsonFileStore:
    """Rate-limit records persisted as a single JSON object on disk."""

    def __init__(self, path: str):
        self.path = path

    def load(self) -> Dict[str, dict]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError):
            logger.exception("Error reading rate limit file %s", self.path)
            return {}
        if not isinstance(data, dict):
            logger.error("Rate limit file %s is not a JSON object, ignoring it", self.path)
            return {}
        return data

    def save(self, records: Dict[str, dict]) -> None:
        try:
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(records, f, indent=2)
        except (OSError, TypeError, ValueError):
            logger.exception("Error writing to rate limit file %s", self.path)


class MemoryStore:
    """Same contract as JsonFileStore, kept in a dict."""

    def __init__(self, records: Optional[Dict[str, dict]] = None):
        self.records: Dict[str, dict] = dict(records or {})
        self.saves = 0

    def load(self) -> Dict[str, dict]:
        return json.loads(json.dumps(self.records))

    def save(self, records: Dict[str, dict]) -> None:
        self.records = json.loads(json.dumps(records))
        self.saves += 1


@dataclass
class RateLimitDecision:
    allowed: bool
    count: int
    reset_time: int


class QuotaExceeded(Exception):
    def __init__(self, client_id: str, reset_time: int):
        super().__init__(QUOTA_MESSAGE)
        self.client_id = client_id
        self.reset_time = reset_time


class RateLimiter:
    """Fixed 24h window per client, anchored at the client's first request."""

    def __init__(
        self,
        store: RateLimitStore,
        max_requests: int = MAX_REQUESTS_PER_DAY,
        window_ms: int = WINDOW_MS,
        clock: Callable[[], int] = now_ms,
    ):
        self.store = store
        self.max_requests = max_requests
        self.window_ms = window_ms
        self.clock = clock
        # serializes the read-modify-write cycle inside this process only
        self._lock = threading.Lock()

    def hit(self, client_id: str) -> RateLimitDecision:
        with self._lock:
            now = self.clock()
            records = self.store.load()
            record = _parse_record(records.get(client_id))

            if record is not None and now < record.resetTime:
                if record.count >= self.max_requests:
                    return RateLimitDecision(False, record.count, record.resetTime)
                record.count += 1
            else:
                record = RateLimitRecord(count=1, resetTime=now + self.window_ms)

            records[client_id] = record.model_dump()
            self.store.save(records)
            return RateLimitDecision(True, record.count, record.resetTime)


def _parse_record(raw) -> Optional[RateLimitRecord]:
    if raw is None:
        return None
    try:
        return RateLimitRecord.model_validate(raw)
    except ValidationError:
        # unreadable entry: start the client on a fresh window
        logger.warning("Discarding malformed rate limit record: %r", raw)
        return None


def client_identifier(request: Request, trust_proxy: bool) -> str:
    """Address the quota is charged to.

    Behind a single trusted proxy the client is the last hop the proxy
    appended to X-Forwarded-For.
    """
    if trust_proxy:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            hops = [h.strip() for h in forwarded.split(",") if h.strip()]
            if hops:
                return hops[-1]
    if request.client is not None:
        return request.client.host
    return "unknown"


async def enforce_quota(request: Request) -> RateLimitDecision:
    """FastAPI dependency guarding /v1/verify."""
    limiter: RateLimiter = request.app.state.limiter
    client_id = client_identifier(request, request.app.state.trust_proxy)
    decision = limiter.hit(client_id)
    if not decision.allowed:
        logger.info("Quota exceeded for %s (%d requests)", client_id, decision.count)
        raise QuotaExceeded(client_id, decision.reset_time)
    return decision
