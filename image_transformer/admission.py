"""
Admission gate: token-bucket throttling that runs before routing.

Each bucket holds ``capacity`` credits and refills linearly so that an
empty bucket is full again after ``interval`` seconds. A request spends one
credit; when none is left it is turned away with ``status`` before any
decoding happens. Buckets are keyed by a signature built from the request,
which with the default options collapses to a single bucket for everyone.
Buckets idle for a whole interval are dropped, and at most ``max_buckets``
are tracked at once.

Independently of the credits, at most ``max_concurrent`` admitted requests
may be in flight; further ones are rejected the same way.
"""

import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ThrottlingOptions:
    enabled: bool = True
    log_only: bool = False
    track_clients: bool = False
    ignore_query: bool = True
    instance: str = "api"
    capacity: int = 500
    interval: float = 1.0
    status: int = 429
    max_concurrent: int = 1000
    max_buckets: int = 10000

    @classmethod
    def from_config(cls, config) -> "ThrottlingOptions":
        return cls(
            enabled=bool(config["THROTTLING_ENABLED"]),
            log_only=bool(config["THROTTLING_LOG_ONLY"]),
            track_clients=bool(config["THROTTLING_TRACK_CLIENTS"]),
            ignore_query=bool(config["THROTTLING_IGNORE_QUERY"]),
            instance=str(config["THROTTLING_INSTANCE"]),
            capacity=int(config["THROTTLING_CAPACITY"]),
            interval=float(config["THROTTLING_INTERVAL"]),
            status=int(config["THROTTLING_STATUS"]),
            max_concurrent=int(config["THROTTLING_MAX_CONCURRENT"]),
            max_buckets=int(config["THROTTLING_MAX_BUCKETS"]),
        )


@dataclass(frozen=True)
class AdmissionDecision:
    admitted: bool
    signature: str
    retry_after: float = 0.0
    holds_slot: bool = False  # caller must hand the slot back with ``leave``


class _Bucket:
    __slots__ = ("credits", "updated")

    def __init__(self, credits: float, updated: float):
        self.credits = credits
        self.updated = updated


class AdmissionGate:
    """Thread-safe credit counters, one bucket per signature, plus a cap on
    requests in flight."""

    def __init__(self, options: ThrottlingOptions, clock: Callable[[], float] = time.monotonic):
        if options.capacity <= 0 or options.interval <= 0:
            raise ValueError("Throttling capacity and interval must be positive")
        if options.max_buckets <= 0 or options.max_concurrent <= 0:
            raise ValueError("Throttling bucket and concurrency limits must be positive")
        self.options = options
        self._clock = clock
        self._rate = options.capacity / options.interval
        self._buckets: Dict[str, _Bucket] = {}
        self._last_prune = clock()
        self._lock = threading.Lock()
        self._slots = threading.BoundedSemaphore(options.max_concurrent)

    @property
    def bucket_count(self) -> int:
        return len(self._buckets)

    def signature(self, query: str = "", client: Optional[str] = None) -> str:
        """Key a request onto a bucket.

        The instance name stands in for the URL; client address and query
        string are appended only when the options ask for them.
        """
        parts = [self.options.instance]
        if self.options.track_clients:
            parts.append(client or "-")
        if not self.options.ignore_query and query:
            parts.append(query)
        return "|".join(parts)

    def _prune(self, now: float):
        # Untouched for a whole interval means full again; recreating it later is equivalent
        idle = [key for key, bucket in self._buckets.items() if now - bucket.updated >= self.options.interval]
        for key in idle:
            del self._buckets[key]
        self._last_prune = now

    def _take(self, signature: str) -> AdmissionDecision:
        now = self._clock()
        with self._lock:
            bucket = self._buckets.get(signature)
            if bucket is None:
                if (len(self._buckets) >= self.options.max_buckets
                        or now - self._last_prune >= self.options.interval):
                    self._prune(now)
                if len(self._buckets) >= self.options.max_buckets:
                    return AdmissionDecision(False, signature, self.options.interval)
                bucket = self._buckets[signature] = _Bucket(float(self.options.capacity), now)
            else:
                elapsed = max(now - bucket.updated, 0.0)
                bucket.credits = min(float(self.options.capacity), bucket.credits + elapsed * self._rate)
                bucket.updated = now

            if bucket.credits >= 1.0:
                bucket.credits -= 1.0
                return AdmissionDecision(True, signature)
            retry_after = (1.0 - bucket.credits) / self._rate
        return AdmissionDecision(False, signature, retry_after)

    def admit(self, signature: str) -> AdmissionDecision:
        """Spend a credit and claim an in-flight slot for *signature*.

        An admitted decision with ``holds_slot`` set must be paired with a
        call to ``leave`` once the request is finished.
        """
        if not self.options.enabled:
            return AdmissionDecision(True, signature)

        decision = self._take(signature)
        if decision.admitted:
            if self._slots.acquire(blocking=False):
                return AdmissionDecision(True, signature, holds_slot=True)
            decision = AdmissionDecision(False, signature)
            reason = f"{self.options.max_concurrent} requests already in flight"
        else:
            reason = f"retry in {decision.retry_after:.3f}s"

        if self.options.log_only:
            logger.warning("Throttling limit reached for %s: %s (log only)", signature, reason)
            return AdmissionDecision(True, signature)

        logger.warning("Throttled request for %s: %s", signature, reason)
        return decision

    def leave(self):
        self._slots.release()

    def retry_after_header(self, decision: AdmissionDecision) -> str:
        return str(max(1, math.ceil(decision.retry_after)))
