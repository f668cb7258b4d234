"""Network liveness checks for table links.

A probe issues a HEAD request and falls back to a streamed GET when HEAD
errors, times out or returns a non-2xx status. Redirects are never followed:
a redirect does not confirm the exact resource. HEAD and GET share a single
timeout budget so an unresponsive host degrades to "invalid" instead of
blocking the run. Each request splits its share of the budget between the
connect and read phases.

``resolve_many`` probes a batch of URLs on a thread pool. The pool size caps
total in-flight probes and a per-host semaphore caps probes against any one
host. Outcomes are memoized for the lifetime of the validator.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Iterable, Iterator
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from contextlib import contextmanager
from typing import Any, Protocol
from urllib.parse import urljoin, urlsplit

import requests
from requests.adapters import HTTPAdapter

from tablelinks import __version__
from tablelinks.ingest.error_handling import ProbeCancelledError
from tablelinks.model.options import ReconcileOptions
from tablelinks.parser.links import is_placeholder_href
from tablelinks.types import ValidationOutcome
from tablelinks.validate.alternates import derive_alternates

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = f"tablelinks/{__version__} (+link check)"


class SessionLike(Protocol):
    def head(self, url: str, **kwargs: Any) -> Any: ...  # pragma: no cover - interface
    def get(self, url: str, **kwargs: Any) -> Any: ...  # pragma: no cover - interface


def build_session(user_agent: str = DEFAULT_USER_AGENT, pool_size: int = 8) -> requests.Session:
    session = requests.Session()
    session.headers.update({"User-Agent": user_agent})
    adapter = HTTPAdapter(pool_connections=pool_size, pool_maxsize=pool_size, max_retries=0)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return session


def is_success(status: int | None) -> bool:
    return status is not None and 200 <= status < 300


def split_timeout(budget: float) -> tuple[float, float]:
    """(connect, read) timeouts whose sum is ``budget``."""
    half = budget / 2
    return (half, half)


class LinkValidator:
    """Probe URLs with bounded concurrency and memoized outcomes."""

    def __init__(
        self,
        *,
        timeout: float = 10.0,
        try_alternates: bool = False,
        workers: int = 8,
        per_host: int = 4,
        base_url: str | None = None,
        session: SessionLike | None = None,
    ) -> None:
        self.timeout = timeout
        self.try_alternates = try_alternates
        self.workers = max(1, workers)
        self.per_host = max(1, per_host)
        self.base_url = base_url
        self._owns_session = session is None
        self.session: SessionLike = session or build_session(pool_size=self.workers)
        self._lock = threading.Lock()
        self._host_slots: dict[str, threading.BoundedSemaphore] = {}
        self._probes: dict[str, bool] = {}
        self._outcomes: dict[str, ValidationOutcome] = {}
        self._cancelled = threading.Event()
        self.probe_count = 0

    @classmethod
    def from_options(cls, options: ReconcileOptions, session: SessionLike | None = None) -> LinkValidator:
        return cls(
            timeout=options.timeout,
            try_alternates=options.try_alternates,
            workers=options.workers,
            per_host=options.per_host,
            base_url=options.base_url,
            session=session,
        )

    def __enter__(self) -> LinkValidator:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def close(self) -> None:
        logger.debug("Link validator closing after %d probe(s)", self.probe_count)
        if self._owns_session:
            close = getattr(self.session, "close", None)
            if callable(close):
                close()

    def cancel(self) -> None:
        """Stop starting new probes; in-flight probes finish or time out."""
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def absolute_url(self, url: str) -> str:
        if self.base_url:
            return urljoin(self.base_url, url)
        return url

    @contextmanager
    def _host_slot(self, url: str) -> Iterator[None]:
        host = urlsplit(url).netloc.lower()
        with self._lock:
            slot = self._host_slots.get(host)
            if slot is None:
                slot = threading.BoundedSemaphore(self.per_host)
                self._host_slots[host] = slot
        with slot:
            yield

    def _status(self, method: str, url: str, budget: float) -> int | None:
        timeout = split_timeout(budget)
        try:
            if method == "HEAD":
                resp = self.session.head(url, timeout=timeout, allow_redirects=False)
            else:
                resp = self.session.get(url, timeout=timeout, allow_redirects=False, stream=True)
        except (requests.RequestException, ValueError) as exc:
            logger.debug("%s %s failed: %s", method, url, exc)
            return None
        try:
            return int(resp.status_code)
        finally:
            close = getattr(resp, "close", None)
            if callable(close):
                close()

    def probe(self, url: str) -> bool:
        """Return True when ``url`` answers with a 2xx status.

        Raises:
            ProbeCancelledError: If cancel() was called before the probe started
        """
        with self._lock:
            cached = self._probes.get(url)
        if cached is not None:
            return cached
        if self.cancelled:
            raise ProbeCancelledError(url)

        with self._host_slot(url):
            deadline = time.monotonic() + self.timeout
            status = self._status("HEAD", url, self.timeout)
            ok = is_success(status)
            if not ok:
                remaining = deadline - time.monotonic()
                if remaining > 0:
                    get_status = self._status("GET", url, remaining)
                    ok = is_success(get_status)
                    status = get_status if get_status is not None else status

        logger.debug("Probe %s -> %s (%s)", url, "ok" if ok else "invalid", status)
        with self._lock:
            self._probes[url] = ok
            self.probe_count += 1
        return ok

    def resolve(self, url: str) -> ValidationOutcome:
        """Validate ``url``, trying alternates when enabled.

        ``resolved_url`` is ``url`` itself when the literal URL is live, the
        winning alternate when one is, and ``url`` on failure.
        """
        with self._lock:
            cached = self._outcomes.get(url)
        if cached is not None:
            return cached

        if is_placeholder_href(url):
            # Intentionally absent; never probed
            outcome = ValidationOutcome(is_valid=False, resolved_url=url)
        else:
            target = self.absolute_url(url)
            outcome = ValidationOutcome(is_valid=False, resolved_url=url)
            if self.probe(target):
                outcome = ValidationOutcome(is_valid=True, resolved_url=url)
            elif self.try_alternates:
                for alt in derive_alternates(target):
                    if self.probe(alt):
                        logger.info("Alternate URL resolved: %s -> %s", url, alt)
                        outcome = ValidationOutcome(is_valid=True, resolved_url=alt)
                        break

        with self._lock:
            self._outcomes[url] = outcome
        return outcome

    def resolve_many(self, urls: Iterable[str]) -> dict[str, ValidationOutcome]:
        """Resolve every distinct URL in ``urls`` concurrently."""
        unique = list(dict.fromkeys(urls))
        results: dict[str, ValidationOutcome] = {}
        if not unique:
            return results

        executor = ThreadPoolExecutor(max_workers=min(self.workers, len(unique)))
        try:
            futures: dict[Future[ValidationOutcome], str] = {
                executor.submit(self.resolve, url): url for url in unique
            }
            for fut in as_completed(futures):
                results[futures[fut]] = fut.result()
        except BaseException:
            self.cancel()
            executor.shutdown(wait=True, cancel_futures=True)
            raise
        else:
            executor.shutdown(wait=True)
        return results


__all__ = [
    "DEFAULT_USER_AGENT",
    "LinkValidator",
    "build_session",
    "is_success",
    "split_timeout",
]
