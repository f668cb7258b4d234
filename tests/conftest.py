import logging
import sys
import threading
import time
from collections.abc import Callable
from pathlib import Path

import pytest
import requests

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))


@pytest.fixture
def isolate_logging():
    """Isolate logging configuration between tests to prevent CI issues.

    The CLI installs a RichHandler with force=True; restore the root logger
    afterwards so later caplog-based tests still see records.
    """
    original_handlers = logging.root.handlers[:]
    original_level = logging.root.level
    pkg_logger = logging.getLogger("tablelinks")
    original_pkg_level = pkg_logger.level

    logging.root.handlers.clear()
    logging.root.addHandler(logging.NullHandler())

    yield

    logging.root.handlers.clear()
    logging.root.handlers.extend(original_handlers)
    logging.root.setLevel(original_level)
    pkg_logger.setLevel(original_pkg_level)


class FakeResponse:
    def __init__(self, status_code: int) -> None:
        self.status_code = status_code
        self.closed = False

    def close(self) -> None:
        self.closed = True


class FakeSession:
    """Stand-in for requests.Session keyed by URL.

    ``statuses`` maps URL -> status for both methods; ``head_statuses``
    overrides HEAD only. URLs in ``errors`` raise ConnectionError.
    """

    def __init__(
        self,
        statuses: dict[str, int] | None = None,
        *,
        default: int = 404,
        head_statuses: dict[str, int] | None = None,
        errors: set[str] | None = None,
        delay: float = 0.0,
    ) -> None:
        self.statuses = statuses or {}
        self.head_statuses = head_statuses or {}
        self.default = default
        self.errors = errors or set()
        self.delay = delay
        self.calls: list[tuple[str, str, dict[str, object]]] = []
        self._lock = threading.Lock()
        self._in_flight: dict[str, int] = {}
        self.max_in_flight: dict[str, int] = {}

    def _respond(self, method: str, url: str, kwargs: dict[str, object]) -> FakeResponse:
        host = url.split("/")[2] if "://" in url else ""
        with self._lock:
            self.calls.append((method, url, kwargs))
            self._in_flight[host] = self._in_flight.get(host, 0) + 1
            self.max_in_flight[host] = max(self.max_in_flight.get(host, 0), self._in_flight[host])
        try:
            if self.delay:
                time.sleep(self.delay)
            if url in self.errors:
                raise requests.ConnectionError(f"cannot reach {url}")
            if method == "HEAD" and url in self.head_statuses:
                return FakeResponse(self.head_statuses[url])
            return FakeResponse(self.statuses.get(url, self.default))
        finally:
            with self._lock:
                self._in_flight[host] -= 1

    def head(self, url: str, **kwargs: object) -> FakeResponse:
        return self._respond("HEAD", url, kwargs)

    def get(self, url: str, **kwargs: object) -> FakeResponse:
        return self._respond("GET", url, kwargs)

    def urls(self, method: str | None = None) -> list[str]:
        return [u for m, u, _ in self.calls if method is None or m == method]


@pytest.fixture
def fake_session() -> Callable[..., FakeSession]:
    return FakeSession


def build_table_document(rows: list[list[str]], *, title: str = "Forms", newline: str = "\n") -> str:
    """A small HTML page embedding one table; each row is a list of cell inner markups."""
    body_rows = []
    for cells in rows:
        tds = "".join(f'<td class="c{i}">{inner}</td>' for i, inner in enumerate(cells))
        body_rows.append(f"    <tr>{tds}</tr>")
    lines = [
        "<!DOCTYPE html>",
        '<html lang="en">',
        f"<head><title>{title}</title></head>",
        "<body>",
        '<table class="table">',
        "  <thead><tr><th>Code</th><th>PDF</th><th>HTML</th></tr></thead>",
        '  <tbody id="items">',
        *body_rows,
        "  </tbody>",
        "</table>",
        "</body>",
        "</html>",
    ]
    return newline.join(lines) + newline


@pytest.fixture
def table_document() -> Callable[..., str]:
    return build_table_document


def link(url: str, text: str | None = None) -> str:
    return f'<a href="{url}">{text if text is not None else url.rsplit("/", 1)[-1]}</a>'


@pytest.fixture
def make_link() -> Callable[..., str]:
    return link
