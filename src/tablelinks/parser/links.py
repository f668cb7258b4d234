"""Find and rewrite the single link a table cell is assumed to carry."""

from __future__ import annotations

import html
import re
from urllib.parse import urlsplit

from ..types import LinkCandidate

_HREF_RE = re.compile(r"""(?<![\w-])href\s*=\s*(?P<q>["'])(?P<href>.*?)(?P=q)""", re.IGNORECASE | re.DOTALL)
_ANCHOR_RE = re.compile(
    r"""(?P<open><a\b[^>]*(?<![\w-])href\s*=\s*(?P<q>["'])(?P<href>.*?)(?P=q)[^>]*>)"""
    r"(?P<text>.*?)(?P<close></a\s*>)",
    re.IGNORECASE | re.DOTALL,
)

# Anchor-only targets mark a resource that is intentionally absent
PLACEHOLDER_HREFS = frozenset({"", "#"})


def extract_href(inner: str) -> str | None:
    """Return the first href value in ``inner``, or None when there is none."""

    m = _HREF_RE.search(inner)
    if m is None:
        return None
    return html.unescape(m.group("href")).strip()


def is_placeholder_href(url: str) -> bool:
    return url.strip() in PLACEHOLDER_HREFS


def extract_link(inner: str) -> LinkCandidate | None:
    url = extract_href(inner)
    if url is None:
        return None
    return LinkCandidate(url=url, is_placeholder=is_placeholder_href(url))


def url_filename(url: str) -> str:
    """Last path segment of ``url`` (empty for directory URLs)."""
    path = urlsplit(url).path
    return path.rsplit("/", 1)[-1]


def _replace_filename(href: str, old_name: str, new_name: str) -> str:
    parts = urlsplit(href)
    head, sep, tail = parts.path.rpartition("/")
    if tail != old_name:
        return href
    start = href.find(parts.path)
    new_path = f"{head}{sep}{new_name}"
    return href[:start] + new_path + href[start + len(parts.path) :]


def rewrite_link(inner: str, old_url: str, new_url: str) -> str:
    """Point the cell's first link at ``new_url``.

    Only the filename differs between an URL and its alternates, so the
    original href keeps its form (relative or absolute) and only its
    filename is swapped. When the anchor's visible text is exactly the old
    filename it is updated as well. Everything else stays byte-identical.
    """

    old_name = url_filename(old_url)
    new_name = url_filename(new_url)
    if not old_name or old_name == new_name:
        return inner

    anchor = _ANCHOR_RE.search(inner)
    if anchor is not None:
        raw_href = anchor.group("href")
        new_href = _replace_filename(raw_href, old_name, new_name)
        text = anchor.group("text")
        if text.strip() == old_name:
            text = text.replace(old_name, new_name, 1)
        open_tag = (
            anchor.group("open")[: anchor.start("href") - anchor.start()]
            + new_href
            + anchor.group("open")[anchor.end("href") - anchor.start() :]
        )
        return inner[: anchor.start()] + open_tag + text + anchor.group("close") + inner[anchor.end() :]

    m = _HREF_RE.search(inner)
    if m is None:
        return inner
    new_href = _replace_filename(m.group("href"), old_name, new_name)
    return inner[: m.start("href")] + new_href + inner[m.end("href") :]


__all__ = [
    "PLACEHOLDER_HREFS",
    "extract_href",
    "extract_link",
    "is_placeholder_href",
    "rewrite_link",
    "url_filename",
]
