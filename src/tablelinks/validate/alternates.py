"""Alternate URL candidates for publication links.

Publications live under a directory named after their code, e.g.
``.../5000-g/5000-g-22e.pdf``. Over time the same publication has been filed
with and without the hyphen in the code (``5000g-22e.pdf``) and under the
sibling ``51xx`` number (``5100-g-22e.pdf``). When the literal URL fails,
these variants are tried in a fixed order.
"""

from __future__ import annotations

import re
from urllib.parse import urlsplit, urlunsplit

_DIR_CODE_RE = re.compile(r"^(?P<digits>\d{4})-(?P<suffix>[A-Za-z0-9]+)$")

_PREFIX_SWAPS = {"50": "51", "51": "50"}


def swap_prefix(digits: str) -> str | None:
    """Return ``digits`` with a leading 50 and 51 exchanged, or None."""
    swapped = _PREFIX_SWAPS.get(digits[:2])
    if swapped is None:
        return None
    return swapped + digits[2:]


def _code_family(digits: str) -> set[str]:
    family = {digits}
    swapped = swap_prefix(digits)
    if swapped is not None:
        family.add(swapped)
    return family


def derive_alternate_filenames(directory: str, filename: str) -> list[str]:
    """Alternate filenames for ``filename`` stored under ``directory``.

    Order: hyphen toggled, prefix swapped, both. Returns an empty list when
    the directory is not a publication code or the filename does not start
    with that code.
    """

    dm = _DIR_CODE_RE.match(directory)
    if dm is None:
        return []
    suffix = dm.group("suffix")
    fm = re.match(
        rf"^(?P<digits>\d{{4}})(?P<hyphen>-?)(?P<suffix>{re.escape(suffix)})(?P<rest>.*)$",
        filename,
        re.IGNORECASE,
    )
    if fm is None or fm.group("digits") not in _code_family(dm.group("digits")):
        return []

    digits = fm.group("digits")
    hyphen = fm.group("hyphen")
    code_suffix = fm.group("suffix")
    rest = fm.group("rest")
    toggled = "" if hyphen else "-"

    candidates = [f"{digits}{toggled}{code_suffix}{rest}"]
    swapped = swap_prefix(digits)
    if swapped is not None:
        candidates.append(f"{swapped}{hyphen}{code_suffix}{rest}")
        candidates.append(f"{swapped}{toggled}{code_suffix}{rest}")

    seen = {filename}
    out: list[str] = []
    for name in candidates:
        if name not in seen:
            seen.add(name)
            out.append(name)
    return out


def derive_alternates(url: str) -> list[str]:
    """Alternate URLs for ``url`` in probing order (original excluded)."""

    parts = urlsplit(url)
    segments = parts.path.split("/")
    if len(segments) < 2:
        return []
    directory, filename = segments[-2], segments[-1]
    if not filename:
        return []
    out = []
    for name in derive_alternate_filenames(directory, filename):
        path = "/".join([*segments[:-1], name])
        out.append(urlunsplit((parts.scheme, parts.netloc, path, parts.query, parts.fragment)))
    return out


__all__ = ["derive_alternate_filenames", "derive_alternates", "swap_prefix"]
