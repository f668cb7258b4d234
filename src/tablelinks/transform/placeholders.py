"""Canonical placeholder markup and detection of existing "unavailable" cells.

Placeholders are rendered from a small jinja2 template so the wrapper element
and muted class stay consistent across languages. Detection works on text
content only (tags stripped, entities unescaped, whitespace collapsed,
case-folded), so placeholders written by older tooling with different markup
are still recognized.
"""

from __future__ import annotations

import html
import re
from dataclasses import dataclass, field

from jinja2 import DictLoader, Environment, StrictUndefined

from tablelinks.model.options import ReconcileOptions

PLACEHOLDER_TEMPLATE = '<span class="{{ css_class }}">{{ label }}</span>'

DEFAULT_CSS_CLASS = "text-muted"

# Labels per language code: (unavailable, not applicable)
DEFAULT_LABELS: dict[str, tuple[str, str]] = {
    "en": ("Not available", "Not applicable"),
    "fr": ("Non disponible", "Sans objet"),
}

UNAVAILABLE_PHRASES = frozenset(
    {
        "not available",
        "unavailable",
        "currently unavailable",
        "non disponible",
        "non-disponible",
        "pas disponible",
        "indisponible",
    }
)

_TAG_RE = re.compile(r"<[^>]*>")
_WS_RE = re.compile(r"\s+")


def cell_text(inner: str) -> str:
    """Normalized visible text of a cell's inner markup."""
    text = html.unescape(_TAG_RE.sub(" ", inner)).replace("\u00a0", " ")
    return _WS_RE.sub(" ", text).strip().casefold()


def is_unavailable(inner: str) -> bool:
    text = cell_text(inner).rstrip(".")
    return text in UNAVAILABLE_PHRASES or f"{text}." in UNAVAILABLE_PHRASES


def _environment() -> Environment:
    loader = DictLoader({"placeholder.html": PLACEHOLDER_TEMPLATE})
    return Environment(loader=loader, undefined=StrictUndefined, autoescape=True)


@dataclass
class PlaceholderSet:
    """Canonical placeholder markup for the configured languages."""

    labels: dict[str, tuple[str, str]] = field(default_factory=lambda: dict(DEFAULT_LABELS))
    css_class: str = DEFAULT_CSS_CLASS
    env: Environment = field(default_factory=_environment, repr=False)

    @classmethod
    def for_options(cls, options: ReconcileOptions) -> PlaceholderSet:
        missing = [lang for lang in options.languages if lang not in DEFAULT_LABELS]
        if missing:
            raise ValueError(
                f"No placeholder labels for language(s) {missing}. "
                f"Known languages: {sorted(DEFAULT_LABELS)}"
            )
        return cls(labels={lang: DEFAULT_LABELS[lang] for lang in options.languages})

    def _render(self, label: str) -> str:
        tpl = self.env.get_template("placeholder.html")
        return str(tpl.render(css_class=self.css_class, label=label))

    def _labels(self, lang: str) -> tuple[str, str]:
        try:
            return self.labels[lang]
        except KeyError as exc:
            raise ValueError(f"No placeholder labels for language '{lang}'") from exc

    def unavailable(self, lang: str) -> str:
        return self._render(self._labels(lang)[0])

    def not_applicable(self, lang: str) -> str:
        return self._render(self._labels(lang)[1])


__all__ = [
    "DEFAULT_LABELS",
    "PlaceholderSet",
    "UNAVAILABLE_PHRASES",
    "cell_text",
    "is_unavailable",
]
