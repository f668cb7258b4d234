"""Run options for the reconciliation engine.

A Profile bundles the policy switches that used to differ between the
forms and publications tables; individual switches can still be set directly.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class Profile(Enum):
    """Table policy profiles."""

    BASIC = "basic"  # Validate every pair, no alternates, no row demotion
    FORMS = "forms"  # Demote rows without any live link to "not applicable"
    PUBLICATIONS = "publications"  # Try alternate URLs, leave unlinked cells alone


@dataclass
class ReconcileOptions:
    """Configuration for one reconciliation run.

    Defaults match the basic profile with a 10 second probe budget.
    """

    # Seconds shared by the HEAD and fallback GET of a single probe
    timeout: float = 10.0

    # Compute and report changes without writing documents
    dry_run: bool = False

    profile: Profile = Profile.BASIC

    # Retry failed links against derived alternate URLs
    try_alternates: bool = False

    # Leave pairs with no link on either side untouched
    skip_unlinked: bool = False

    # Overwrite rows with no live link with "not applicable"
    demote_empty_rows: bool = False

    # Concurrency caps for probing
    workers: int = 8
    per_host: int = 4

    primary_lang: str = "en"
    secondary_lang: str = "fr"

    # Joined with relative hrefs before probing
    base_url: str | None = None

    @classmethod
    def for_profile(cls, profile: Profile, **kwargs: Any) -> ReconcileOptions:
        """Build options with the switches implied by ``profile``."""
        flags = {
            "try_alternates": profile is Profile.PUBLICATIONS,
            "skip_unlinked": profile is Profile.PUBLICATIONS,
            "demote_empty_rows": profile is Profile.FORMS,
        }
        flags.update(kwargs)
        return cls(profile=profile, **flags)

    @classmethod
    def from_cli(
        cls,
        *,
        profile: str = "basic",
        timeout: float = 10.0,
        dry_run: bool = False,
        workers: int = 8,
        per_host: int = 4,
        primary_lang: str = "en",
        secondary_lang: str = "fr",
        base_url: str | None = None,
    ) -> ReconcileOptions:
        """Build ReconcileOptions from CLI argument values.

        Raises:
            ValueError: If any argument has an invalid value
        """
        try:
            profile_enum = Profile(profile)
        except ValueError as exc:
            valid_values = [p.value for p in Profile]
            raise ValueError(f"Invalid profile '{profile}'. Valid values: {valid_values}") from exc

        if timeout <= 0:
            raise ValueError(f"Timeout must be positive, got {timeout}")
        if workers < 1:
            raise ValueError(f"Workers must be at least 1, got {workers}")
        if per_host < 1:
            raise ValueError(f"Per-host limit must be at least 1, got {per_host}")

        primary_lang = primary_lang.strip()
        secondary_lang = secondary_lang.strip()
        if not primary_lang or not secondary_lang:
            raise ValueError("Language codes must not be empty")
        if primary_lang == secondary_lang:
            raise ValueError(f"Primary and secondary languages must differ, got '{primary_lang}' twice")

        return cls.for_profile(
            profile_enum,
            timeout=timeout,
            dry_run=dry_run,
            workers=workers,
            per_host=per_host,
            primary_lang=primary_lang,
            secondary_lang=secondary_lang,
            base_url=base_url or None,
        )

    @property
    def languages(self) -> tuple[str, str]:
        return (self.primary_lang, self.secondary_lang)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization/logging."""
        return {
            "timeout": self.timeout,
            "dry_run": self.dry_run,
            "profile": self.profile.value,
            "try_alternates": self.try_alternates,
            "skip_unlinked": self.skip_unlinked,
            "demote_empty_rows": self.demote_empty_rows,
            "workers": self.workers,
            "per_host": self.per_host,
            "primary_lang": self.primary_lang,
            "secondary_lang": self.secondary_lang,
            "base_url": self.base_url,
        }


__all__ = [
    "Profile",
    "ReconcileOptions",
]
