"""Keep link tables in paired bilingual HTML documents in sync with live resources."""

__version__ = "0.1.0"
