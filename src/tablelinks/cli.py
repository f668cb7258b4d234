"""CLI interface for tablelinks."""

import logging
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler

from tablelinks import __version__
from tablelinks.builder.generate import DEFAULT_TOKEN, generate_item_documents
from tablelinks.core.timeout import get_environment_timeout
from tablelinks.ingest.error_handling import ConfigurationError, ProbeCancelledError
from tablelinks.ingest.feature_logger import log_run_configuration
from tablelinks.ingest.item_list import read_item_codes
from tablelinks.model.options import Profile, ReconcileOptions
from tablelinks.model.plan import ItemResult, ItemStatus
from tablelinks.pipeline import iter_reconcile_items
from tablelinks.transform.placeholders import DEFAULT_LABELS, PlaceholderSet
from tablelinks.ui.progress import ProgressReporter
from tablelinks.ui.summary import print_summary
from tablelinks.validate.link_validator import LinkValidator

# Environment variables (TABLELINKS_PROBE_TIMEOUT, CI) may come from a .env file
load_dotenv(override=False)

app = typer.Typer(
    name="tablelinks",
    help="Check the link tables of paired bilingual HTML documents and mark dead links.",
    no_args_is_help=True,
)


def setup_logging(verbose: bool = False) -> None:
    """Route log records through rich; -v enables DEBUG."""
    level = logging.DEBUG if verbose else logging.WARNING
    handler = RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=True)
    logging.basicConfig(level=level, format="%(message)s", handlers=[handler], force=True)
    # Decision logging is INFO; surface it only in verbose mode
    logging.getLogger("tablelinks").setLevel(logging.DEBUG if verbose else logging.WARNING)


@app.command()
def reconcile(
    items: Annotated[
        Path,
        typer.Argument(
            help="Newline-delimited list of item codes",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
        ),
    ],
    doc_dir: Annotated[
        Path,
        typer.Argument(
            help="Directory holding <code>-table-<lang>.htm(l) documents",
            exists=True,
            file_okay=False,
            dir_okay=True,
        ),
    ],
    profile: Annotated[
        str,
        typer.Option(
            "--profile",
            help=f"Table policy: {', '.join(p.value for p in Profile)}",
        ),
    ] = "basic",
    timeout: Annotated[
        float | None,
        typer.Option(
            "--timeout",
            help="Seconds per link probe (default: $TABLELINKS_PROBE_TIMEOUT, else 10; 5 in CI)",
        ),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run/--write", help="Report changes without writing documents (default: write)"),
    ] = False,
    workers: Annotated[
        int,
        typer.Option("--workers", help="Maximum concurrent link probes"),
    ] = 8,
    per_host: Annotated[
        int,
        typer.Option("--per-host", help="Maximum concurrent probes against one host"),
    ] = 4,
    primary: Annotated[
        str,
        typer.Option("--primary", help="Primary language code"),
    ] = "en",
    secondary: Annotated[
        str,
        typer.Option("--secondary", help="Secondary language code"),
    ] = "fr",
    base_url: Annotated[
        str | None,
        typer.Option("--base-url", help="Base URL for relative links"),
    ] = None,
    progress: Annotated[
        bool,
        typer.Option("--progress/--no-progress", help="Show a progress bar (default: yes)"),
    ] = True,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log every decision and probe"),
    ] = False,
) -> None:
    """
    Validate every linked cell of each item's document pair.

    Dead links are replaced in both languages with a localized "not available"
    placeholder; everything else in the documents is left byte-for-byte intact.

    Examples:

        # Check forms, report only
        tablelinks reconcile items.txt docs --profile forms --dry-run

        # Publications with alternate-URL fallback and a short timeout
        tablelinks reconcile items.txt docs --profile publications --timeout 5
    """
    setup_logging(verbose)

    if timeout is None:
        timeout = get_environment_timeout("probe")

    try:
        options = ReconcileOptions.from_cli(
            profile=profile,
            timeout=timeout,
            dry_run=dry_run,
            workers=workers,
            per_host=per_host,
            primary_lang=primary,
            secondary_lang=secondary,
            base_url=base_url,
        )
        placeholders = PlaceholderSet.for_options(options)
    except ValueError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(2) from exc

    codes = read_item_codes(items)
    if not codes:
        typer.echo(f"⚠️  No item codes in {items}")
        return

    log_run_configuration(options)
    typer.echo(f"📋 Items: {len(codes)} from {items}")
    typer.echo(f"📁 Documents: {doc_dir}")
    typer.echo(f"🧭 Profile: {options.profile.value}")
    typer.echo(f"⏱️  Probe timeout: {options.timeout:g}s")
    if options.dry_run:
        typer.echo("🔍 Dry run: no files will be written")

    results: list[ItemResult] = []
    interrupted = False
    with LinkValidator.from_options(options) as validator:
        try:
            if progress:
                with ProgressReporter() as pr:
                    for result in iter_reconcile_items(codes, doc_dir, options, validator, placeholders, pr.emit):
                        results.append(result)
            else:
                for result in iter_reconcile_items(codes, doc_dir, options, validator, placeholders):
                    results.append(result)
        except (KeyboardInterrupt, ProbeCancelledError):
            validator.cancel()
            interrupted = True

    print_summary(results, dry_run=options.dry_run)

    if interrupted:
        typer.echo(f"\n⛔ Interrupted after {len(results)} of {len(codes)} item(s)")
        raise typer.Exit(130)
    if any(r.status is ItemStatus.FAILED for r in results):
        raise typer.Exit(1)


@app.command()
def generate(
    template: Annotated[
        Path,
        typer.Argument(
            help="Template document for one language",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
        ),
    ],
    items: Annotated[
        Path,
        typer.Argument(
            help="Newline-delimited list of item codes",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
        ),
    ],
    out_dir: Annotated[
        Path,
        typer.Argument(help="Output directory (must exist)", exists=True, file_okay=False, dir_okay=True),
    ],
    lang: Annotated[
        str,
        typer.Option("--lang", help=f"Language code of the template ({', '.join(sorted(DEFAULT_LABELS))})"),
    ] = "en",
    token: Annotated[
        str,
        typer.Option("--token", help="Text in the template replaced by each item code"),
    ] = DEFAULT_TOKEN,
    overwrite: Annotated[
        bool,
        typer.Option("--overwrite/--keep-existing", help="Replace documents that already exist (default: keep)"),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Verbose logging"),
    ] = False,
) -> None:
    """Write one <code>-table-<lang> document per item code from a template."""
    setup_logging(verbose)
    codes = read_item_codes(items)
    try:
        with ProgressReporter() as pr:
            written = generate_item_documents(
                template, codes, out_dir, lang, token=token, overwrite=overwrite, on_progress=pr.emit
            )
    except ConfigurationError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(2) from exc
    typer.echo(f"✅ Wrote {len(written)} of {len(codes)} {lang} document(s) to {out_dir}")


@app.command()
def version() -> None:
    """Show version information."""
    typer.echo(f"tablelinks version {__version__}")


def version_callback(value: bool) -> None:
    """Version callback for --version flag."""
    if value:
        typer.echo(f"tablelinks version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = None,
) -> None:
    """
    tablelinks - keep bilingual link tables honest.

    Each item has two HTML documents, one per language, embedding one table of
    links. tablelinks probes every link and replaces dead ones in both
    languages with a localized placeholder, touching nothing else.

    Profiles:
    - basic: validate every linked cell
    - forms: also mark rows with no live link as "not applicable"
    - publications: retry dead links against known alternate file names

    For detailed usage, run: tablelinks reconcile --help
    """
    pass


if __name__ == "__main__":  # pragma: no cover - executed only via `python -m`
    app()
