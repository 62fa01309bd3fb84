# productlens/cli/runner.py

"""Headless CLI runner: extract product data from files and URLs."""

import asyncio
import dataclasses
import json
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.rule import Rule
from rich.table import Table

from productlens.config.extraction_config import (
    DEFAULT_EXTRACTION_CONFIG,
    ExtractionConfig,
)
from productlens.models.price_history import PriceAlert
from productlens.scrapers.page_fetcher import PageFetcher
from productlens.services.page_extractor import PageExtraction, PageExtractor
from productlens.services.price_tracker import PriceHistoryTracker
from productlens.storage.kv_store import SQLiteStore

logger = logging.getLogger("productlens.cli")

# Stderr console for status messages so stdout stays clean for JSON
_err = Console(stderr=True)


def is_url(source: str) -> bool:
    """True for http(s) URLs, False for local paths."""
    return source.lower().startswith(("http://", "https://"))


def build_config(max_length: int | None) -> ExtractionConfig:
    """Default extraction config, optionally with a new content budget."""
    if max_length is None:
        return DEFAULT_EXTRACTION_CONFIG
    if max_length <= 0:
        _err.print("[red]--max-length must be positive[/red]")
        raise SystemExit(1)
    return dataclasses.replace(
        DEFAULT_EXTRACTION_CONFIG, max_content_length=max_length
    )


def _load_source(
    source: str, fetcher: PageFetcher | None,
) -> tuple[str, str] | None:
    """Return ``(html, url)`` for a file path or URL, or ``None``."""
    if is_url(source):
        if fetcher is None:
            fetcher = PageFetcher()
        html = fetcher.fetch_html(source)
        if html is None:
            _err.print(f"[red]Could not fetch {source}[/red]")
            return None
        return html, source

    path = Path(source)
    try:
        html = path.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        logger.error("Failed to read %s: %s", path, exc)
        _err.print(f"[red]Could not read {source}: {exc}[/red]")
        return None
    return html, path.resolve().as_uri()


def _print_table(extractions: list[PageExtraction]) -> None:
    """Render a Rich table of extracted products to stdout."""
    table = Table(
        title="Extracted Products",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("#", style="dim", width=4)
    table.add_column("Title", max_width=50)
    table.add_column("Price", justify="right", style="green")
    table.add_column("Rating", justify="center")
    table.add_column("Reviews", justify="right")
    table.add_column("Value", justify="center", style="magenta")
    table.add_column("URL", overflow="fold", style="dim")

    for idx, ex in enumerate(extractions, 1):
        record = ex.record
        price_str = (
            f"{record.currency} {record.price:,.2f}"
            if record.price is not None
            else "N/A"
        )
        value_str = (
            f"{ex.value_score:.1f} ({ex.value_label})"
            if ex.value_score is not None
            else "—"
        )
        table.add_row(
            str(idx),
            (record.title or "(no title)")[:50],
            price_str,
            f"{record.rating:.1f}" if record.rating is not None else "—",
            (
                f"{record.review_count:,}"
                if record.review_count is not None
                else "—"
            ),
            value_str,
            ex.url,
        )

    Console().print(table)


def _print_text(extractions: list[PageExtraction]) -> None:
    """Print each page's packed content under a heading rule."""
    console = Console()
    for ex in extractions:
        console.print(Rule(ex.record.title or ex.url))
        console.print(ex.content, markup=False, highlight=False)


def _print_alerts(alerts: list[PriceAlert]) -> None:
    for alert in alerts:
        colour = "green" if alert.kind == "drop" else "yellow"
        _err.print(
            f"[{colour}]Price {alert.kind} {alert.percent_label}: "
            f"{alert.currency} {alert.old_price:,.2f} → "
            f"{alert.new_price:,.2f}[/{colour}] [dim]{alert.url}[/dim]"
        )


async def cli_extract(
    sources: list[str],
    output_format: str = "json",
    max_length: int | None = None,
    track: bool = False,
    store_path: Path | None = None,
) -> int:
    """Run extraction over every source and return an exit code.

    Returns 0 when at least one source was processed, 1 otherwise.
    """
    config = build_config(max_length)
    extractor = PageExtractor(config)
    fetcher = PageFetcher() if any(is_url(s) for s in sources) else None
    store = SQLiteStore(store_path) if track else None
    tracker = PriceHistoryTracker(store) if store is not None else None

    extractions: list[PageExtraction] = []
    alerts: dict[str, PriceAlert] = {}
    try:
        for source in sources:
            _err.print(f"[bold]Extracting:[/bold] {source}")
            loaded = await asyncio.to_thread(_load_source, source, fetcher)
            if loaded is None:
                continue
            html, url = loaded
            try:
                extraction = extractor.extract_html(html, url)
            except Exception as exc:
                logger.error(
                    "Extraction failed for %s: %s", source, exc,
                    exc_info=True,
                )
                _err.print(f"[red]Extraction failed for {source}: {exc}[/red]")
                continue
            extractions.append(extraction)

            if tracker is not None:
                alert = await tracker.track(extraction.record)
                if alert is not None:
                    alerts[extraction.url] = alert
    finally:
        if store is not None:
            store.close()

    if not extractions:
        _err.print("[yellow]No pages processed.[/yellow]")
        return 1

    _err.print(f"[green]✓ {len(extractions)} of {len(sources)} pages[/green]")
    _print_alerts(list(alerts.values()))

    if output_format == "table":
        _print_table(extractions)
    elif output_format == "text":
        _print_text(extractions)
    else:
        payload: list[dict[str, object]] = []
        for ex in extractions:
            item = ex.to_dict()
            alert = alerts.get(ex.url)
            item["priceAlert"] = alert.to_dict() if alert else None
            payload.append(item)
        json.dump(payload, sys.stdout, ensure_ascii=False, indent=2)
        sys.stdout.write("\n")

    return 0
