#!/usr/bin/env python3
"""
marksearch - semantic search for bookmarks

Enrich a JSON list of bookmarks with page text and embeddings, then search
the enriched collection by meaning.
"""
import sys
import argparse
import asyncio
import json
import logging
from pathlib import Path
from typing import List, Optional
from rich.console import Console
from rich.table import Table
from rich.markup import escape
from rich.progress import Progress, BarColumn, TextColumn, MofNCompleteColumn

from marksearch.config import MarksearchConfig, init_config
from marksearch.content_extractor import HtmlContentExtractor
from marksearch.embeddings import SentenceTransformerProvider
from marksearch.enricher import Enricher, EnrichmentResult, summarize_results
from marksearch.errors import MarksearchError
from marksearch.models import EnrichedBookmark, SearchResult
from marksearch.search import SearchEngine
from marksearch.store import load_bookmarks, load_enriched, save_enriched, save_embeddings

logger = logging.getLogger(__name__)


console = Console()


def setup_logging(config: MarksearchConfig, verbose: bool = False, quiet: bool = False):
    """Configure root logging from config and command-line flags."""
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = getattr(logging, str(config.log_level).upper(), logging.INFO)
    logging.basicConfig(level=level, format='%(levelname)s: %(message)s')


def build_provider(config: MarksearchConfig) -> SentenceTransformerProvider:
    return SentenceTransformerProvider(
        model_name=config.model_name,
        device=config.device,
        max_chars=config.max_text_chars,
        timeout=config.embedding_timeout,
    )


def build_extractor(config: MarksearchConfig) -> HtmlContentExtractor:
    return HtmlContentExtractor(
        timeout=config.request_timeout,
        retries=config.fetch_retries,
        backoff=config.retry_backoff,
        user_agent=config.user_agent,
    )


def output_results(results: List[SearchResult], format: str = "table"):
    """Output search results in the specified format."""
    if format == "json":
        print(json.dumps([r.to_dict() for r in results], indent=2, ensure_ascii=False))
        return

    if not results:
        console.print("[yellow]No matching bookmarks[/yellow]")
        return

    table = Table(title="Search Results")
    table.add_column("#", style="cyan", justify="right")
    table.add_column("Similarity", style="green", justify="right")
    table.add_column("Title", style="bold")
    table.add_column("URL", style="blue")
    table.add_column("Description", style="dim")

    for index, result in enumerate(results, start=1):
        table.add_row(
            str(index),
            f"{result.similarity * 100:.2f}%",
            result.display_title,
            result.bookmark.site,
            result.bookmark.description,
        )

    console.print(table)


def enrich_bookmarks(config: MarksearchConfig, provider: SentenceTransformerProvider) -> List[EnrichedBookmark]:
    """Load, enrich and save bookmarks. Returns the enriched records."""
    bookmarks = load_bookmarks(config.input_file)
    enricher = Enricher(build_extractor(config), provider)

    show_progress = config.show_progress and sys.stdout.isatty() and bookmarks
    if show_progress:
        with Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            console=console,
            transient=True
        ) as progress:
            task = progress.add_task("Enriching bookmarks", total=len(bookmarks))

            def on_progress(completed: int, total: int, result: EnrichmentResult):
                progress.update(task, completed=completed)

            results = asyncio.run(enricher.enrich_all(bookmarks, on_progress))
    else:
        results = asyncio.run(enricher.enrich_all(bookmarks))

    records = EnrichmentResult.records(results)
    save_enriched(records, config.output_file)
    if config.write_embeddings_file:
        save_embeddings(records, config.embeddings_file)

    summary = summarize_results(results)
    console.print(
        f"[green]Enriched {summary['enriched']}/{summary['total']} bookmarks "
        f"({summary['embedded']} with embeddings)[/green]"
    )
    for skipped in summary['skipped_bookmarks']:
        console.print(f"[yellow]Skipped {escape(skipped['site'])}: {escape(skipped['reason'])}[/yellow]")
    return records


def cmd_enrich(args, config: MarksearchConfig):
    enrich_bookmarks(config, build_provider(config))


def cmd_search(args, config: MarksearchConfig):
    corpus = load_enriched(config.output_file)
    engine = SearchEngine(build_provider(config))
    limit = args.limit if args.limit is not None else config.search_limit
    results = asyncio.run(engine.search(args.query, corpus, limit, args.threshold))
    output_results(results, args.format)


def cmd_run(args, config: MarksearchConfig):
    provider = build_provider(config)
    records = enrich_bookmarks(config, provider)
    query = args.query or config.default_query
    limit = args.limit if args.limit is not None else config.search_limit
    results = asyncio.run(SearchEngine(provider).search(query, records, limit))
    output_results(results, args.format)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="marksearch",
        description="Semantic search for bookmarks",
    )
    parser.add_argument("--config", type=Path, help="Config file to load")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("-q", "--quiet", action="store_true", help="Only warnings and errors")
    parser.add_argument("--model", help="Sentence-transformer model name")
    parser.add_argument("--device", help="Device to run the model on")
    parser.add_argument("--timeout", type=float, help="Fetch timeout in seconds")
    parser.add_argument("--no-progress", action="store_true", help="Disable progress bar")

    subparsers = parser.add_subparsers(dest="command", required=True)

    enrich = subparsers.add_parser("enrich", help="Fetch pages and compute embeddings")
    enrich.add_argument("--input", help="Bookmark file to read")
    enrich.add_argument("--output", help="Enriched bookmark file to write")
    enrich.add_argument("--embeddings", help="Embedding vector file to write")
    enrich.add_argument("--no-embeddings-file", action="store_true",
                        help="Do not write the separate embeddings file")
    enrich.set_defaults(func=cmd_enrich)

    search = subparsers.add_parser("search", help="Search enriched bookmarks")
    search.add_argument("query", help="Free-text query")
    search.add_argument("--input", dest="output", help="Enriched bookmark file to search")
    search.add_argument("--limit", type=int, help="Maximum number of results")
    search.add_argument("--threshold", type=float, help="Minimum similarity (0-1)")
    search.add_argument("--format", choices=["table", "json"], default="table")
    search.set_defaults(func=cmd_search)

    run = subparsers.add_parser("run", help="Enrich, then run a sample query")
    run.add_argument("--query", help="Query to run after enrichment")
    run.add_argument("--input", help="Bookmark file to read")
    run.add_argument("--output", help="Enriched bookmark file to write")
    run.add_argument("--embeddings", help="Embedding vector file to write")
    run.add_argument("--no-embeddings-file", action="store_true",
                     help="Do not write the separate embeddings file")
    run.add_argument("--limit", type=int, help="Maximum number of results")
    run.add_argument("--format", choices=["table", "json"], default="table")
    run.set_defaults(func=cmd_run)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    overrides = {
        "model_name": args.model,
        "device": args.device,
        "request_timeout": args.timeout,
        "input_file": getattr(args, "input", None),
        "output_file": getattr(args, "output", None),
        "embeddings_file": getattr(args, "embeddings", None),
    }
    if args.no_progress:
        overrides["show_progress"] = False
    if getattr(args, "no_embeddings_file", False):
        overrides["write_embeddings_file"] = False

    config = init_config(config_file=args.config, **overrides)
    setup_logging(config, args.verbose, args.quiet)

    try:
        args.func(args, config)
    except (MarksearchError, ValueError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
