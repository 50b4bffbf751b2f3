"""CLI entry point for the India Code harvesting pipeline."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from harvester.config import load_config
from harvester.ingestion.act_page import ActPageExtractor
from harvester.ingestion.listing import ListingCrawler, make_strategy
from harvester.ingestion.section_content import SectionContentFetcher
from harvester.normalization.normalizer import read_index
from harvester.orchestrator import PipelineOrchestrator
from harvester.utils.cache import SeedCache
from harvester.utils.http import RateLimitedTransport
from harvester.utils.rate_limiter import RateLimiter

DATA_DIR = "data"

logger = logging.getLogger(__name__)


def _data_dir(data_dir: str | None) -> Path:
    """Output directory; relative to the working directory unless given."""
    return Path(data_dir) if data_dir else Path.cwd() / DATA_DIR


def _paths(config: dict, data_dir: Path) -> tuple[Path, Path]:
    output = config.get("output", {})
    index_path = data_dir / output.get("index_file", "source/act-index.json")
    seed_dir = data_dir / output.get("seed_dir", "seed")
    return index_path, seed_dir


def build_transport(config: dict) -> RateLimitedTransport:
    portal = config["portal"]
    return RateLimitedTransport(
        user_agent=portal["user_agent"],
        accept=portal["accept"],
        timeout=portal.get("timeout", 60),
        max_retries=portal.get("max_retries", 3),
        rate_limiter=RateLimiter(min_interval=portal.get("min_interval", 0.5)),
    )


def build_pipeline(config: dict, data_dir: Path, transport: RateLimitedTransport) -> PipelineOrchestrator:
    """Wire every stage to the one shared transport."""
    portal = config["portal"]
    discovery = config.get("discovery", {})
    scheme = discovery.get("scheme", "table")

    strategy = make_strategy(
        scheme,
        base_url=portal["base_url"],
        url_template=discovery.get(scheme, {}).get("url"),
        page_size=discovery.get("page_size", 50),
    )
    index_path, seed_dir = _paths(config, data_dir)

    return PipelineOrchestrator(
        crawler=ListingCrawler(transport, strategy, max_pages=discovery.get("max_pages", 500)),
        transport=transport,
        extractor=ActPageExtractor(),
        fetcher=SectionContentFetcher(
            transport,
            base_url=portal["base_url"],
            path=config.get("content", {}).get("section_path", "/SectionPageContent"),
        ),
        cache=SeedCache(seed_dir),
        index_path=index_path,
    )


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
def cli(verbose: bool):
    """India Code statute harvesting pipeline."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )


@cli.command()
@click.option("--limit", type=click.IntRange(min=0), default=None, help="Process at most N acts (smoke testing)")
@click.option("--skip-discovery", is_flag=True, help="Reuse the cached act index instead of re-crawling")
@click.option("--retry-placeholders", is_flag=True, help="Retry acts that previously produced placeholder seeds")
@click.option("--data-dir", type=click.Path(file_okay=False), default=None, help="Output data directory")
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False), default=None, help="Portal config override (YAML)")
def ingest(limit: int | None, skip_discovery: bool, retry_placeholders: bool, data_dir: str | None, config_path: str | None):
    """Discover acts and harvest one seed record per act."""
    out_data = _data_dir(data_dir)

    if limit is not None:
        click.echo(f"  --limit {limit}")
    if skip_discovery:
        click.echo("  --skip-discovery")

    try:
        config = load_config(Path(config_path) if config_path else None)
        with build_transport(config) as transport:
            pipeline = build_pipeline(config, out_data, transport)
            stats = pipeline.run(
                limit=limit,
                skip_discovery=skip_discovery,
                retry_placeholders=retry_placeholders,
            )
    except Exception as e:
        logger.exception("Ingestion aborted")
        click.echo(f"Fatal error: {e}", err=True)
        sys.exit(1)

    click.echo(f"\n{'='*60}")
    click.echo(f"Processed: {stats.processed}")
    click.echo(f"Skipped (already cached): {stats.skipped}")
    click.echo(f"Failed/No content: {stats.failed}")
    click.echo(f"Total provisions extracted: {stats.provisions}")


@cli.command()
@click.option("--data-dir", type=click.Path(file_okay=False), default=None, help="Output data directory")
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False), default=None, help="Portal config override (YAML)")
def status(data_dir: str | None, config_path: str | None):
    """Compare the act index with the seed directory."""
    config = load_config(Path(config_path) if config_path else None)
    index_path, seed_dir = _paths(config, _data_dir(data_dir))

    if not index_path.exists():
        click.echo(f"Error: no act index at {index_path}; run 'ingest' first", err=True)
        sys.exit(1)

    entries = read_index(index_path)
    counts = SeedCache(seed_dir).summary(entries)

    click.echo(f"Acts in index: {len(entries)}")
    for state in ("complete", "partial", "placeholder", "missing"):
        click.echo(f"  {state}: {counts.get(state, 0)}")


if __name__ == "__main__":
    cli()
