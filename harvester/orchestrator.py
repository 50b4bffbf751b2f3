"""Two-phase harvest: discover the act index, then build one seed per act."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from harvester.ingestion.act_page import ActPageExtractor
from harvester.ingestion.base import COMPLETE, PLACEHOLDER, IndexEntry
from harvester.ingestion.listing import ListingCrawler
from harvester.ingestion.section_content import SectionContentFetcher
from harvester.normalization.normalizer import build_record, read_index, write_index
from harvester.utils.cache import SeedCache
from harvester.utils.http import RateLimitedTransport

logger = logging.getLogger(__name__)

NAVIGATIONAL_STATUS = (301, 302, 404)
PROGRESS_EVERY = 100


@dataclass
class RunStats:
    processed: int = 0
    skipped: int = 0
    failed: int = 0
    written: int = 0
    provisions: int = 0


class PipelineOrchestrator:
    """Sequences discovery, act extraction, section fetching and seed writing.

    All stages share one transport, so one request is in flight at a time
    and every request honours the same rate limit.
    """

    def __init__(
        self,
        crawler: ListingCrawler,
        transport: RateLimitedTransport,
        extractor: ActPageExtractor,
        fetcher: SectionContentFetcher,
        cache: SeedCache,
        index_path: Path,
    ):
        self.crawler = crawler
        self.transport = transport
        self.extractor = extractor
        self.fetcher = fetcher
        self.cache = cache
        self.index_path = index_path

    def load_index(self, skip_discovery: bool = False) -> list[IndexEntry]:
        if skip_discovery and self.index_path.exists():
            entries = read_index(self.index_path)
            logger.info("Using cached act index from %s (%d acts)", self.index_path, len(entries))
            return entries

        if skip_discovery:
            logger.info("No cached index at %s, running discovery", self.index_path)
        entries = self.crawler.discover()
        if not entries and self.index_path.exists():
            try:
                previous = read_index(self.index_path)
            except (ValueError, KeyError, TypeError):
                previous = []
            if previous:
                logger.warning(
                    "Discovery found no acts; keeping existing index %s (%d acts)",
                    self.index_path,
                    len(previous),
                )
                return previous
        write_index(entries, self.index_path)
        return entries

    def run(
        self,
        limit: int | None = None,
        skip_discovery: bool = False,
        retry_placeholders: bool = False,
    ) -> RunStats:
        """Run the pipeline. Per-act failures are logged and counted, never raised."""
        entries = self.load_index(skip_discovery)
        if limit is not None:
            entries = entries[:limit]

        logger.info("Fetching content for %d acts", len(entries))
        stats = RunStats()

        for entry in entries:
            try:
                self._process(entry, stats, retry_placeholders)
            except Exception:
                logger.exception("Failed to process %s (%s)", entry.record_id, entry.url)
                stats.failed += 1

            stats.processed += 1
            if stats.processed % PROGRESS_EVERY == 0:
                logger.info(
                    "Progress: %d/%d (%d skipped, %d failed, %d provisions)",
                    stats.processed,
                    len(entries),
                    stats.skipped,
                    stats.failed,
                    stats.provisions,
                )

        logger.info(
            "Run complete: %d processed, %d skipped, %d failed, %d provisions",
            stats.processed,
            stats.skipped,
            stats.failed,
            stats.provisions,
        )
        return stats

    def _process(self, entry: IndexEntry, stats: RunStats, retry_placeholders: bool) -> None:
        state = self.cache.state_of(entry)
        if state == COMPLETE or (state == PLACEHOLDER and not retry_placeholders):
            stats.skipped += 1
            return

        result = self.transport.request(entry.url)

        if result.status in NAVIGATIONAL_STATUS:
            self._placeholder(entry, f"http-{result.status}", stats)
            return
        if result.status != 200:
            logger.error("HTTP %d for %s", result.status, entry.record_id)
            stats.failed += 1
            return

        page = self.extractor.extract(result.body)
        if not page.sections:
            self._placeholder(entry, "no-sections", stats)
            return

        provisions = [self.fetcher.fetch(ref) for ref in page.sections]
        record = build_record(entry, page.metadata, provisions)
        if self.cache.write(record, entry):
            stats.written += 1
        stats.provisions += len(provisions)
        logger.info(
            "%s: %d sections (%s), %s",
            entry.record_id,
            len(provisions),
            page.strategy,
            record.harvest.state,
        )

    def _placeholder(self, entry: IndexEntry, reason: str, stats: RunStats) -> None:
        stats.failed += 1
        if self.cache.has_provisions(entry):
            logger.warning("Keeping existing seed for %s (%s)", entry.record_id, reason)
            return
        self.cache.write_placeholder(entry, reason)
