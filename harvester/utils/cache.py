"""Disk-backed seed record cache driving resumable runs."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from harvester.ingestion.base import COMPLETE, PARTIAL, PLACEHOLDER, IndexEntry, StatuteRecord
from harvester.normalization.normalizer import build_placeholder, dump_json, record_to_dict

from .checksum import content_hash, file_hash

logger = logging.getLogger(__name__)


class SeedCache:
    """One JSON seed file per statute, named ``{year}_{actNumber}.json``.

    Args:
        seed_dir: Directory holding the seed files. Created on construction.
    """

    def __init__(self, seed_dir: Path):
        self.seed_dir = seed_dir
        self.seed_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, entry: IndexEntry) -> Path:
        return self.seed_dir / entry.seed_name

    def load(self, entry: IndexEntry) -> dict | None:
        """Return the stored record, or None when missing or unparseable."""
        path = self.path_for(entry)
        if not path.exists():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning("Ignoring corrupt seed %s: %s", path, e)
            return None
        if not isinstance(data, dict):
            logger.warning("Ignoring corrupt seed %s: not a JSON object", path)
            return None
        return data

    def state_of(self, entry: IndexEntry) -> str | None:
        """Harvest state of the stored record (None when there is no usable record).

        Records written before the ``harvest`` tag existed are complete when
        at least one provision has content, partial otherwise.
        """
        data = self.load(entry)
        if data is None:
            return None
        harvest = data.get("harvest")
        if isinstance(harvest, dict) and harvest.get("state"):
            return harvest["state"]
        provisions = data.get("provisions") or []
        if any(isinstance(p, dict) and p.get("content") for p in provisions):
            return COMPLETE
        return PARTIAL

    def is_complete(self, entry: IndexEntry) -> bool:
        return self.state_of(entry) == COMPLETE

    def is_placeholder(self, entry: IndexEntry) -> bool:
        return self.state_of(entry) == PLACEHOLDER

    def has_provisions(self, entry: IndexEntry) -> bool:
        """Whether the stored record already lists at least one provision."""
        data = self.load(entry)
        return bool(data and data.get("provisions"))

    def write(self, record: StatuteRecord, entry: IndexEntry) -> bool:
        """Persist a record. Returns False when the file already held identical bytes."""
        path = self.path_for(entry)
        text = dump_json(record_to_dict(record))
        if path.exists() and file_hash(path) == content_hash(text):
            logger.debug("Seed %s unchanged", path)
            return False
        path.write_bytes(text.encode("utf-8"))
        logger.debug("Wrote %s (%d provisions)", path, len(record.provisions))
        return True

    def write_placeholder(self, entry: IndexEntry, reason: str) -> bool:
        """Write a negative-cache record so the failure is not retried every run."""
        logger.info("Placeholder for %s (%s)", entry.record_id, reason)
        return self.write(build_placeholder(entry, reason), entry)

    def summary(self, entries: list[IndexEntry]) -> dict[str, int]:
        """Count seeds per harvest state for the given index entries."""
        counts = {COMPLETE: 0, PARTIAL: 0, PLACEHOLDER: 0, "missing": 0}
        for entry in entries:
            state = self.state_of(entry) or "missing"
            counts[state] = counts.get(state, 0) + 1
        return counts
