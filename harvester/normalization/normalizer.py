"""Normalize harvested acts into seed records and the act index file."""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path

from harvester.ingestion.base import (
    COMPLETE,
    PARTIAL,
    PLACEHOLDER,
    ActMetadata,
    HarvestStatus,
    IndexEntry,
    Provision,
    StatuteRecord,
)
from harvester.normalization.text_cleaner import parse_enactment_date, short_name

logger = logging.getLogger(__name__)

_REPEALED_RE = re.compile(r"\brepealed\b", re.IGNORECASE)


def _status(entry: IndexEntry, metadata: ActMetadata | None) -> str:
    texts = [entry.title]
    if metadata is not None:
        texts += [metadata.short_title, metadata.long_title]
    if any(_REPEALED_RE.search(t or "") for t in texts):
        return "repealed"
    return "in_force"


def _issued_date(entry: IndexEntry, metadata: ActMetadata | None) -> str:
    if metadata is not None:
        parsed = parse_enactment_date(metadata.enactment_date)
        if parsed:
            return parsed
    return f"{entry.year}-01-01"


def build_record(
    entry: IndexEntry,
    metadata: ActMetadata,
    provisions: list[Provision],
) -> StatuteRecord:
    """Assemble a StatuteRecord for a successfully extracted act page."""
    title = entry.title or metadata.short_title
    record = StatuteRecord(
        id=entry.record_id,
        title=title,
        short_name=short_name(title, entry.year),
        status=_status(entry, metadata),
        issued_date=_issued_date(entry, metadata),
        url=entry.url,
        provisions=provisions,
        language=metadata.language or None,
        harvest=HarvestStatus(state=COMPLETE),
    )
    if not record.has_content:
        record.harvest = HarvestStatus(state=PARTIAL, reason="no-content")
    return record


def build_placeholder(entry: IndexEntry, reason: str) -> StatuteRecord:
    """Minimal negative-cache record for an act that could not be harvested."""
    return StatuteRecord(
        id=entry.record_id,
        title=entry.title,
        short_name="",
        status=_status(entry, None),
        issued_date=f"{entry.year}-01-01",
        url=entry.url,
        provisions=[],
        harvest=HarvestStatus(state=PLACEHOLDER, reason=reason),
    )


def record_to_dict(record: StatuteRecord) -> dict:
    """Seed JSON layout consumed by the database build step."""
    data = {
        "id": record.id,
        "type": record.kind,
        "title": record.title,
        "short_name": record.short_name,
        "status": record.status,
        "issued_date": record.issued_date,
        "url": record.url,
        "provisions": [p.to_dict() for p in record.provisions],
    }
    if record.language:
        data["language"] = record.language
    data["harvest"] = record.harvest.to_dict()
    return data


def dump_json(data) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def write_index(entries: list[IndexEntry], index_path: Path) -> None:
    """Write the ordered, deduplicated act index."""
    index_path.parent.mkdir(parents=True, exist_ok=True)
    index_path.write_text(dump_json([e.to_dict() for e in entries]), encoding="utf-8")
    logger.info("Wrote %d index entries to %s", len(entries), index_path)


def read_index(index_path: Path) -> list[IndexEntry]:
    """Read a previously written act index, preserving its order."""
    data = json.loads(index_path.read_text(encoding="utf-8"))
    return [IndexEntry.from_dict(item) for item in data]
