"""Canonical data structures for statute harvesting."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

COMPLETE = "complete"
PARTIAL = "partial"
PLACEHOLDER = "placeholder"

STATUSES = ("in_force", "amended", "repealed")


@dataclass
class IndexEntry:
    """One statute discovered on the listing pages."""

    title: str
    year: int
    act_number: int
    url: str
    last_seen: str = ""

    @property
    def key(self) -> tuple[int, int]:
        return (self.year, self.act_number)

    @property
    def record_id(self) -> str:
        return f"act-{self.act_number}-{self.year}"

    @property
    def seed_name(self) -> str:
        return f"{self.year}_{self.act_number}.json"

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "year": self.year,
            "actNumber": self.act_number,
            "url": self.url,
            "lastSeen": self.last_seen,
        }

    @classmethod
    def from_dict(cls, data: dict) -> IndexEntry:
        return cls(
            title=data["title"],
            year=int(data["year"]),
            act_number=int(data["actNumber"]),
            url=data["url"],
            last_seen=data.get("lastSeen") or data.get("updated", ""),
        )


@dataclass
class SectionRef:
    """A section listed on an act page, not yet resolved to text."""

    act_id: str
    section_id: str
    section_number: str
    title: str

    @property
    def content_key(self) -> str:
        return f"{self.act_id}#{self.section_id}"


@dataclass
class Provision:
    """A section-level unit of statute text."""

    provision_ref: str
    section_number: str
    title: str
    content: str

    def to_dict(self) -> dict:
        return {
            "provision_ref": self.provision_ref,
            "section": self.section_number,
            "title": self.title,
            "content": self.content,
        }


@dataclass
class ActMetadata:
    """Fields read from an act page's metadata table."""

    act_id: str = ""
    short_title: str = ""
    long_title: str = ""
    enactment_date: str = ""
    ministry: str = ""
    year: int = 0
    act_number: int = 0
    language: str = ""


@dataclass
class ActPage:
    """Result of extracting one act detail page."""

    metadata: ActMetadata
    act_id: str
    sections: list[SectionRef] = field(default_factory=list)
    strategy: str = ""


@dataclass
class HarvestStatus:
    """Explicit completion tag carried by every seed record.

    ``complete``: at least one provision has content.
    ``partial``: sections were found but no content could be fetched.
    ``placeholder``: negative-cache record; ``reason`` says why.
    """

    state: str = COMPLETE
    reason: str = ""

    def to_dict(self) -> dict:
        return {"state": self.state, "reason": self.reason}


@dataclass
class StatuteRecord:
    """The seed artifact written once per statute."""

    id: str
    title: str
    short_name: str
    status: str
    issued_date: str
    url: str
    provisions: list[Provision] = field(default_factory=list)
    language: Optional[str] = None
    harvest: HarvestStatus = field(default_factory=HarvestStatus)
    kind: str = "statute"

    def __post_init__(self):
        if self.status not in STATUSES:
            raise ValueError(f"Unknown statute status: {self.status}")

    @property
    def has_content(self) -> bool:
        return any(p.content for p in self.provisions)
