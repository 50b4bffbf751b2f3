"""Metadata and section-reference extraction from act detail pages.

Section references are read by an ordered list of strategies, one per markup
shape the portal has used. Each strategy is a pure function of the parsed
page; the first one returning at least one section wins and results from
different strategies are never merged.
"""

from __future__ import annotations

import logging
import re
from typing import Callable
from urllib.parse import parse_qs, urlparse

from bs4 import BeautifulSoup

from .base import ActMetadata, ActPage, SectionRef
from ..normalization.text_cleaner import clean_section_number, normalize_whitespace, parse_act_number

logger = logging.getLogger(__name__)

SECTION_LABEL_RE = re.compile(r"Section\s+([\w.()\-]+)", re.IGNORECASE)
SECTION_TITLE_RE = re.compile(r"Section\s+[\w.()\-]+\.?\s*[-–—:]?\s*(.*)", re.IGNORECASE | re.DOTALL)

SectionStrategy = Callable[[BeautifulSoup], list[SectionRef]]


def _label_key(text: str) -> str:
    return re.sub(r"[\W_]+", "", text).lower()


def extract_metadata(soup: BeautifulSoup) -> ActMetadata:
    """Read the labelled key/value metadata table. A repeated label keeps its last row."""
    rows: list[tuple[str, str]] = []
    for tr in soup.select("table.itemDisplayTable tr"):
        label = tr.select_one("td.metadataFieldLabel")
        value = tr.select_one("td.metadataFieldValue")
        if label is None or value is None:
            continue
        rows.append((_label_key(label.get_text()), normalize_whitespace(value.get_text(" "))))

    def field(name: str) -> str:
        wanted = _label_key(name)
        found = ""
        for key, value in rows:
            if wanted in key:
                found = value
        return found

    year_text = field("Act Year")
    return ActMetadata(
        act_id=field("Act ID"),
        short_title=field("Short Title"),
        long_title=field("Long Title"),
        enactment_date=field("Enactment Date"),
        ministry=field("Ministry"),
        year=int(year_text) if year_text.isdigit() else 0,
        act_number=parse_act_number(field("Act Number")),
        language=field("Language"),
    )


def _split_label(text: str) -> tuple[str, str]:
    """Split 'Section 43A. Title' into ('43A', 'Title')."""
    text = normalize_whitespace(text)
    match = SECTION_LABEL_RE.search(text)
    number = clean_section_number(match.group(1)) if match else ""
    title_match = SECTION_TITLE_RE.search(text)
    title = title_match.group(1).strip() if title_match else text
    return number, title


def accordion_sections(soup: BeautifulSoup) -> list[SectionRef]:
    """Current skin: accordion anchors with id ``actId#sectionId#orgActId``."""
    sections = []
    for a in soup.select("div.hideshowsection a.title"):
        parts = (a.get("id") or "").split("#")
        if len(parts) < 2 or not parts[1]:
            continue
        label = a.select_one("span.label-info")
        number, _ = _split_label(label.get_text(" ") if label else "")
        _, title = _split_label(a.get_text(" "))
        if not number:
            continue
        sections.append(SectionRef(act_id=parts[0], section_id=parts[1], section_number=number, title=title))
    return sections


def content_link_sections(soup: BeautifulSoup) -> list[SectionRef]:
    """Legacy skin: plain links to the content endpoint with actid/sectionID parameters."""
    sections = []
    seen = set()
    for a in soup.find_all("a", href=True):
        query = parse_qs(urlparse(a["href"]).query)
        lowered = {k.lower(): v for k, v in query.items()}
        section_id = (lowered.get("sectionid") or [""])[0]
        if not section_id or section_id in seen:
            continue
        number, title = _split_label(a.get_text(" "))
        if not number:
            continue
        seen.add(section_id)
        act_id = (lowered.get("actid") or [""])[0]
        sections.append(SectionRef(act_id=act_id, section_id=section_id, section_number=number, title=title))
    return sections


def data_attribute_sections(soup: BeautifulSoup) -> list[SectionRef]:
    """Legacy skin: elements tagged with ``data-sectionid`` (and optionally ``data-actid``)."""
    sections = []
    for el in soup.find_all(attrs={"data-sectionid": True}):
        section_id = el["data-sectionid"].strip()
        number, title = _split_label(el.get_text(" "))
        if not number:
            # "5. Definitions" style labels without the word Section
            match = re.match(r"\s*([\w()\-]+)\.\s*(.*)", normalize_whitespace(el.get_text(" ")))
            if match:
                number, title = match.group(1), match.group(2)
        if not section_id or not number:
            continue
        sections.append(SectionRef(
            act_id=(el.get("data-actid") or "").strip(),
            section_id=section_id,
            section_number=number,
            title=title,
        ))
    return sections


SECTION_STRATEGIES: tuple[SectionStrategy, ...] = (
    accordion_sections,
    content_link_sections,
    data_attribute_sections,
)


def _page_act_id(soup: BeautifulSoup, metadata: ActMetadata) -> str:
    if metadata.act_id:
        return metadata.act_id
    anchor = soup.select_one("a.preambletitle")
    if anchor is not None and anchor.get("id"):
        return anchor["id"]
    return ""


class ActPageExtractor:
    """Extract metadata and section references from one act page.

    Args:
        strategies: Section strategies in priority order.
    """

    def __init__(self, strategies: tuple[SectionStrategy, ...] = SECTION_STRATEGIES):
        self.strategies = strategies

    def extract(self, html: str) -> ActPage:
        soup = BeautifulSoup(html, "lxml")
        metadata = extract_metadata(soup)
        act_id = _page_act_id(soup, metadata)

        sections: list[SectionRef] = []
        used = ""
        for strategy in self.strategies:
            sections = strategy(soup)
            if sections:
                used = strategy.__name__
                break

        if not act_id and sections:
            act_id = sections[0].act_id
        for ref in sections:
            if not ref.act_id:
                ref.act_id = act_id

        logger.debug("Extracted %d sections via %s (act id %r)", len(sections), used or "none", act_id)
        return ActPage(metadata=metadata, act_id=act_id, sections=sections, strategy=used)
