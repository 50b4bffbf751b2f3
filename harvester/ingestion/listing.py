"""Paginated discovery of statutes from the portal's browse pages.

The portal has shipped two browse skins: a DSpace data table paged by byte
offset, and an older itemised list paged by page number. Each is a
ListingStrategy; the crawler only knows the strategy interface.
"""

from __future__ import annotations

import abc
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from .base import IndexEntry
from ..normalization.text_cleaner import extract_year, normalize_whitespace, parse_act_number
from ..utils.http import RateLimitedTransport

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://www.indiacode.nic.in"
TABLE_URL = (
    "/handle/123456789/1362/browse?type=shorttitle&sort_by=1&order=ASC"
    "&rpp={page_size}&etal=-1&offset={offset}"
)
ITEM_LIST_URL = "/handle/123456789/1362/browse?type=shorttitle&order=ASC&rpp={page_size}&page={page}"
MAX_PAGES = 500


@dataclass
class ListingPage:
    """Entries parsed from one listing page plus its continuation signal."""

    entries: list[IndexEntry] = field(default_factory=list)
    has_next: bool = False
    total: int | None = None


class ListingStrategy(abc.ABC):
    """One browse-page skin: how to address page N and how to parse it."""

    name = ""
    default_template = ""

    def __init__(self, base_url: str = DEFAULT_BASE_URL, url_template: str | None = None, page_size: int = 50):
        self.base_url = base_url.rstrip("/")
        self.url_template = url_template or self.default_template
        self.page_size = page_size

    @abc.abstractmethod
    def page_url(self, page: int) -> str:
        """URL of 1-based listing page ``page``."""

    @abc.abstractmethod
    def parse(self, html: str) -> ListingPage:
        """Parse one listing page."""

    def _absolute(self, href: str) -> str:
        if href.startswith("http"):
            return href
        return urljoin(self.base_url + "/", href.lstrip("/"))

    def _entry(self, title: str, act_number_text: str, date_text: str, href: str) -> IndexEntry | None:
        title = normalize_whitespace(title)
        if not title or not href:
            return None
        year = extract_year(title) or extract_year(date_text)
        if not year:
            logger.debug("Dropping listing entry without a year: %s", title)
            return None
        return IndexEntry(
            title=title,
            year=year,
            act_number=parse_act_number(act_number_text),
            url=self._absolute(href),
        )


class TableListingStrategy(ListingStrategy):
    """DSpace browse table: td[headers=t1..t4] = date, act number, title, view link."""

    name = "table"
    default_template = TABLE_URL

    def page_url(self, page: int) -> str:
        offset = (page - 1) * self.page_size
        return self._absolute(self.url_template.format(page_size=self.page_size, offset=offset, page=page))

    def parse(self, html: str) -> ListingPage:
        soup = BeautifulSoup(html, "lxml")
        result = ListingPage()

        heading = soup.select_one(".panel-heading1")
        if heading:
            match = re.search(r"of\s+(\d+)", heading.get_text())
            if match:
                result.total = int(match.group(1))

        for row in soup.select("table.table.table-bordered tr"):
            if row.find("th"):
                continue
            link = row.select_one('td[headers="t4"] a')
            entry = self._entry(
                title=_cell_text(row, "t3"),
                act_number_text=_cell_text(row, "t2"),
                date_text=_cell_text(row, "t1"),
                href=link.get("href", "") if link else "",
            )
            if entry:
                result.entries.append(entry)

        for a in soup.select('a[href*="offset="]'):
            if a.select_one('img[src*="nextPage"]'):
                result.has_next = True
                break

        return result


class ItemListStrategy(ListingStrategy):
    """Legacy itemised list skin paged by page number."""

    name = "item_list"
    default_template = ITEM_LIST_URL

    def page_url(self, page: int) -> str:
        return self._absolute(self.url_template.format(page_size=self.page_size, page=page, offset=0))

    def parse(self, html: str) -> ListingPage:
        soup = BeautifulSoup(html, "lxml")
        result = ListingPage()

        for item in soup.select("li.ds-artifact-item"):
            link = item.select_one(".artifact-title a[href]") or item.find("a", href=True)
            if link is None:
                continue
            number_el = item.select_one(".act-number")
            if number_el is not None:
                number_text = number_el.get_text(" ", strip=True)
            else:
                match = re.search(r"Act\s+No\.?\s*([\dIVXLC]+)", item.get_text(" ", strip=True), re.IGNORECASE)
                number_text = match.group(1) if match else ""
            date_el = item.select_one(".date")
            entry = self._entry(
                title=link.get_text(" ", strip=True),
                act_number_text=number_text,
                date_text=date_el.get_text(" ", strip=True) if date_el else "",
                href=link["href"],
            )
            if entry:
                result.entries.append(entry)

        result.has_next = soup.select_one("a.next-page-link[href]") is not None
        return result


LISTING_STRATEGIES: dict[str, type[ListingStrategy]] = {
    TableListingStrategy.name: TableListingStrategy,
    ItemListStrategy.name: ItemListStrategy,
}


def make_strategy(scheme: str, **kwargs) -> ListingStrategy:
    cls = LISTING_STRATEGIES.get(scheme)
    if cls is None:
        raise ValueError(f"Unknown discovery scheme: {scheme}. Available: {', '.join(sorted(LISTING_STRATEGIES))}")
    return cls(**kwargs)


def _cell_text(row: Tag, header: str) -> str:
    cell = row.select_one(f'td[headers="{header}"]')
    return cell.get_text(" ", strip=True) if cell else ""


def dedupe(entries: list[IndexEntry]) -> list[IndexEntry]:
    """Collapse entries sharing (year, act number), keeping the first seen."""
    seen = set()
    unique = []
    for entry in entries:
        if entry.key not in seen:
            seen.add(entry.key)
            unique.append(entry)
    return unique


class ListingCrawler:
    """Walks listing pages until they run out, then deduplicates.

    Args:
        transport: Shared rate-limited transport.
        strategy: Browse skin to use.
        max_pages: Hard cap on pages fetched, regardless of continuation links.
    """

    def __init__(self, transport: RateLimitedTransport, strategy: ListingStrategy, max_pages: int = MAX_PAGES):
        self.transport = transport
        self.strategy = strategy
        self.max_pages = max_pages

    def discover(self) -> list[IndexEntry]:
        logger.info("Discovering acts using the %s listing", self.strategy.name)
        collected: list[IndexEntry] = []
        pages = 0

        for page in range(1, self.max_pages + 1):
            url = self.strategy.page_url(page)
            result = self.transport.request(url)
            pages = page
            if not result.ok:
                logger.warning("HTTP %d for listing page %d, stopping discovery", result.status, page)
                break

            listing = self.strategy.parse(result.body)
            logger.info("Listing page %d: %d entries", page, len(listing.entries))
            collected.extend(listing.entries)

            if not listing.entries or not listing.has_next:
                break
        else:
            logger.warning("Hit page limit of %d, stopping discovery", self.max_pages)

        today = datetime.now(timezone.utc).date().isoformat()
        for entry in collected:
            entry.last_seen = today

        unique = dedupe(collected)
        logger.info(
            "Discovered %d unique acts (from %d entries, %d pages)",
            len(unique),
            len(collected),
            pages,
        )
        return unique
