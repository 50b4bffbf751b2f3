from .base import ActMetadata, ActPage, HarvestStatus, IndexEntry, Provision, SectionRef, StatuteRecord
from .listing import ItemListStrategy, ListingCrawler, ListingStrategy, TableListingStrategy
from .act_page import ActPageExtractor
from .section_content import SectionContentFetcher

__all__ = [
    "ActMetadata",
    "ActPage",
    "HarvestStatus",
    "IndexEntry",
    "Provision",
    "SectionRef",
    "StatuteRecord",
    "ListingStrategy",
    "TableListingStrategy",
    "ItemListStrategy",
    "ListingCrawler",
    "ActPageExtractor",
    "SectionContentFetcher",
]
