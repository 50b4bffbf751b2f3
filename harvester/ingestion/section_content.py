"""Resolve section references to cleaned text via the portal's content endpoint."""

from __future__ import annotations

import json
import logging
from urllib.parse import urlencode

from .base import Provision, SectionRef
from ..normalization.text_cleaner import clean_fragment, provision_ref
from ..utils.http import RateLimitedTransport

logger = logging.getLogger(__name__)

SECTION_PATH = "/SectionPageContent"
FOOTNOTE_MARKER = "[Footnote]"


def section_url(base_url: str, act_id: str, section_id: str, path: str = SECTION_PATH) -> str:
    """Content endpoint URL with encoded ``actid`` and ``sectionID`` parameters."""
    query = urlencode({"actid": act_id, "sectionID": section_id})
    return f"{base_url.rstrip('/')}{path}?{query}"


def parse_section_json(body: str) -> tuple[str, str]:
    """Return cleaned (content, footnote); malformed payloads give empty strings."""
    try:
        data = json.loads(body)
    except (TypeError, ValueError):
        return "", ""
    if not isinstance(data, dict):
        return "", ""
    return (
        clean_fragment(str(data.get("content") or "")),
        clean_fragment(str(data.get("footnote") or "")),
    )


def assemble_content(content: str, footnote: str) -> str:
    if content and footnote:
        return f"{content}\n\n{FOOTNOTE_MARKER} {footnote}"
    return content


class SectionContentFetcher:
    """Fetch the text of one section at a time.

    A section reference always yields a Provision; on any failure its content
    is simply empty.

    Args:
        transport: Shared rate-limited transport.
        base_url: Portal root URL.
        path: Path of the content endpoint.
    """

    def __init__(self, transport: RateLimitedTransport, base_url: str, path: str = SECTION_PATH):
        self.transport = transport
        self.base_url = base_url
        self.path = path

    def fetch_text(self, act_id: str, section_id: str) -> str:
        """Fetch and assemble the text for ``act_id``/``section_id`` ('' on failure)."""
        url = section_url(self.base_url, act_id, section_id, self.path)
        try:
            result = self.transport.request(url)
            if result.status != 200 or not result.body.strip():
                logger.warning("No content for section %s#%s (HTTP %d)", act_id, section_id, result.status)
                return ""
            content, footnote = parse_section_json(result.body)
            return assemble_content(content, footnote)
        except Exception:
            logger.exception("Failed to fetch section %s#%s", act_id, section_id)
            return ""

    def fetch(self, ref: SectionRef) -> Provision:
        return Provision(
            provision_ref=provision_ref(ref.section_number),
            section_number=ref.section_number,
            title=ref.title,
            content=self.fetch_text(ref.act_id, ref.section_id),
        )
