"""Text cleaning and derivation helpers for statute normalization."""

from __future__ import annotations

import re
from datetime import datetime

_ENTITIES = {
    "&nbsp;": " ",
    "&amp;": "&",
    "&lt;": "<",
    "&gt;": ">",
    "&quot;": '"',
    "&#39;": "'",
}
_ENTITY_RE = re.compile("|".join(re.escape(e) for e in _ENTITIES))

_SHORT_NAME_STOP_WORDS = {"The", "And", "For", "Act", "Of", "In", "To", "With"}

_ROMAN_VALUES = {"I": 1, "V": 5, "X": 10, "L": 50, "C": 100, "D": 500, "M": 1000}

_DATE_FORMATS = (
    "%Y-%m-%d",
    "%d-%b-%Y",
    "%d-%B-%Y",
    "%d %B, %Y",
    "%d %B %Y",
    "%d %b %Y",
    "%d/%m/%Y",
    "%d.%m.%Y",
    "%B %d, %Y",
)


def strip_html(text: str) -> str:
    """Turn line-break and paragraph tags into newlines, drop all other tags."""
    text = re.sub(r"<br\s*/?>", "\n", text, flags=re.IGNORECASE)
    text = re.sub(r"</p>", "\n", text, flags=re.IGNORECASE)
    text = re.sub(r"<[^>]+>", "", text)
    return text


def unescape_entities(text: str) -> str:
    """Decode the fixed entity set the content endpoint emits (single pass)."""
    return _ENTITY_RE.sub(lambda m: _ENTITIES[m.group(0)], text)


def normalize_whitespace(text: str) -> str:
    """Collapse every whitespace run to one space and trim."""
    return re.sub(r"\s+", " ", text).strip()


def clean_fragment(text: str) -> str:
    """Full cleaning pipeline for an HTML fragment from the content endpoint."""
    return normalize_whitespace(unescape_entities(strip_html(text)))


def clean_section_number(number: str) -> str:
    """Normalize a section number (strip 'Section' label, trailing period, whitespace)."""
    number = re.sub(r"^\s*section\s*", "", number, flags=re.IGNORECASE)
    number = re.sub(r"\.\s*$", "", number)
    return number.strip()


def provision_ref(section_number: str) -> str:
    """Build a provision reference: '43A.' -> 's43A', 'Section 4' -> 's4'."""
    return f"s{clean_section_number(section_number)}"


def short_name(title: str, year: int) -> str:
    """Build an abbreviated name such as 'DPDPA 2023' from an act title."""
    words = re.sub(r"[(),]", "", title).split()
    if len(words) <= 3:
        return f"{title} {year}"

    significant = [
        w for w in words
        if len(w) > 2 and w[0].isupper() and w not in _SHORT_NAME_STOP_WORDS
    ]
    if len(significant) >= 2:
        initials = "".join(w[0] for w in significant[:5])
        return f"{initials} {year}"

    return f"{title[:30].strip()} {year}"


def roman_to_int(roman: str) -> int | None:
    """Convert a Roman numeral to an int, or None when it is not one."""
    upper = roman.strip().upper()
    if not upper:
        return None
    total = 0
    for i, ch in enumerate(upper):
        value = _ROMAN_VALUES.get(ch)
        if value is None:
            return None
        nxt = _ROMAN_VALUES.get(upper[i + 1]) if i + 1 < len(upper) else None
        if nxt is not None and value < nxt:
            total -= value
        else:
            total += value
    return total if total > 0 else None


def parse_act_number(text: str) -> int:
    """Parse an act number cell ('05', 'XIII', 'Act No. 13'); 0 when unknown."""
    text = (text or "").strip()
    match = re.search(r"\d+", text)
    if match:
        return int(match.group(0))
    return roman_to_int(text) or 0


def extract_year(text: str) -> int:
    """Return the first four-digit year in ``text``, or 0."""
    match = re.search(r"\b(1[5-9]\d{2}|20\d{2})\b", text or "")
    return int(match.group(1)) if match else 0


def parse_enactment_date(text: str) -> str | None:
    """Parse an enactment date in one of the portal's formats to ISO 8601."""
    text = normalize_whitespace(text or "")
    if not text:
        return None
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date().isoformat()
        except ValueError:
            continue
    return None
