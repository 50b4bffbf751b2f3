from bs4 import BeautifulSoup

from harvester.ingestion.act_page import (
    ActPageExtractor,
    accordion_sections,
    content_link_sections,
    data_attribute_sections,
    extract_metadata,
)

LEGACY_LINKS_HTML = """
<html><body>
<a class="preambletitle" id="AC_LEGACY_1"></a>
<ul>
  <li><a href="/SectionPageContent?actid=AC_LEGACY_1&amp;sectionID=101">Section 1. Short title</a></li>
  <li><a href="/SectionPageContent?actid=AC_LEGACY_1&amp;sectionID=102">Section 2 - Definitions</a></li>
  <li><a href="/SectionPageContent?actid=AC_LEGACY_1&amp;sectionID=102">Section 2 - Definitions</a></li>
  <li><a href="/about">About</a></li>
</ul>
</body></html>
"""

DATA_ATTR_HTML = """
<html><body>
<div class="toc">
  <p data-sectionid="900" data-actid="AC_OLD_9">Section 3. Application</p>
  <p data-sectionid="901">4. Repeal</p>
  <p data-sectionid="">Section 5. Orphan</p>
</div>
</body></html>
"""


def _soup(html):
    return BeautifulSoup(html, "lxml")


def test_metadata_labels_are_normalised(make_act_page):
    html = make_act_page(
        [],
        metadata={
            "Act ID": "AC_CEN_13",
            "Act Number": "13",
            "Enactment Date": "27-Mar-1855",
            "Act Year": "1855",
            "Short Title": "The Fatal Accidents Act, 1855",
            "Long Title": "An Act to provide compensation",
            "Ministry": "Ministry of Law and Justice",
        },
    )
    meta = extract_metadata(_soup(html))
    assert meta.act_id == "AC_CEN_13"
    assert meta.act_number == 13
    assert meta.year == 1855
    assert meta.enactment_date == "27-Mar-1855"
    assert meta.short_title == "The Fatal Accidents Act, 1855"
    assert meta.long_title == "An Act to provide compensation"
    assert meta.ministry == "Ministry of Law and Justice"


def test_metadata_last_matching_row_wins():
    html = """
    <table class="itemDisplayTable">
      <tr><td class="metadataFieldLabel">Ministry:</td><td class="metadataFieldValue">Old Ministry</td></tr>
      <tr><td class="metadataFieldLabel">MINISTRY</td><td class="metadataFieldValue">New Ministry</td></tr>
    </table>
    """
    assert extract_metadata(_soup(html)).ministry == "New Ministry"


def test_accordion_sections(make_act_page):
    html = make_act_page(
        [
            ("S1", "Section 1.", "Short title and extent"),
            ("S43A", "Section 43A.", "Compensation for failure to protect data"),
            ("S66", "Section 66(1).", "Computer related offences"),
            ("S99", "Schedule", "Not a section"),
        ],
        act_id="AC_CEN_IT",
    )
    sections = accordion_sections(_soup(html))
    assert [(s.section_id, s.section_number, s.title) for s in sections] == [
        ("S1", "1", "Short title and extent"),
        ("S43A", "43A", "Compensation for failure to protect data"),
        ("S66", "66(1)", "Computer related offences"),
    ]
    assert all(s.act_id == "AC_CEN_IT" for s in sections)
    assert sections[0].content_key == "AC_CEN_IT#S1"


def test_content_link_sections_dedupe_by_section_id():
    sections = content_link_sections(_soup(LEGACY_LINKS_HTML))
    assert [(s.act_id, s.section_id, s.section_number, s.title) for s in sections] == [
        ("AC_LEGACY_1", "101", "1", "Short title"),
        ("AC_LEGACY_1", "102", "2", "Definitions"),
    ]


def test_data_attribute_sections():
    sections = data_attribute_sections(_soup(DATA_ATTR_HTML))
    assert [(s.act_id, s.section_id, s.section_number, s.title) for s in sections] == [
        ("AC_OLD_9", "900", "3", "Application"),
        ("", "901", "4", "Repeal"),
    ]


def test_extractor_prefers_accordion_and_does_not_merge(make_act_page):
    html = make_act_page([("S1", "Section 1.", "Title")], act_id="AC_NEW").replace(
        "</body>", '<p data-sectionid="900">Section 9. Legacy</p></body>'
    )
    page = ActPageExtractor().extract(html)
    assert page.strategy == "accordion_sections"
    assert [s.section_id for s in page.sections] == ["S1"]


def test_extractor_falls_back_in_priority_order():
    html = LEGACY_LINKS_HTML.replace("</body>", DATA_ATTR_HTML)
    page = ActPageExtractor().extract(html)
    assert page.strategy == "content_link_sections"
    assert [s.section_id for s in page.sections] == ["101", "102"]


def test_extractor_act_id_from_preamble():
    page = ActPageExtractor().extract(LEGACY_LINKS_HTML)
    assert page.act_id == "AC_LEGACY_1"


def test_extractor_recovers_act_id_from_first_section():
    page = ActPageExtractor().extract(DATA_ATTR_HTML)
    assert page.act_id == "AC_OLD_9"
    assert page.sections[1].act_id == "AC_OLD_9"
    assert page.strategy == "data_attribute_sections"


def test_extractor_no_sections():
    page = ActPageExtractor().extract("<html><body><p>Repealed.</p></body></html>")
    assert page.sections == []
    assert page.act_id == ""
    assert page.strategy == ""
