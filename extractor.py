"""
Data extraction utilities for reading publication rows from a profile page snapshot
"""
import re
import urllib.parse
from typing import List

from bs4 import BeautifulSoup

from models import RawRecord

DEFAULT_BASE_URL = "https://scholar.google.com"

ROW_SELECTOR = "tr.gsc_a_tr"
TITLE_SELECTOR = "td.gsc_a_t a.gsc_a_at"
GRAY_SELECTOR = "td.gsc_a_t .gs_gray"
YEAR_SELECTOR = "td.gsc_a_y"
CITATION_SELECTOR = "td.gsc_a_c a.gsc_a_ac"

YEAR_PATTERN = re.compile(r'\b(19|20)\d{2}\b')


class PublicationExtractor:
    """Utility class for extracting and cleaning publication rows"""

    @staticmethod
    def clean_text(text) -> str:
        """Clean and normalize text content"""
        if text is None:
            return ""
        text = str(text).replace("\u00a0", " ")
        return " ".join(text.split())

    @staticmethod
    def extract_year(text: str) -> str:
        """Extract the first publication year (1900-2099) from text"""
        if not text:
            return ""
        year_match = YEAR_PATTERN.search(text)
        if year_match:
            return year_match.group()
        return ""

    @staticmethod
    def resolve_year(year_column: str, venue: str) -> str:
        """Prefer the year column; fall back to a year embedded in the venue"""
        year = PublicationExtractor.clean_text(year_column)
        if year:
            return year
        return PublicationExtractor.extract_year(venue)

    @staticmethod
    def parse_citation_count(text: str) -> int:
        """
        Parse a citation link label such as "5,754" or "12*".

        Rows without a citation link (common for conference entries) count as 0.
        """
        cleaned = PublicationExtractor.clean_text(text).replace(",", "").replace(" ", "")
        citation_match = re.search(r'(\d+)', cleaned)
        if citation_match:
            return int(citation_match.group(1))
        return 0

    @staticmethod
    def absolute_url(url: str, base_url: str = DEFAULT_BASE_URL) -> str:
        """Resolve relative scholar URLs against the profile origin"""
        if not url:
            return ""
        url = url.strip()
        if not url:
            return ""
        return urllib.parse.urljoin(base_url or DEFAULT_BASE_URL, url)

    @staticmethod
    def extract_record(row, base_url: str = DEFAULT_BASE_URL) -> RawRecord:
        """Read one ``tr.gsc_a_tr`` row (a BeautifulSoup tag) into a RawRecord"""
        clean = PublicationExtractor.clean_text

        title_elem = row.select_one(TITLE_SELECTOR)
        title = clean(title_elem.get_text()) if title_elem else ""

        gray = row.select(GRAY_SELECTOR)
        authors = clean(gray[0].get_text()) if len(gray) > 0 else ""
        venue = clean(gray[1].get_text()) if len(gray) > 1 else ""

        year_elem = row.select_one(YEAR_SELECTOR)
        year = PublicationExtractor.resolve_year(
            year_elem.get_text() if year_elem else "", venue
        )

        view_url = ""
        if title_elem is not None:
            view_url = PublicationExtractor.absolute_url(title_elem.get("href", ""), base_url)

        citation_elem = row.select_one(CITATION_SELECTOR)
        citation_count = 0
        cites_url = ""
        if citation_elem is not None:
            citation_count = PublicationExtractor.parse_citation_count(citation_elem.get_text())
            cites_url = PublicationExtractor.absolute_url(citation_elem.get("href", ""), base_url)

        return RawRecord(
            title=title,
            authors=authors,
            venue=venue,
            year=year,
            citation_count=citation_count,
            view_url=view_url,
            cites_url=cites_url,
        )

    @staticmethod
    def extract_records(html: str, base_url: str = DEFAULT_BASE_URL) -> List[RawRecord]:
        """
        Extract every rendered publication row from a page snapshot

        Args:
            html: Serialized HTML of the profile page
            base_url: Origin used to absolutize relative links

        Returns:
            RawRecords in table order
        """
        if not html:
            return []
        soup = BeautifulSoup(html, "html.parser")
        return [
            PublicationExtractor.extract_record(row, base_url)
            for row in soup.select(ROW_SELECTOR)
        ]
