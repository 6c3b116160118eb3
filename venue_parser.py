"""
Heuristic parsing of free-text venue lines into bibliographic fields.

Venue lines follow no fixed grammar. Two shapes dominate:

* journals: ``"Applied Physics Reviews 6 (4), 41308"``
* conferences: ``"2020 IEEE International Conference on Robotics, 45-50"``

Each field is resolved by an ordered chain of small strategies. A strategy
returns ``None`` when its pattern does not apply and the next one is tried;
when the whole chain misses, the field stays empty. Nothing here raises on
odd input.
"""
import re
from typing import Callable, Optional, Sequence, Tuple, TypeVar

from extractor import PublicationExtractor
from models import PublicationType, VenueFields

T = TypeVar("T")
Strategy = Callable[[str], Optional[T]]

VolumeIssue = Tuple[Optional[int], Optional[int]]
PageRange = Tuple[int, int]

CONFERENCE_KEYWORDS = ("conference", "proceedings", "symposium", "workshop")

YEAR_TOKEN = re.compile(r'\b(?:19|20)\d{2}\b')
EMPTY_PARENS = re.compile(r'\(\s*\)')
DANGLING_COMMA = re.compile(r'\s*,\s*(?=,|$)')
LEADING_COMMA = re.compile(r'^\s*,\s*')
PARENTHESISED_YEAR = re.compile(r'\(\s*(?:19|20)\d{2}\s*\)')
TRAILING_YEAR = re.compile(r',\s*((?:19|20)\d{2})\s*$')

VOLUME_ISSUE = re.compile(r'\b(\d+)\s*\(\s*(\d+)\s*\)')
VOLUME_ONLY = re.compile(r'(?:^|[^\d])(\d{1,5})(?=\s*,)')
NAME_BEFORE_NUMBERS = re.compile(r'^(.+?)(\s+\d+\s*(?:\(|,|$).*)$')
TRAILING_PAGES = re.compile(r',\s*\d+(?:\s*[-–]\s*\d+)?\s*$')
PAGE_RANGE = re.compile(r'(\d+)\s*[-–]\s*(\d+)')
SINGLE_PAGE = re.compile(r'\b(\d+)\b')


def strip_years(text: str, year: str = "") -> str:
    """Remove year tokens and the leftovers they leave behind."""
    text = PublicationExtractor.clean_text(text)
    text = YEAR_TOKEN.sub("", text)
    text = EMPTY_PARENS.sub("", text)
    text = DANGLING_COMMA.sub("", text)
    text = LEADING_COMMA.sub("", text)
    text = PublicationExtractor.clean_text(text)
    year = PublicationExtractor.clean_text(year)
    if year and text.startswith(year):
        text = PublicationExtractor.clean_text(text[len(year):])
    return text


def strip_publication_year(text: str, year: str = "") -> str:
    """Remove only the year Scholar attaches to a venue.

    That is a parenthesised year, a trailing ``, <year>`` segment and a
    leading copy of ``year``. Page and article numbers that happen to fall
    in 1900-2099 are kept. A trailing year is only dropped when it matches
    ``year`` (or when no year is known).
    """
    text = PublicationExtractor.clean_text(text)
    year = PublicationExtractor.clean_text(year)
    text = PARENTHESISED_YEAR.sub("", text)
    match = TRAILING_YEAR.search(text)
    if match and (not year or match.group(1) == year):
        text = text[:match.start()]
    if year and re.match(re.escape(year) + r'\b', text):
        text = text[len(year):]
    text = DANGLING_COMMA.sub("", text)
    text = LEADING_COMMA.sub("", text)
    return PublicationExtractor.clean_text(text)


def first_match(strategies: Sequence[Strategy], text: str) -> Optional[T]:
    for strategy in strategies:
        result = strategy(text)
        if result is not None:
            return result
    return None


# -- volume / issue ---------------------------------------------------------

def volume_with_issue(text: str) -> Optional[VolumeIssue]:
    """``"6 (4)"`` -> (6, 4)"""
    match = VOLUME_ISSUE.search(text)
    if not match:
        return None
    return int(match.group(1)), int(match.group(2))


def volume_before_comma(text: str) -> Optional[VolumeIssue]:
    """``"... 181, 111730"`` -> (181, None)"""
    match = VOLUME_ONLY.search(text)
    if not match:
        return None
    return int(match.group(1)), None


# -- source name -------------------------------------------------------------

def journal_name_before_numbers(text: str) -> Optional[str]:
    """Name preceding a ``<volume> (`` or ``<volume>,`` tail.

    Venues mentioning "conference" are left to the next strategy, since
    proceedings titles rarely follow the volume/pages layout.
    """
    if "conference" in text.lower():
        return None
    match = NAME_BEFORE_NUMBERS.match(text)
    if not match:
        return None
    return PublicationExtractor.clean_text(match.group(1))


def strip_trailing_pages(text: str) -> Optional[str]:
    """Drop a trailing ``, <n>`` or ``, <n>-<n>`` chunk and keep the rest."""
    return PublicationExtractor.clean_text(TRAILING_PAGES.sub("", text))


# -- pages ---------------------------------------------------------------------

def page_range(segment: str) -> Optional[PageRange]:
    match = PAGE_RANGE.search(segment)
    if not match:
        return None
    start, end = int(match.group(1)), int(match.group(2))
    return (start, end) if start <= end else (end, start)


def single_page(segment: str) -> Optional[PageRange]:
    """A lone number is an article number: start and end are equal."""
    match = SINGLE_PAGE.search(segment)
    if not match:
        return None
    page = int(match.group(1))
    return page, page


VOLUME_STRATEGIES: Tuple[Strategy, ...] = (volume_with_issue, volume_before_comma)
SOURCE_STRATEGIES: Tuple[Strategy, ...] = (journal_name_before_numbers, strip_trailing_pages)
PAGE_STRATEGIES: Tuple[Strategy, ...] = (page_range, single_page)


def infer_type(venue: str) -> PublicationType:
    lowered = PublicationExtractor.clean_text(venue).lower()
    if any(keyword in lowered for keyword in CONFERENCE_KEYWORDS):
        return PublicationType.CONFERENCE_PAPER
    return PublicationType.JOURNAL_ARTICLE


class VenueParser:
    """Resolves venue fields by running each strategy chain in order"""

    def __init__(
        self,
        volume_strategies: Sequence[Strategy] = VOLUME_STRATEGIES,
        source_strategies: Sequence[Strategy] = SOURCE_STRATEGIES,
        page_strategies: Sequence[Strategy] = PAGE_STRATEGIES,
    ):
        self.volume_strategies = tuple(volume_strategies)
        self.source_strategies = tuple(source_strategies)
        self.page_strategies = tuple(page_strategies)

    def parse(self, venue: str, year: str = "") -> VenueFields:
        """
        Parse a venue line

        Args:
            venue: Free-text venue as rendered on the profile
            year: Year already resolved for the record, stripped if it prefixes the venue

        Returns:
            VenueFields with unset fields left as None / ""
        """
        text = strip_publication_year(venue, year)

        volume, issue = first_match(self.volume_strategies, text) or (None, None)
        source_name = first_match(self.source_strategies, strip_years(venue, year)) or ""
        start_page, end_page = self._parse_pages(text)

        return VenueFields(
            type=infer_type(venue),
            source_name=source_name,
            volume=volume,
            issue=issue,
            start_page=start_page,
            end_page=end_page,
        )

    def _parse_pages(self, text: str) -> Tuple[Optional[int], Optional[int]]:
        """Pages live in the last comma-delimited segment, if there is one."""
        segments = [segment.strip() for segment in text.split(",")]
        if len(segments) < 2:
            return None, None
        pages = first_match(self.page_strategies, segments[-1])
        if pages is None:
            return None, None
        return pages


DEFAULT_PARSER = VenueParser()


def parse_venue(venue: str, year: str = "") -> VenueFields:
    return DEFAULT_PARSER.parse(venue, year)
