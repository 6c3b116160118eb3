"""
Google Scholar profile exporter using Playwright
"""
import asyncio
import platform
import sys
import urllib.parse
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from playwright.async_api import Page, TimeoutError as PlaywrightTimeoutError, async_playwright

from csv_generator import POPCITES_FILENAME, CSVGenerator
from extractor import DEFAULT_BASE_URL, PublicationExtractor
from metrics import enrich_records
from models import BibtexCapture, RawRecord

EXPORT_KINDS = ("csv", "popcites", "bibtex")

PROFILE_SELECTOR = 'div#gsc_prf'
LOAD_MORE_SELECTORS = [
    'button#gsc_bpf_more',
    '#gsc_bpf_more',
    'button.gsc_bpf_more',
]
ROW_CHECKBOX_SELECTOR = 'input[type="checkbox"][name="s"]'
EXPORT_CANDIDATE_SELECTOR = 'button, a, span, div'

USER_AGENT = (
    'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 '
    '(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36'
)


class MissingInputError(Exception):
    """An element the export relies on is not present on the profile page"""


class ScholarProfileScraper:
    """Drives a rendered Google Scholar profile and exports its publications"""

    def __init__(
        self,
        headless: bool = True,
        verbose: bool = False,
        max_clicks: int = 200,
        click_delay: float = 0.9,
        bibtex_poll_delays: Sequence[float] = (0.25, 0.4, 0.6),
        base_url: str = DEFAULT_BASE_URL,
        progress_handler: Optional[Callable[[str, int, int, float], None]] = None,
    ):
        self.headless = headless
        self.verbose = verbose
        self.max_clicks = max_clicks
        self.click_delay = click_delay
        self.bibtex_poll_delays = tuple(bibtex_poll_delays)
        self.base_url = base_url.rstrip("/")
        self.progress_handler = progress_handler

    def _log(self, message: str, level: str = "INFO"):
        """Log message if verbose mode is enabled"""
        if self.verbose:
            prefix = {
                "INFO": "ℹ️",
                "DEBUG": "🔍",
                "WARN": "⚠️",
                "ERROR": "❌",
                "SUCCESS": "✓"
            }.get(level, "•")
            print(f"{prefix} {message}")

    def _print_progress(self, current: int, total: int, prefix: str = "Progress"):
        """Print a progress bar and emit progress callbacks"""
        if total == 0:
            return

        percentage = (current / total) * 100
        bar_length = 40
        filled_length = int(bar_length * current // total)
        bar = '█' * filled_length + '░' * (bar_length - filled_length)

        sys.stdout.write(f'\r{prefix}: [{bar}] {current}/{total} ({percentage:.1f}%)')
        sys.stdout.flush()

        if current >= total:
            print()

        if self.progress_handler:
            try:
                self.progress_handler(prefix, current, total, percentage)
            except Exception as exc:
                # A broken progress display must not abort the export
                self._log(f"Progress handler failed: {exc}", "WARN")

    def build_profile_url(self, user_input: str) -> str:
        """Accept either a profile user id or a full profile URL"""
        user_input = (user_input or "").strip()
        if not user_input:
            raise ValueError("A Google Scholar user id or profile URL is required")
        if user_input.startswith("http://") or user_input.startswith("https://"):
            return user_input
        return f"{self.base_url}/citations?user={urllib.parse.quote(user_input)}&hl=en"

    @staticmethod
    def extract_user_id(profile_url: str) -> str:
        """Return the ``user`` query parameter of a profile URL, or "" """
        query = urllib.parse.urlparse(profile_url or "").query
        values = urllib.parse.parse_qs(query).get("user", [])
        return values[0] if values else ""

    def _origin(self, page_url: str) -> str:
        parsed = urllib.parse.urlparse(page_url or "")
        if parsed.scheme and parsed.netloc:
            return f"{parsed.scheme}://{parsed.netloc}"
        return self.base_url

    async def export_profile(
        self,
        user_input: str,
        kinds: Iterable[str],
        output_dir: Path,
        load_all: bool = False,
    ) -> List[Path]:
        """
        Open a profile in Chromium and write the requested exports

        Args:
            user_input: Google Scholar user ID (e.g., 'x8xNLZQAAAAJ') or profile URL
            kinds: Any of "csv", "popcites", "bibtex"
            output_dir: Directory receiving the files
            load_all: Click "Show more" until every row is loaded first

        Returns:
            Paths of the written files
        """
        profile_url = self.build_profile_url(user_input)

        async with async_playwright() as p:
            launch_options = {
                'headless': self.headless,
                'slow_mo': 100
            }

            # On macOS, sometimes need to disable sandbox
            if platform.system() == 'Darwin':
                launch_options['args'] = ['--no-sandbox', '--disable-setuid-sandbox']

            browser = await p.chromium.launch(**launch_options)
            context = await browser.new_context(
                user_agent=USER_AGENT,
                viewport={'width': 1920, 'height': 1080}
            )
            page = await context.new_page()

            try:
                print(f"Navigating to profile: {profile_url}")
                await page.goto(profile_url, wait_until='networkidle', timeout=30000)

                if not await self._check_profile_exists(page):
                    raise MissingInputError(
                        "Profile not found or inaccessible. If Scholar shows a CAPTCHA, "
                        "solve it in a headful browser (--headful) and retry."
                    )
                print("Profile found. Starting export...")
                return await self.export_page(page, kinds, output_dir, load_all=load_all)
            finally:
                await browser.close()

    async def export_page(
        self,
        page: Page,
        kinds: Iterable[str],
        output_dir: Path,
        load_all: bool = False,
    ) -> List[Path]:
        """Run the requested exports against an already opened profile page"""
        kinds = list(kinds)
        if load_all:
            try:
                clicks = await self.load_all_publications(page)
                print(f"Load all complete. Clicked 'Show more' {clicks} time(s).")
            except MissingInputError as exc:
                print(f"⚠️  Warning: {exc} Exporting the rows already on the page.")

        records = await self.collect_records(page)
        print(f"Found {len(records)} publication rows.")

        capture = None
        if "bibtex" in kinds:
            capture = await self.capture_bibtex_link(page)
            self._log(f"BibTeX export link: {capture.url}", "SUCCESS")

        return self.write_exports(records, kinds, output_dir, capture=capture)

    def export_snapshot(
        self,
        html: str,
        kinds: Iterable[str],
        output_dir: Path,
        base_url: Optional[str] = None,
    ) -> List[Path]:
        """Run exports against a saved profile page instead of a live browser"""
        kinds = list(kinds)
        if "bibtex" in kinds:
            raise MissingInputError("The BibTeX link is only available from a live profile page.")
        records = PublicationExtractor.extract_records(html, base_url or self.base_url)
        if not records:
            raise MissingInputError(
                "No publication rows found. Make sure the saved page contains the publications table."
            )
        return self.write_exports(records, kinds, output_dir)

    def write_exports(
        self,
        records: List[RawRecord],
        kinds: Iterable[str],
        output_dir: Path,
        capture: Optional[BibtexCapture] = None,
        now: Optional[datetime] = None,
    ) -> List[Path]:
        """Render every requested export, then write them all to ``output_dir``"""
        now = now or datetime.now()
        outputs: Dict[str, str] = {}

        for kind in kinds:
            if kind == "csv":
                outputs[CSVGenerator.publications_filename(now)] = \
                    CSVGenerator.generate_publications_csv(records)
            elif kind == "popcites":
                outputs[POPCITES_FILENAME] = \
                    CSVGenerator.generate_popcites_csv(enrich_records(records, now))
            elif kind == "bibtex":
                if capture is None:
                    raise MissingInputError("No BibTeX export link was captured.")
                outputs[CSVGenerator.bibtex_links_filename(now)] = \
                    CSVGenerator.generate_bibtex_link_text(capture.url, capture.selected_count)
            else:
                raise ValueError(f"Unknown export format: {kind!r} (expected one of {EXPORT_KINDS})")

        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        paths = []
        for index, (filename, content) in enumerate(outputs.items(), start=1):
            path = output_dir / filename
            path.write_text(content, encoding="utf-8")
            paths.append(path)
            self._print_progress(index, len(outputs), "Writing exports")
        return paths

    async def _check_profile_exists(self, page: Page) -> bool:
        """Check if the profile page loaded successfully"""
        try:
            await page.wait_for_selector(PROFILE_SELECTOR, timeout=5000)
            return True
        except PlaywrightTimeoutError:
            return False

    async def snapshot(self, page: Page) -> str:
        return await page.content()

    async def collect_records(self, page: Page) -> List[RawRecord]:
        """Extract every publication row currently rendered on the page"""
        html = await self.snapshot(page)
        records = PublicationExtractor.extract_records(html, self._origin(page.url))
        if not records:
            raise MissingInputError(
                "No publication rows found. Make sure your publications table is visible."
            )
        return records

    async def _find_load_more_button(self, page: Page):
        for selector in LOAD_MORE_SELECTORS:
            button = await page.query_selector(selector)
            if button:
                return button

        # Fall back to any button labelled "Show more"
        for button in await page.query_selector_all('button'):
            text = PublicationExtractor.clean_text(await button.text_content()).lower()
            if 'show more' in text:
                return button
        return None

    @staticmethod
    async def _is_disabled(button) -> bool:
        """Scholar marks an exhausted "Show more" button in several ways"""
        classes = (await button.get_attribute("class") or "").split()
        if "gs_dis" in classes:
            return True
        if (await button.get_attribute("aria-disabled") or "").lower() == "true":
            return True
        if await button.get_attribute("disabled") is not None:
            return True
        style = (await button.get_attribute("style") or "").replace(" ", "").lower()
        return "display:none" in style

    async def load_all_publications(self, page: Page) -> int:
        """
        Click "Show more" until it becomes disabled or ``max_clicks`` is reached

        Returns:
            Number of clicks performed
        """
        button = await self._find_load_more_button(page)
        if not button:
            raise MissingInputError(
                "Could not find the 'Show more' button (#gsc_bpf_more). "
                "If everything is already loaded, you can export now."
            )

        clicks = 0
        while clicks < self.max_clicks:
            if await self._is_disabled(button):
                self._log("'Show more' is disabled; all rows are loaded", "DEBUG")
                break
            await button.click()
            clicks += 1
            self._log(f"Clicked 'Show more' ({clicks})", "DEBUG")
            await asyncio.sleep(self.click_delay)

        return clicks

    async def select_all_rows(self, page: Page) -> int:
        """Tick every row checkbox; returns how many rows are selectable"""
        checkboxes = await page.query_selector_all(ROW_CHECKBOX_SELECTOR)
        for checkbox in checkboxes:
            if not await checkbox.is_checked():
                await checkbox.check(force=True)
        return len(checkboxes)

    async def find_export_button(self, page: Page):
        """Locate the toolbar "Export" control by its visible text"""
        candidates = []
        for element in await page.query_selector_all(EXPORT_CANDIDATE_SELECTOR):
            text = PublicationExtractor.clean_text(await element.text_content()).lower()
            candidates.append((element, text))

        for element, text in candidates:
            if text == "export":
                return element
        for element, text in candidates:
            if "export" in text:
                return element
        return None

    async def find_bibtex_link(self, page: Page):
        for link in await page.query_selector_all('a'):
            text = PublicationExtractor.clean_text(await link.text_content()).lower()
            if "bibtex" in text:
                return link
        return None

    async def capture_bibtex_link(self, page: Page) -> BibtexCapture:
        """
        Select all loaded rows, open Scholar's Export menu and read the BibTeX link

        The menu renders asynchronously, so the link is polled with increasing delays.
        """
        selected_count = await self.select_all_rows(page)
        if not selected_count:
            raise MissingInputError(
                "No rows found to select. Make sure your publications table is visible and rows are loaded."
            )

        export_button = await self.find_export_button(page)
        if not export_button:
            raise MissingInputError(
                "Could not find the Export button on this page. "
                "Ensure you are on your Scholar profile 'My citations' page."
            )
        await export_button.click()

        bibtex_link = None
        for attempt, delay in enumerate(self.bibtex_poll_delays, start=1):
            await asyncio.sleep(delay)
            bibtex_link = await self.find_bibtex_link(page)
            if bibtex_link:
                break
            self._log(f"BibTeX menu item not rendered yet (attempt {attempt})", "DEBUG")

        if not bibtex_link:
            raise MissingInputError(
                "Could not locate the 'BibTeX' item in the Export menu. "
                "Try clicking Export manually once, then run the export again."
            )

        href = await bibtex_link.get_attribute("href") or ""
        url = PublicationExtractor.absolute_url(href, self._origin(page.url))
        if not url:
            raise MissingInputError("Found BibTeX menu item, but its link was empty.")

        return BibtexCapture(url=url, selected_count=selected_count)
