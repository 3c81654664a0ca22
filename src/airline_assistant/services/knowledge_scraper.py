"""
Knowledge scraper for the airline policy pages.

Each section (baggage, check-in, booking, policies, loyalty club) comes from
its own page. Pages are fetched concurrently and independently: a page that
keeps failing yields None for its section without affecting the others. When
every page fails, a static fallback bundle is returned and cached like a
real scrape so a down site is not hit on every request.
"""

import asyncio
import re
from typing import Awaitable, Callable, Dict, Optional

import httpx
import structlog
from bs4 import BeautifulSoup

from ..config import config
from ..interfaces.providers import KnowledgeProviderInterface
from ..types import ScrapedKnowledgeBase, ScrapeError
from .cache_service import CacheKeyType, TTLCache
from .fallback_data import build_fallback_knowledge_base


logger = structlog.get_logger(__name__)


REQUEST_HEADERS = {
    'User-Agent': 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36',
    'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8',
    'Accept-Language': 'en-US,en;q=0.9',
    'Connection': 'keep-alive',
    'Upgrade-Insecure-Requests': '1',
    'Cache-Control': 'max-age=0',
    'Referer': 'https://www.airindia.com/',
}

PRUNED_SELECTORS = (
    'script, style, nav, footer, header, aside, .cookie, .popup, .modal, '
    '.advertisement, .ad, iframe, noscript'
)

CONTENT_SELECTORS = (
    'main article',
    'main .content',
    'main',
    '.main-content',
    '.page-content',
    'article',
    '#content',
    '.content-wrapper',
)

IRRELEVANT_SELECTORS = (
    '.menu, .navigation, .sidebar, .social, .share, .breadcrumb, .pagination, '
    '.related, .tags, .comments, .author, .date, .meta'
)

TEXT_ELEMENTS = 'p, li, dt, dd, h1, h2, h3, h4, h5, h6, .text, .description'

NAVIGATION_KEYWORDS = ('home', 'menu', 'search', 'login', 'sign up', 'cookie', 'privacy', 'terms')

AGGREGATE_CACHE_KEY = TTLCache.make_key(CacheKeyType.KNOWLEDGE_BASE, "airline_info")


def is_navigation_text(text: str) -> bool:
    """Short snippets mentioning navigation words are menu items, not content"""
    lower_text = text.lower()
    return len(text) < 50 and any(keyword in lower_text for keyword in NAVIGATION_KEYWORDS)


def extract_relevant_text(element, min_length: int = 100) -> str:
    """Join the text of content elements inside a container"""
    for irrelevant in element.select(IRRELEVANT_SELECTORS):
        irrelevant.extract()

    parts = []
    for node in element.select(TEXT_ELEMENTS):
        content = node.get_text(' ', strip=True)
        if len(content) > 20 and not is_navigation_text(content):
            parts.append(content)

    text = ' '.join(parts)
    if len(text) < min_length:
        text = element.get_text(' ')

    return text


def clean_text(text: str, max_length: int = 5000) -> str:
    """Normalize whitespace, drop non-basic punctuation and truncate"""
    text = re.sub(r'\s+', ' ', text)
    text = re.sub(r'[^\w\s.,;:!?()\-/]', ' ', text, flags=re.ASCII)
    text = re.sub(r'\s+', ' ', text).strip()
    return text[:max_length]


def extract_page_text(html: str, min_length: int = 100, max_length: int = 5000) -> str:
    """
    Extract the readable body text of a policy page.

    Page chrome is pruned first, then the content containers are probed in
    order and the first one yielding more than min_length characters wins.
    The whole document body is used when none qualifies.
    """
    soup = BeautifulSoup(html, 'html.parser')

    for element in soup.select(PRUNED_SELECTORS):
        element.extract()

    text = ''
    for selector in CONTENT_SELECTORS:
        container = soup.select_one(selector)
        if container is None:
            continue
        extracted = extract_relevant_text(container, min_length)
        if len(extracted) > min_length:
            text = extracted
            break

    if not text:
        text = extract_relevant_text(soup.body or soup, min_length)

    return clean_text(text, max_length)


class KnowledgeScraper(KnowledgeProviderInterface):
    """Scrapes, caches and falls back for the airline knowledge base"""

    def __init__(
        self,
        cache: TTLCache,
        client: Optional[httpx.AsyncClient] = None,
        page_urls: Optional[Dict[str, str]] = None,
        max_retries: Optional[int] = None,
        retry_delay: Optional[float] = None,
        request_timeout: Optional[float] = None,
        min_content_length: Optional[int] = None,
        max_content_length: Optional[int] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        settings = config.scraper
        self.cache = cache
        self.page_urls = page_urls or settings.page_urls
        self.max_retries = settings.max_retries if max_retries is None else max_retries
        self.retry_delay = settings.retry_delay if retry_delay is None else retry_delay
        self.request_timeout = request_timeout or settings.request_timeout
        self.min_content_length = min_content_length or settings.min_content_length
        self.max_content_length = max_content_length or settings.max_content_length
        self.sleep = sleep

        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            timeout=self.request_timeout,
            headers=REQUEST_HEADERS,
            follow_redirects=True,
            max_redirects=5,
        )

    async def get_knowledge_base(self) -> ScrapedKnowledgeBase:
        """Return the cached knowledge base, scraping all pages on a miss"""
        cached = self.cache.get(AGGREGATE_CACHE_KEY)
        if cached is not None:
            logger.debug("Using cached knowledge base", is_fallback=cached.is_fallback)
            return cached

        logger.info("Scraping airline knowledge pages", pages=len(self.page_urls))

        sections = list(self.page_urls.items())
        results = await asyncio.gather(
            *(self.scrape_page(section, url) for section, url in sections),
            return_exceptions=True,
        )

        scraped: Dict[str, Optional[str]] = {}
        for (section, _), result in zip(sections, results):
            if isinstance(result, Exception):
                logger.error("Page scrape raised", section=section, error=str(result))
                result = None
            scraped[section] = result

        success_count = sum(1 for text in scraped.values() if text)
        if success_count > 0:
            fields = ScrapedKnowledgeBase.model_fields
            knowledge_base = ScrapedKnowledgeBase(
                **{section: text for section, text in scraped.items() if section in fields}
            )
            self.cache.set(AGGREGATE_CACHE_KEY, knowledge_base)
            logger.info("Knowledge base scraped", succeeded=success_count, total=len(sections))
            return knowledge_base

        logger.warning("Failed to scrape any knowledge page, using fallback data")
        fallback = build_fallback_knowledge_base()
        self.cache.set(AGGREGATE_CACHE_KEY, fallback)
        return fallback

    async def scrape_page(self, section: str, url: str) -> Optional[str]:
        """Fetch one page with retries and exponential backoff; None when every attempt fails"""
        page_key = TTLCache.make_key(CacheKeyType.KNOWLEDGE_PAGE, section)
        cached = self.cache.get(page_key)
        if cached is not None:
            return cached

        for attempt in range(self.max_retries + 1):
            try:
                text = await self._fetch_page_text(url)
                self.cache.set(page_key, text)
                logger.info("Page scraped", section=section, chars=len(text), attempt=attempt + 1)
                return text
            except (httpx.HTTPError, ScrapeError) as e:
                if attempt < self.max_retries:
                    delay = self.retry_delay * (2 ** attempt)
                    logger.warning(
                        "Page scrape attempt failed, retrying",
                        section=section,
                        attempt=attempt + 1,
                        delay=delay,
                        error=str(e),
                    )
                    await self.sleep(delay)
                    continue

                logger.error(
                    "Page scrape failed",
                    section=section,
                    url=url,
                    attempts=attempt + 1,
                    timeout=isinstance(e, httpx.TimeoutException),
                    error=str(e),
                )

        return None

    async def _fetch_page_text(self, url: str) -> str:
        response = await self.client.get(url, timeout=self.request_timeout)
        if response.status_code != 200:
            raise ScrapeError(f"HTTP {response.status_code} from {url}")

        text = extract_page_text(response.text, self.min_content_length, self.max_content_length)
        if len(text) <= self.min_content_length:
            raise ScrapeError(f"Insufficient content extracted from {url}")

        return text

    async def close(self):
        """Close the HTTP client if this scraper created it"""
        if self._owns_client:
            await self.client.aclose()
