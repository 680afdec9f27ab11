import asyncio
import re
from typing import Optional

import requests
from requests.exceptions import RequestException

from analysis.errors import ExtractionError, FetchError
from configs.settings import Config
from tools.logger import setup_logger

logger = setup_logger("url-text-extractor")

SCHEME = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.\-]*://")
HORIZONTAL_WHITESPACE = re.compile(r"[ \t\f\v\u00a0]+")
TRAILING_SPACE = re.compile(r" +\n")
BLANK_LINES = re.compile(r"\n{3,}")


def normalize_url(url: str) -> str:
    """
    Example:
        >>> normalize_url("example.com/terms")
        'https://example.com/terms'
    """
    url = (url or "").strip()
    if url and not SCHEME.match(url):
        url = f"https://{url}"
    return url


class UrlTextExtractor:
    """
    Fetches a plain-text rendition of a web page through a read-only
    page-to-text proxy and cleans it for analysis.

    Single attempt, no retry; callers decide whether to ask for pasted text.

    Example:
        >>> extractor = UrlTextExtractor()
        >>> text = await extractor.extract_from_url("example.com/terms")
    """

    MIN_TEXT_LENGTH = Config.MIN_TEXT_LENGTH
    MAX_TEXT_LENGTH = Config.MAX_TEXT_LENGTH

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        reader_base_url: str = Config.READER_BASE_URL,
        timeout: float = Config.FETCH_TIMEOUT,
    ):
        if session is None:
            session = requests.Session()
            session.headers.update({
                "User-Agent": "tos-risk-analyzer/1.0",
                "Accept": "text/plain, text/markdown;q=0.9, */*;q=0.5",
            })
        self.session = session
        self.reader_base_url = reader_base_url
        self.timeout = timeout

    # =========================================================
    # Public API
    # =========================================================

    async def extract_from_url(self, url: str) -> str:
        """
        Returns cleaned text of at least MIN_TEXT_LENGTH characters.

        Raises:
            FetchError on transport failure or a non-2xx response.
            ExtractionError when the cleaned text is too short.
        """
        # requests is blocking; keep it off the event loop.
        return await asyncio.to_thread(self.extract_from_url_sync, url)

    def extract_from_url_sync(self, url: str) -> str:
        target = normalize_url(url)
        if not target:
            raise FetchError(url or "", detail="no URL provided")

        logger.info(f"Fetching text for: {target}")
        raw_text = self._fetch(target)

        text = self._normalize(raw_text)
        if len(text) < self.MIN_TEXT_LENGTH:
            logger.warning(f"Extracted text too short ({len(text)} chars) for {target}")
            raise ExtractionError(target, len(text), self.MIN_TEXT_LENGTH)

        logger.info(f"Extracted {len(text)} characters from {target}")
        return text

    # =========================================================
    # Internals
    # =========================================================

    def _fetch(self, target: str) -> str:
        try:
            response = self.session.get(
                f"{self.reader_base_url}{target}",
                timeout=self.timeout,
            )
        except RequestException as e:
            logger.error(f"Network error while fetching {target}: {e}")
            raise FetchError(target, detail=str(e)) from e

        if not 200 <= response.status_code < 300:
            logger.error(f"Content extraction failed for {target}: HTTP {response.status_code}")
            raise FetchError(target, status_code=response.status_code)

        return response.text or ""

    def _normalize(self, text: str) -> str:
        """
        Collapse repeated whitespace and blank lines, then bound the length.
        """
        text = text.replace("\r\n", "\n").replace("\r", "\n")
        text = HORIZONTAL_WHITESPACE.sub(" ", text)
        text = TRAILING_SPACE.sub("\n", text)
        text = BLANK_LINES.sub("\n\n", text)
        text = text.strip()
        return text[: self.MAX_TEXT_LENGTH]
