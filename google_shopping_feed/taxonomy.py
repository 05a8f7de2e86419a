"""Client for Google's product taxonomy list."""

import logging
import time
from typing import List, Optional
import httpx

from .config import TaxonomyConfig

logger = logging.getLogger("google_shopping_feed")


class TaxonomyUnavailable(Exception):
    """Raised when the taxonomy cannot be fetched and nothing usable is cached."""


class TaxonomyCache:
    """TTL cache for the category list with a stale fallback window."""

    def __init__(self, ttl: int, stale_ttl: int = 86400):
        """
        Initialize cache.

        Args:
            ttl: Time-to-live in seconds for fresh cache
            stale_ttl: Max age for stale cache fallback
        """
        self.ttl = ttl
        self.stale_ttl = stale_ttl
        self._categories: Optional[List[str]] = None
        self._fetched_at: float = 0.0

    def _age(self) -> float:
        return time.time() - self._fetched_at

    def get(self) -> Optional[List[str]]:
        """Get the cached categories if not expired."""
        if self._categories is None or self._age() > self.ttl:
            return None
        return self._categories

    def get_stale(self) -> Optional[List[str]]:
        """Get the cached categories even if stale (within stale TTL)."""
        if self._categories is None or self._age() > self.stale_ttl:
            return None
        return self._categories

    def set(self, categories: List[str]) -> None:
        self._categories = categories
        self._fetched_at = time.time()


def parse_taxonomy(text: str) -> List[str]:
    """Split the taxonomy file into category paths, skipping the version header."""
    lines = text.split("\n")[1:]
    return [line.strip() for line in lines if line.strip()]


class TaxonomyClient:
    """
    Fetches the list of valid google_product_category values.

    The list is fetched over HTTP when an editor form is rendered, so it is
    cached and a stale copy is served if Google cannot be reached.
    """

    def __init__(self, config: Optional[TaxonomyConfig] = None, client: Optional[httpx.Client] = None):
        """
        Initialize the client.

        Args:
            config: Taxonomy configuration (defaults apply when omitted)
            client: Optional httpx client (e.g. with a MockTransport)
        """
        self.config = config or TaxonomyConfig()
        self.cache = TaxonomyCache(
            ttl=self.config.cache_ttl_seconds,
            stale_ttl=self.config.stale_ttl_seconds,
        )
        if client is not None:
            self.client = client
            self._owns_client = False
        else:
            self.client = httpx.Client(timeout=self.config.timeout_seconds, follow_redirects=True)
            self._owns_client = True

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def categories(self) -> List[str]:
        """
        Return the taxonomy category paths.

        Raises:
            TaxonomyUnavailable: if the fetch fails and no stale copy exists
        """
        cached = self.cache.get()
        if cached is not None:
            return cached

        try:
            response = self.client.get(self.config.url)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning("taxonomy_fetch_failed", extra={"url": self.config.url, "error": str(exc)})
            stale = self.cache.get_stale()
            if stale is not None:
                return stale
            raise TaxonomyUnavailable(f"Could not fetch taxonomy from {self.config.url}") from exc

        categories = parse_taxonomy(response.text)
        logger.info("taxonomy_fetched", extra={"url": self.config.url, "count": len(categories)})
        self.cache.set(categories)
        return categories

    def search(self, term: str) -> List[str]:
        """Categories containing term, case-insensitively."""
        needle = term.lower()
        return [c for c in self.categories() if needle in c.lower()]
