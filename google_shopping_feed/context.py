"""Request context passed explicitly to feed resolvers."""

from typing import Optional
from urllib.parse import urlparse
from pydantic import BaseModel, Field


class FeedContext(BaseModel):
    """
    View/request information available while building a feed record.

    Resolvers that accept a second argument receive one of these, or None
    when the feed is built outside a request (e.g. a background upload).
    """
    request_url: str = Field(..., description="Full URL of the current request")

    @classmethod
    def from_request(cls, request) -> "FeedContext":
        """Build a context from a Starlette/FastAPI request."""
        return cls(request_url=str(request.url))

    def product_url(self, slug: str) -> Optional[str]:
        """Storefront URL of the product with the given slug."""
        return product_url(self.request_url, slug)


def product_url(base_url: str, slug: str) -> Optional[str]:
    """Join the scheme and host of base_url with the product path."""
    parsed = urlparse(base_url)
    if not parsed.scheme or not parsed.hostname:
        return None
    return f"{parsed.scheme}://{parsed.hostname}/products/{slug}"
