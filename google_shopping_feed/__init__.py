"""
Google Shopping Feed

Maps store products and variants onto the attribute set of the
Google Shopping Content API through a registry of field mappings.
"""

__version__ = "0.1.0"

from .config import FeedConfig
from .context import FeedContext
from .exporter import FeedExporter
from .google_feed import build_registry, from_option_type
from .registry import FieldMappingRegistry, UnknownFieldError
from .router import get_feed_router

__all__ = [
    "FeedConfig",
    "FeedContext",
    "FeedExporter",
    "FieldMappingRegistry",
    "UnknownFieldError",
    "build_registry",
    "from_option_type",
    "get_feed_router",
]
