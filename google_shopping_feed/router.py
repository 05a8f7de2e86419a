"""FastAPI router for serving feed records and override editors."""

from typing import Any, Dict
from time import perf_counter
import logging
from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import HTMLResponse

from .catalog import Catalog
from .context import FeedContext
from .exporter import FeedExporter
from .registry import InvalidOverrideError, UnknownFieldError
from .telemetry import get_export_duration_histogram

logger = logging.getLogger("google_shopping_feed")


def get_feed_router(exporter: FeedExporter, catalog: Catalog) -> APIRouter:
    """
    Create a FastAPI router for feed endpoints.

    Args:
        exporter: Feed exporter instance
        catalog: Catalog the records are built from

    Returns:
        APIRouter with feed endpoints
    """
    router = APIRouter(prefix="/feed", tags=["feed"])
    duration_histogram = get_export_duration_histogram()

    def find_variant(variant_id: int):
        variant = catalog.get_variant(variant_id)
        if variant is None:
            raise HTTPException(status_code=404, detail="Variant not found")
        return variant

    @router.get("/fields")
    async def list_fields():
        """List registered feed fields."""
        return [
            {"name": m.name, "kind": m.kind, "default": m.default}
            for m in exporter.registry
        ]

    @router.get("/products/{product_id}")
    async def get_product_records(product_id: int, request: Request):
        """Feed records for every exported variant of a product."""
        product = catalog.get_product(product_id)
        if product is None:
            raise HTTPException(status_code=404, detail="Product not found")

        start = perf_counter()
        records = exporter.export_product(product, FeedContext.from_request(request))
        duration_ms = (perf_counter() - start) * 1000
        duration_histogram.record(duration_ms, attributes={"product_id": product_id})
        logger.info("product_exported", extra={"product_id": product_id, "duration_ms": duration_ms})
        return records

    @router.get("/variants/{variant_id}")
    async def get_variant_record(variant_id: int, request: Request):
        """Feed record for a single variant."""
        variant = find_variant(variant_id)
        return exporter.build_record(variant, FeedContext.from_request(request))

    @router.get("/variants/{variant_id}/form", response_class=HTMLResponse)
    def get_variant_form(variant_id: int):
        """HTML editors for the variant's stored columns. Sync so the taxonomy fetch runs in the threadpool."""
        find_variant(variant_id)
        return exporter.render_form(variant_id)

    @router.put("/variants/{variant_id}/overrides")
    def put_variant_overrides(variant_id: int, values: Dict[str, Any]):
        """Save administrator overrides for stored columns. A null value removes the override."""
        find_variant(variant_id)
        try:
            saved = exporter.save_overrides(variant_id, values)
        except UnknownFieldError as exc:
            raise HTTPException(status_code=422, detail=f"Not an editable field: {exc.args[0]}")
        except InvalidOverrideError as exc:
            raise HTTPException(status_code=422, detail=str(exc))
        return {"variant_id": variant_id, "overrides": saved}

    return router
