from contextlib import asynccontextmanager

from fastapi import FastAPI

from google_shopping_feed import FeedConfig, FeedExporter, build_registry, get_feed_router
from google_shopping_feed.catalog import Catalog
from google_shopping_feed.taxonomy import TaxonomyClient

config = FeedConfig(
    store={
        "brand": "Ann Arbor Tees",
        "storefront_url": "https://annarbortees.com",
    },
)
taxonomy = TaxonomyClient(config.taxonomy)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    yield
    taxonomy.close()


app = FastAPI(lifespan=lifespan)
exporter = FeedExporter(build_registry(config, taxonomy))
app.include_router(get_feed_router(exporter, Catalog.from_file("examples/catalog.json")))

# Run: uvicorn examples.simple_app:app --reload
