import asyncio
import time

import httpx
import pytest
from fastapi import FastAPI

from google_shopping_feed.catalog import Catalog
from google_shopping_feed.exporter import FeedExporter
from google_shopping_feed.google_feed import build_registry
from google_shopping_feed.registry import InvalidOverrideError
from google_shopping_feed.router import get_feed_router
from google_shopping_feed.storage import InMemoryOverrideStore, SQLiteOverrideStore
from google_shopping_feed.taxonomy import TaxonomyClient

from tests.test_transform import make_config, make_registry, sample_product


def make_exporter(store=None):
    return FeedExporter(make_registry(), store=store)


def make_app(exporter=None):
    app = FastAPI()
    app.include_router(get_feed_router(exporter or make_exporter(), Catalog([sample_product()])))
    return app


def test_feed_variants_skip_master():
    catalog = Catalog([sample_product()])
    exporter = make_exporter()
    product = catalog.get_product(7)
    assert [v.id for v in exporter.feed_variants(product)] == [71, 72]

    single = Catalog([{"id": 8, "name": "Sticker", "slug": "sticker",
                       "variants": [{"id": 80, "sku": "STK", "price": "2.00", "is_master": True}]}])
    records = exporter.export(single.products())
    assert len(records) == 1
    assert records[0]["offer_id"] == "STK"
    assert "item_group_id" not in records[0]


def test_save_overrides_merges():
    exporter = make_exporter()
    exporter.save_overrides(71, {"condition": "refurbished"})
    exporter.save_overrides(71, {"age_group": "kids"})

    record = exporter.build_record(Catalog([sample_product()]).get_variant(71))
    assert record["condition"] == "refurbished"
    assert record["age_group"] == "kids"


def test_clearing_override_restores_default():
    exporter = make_exporter()
    variant = Catalog([sample_product()]).get_variant(71)

    exporter.save_overrides(71, {"condition": "used", "product_type": "Hoodie"})
    assert exporter.build_record(variant)["condition"] == "used"

    exporter.save_overrides(71, {"condition": None, "product_type": ""})
    record = exporter.build_record(variant)
    assert record["condition"] == "new"
    assert record["product_type"] == "T-Shirt"
    assert exporter.overrides_for(71) == {}


def test_checkbox_override_is_boolean():
    exporter = make_exporter()
    variant = Catalog([sample_product()]).get_variant(71)

    exporter.save_overrides(71, {"adult": "0"})
    assert exporter.build_record(variant)["adult"] is False
    exporter.save_overrides(71, {"adult": "1"})
    assert exporter.build_record(variant)["adult"] is True


def test_select_override_must_be_a_choice():
    exporter = make_exporter()
    with pytest.raises(InvalidOverrideError):
        exporter.save_overrides(71, {"age_group": "teen"})
    assert exporter.overrides_for(71) == {}


def test_sqlite_store_round_trip(tmp_path):
    store = SQLiteOverrideStore(str(tmp_path / "google_products.db"))
    assert store.get(71) is None
    store.set(71, {"adult": True, "product_type": "Hoodie"})
    assert store.get(71) == {"adult": True, "product_type": "Hoodie"}
    store.close()


def test_in_memory_store_copies_values():
    store = InMemoryOverrideStore()
    values = {"condition": "used"}
    store.set(1, values)
    values["condition"] = "new"
    assert store.get(1) == {"condition": "used"}


@pytest.mark.asyncio
async def test_product_records_use_request_context():
    transport = httpx.ASGITransport(app=make_app())
    async with httpx.AsyncClient(transport=transport, base_url="http://shop.test") as client:
        response = await client.get("/feed/products/7")
        assert response.status_code == 200
        records = response.json()
        assert [r["offer_id"] for r in records] == ["BEAR-RED-S", "BEAR-BLUE-M"]
        assert records[0]["link"] == "http://shop.test/products/bear-tee"

        missing = await client.get("/feed/products/999")
        assert missing.status_code == 404


@pytest.mark.asyncio
async def test_fields_listing():
    transport = httpx.ASGITransport(app=make_app())
    async with httpx.AsyncClient(transport=transport, base_url="http://shop.test") as client:
        response = await client.get("/feed/fields")
        assert response.status_code == 200
        fields = {f["name"]: f for f in response.json()}
        assert fields["condition"] == {"name": "condition", "kind": "stored", "default": "new"}
        assert fields["channel"]["kind"] == "constant"
        assert fields["size_type"]["kind"] == "stored"


@pytest.mark.asyncio
async def test_overrides_and_form():
    transport = httpx.ASGITransport(app=make_app())
    async with httpx.AsyncClient(transport=transport, base_url="http://shop.test") as client:
        response = await client.put("/feed/variants/71/overrides", json={"condition": "used"})
        assert response.status_code == 200
        assert response.json() == {"variant_id": 71, "overrides": {"condition": "used"}}

        record = (await client.get("/feed/variants/71")).json()
        assert record["condition"] == "used"

        form = await client.get("/feed/variants/71/form")
        assert form.status_code == 200
        assert '<option value="used" selected="selected">used</option>' in form.text

        rejected = await client.put("/feed/variants/71/overrides", json={"title": "Nope"})
        assert rejected.status_code == 422

        missing = await client.get("/feed/variants/999/form")
        assert missing.status_code == 404


@pytest.mark.asyncio
async def test_null_override_over_http():
    transport = httpx.ASGITransport(app=make_app())
    async with httpx.AsyncClient(transport=transport, base_url="http://shop.test") as client:
        await client.put("/feed/variants/71/overrides", json={"condition": "used"})
        response = await client.put("/feed/variants/71/overrides", json={"condition": None})
        assert response.status_code == 200
        assert response.json() == {"variant_id": 71, "overrides": {}}

        record = (await client.get("/feed/variants/71")).json()
        assert record["condition"] == "new"

        rejected = await client.put("/feed/variants/71/overrides", json={"condition": "broken"})
        assert rejected.status_code == 422


def slow_taxonomy(delay):
    def handler(_request):
        time.sleep(delay)
        return httpx.Response(200, text="# Google_Product_Taxonomy_Version\nApparel & Accessories\n")

    return TaxonomyClient(client=httpx.Client(transport=httpx.MockTransport(handler)))


@pytest.mark.asyncio
async def test_taxonomy_fetch_does_not_block_other_requests():
    exporter = FeedExporter(build_registry(make_config(), slow_taxonomy(1.0)))
    transport = httpx.ASGITransport(app=make_app(exporter))
    async with httpx.AsyncClient(transport=transport, base_url="http://shop.test") as client:
        start = time.perf_counter()

        async def fields_after_form_started():
            await asyncio.sleep(0.05)
            response = await client.get("/feed/fields")
            assert response.status_code == 200
            return time.perf_counter() - start

        form, fields_elapsed = await asyncio.gather(
            client.get("/feed/variants/71/form"),
            fields_after_form_started(),
        )

    assert form.status_code == 200
    assert "Apparel &amp; Accessories" in form.text
    assert fields_elapsed < 0.5
