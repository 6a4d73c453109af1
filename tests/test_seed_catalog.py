import seed_catalog
from catalog_data import PRODUCTS
from models import Product


def test_seed_inserts_catalog_once(app, client):
    seed_catalog.main()
    seed_catalog.main()

    assert Product.query.count() == len(PRODUCTS)
    assert len({p.slug for p in Product.query.all()}) == len(PRODUCTS)

    body = client.get("/api/v1/catalog?limit=100").get_json()
    assert body["total"] == len(PRODUCTS)
    assert {c["id"] for c in body["filters"]["categories"]} == {3, 4}


def test_dry_run_writes_nothing(app, monkeypatch):
    monkeypatch.setattr(seed_catalog, "DRY_RUN", True)
    seed_catalog.main()
    assert Product.query.count() == 0


def test_unique_slug_appends_counter(app, make_product):
    make_product("Kain Kawung")
    taken = Product.query.one().slug

    assert seed_catalog._unique_slug(taken) == f"{taken}-2"
    assert seed_catalog._unique_slug("") == "product"
