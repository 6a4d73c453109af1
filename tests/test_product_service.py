import asyncio

import httpx
import pytest

from api_client import ApiClient, ApiError
from filters import FilterState
from product_service import ProductService


@pytest.fixture()
def service(client):
    """A ProductService whose HTTP calls are answered by the Flask test client."""

    def handler(request):
        resp = client.open(
            request.url.raw_path.decode("ascii"),
            method=request.method,
            data=request.content,
            content_type=request.headers.get("content-type"),
        )
        return httpx.Response(resp.status_code, content=resp.data, headers={"content-type": resp.content_type})

    return ProductService(ApiClient("http://localhost/api", transport=httpx.MockTransport(handler)))


def _run(coro):
    return asyncio.run(coro)


def test_get_products_with_filters(service, make_product):
    for i in range(3):
        make_product(price=500000 + i, category_id=3, subcategory_id=1, sizes={"M": 1})
    make_product(price=800000, category_id=4, subcategory_id=4, sizes={"M": 1})

    filters = FilterState().toggle_category("batik-tulis", True).with_price_range(400000, 600000)
    response = _run(service.get_products(filters, page=1, limit=2))

    assert response.total == 3
    assert response.total_pages == 2
    assert len(response.products) == 2
    assert all(p.category_id == "3" for p in response.products)
    assert response.filters.price_min == 500000


def test_get_product_by_id(service, make_product):
    product = make_product("Kain Truntum", motif="Truntum")

    found = _run(service.get_product_by_id(product.id))
    assert found.name == "Kain Truntum"
    assert found.motif == "Truntum"

    with pytest.raises(ApiError) as exc:
        _run(service.get_product_by_id(9999))
    assert exc.value.status == 404


def test_showcase_lists(service, make_product):
    featured = make_product(is_featured=True)
    older = make_product(is_new=True)
    newer = make_product(is_new=True)
    best = make_product(is_best_seller=True)

    assert [p.id for p in _run(service.get_featured_products())] == [featured.id]
    assert [p.id for p in _run(service.get_new_arrivals())] == [newer.id, older.id]
    assert [p.id for p in _run(service.get_best_sellers())] == [best.id]


def test_related_products_exclude_the_product(service, make_product):
    product = make_product(category_id=4)
    for _ in range(5):
        make_product(category_id=4)

    related = _run(service.get_related_products(product.id, 4))
    assert len(related) == 4
    assert product.id not in {p.id for p in related}


def test_categories_from_facets(service, make_product):
    make_product(category_id=3, subcategory_id=2)

    categories = _run(service.get_categories())
    assert [c["name"] for c in categories] == ["Batik Tulis", "Ready to Wear"]
    assert categories[0]["productCount"] == 1
    assert [s["name"] for s in categories[0]["subcategories"]] == ["Katun", "Sutra"]
    assert categories[0]["subcategories"][1]["productCount"] == 1

    tree = _run(service.get_category_tree())
    assert tree[1]["slug"] == "ready-to-wear"


def test_search_products(service, make_product):
    match = make_product("Selendang Sidomukti")
    make_product("Kemeja Lereng")

    response = _run(service.search_products("sidomukti"))
    assert [p.id for p in response.products] == [match.id]
