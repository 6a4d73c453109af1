import pytest

from transform import (
    FacetSummary,
    to_api_product,
    transform_api_product,
    transform_catalog_response,
    transform_image_url,
)

API_PRODUCT = {
    "id": 42,
    "name": "Kemeja Parang",
    "slug": "kemeja-parang",
    "description": "",
    "price": 450000,
    "discount_price": 399000,
    "image_url": "https://drive.google.com/file/d/abc_123-X/view?usp=sharing",
    "motif": "Parang",
    "is_single_size": False,
    "is_new": True,
    "is_best_seller": False,
    "is_featured": True,
    "stock_quantity": 5,
    "category_id": 4,
    "category_name": "Ready to Wear",
    "subcategory_id": None,
    "subcategory_name": None,
    "available_sizes": ["M", "L"],
    "all_sizes": ["S", "M", "L"],
    "created_at": "2024-01-01T00:00:00",
    "updated_at": "2024-01-02T00:00:00",
}


IMAGE_URLS = [
    ("https://drive.google.com/uc?id=XYZ789", "https://drive.google.com/thumbnail?id=XYZ789&sz=w800"),
    ("https://drive.google.com/file/d/abc_123-X/view", "https://drive.google.com/thumbnail?id=abc_123-X&sz=w800"),
    ("https://cdn.example.com/kain.jpg", "https://cdn.example.com/kain.jpg"),
    ("", ""),
    (None, None),
    ("https://drive.google.com/thumbnail?id=XYZ789&sz=w800", "https://drive.google.com/thumbnail?id=XYZ789&sz=w800"),
]


@pytest.mark.parametrize(("url", "expected"), IMAGE_URLS)
def test_transform_image_url(url, expected):
    assert transform_image_url(url) == expected


@pytest.mark.parametrize(("url", "expected"), IMAGE_URLS)
def test_transform_image_url_is_idempotent(url, expected):
    assert transform_image_url(transform_image_url(url)) == transform_image_url(url)


def test_transform_api_product():
    product = transform_api_product(API_PRODUCT)

    assert product.image == "https://drive.google.com/thumbnail?id=abc_123-X&sz=w800"
    assert product.description is None
    assert product.category_id == "4"
    assert product.subcategory_id == ""
    assert product.subcategory == ""
    assert product.sizes == ["M", "L"]
    assert product.stock == 5

    data = product.to_dict()
    assert data["discountPrice"] == 399000
    assert data["isFeatured"] is True
    assert data["allSizes"] == ["S", "M", "L"]


def test_to_api_product_restores_numeric_ids():
    product = transform_api_product({**API_PRODUCT, "subcategory_id": 4, "subcategory_name": "Batik Casual"})
    api = to_api_product(product)

    assert api["category_id"] == 4
    assert api["subcategory_id"] == 4
    assert api["subcategory_name"] == "Batik Casual"
    assert api["available_sizes"] == ["M", "L"]
    assert to_api_product(transform_api_product(API_PRODUCT))["subcategory_id"] is None


def test_transform_catalog_response():
    payload = {
        "products": [API_PRODUCT],
        "total": 25,
        "page": 2,
        "limit": 12,
        "filters": {
            "categories": [{"id": 4, "name": "Ready to Wear", "product_count": 25}],
            "subcategories": [{"id": 4, "category_id": 4, "name": "Batik Casual", "product_count": 3}],
            "sizes": ["M"],
            "price_range": {"min": 100000, "max": 900000},
        },
    }
    response = transform_catalog_response(payload)

    assert response.total_pages == 3
    assert response.page == 2
    assert response.products[0].id == 42
    assert response.filters.to_dict() == {
        "categories": [{"id": "4", "name": "Ready to Wear", "productCount": 25}],
        "subcategories": [{"id": "4", "categoryId": "4", "name": "Batik Casual", "productCount": 3}],
        "sizes": ["M"],
        "priceRange": {"min": 100000, "max": 900000},
    }


def test_transform_empty_catalog_response():
    response = transform_catalog_response({"products": [], "total": 0, "page": 1, "limit": 24})
    assert response.products == []
    assert response.total_pages == 0
    assert response.filters is None
    assert FacetSummary.from_api(None).to_dict()["priceRange"] == {"min": 0, "max": 0}


@pytest.mark.parametrize(
    "api",
    [
        API_PRODUCT,
        {
            **API_PRODUCT,
            "description": "Kemeja katun motif parang",
            "subcategory_id": 4,
            "subcategory_name": "Batik Casual",
            "discount_price": None,
        },
        {**API_PRODUCT, "image_url": "https://cdn.example.com/kain.jpg"},
    ],
)
def test_product_round_trip_only_rewrites_the_image(api):
    expected = {**api, "image_url": transform_image_url(api["image_url"])}
    assert to_api_product(transform_api_product(api)) == expected
