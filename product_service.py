"""Catalog calls used by the storefront pages."""
from urllib.parse import urlencode

from filters import FilterState, build_query_string
from transform import transform_api_product, transform_catalog_response

DEFAULT_PAGE_SIZE = 24
SHOWCASE_LIMIT = 8
RELATED_LIMIT = 4


class ProductService:
    def __init__(self, client):
        self.client = client

    async def get_products(self, filters=None, page=1, limit=DEFAULT_PAGE_SIZE):
        """One catalog page as a ``ProductsResponse``."""
        query = urlencode({"page": page, "limit": limit})
        filter_query = build_query_string(filters)
        if filter_query:
            query = f"{query}&{filter_query}"
        payload = await self.client.get(f"/v1/catalog?{query}")
        return transform_catalog_response(payload)

    async def get_product_by_id(self, product_id):
        payload = await self.client.get(f"/v1/products/{product_id}")
        return transform_api_product(payload["product"])

    async def get_products_by_category(self, category):
        return await self.get_products(FilterState(category=[category]))

    async def get_products_by_subcategory(self, subcategory):
        return await self.get_products(FilterState(subcategory=[subcategory]))

    async def search_products(self, term):
        return await self.get_products(FilterState(search=term))

    async def _showcase(self, **params):
        params.setdefault("limit", SHOWCASE_LIMIT)
        payload = await self.client.get(f"/v1/catalog?{urlencode(params)}")
        return [transform_api_product(p) for p in payload.get("products") or []]

    async def get_featured_products(self):
        return await self._showcase(is_featured="true")

    async def get_new_arrivals(self):
        return await self._showcase(is_new="true", sort_by="newest")

    async def get_best_sellers(self):
        return await self._showcase(is_best_seller="true")

    async def get_related_products(self, product_id, category_id):
        payload = await self.client.get(
            f"/v1/catalog?{urlencode({'category_id': category_id, 'limit': RELATED_LIMIT + 1})}"
        )
        related = [p for p in payload.get("products") or [] if p["id"] != product_id]
        return [transform_api_product(p) for p in related[:RELATED_LIMIT]]

    async def get_categories(self):
        """Categories with their subcategories and product counts, from the catalog facets."""
        payload = await self.client.get("/v1/catalog?limit=1")
        facets = payload.get("filters") or {}
        subcategories = facets.get("subcategories") or []
        return [
            {
                "id": str(category["id"]),
                "name": category["name"],
                "productCount": category.get("product_count", 0),
                "subcategories": [
                    {
                        "id": str(sub["id"]),
                        "name": sub["name"],
                        "parentId": str(sub["category_id"]),
                        "productCount": sub.get("product_count", 0),
                    }
                    for sub in subcategories
                    if sub["category_id"] == category["id"]
                ],
            }
            for category in facets.get("categories") or []
        ]

    async def get_category_tree(self):
        """The ``/v1/categories`` payload, including slugs."""
        payload = await self.client.get("/v1/categories")
        return payload.get("data") or []
