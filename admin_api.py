"""Admin product and subcategory management over the API."""
import re


def generate_slug(name):
    slug = (name or "").lower()
    slug = re.sub(r"[^a-z0-9\s-]", "", slug)
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip()


class AdminApi:
    """Thin wrapper over the ``/v1/admin`` endpoints.

    ``client`` is an ``ApiClient`` carrying the admin bearer token.
    """

    def __init__(self, client):
        self.client = client

    # ---------- products ----------
    async def get_products(self):
        data = await self.client.get("/v1/admin/products")
        products = data.get("products")
        if isinstance(products, list):
            return products
        return data.get("data") or []

    async def get_products_list(self):
        data = await self.client.get("/v1/admin/products/list")
        products = data.get("products") or []
        return {"products": products, "total": data.get("total", len(products))}

    async def get_product(self, product_id):
        data = await self.client.get(f"/v1/admin/products/{product_id}")
        return data.get("product") or data.get("data")

    async def create_product(self, payload):
        payload = dict(payload)
        if not payload.get("slug"):
            payload["slug"] = generate_slug(payload.get("name"))
        data = await self.client.post("/v1/admin/products", payload)
        return data.get("product") or data.get("data")

    async def update_product(self, product_id, payload):
        data = await self.client.put(f"/v1/admin/products/{product_id}", payload)
        return data.get("product") or data.get("data")

    async def update_stock(self, product_id, stock_quantity, sizes=None):
        payload = {"stock_quantity": stock_quantity}
        if sizes is not None:
            payload["sizes"] = sizes
        data = await self.client.patch(f"/v1/admin/products/{product_id}", payload)
        return data.get("product") or data.get("data")

    async def delete_product(self, product_id):
        await self.client.delete(f"/v1/admin/products/{product_id}")

    # ---------- categories ----------
    async def get_categories(self):
        data = await self.client.get("/v1/categories")
        return data.get("data") or []

    async def get_subcategories(self, category_id=None):
        endpoint = "/v1/admin/subcategories"
        if category_id is not None:
            endpoint = f"{endpoint}?category_id={int(category_id)}"
        data = await self.client.get(endpoint)
        return data.get("data") or []

    async def get_subcategory(self, subcategory_id):
        data = await self.client.get(f"/v1/admin/subcategories/{subcategory_id}")
        return data.get("data")

    async def create_subcategory(self, payload):
        data = await self.client.post("/v1/admin/subcategories", payload)
        return data.get("data")

    async def update_subcategory(self, subcategory_id, payload):
        data = await self.client.put(f"/v1/admin/subcategories/{subcategory_id}", payload)
        return data.get("data")

    async def delete_subcategory(self, subcategory_id):
        await self.client.delete(f"/v1/admin/subcategories/{subcategory_id}")

    # ---------- orders ----------
    async def get_orders(self):
        return await self.client.get("/v1/admin/orders")

    async def update_order(self, order_code, status=None, tracking_number=None, notes=None):
        payload = {}
        if status is not None:
            payload["status"] = status
        if tracking_number is not None:
            payload["trackingNumber"] = tracking_number
        if notes:
            payload["notes"] = notes
        data = await self.client.patch(f"/v1/admin/orders/{order_code}", payload)
        return data.get("data")
