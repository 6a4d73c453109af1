import pytest

from models import db, Product


PRODUCT = {
    "name": "Kemeja Batik Lereng",
    "description": "Long sleeve silk shirt",
    "price": 1250000,
    "category_id": 4,
    "subcategory_id": 3,
    "motif": "Lereng",
    "colors": ["brown", " "],
    "is_new": True,
    "stock_quantity": 6,
    "sizes": [
        {"size": "M", "stock_quantity": 4, "is_available": True},
        {"size": "L", "stock_quantity": 2},
    ],
    "images": [{"image_url": "https://example.com/lereng.jpg", "is_primary": True}],
}


def test_login_returns_token(client):
    resp = client.post("/api/v1/admin/login", json={"email": "ADMIN@tomobatik.com", "password": "admin123"})
    body = resp.get_json()

    assert resp.status_code == 200
    assert body["token"] == "test-admin-token"
    assert body["user"]["email"] == "admin@tomobatik.com"


@pytest.mark.parametrize(
    "credentials",
    [
        {"email": "admin@tomobatik.com", "password": "wrong"},
        {"email": "someone@tomobatik.com", "password": "admin123"},
    ],
)
def test_login_rejects_bad_credentials(client, credentials):
    resp = client.post("/api/v1/admin/login", json=credentials)
    assert resp.status_code == 401
    assert resp.get_json()["success"] is False


def test_login_requires_fields(client):
    assert client.post("/api/v1/admin/login", json={"email": "admin@tomobatik.com"}).status_code == 400


@pytest.mark.parametrize(
    "headers",
    [{}, {"Authorization": "Bearer nope"}, {"Authorization": "test-admin-token"}],
)
def test_admin_routes_require_token(client, headers):
    resp = client.get("/api/v1/admin/products", headers=headers)
    assert resp.status_code == 401
    assert resp.get_json()["message"] == "Authentication required"


def test_non_admin_token_is_forbidden(client, app):
    from models import User

    db.session.add(User(email="staff@tomobatik.com", password_hash="x", is_admin=False, api_token="staff-token"))
    db.session.commit()

    resp = client.get("/api/v1/admin/products", headers={"Authorization": "Bearer staff-token"})
    assert resp.status_code == 403


def test_create_product(client, admin_headers):
    resp = client.post("/api/v1/admin/products", json=PRODUCT, headers=admin_headers)
    body = resp.get_json()

    assert resp.status_code == 201
    product = body["product"]
    assert product["slug"] == "kemeja-batik-lereng"
    assert product["colors"] == ["brown"]
    assert product["all_sizes"] == ["M", "L"]
    assert product["sizes"][1] == {"size": "L", "stock_quantity": 2, "is_available": True}
    assert product["images"][0]["is_primary"] is True
    assert product["is_active"] is True

    # visible in the public catalog straight away
    catalog = client.get("/api/v1/catalog?subcategory_id=3").get_json()
    assert [p["id"] for p in catalog["products"]] == [product["id"]]


def test_create_product_duplicate_slug(client, admin_headers):
    client.post("/api/v1/admin/products", json=PRODUCT, headers=admin_headers)
    resp = client.post("/api/v1/admin/products", json=PRODUCT, headers=admin_headers)
    assert resp.status_code == 409


@pytest.mark.parametrize(
    ("changes", "status"),
    [
        ({"name": ""}, 400),
        ({"price": "lots"}, 400),
        ({"category_id": 99}, 400),
        ({"subcategory_id": 1}, 400),
        ({"stock_quantity": -1}, 400),
    ],
)
def test_create_product_validation(client, admin_headers, changes, status):
    resp = client.post("/api/v1/admin/products", json={**PRODUCT, **changes}, headers=admin_headers)
    assert resp.status_code == status


def test_list_get_update_delete(client, admin_headers, make_product):
    product = make_product("Kain Kawung", category_id=3, subcategory_id=1, sizes={"M": 1})
    hidden = make_product("Kain Lama", is_active=False)

    listing = client.get("/api/v1/admin/products/list", headers=admin_headers).get_json()
    assert listing["total"] == 2
    assert {p["id"] for p in listing["products"]} == {product.id, hidden.id}

    full = client.get("/api/v1/admin/products", headers=admin_headers).get_json()
    assert len(full["products"]) == 2

    resp = client.get(f"/api/v1/admin/products/{product.id}", headers=admin_headers)
    assert resp.get_json()["product"]["name"] == "Kain Kawung"

    resp = client.put(
        f"/api/v1/admin/products/{product.id}",
        json={"price": 99000, "is_featured": True},
        headers=admin_headers,
    )
    updated = resp.get_json()["product"]
    assert updated["price"] == 99000
    assert updated["is_featured"] is True
    assert updated["name"] == "Kain Kawung"
    assert updated["all_sizes"] == ["M"]

    resp = client.patch(
        f"/api/v1/admin/products/{product.id}",
        json={"stock_quantity": 7, "sizes": [{"size": "XL", "stock_quantity": 7}]},
        headers=admin_headers,
    )
    stocked = resp.get_json()["product"]
    assert stocked["stock_quantity"] == 7
    assert stocked["all_sizes"] == ["XL"]

    assert client.patch(
        f"/api/v1/admin/products/{product.id}", json={}, headers=admin_headers
    ).status_code == 400

    resp = client.delete(f"/api/v1/admin/products/{product.id}", headers=admin_headers)
    assert resp.status_code == 200
    db.session.expire_all()
    assert Product.query.filter_by(id=product.id).first() is None
    assert client.get(f"/api/v1/admin/products/{product.id}", headers=admin_headers).status_code == 404


def test_subcategory_crud(client, admin_headers, make_product):
    resp = client.post(
        "/api/v1/admin/subcategories",
        json={"name": "Batik Pesisir", "category_id": 3, "display_order": 3},
        headers=admin_headers,
    )
    assert resp.status_code == 201
    created = resp.get_json()["data"]
    assert created["slug"] == "batik-pesisir"
    assert created["parentId"] == 3

    assert client.post(
        "/api/v1/admin/subcategories", json={"name": "Batik Pesisir", "category_id": 3}, headers=admin_headers
    ).status_code == 409

    subs = client.get("/api/v1/admin/subcategories?category_id=3", headers=admin_headers).get_json()["data"]
    assert [s["name"] for s in subs] == ["Katun", "Sutra", "Batik Pesisir"]

    resp = client.put(
        f"/api/v1/admin/subcategories/{created['id']}",
        json={"description": "North coast batik"},
        headers=admin_headers,
    )
    assert resp.get_json()["data"]["description"] == "North coast batik"
    assert resp.get_json()["data"]["name"] == "Batik Pesisir"

    assert client.delete(f"/api/v1/admin/subcategories/{created['id']}", headers=admin_headers).status_code == 200
    assert client.get(f"/api/v1/admin/subcategories/{created['id']}", headers=admin_headers).status_code == 404


def test_subcategory_with_products_cannot_be_deleted(client, admin_headers, make_product):
    make_product(category_id=3, subcategory_id=1)

    resp = client.delete("/api/v1/admin/subcategories/1", headers=admin_headers)
    assert resp.status_code == 409


def test_admin_orders(client, admin_headers, make_product):
    product = make_product(sizes={"M": 3}, price=200000)
    placed = client.post("/api/v1/checkout", json={
        "customer": {
            "fullName": "Budi Santoso",
            "email": "budi@example.com",
            "phone": "0811111111",
            "address": "Jl. Braga 1",
            "city": "Bandung",
            "province": "Jawa Barat",
            "postalCode": "40111",
        },
        "shipping": {"courier": "TIKI", "service": "Regular"},
        "payment": {"method": "e_wallet"},
        "items": [{"id": product.id, "size": "M", "quantity": 1}],
    }).get_json()["data"]

    listing = client.get("/api/v1/admin/orders", headers=admin_headers).get_json()
    assert listing["total"] == 1
    assert listing["liveOrders"] == 1
    assert listing["totalRevenue"] == 0
    assert listing["orders"][0]["itemCount"] == 1

    resp = client.patch(
        f"/api/v1/admin/orders/{placed['orderNumber']}",
        json={"status": "shipped", "trackingNumber": "TIKI123", "notes": "Picked up"},
        headers=admin_headers,
    )
    order = resp.get_json()["data"]
    assert order["status"] == "shipped"
    assert order["shipping"]["trackingNumber"] == "TIKI123"
    assert order["statusHistory"][-1] == {
        "status": "shipped",
        "timestamp": order["statusHistory"][-1]["timestamp"],
        "notes": "Picked up",
    }
    assert "bankDetails" not in order["payment"]

    bad = client.patch(
        f"/api/v1/admin/orders/{placed['orderNumber']}", json={"status": "lost"}, headers=admin_headers
    )
    assert bad.status_code == 400
    assert client.patch("/api/v1/admin/orders/TB-0-0", json={}, headers=admin_headers).status_code == 404
