from flask import Flask, request, jsonify, abort
from flask_cors import CORS
from flask_login import LoginManager, current_user
from sqlalchemy import or_, and_
from sqlalchemy.engine import URL
from werkzeug.exceptions import HTTPException, NotFound
from werkzeug.security import generate_password_hash, check_password_hash
from collections import Counter
from datetime import datetime
import hmac
import logging
import os
import re
import secrets

from models import (
    db, Category, Subcategory, Product, ProductSize, ProductColor, ProductImage,
    User, Order, OrderItem, OrderStatusHistory,
)
from catalog_query import (
    CatalogQuery, CatalogQueryError, run_catalog_query, total_pages,
    api_product, admin_product, legacy_product, legacy_product_detail, category_payload,
)
from checkout import (
    ORDER_STATUSES, validate_checkout, find_shipping_service, payment_method_name,
    generate_order_id, generate_order_number, generate_guest_token, estimated_delivery,
)

app = Flask(__name__)


# ----------------------------
# CONFIG
# ----------------------------
def _database_url():
    """DATABASE_URL wins; DB_HOST selects PostgreSQL; otherwise a local SQLite file."""
    url = os.getenv("DATABASE_URL")
    if url:
        return url
    if os.getenv("DB_HOST"):
        return URL.create(
            "postgresql+psycopg2",
            username=os.getenv("DB_USER", "postgres"),
            password=os.getenv("DB_PASSWORD", "") or None,
            host=os.getenv("DB_HOST"),
            port=int(os.getenv("DB_PORT", "5432")),
            database=os.getenv("DB_NAME", "tomo_batik"),
        ).render_as_string(hide_password=False)
    return "sqlite:///tomo_batik.db"


def _app_env():
    """APP_ENV, falling back to NODE_ENV for deployments that still set it."""
    return os.getenv("APP_ENV") or os.getenv("NODE_ENV", "development")


app.config["SECRET_KEY"] = os.getenv("SECRET_KEY", "change-this-secret-key")
app.config["SQLALCHEMY_DATABASE_URI"] = _database_url()
app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False

app.config["APP_ENV"] = _app_env()
app.config["PORT"] = int(os.getenv("PORT", "3001"))
app.config["FRONTEND_URL"] = os.getenv("FRONTEND_URL", "http://localhost:5173")
app.config["CATALOG_QUERY_WORKERS"] = int(os.getenv("CATALOG_QUERY_WORKERS", "3"))

# Admin account created on first start
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@tomobatik.com")
app.config["ADMIN_PASSWORD"] = os.getenv("ADMIN_PASSWORD", "admin123")
app.config["ADMIN_TOKEN"] = os.getenv("ADMIN_TOKEN")

# Shown to customers paying by bank transfer
app.config["BANK_DETAILS"] = {
    "bankName": os.getenv("BANK_NAME", "BCA"),
    "accountNumber": os.getenv("BANK_ACCOUNT_NUMBER", "1234567890"),
    "accountName": os.getenv("BANK_ACCOUNT_NAME", "PT Tomo Batik Indonesia"),
}

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
app.logger.setLevel(os.getenv("LOG_LEVEL", "INFO"))

db.init_app(app)

login_manager = LoginManager(app)

CORS(
    app,
    resources={r"/api/*": {"origins": [app.config["FRONTEND_URL"]]}},
    supports_credentials=True,
    allow_headers=["Content-Type", "Authorization"],
    methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
)


# ----------------------------
# LOGIN MANAGER
# ----------------------------
@login_manager.user_loader
def load_user(user_id):
    return db.session.get(User, int(user_id))


@login_manager.request_loader
def load_user_from_request(req):
    """Admin clients authenticate with ``Authorization: Bearer <token>``."""
    header = req.headers.get("Authorization", "")
    if not header.startswith("Bearer "):
        return None
    token = header[len("Bearer "):].strip()
    if not token:
        return None
    return User.query.filter_by(api_token=token).first()


@login_manager.unauthorized_handler
def unauthorized():
    return jsonify({"success": False, "message": "Authentication required"}), 401


def admin_required(fn):
    from functools import wraps

    @wraps(fn)
    def wrapper(*args, **kwargs):
        if not current_user.is_authenticated:
            return login_manager.unauthorized()
        if not current_user.is_admin:
            return jsonify({"success": False, "message": "Admin access only"}), 403
        return fn(*args, **kwargs)
    return wrapper


# ----------------------------
# REQUEST HOOKS & ERRORS
# ----------------------------
@app.before_request
def log_request():
    app.logger.info("%s %s", request.method, request.path)


@app.errorhandler(CatalogQueryError)
def handle_bad_query(e):
    return jsonify({"message": str(e)}), 400


@app.errorhandler(HTTPException)
def handle_http_error(e):
    message = "Endpoint not found" if e.description == NotFound.description else e.description
    return jsonify({"message": message}), e.code


@app.errorhandler(Exception)
def handle_server_error(e):
    db.session.rollback()
    app.logger.exception("Server error: %s", e)
    body = {"message": "Internal server error"}
    if app.config["APP_ENV"] == "development":
        body["error"] = str(e)
    return jsonify(body), 500


# ----------------------------
# HELPERS
# ----------------------------
def slugify(text):
    text = (text or "").strip().lower()
    return re.sub(r"[^a-z0-9]+", "-", text).strip("-")


def _json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        abort(400, description="Request body must be a JSON object")
    return data


def _int_field(data, key, minimum=None, required=True):
    value = data.get(key)
    if value is None or value == "":
        if required:
            abort(400, description=f"{key} is required")
        return None
    if isinstance(value, bool):
        abort(400, description=f"{key} must be a whole number")
    try:
        number = int(value)
    except (TypeError, ValueError):
        abort(400, description=f"{key} must be a whole number")
    if minimum is not None and number < minimum:
        abort(400, description=f"{key} must be at least {minimum}")
    return number


def _price_field(data, key, required=True):
    value = data.get(key)
    if value is None or value == "":
        if required:
            abort(400, description=f"{key} is required")
        return None
    if isinstance(value, bool):
        abort(400, description=f"{key} must be a number")
    try:
        number = float(value)
    except (TypeError, ValueError):
        abort(400, description=f"{key} must be a number")
    if number < 0:
        abort(400, description=f"{key} cannot be negative")
    return number


def _active_product_or_404(product_id):
    product = db.session.get(Product, product_id)
    if product is None or not product.is_active:
        abort(404, description="Product not found")
    return product


def _order_by_code(code):
    return Order.query.filter(or_(Order.order_number == code, Order.order_id == code)).first()


def _token_matches(order, token):
    return bool(token) and hmac.compare_digest(order.guest_token.encode(), token.encode())


def _add_history(order, status, notes=None):
    db.session.add(OrderStatusHistory(order_id=order.id, status=status, notes=notes))


def order_payload(order, include_token=False):
    shipping = {
        "courier": order.shipping_courier,
        "service": order.shipping_service,
        "duration": order.shipping_duration,
        "cost": order.shipping_cost,
        "trackingNumber": order.tracking_number,
        "estimatedDelivery": estimated_delivery(order.shipping_duration, order.created_at),
    }
    payment = {
        "method": order.payment_method,
        "methodName": payment_method_name(order.payment_method),
        "status": order.payment_status,
        "paidAt": order.paid_at.isoformat() if order.paid_at else None,
    }
    if order.payment_method == "bank_transfer":
        payment["bankDetails"] = dict(app.config["BANK_DETAILS"])

    data = {
        "orderId": order.order_id,
        "orderNumber": order.order_number,
        "status": order.status,
        "customer": {
            "fullName": order.customer_name,
            "email": order.customer_email,
            "phone": order.customer_phone,
            "address": order.address,
            "city": order.city,
            "province": order.province,
            "postalCode": order.postal_code,
            "notes": order.notes,
        },
        "shipping": shipping,
        "payment": payment,
        "items": [
            {
                "id": item.product_db_id,
                "name": item.product_name,
                "category": item.product_category,
                "price": item.product_price,
                "image": item.product_image,
                "size": item.product_size,
                "quantity": item.quantity,
                "totalPrice": item.product_price * item.quantity,
            }
            for item in order.items
        ],
        "subtotal": order.subtotal,
        "shippingCost": order.shipping_cost,
        "discount": order.discount or 0,
        "total": order.total,
        "orderDate": order.created_at.strftime("%A, %B %d, %Y"),
        "createdAt": order.created_at.isoformat(),
        "updatedAt": order.updated_at.isoformat() if order.updated_at else None,
        "statusHistory": [
            {"status": h.status, "timestamp": h.created_at.isoformat(), "notes": h.notes}
            for h in order.history
        ],
    }
    if include_token:
        data["guestToken"] = order.guest_token
    return data


# ----------------------------
# HEALTH
# ----------------------------
@app.route("/api/health")
def health():
    return jsonify({
        "status": "ok",
        "timestamp": datetime.utcnow().isoformat() + "Z",
        "service": "Tomo Batik API",
    })


# ----------------------------
# CATALOG (v1)
# ----------------------------
@app.route("/api/v1/catalog")
def catalog():
    query = CatalogQuery.from_args(request.args)
    result = run_catalog_query(db.engine, query, workers=app.config["CATALOG_QUERY_WORKERS"])
    return jsonify(result)


@app.route("/api/v1/products/<int:product_id>")
def catalog_product(product_id):
    product = _active_product_or_404(product_id)
    return jsonify({"success": True, "product": api_product(product)})


@app.route("/api/v1/categories")
def catalog_categories():
    categories = (
        Category.query.filter_by(is_active=True)
        .order_by(Category.display_order, Category.id)
        .all()
    )
    return jsonify({"data": [category_payload(c, slugs=True) for c in categories]})


# ----------------------------
# PRODUCTS (example API)
# ----------------------------
@app.route("/api/products")
def list_products():
    query = CatalogQuery.from_legacy_args(request.args)
    result = run_catalog_query(
        db.engine,
        query,
        serializer=legacy_product,
        with_facets=False,
        workers=app.config["CATALOG_QUERY_WORKERS"],
    )
    return jsonify({
        "data": result["products"],
        "meta": {
            "total": result["total"],
            "page": query.page,
            "limit": query.limit,
            "totalPages": total_pages(result["total"], query.limit),
        },
    })


@app.route("/api/products/featured")
def featured_products():
    products = (
        Product.query.filter(
            Product.is_active.is_(True),
            or_(Product.is_best_seller.is_(True), Product.is_featured.is_(True)),
        )
        .order_by(Product.is_best_seller.desc(), Product.created_at.desc())
        .limit(8)
        .all()
    )
    return jsonify({"data": [legacy_product(p) for p in products]})


@app.route("/api/products/new-arrivals")
def new_arrivals():
    products = (
        Product.query.filter(Product.is_active.is_(True), Product.is_new.is_(True))
        .order_by(Product.created_at.desc())
        .limit(8)
        .all()
    )
    return jsonify({"data": [legacy_product(p) for p in products]})


@app.route("/api/products/<int:product_id>")
def product_detail(product_id):
    product = _active_product_or_404(product_id)
    return jsonify({"data": legacy_product_detail(product)})


@app.route("/api/products/<int:product_id>/related")
def related_products(product_id):
    product = db.session.get(Product, product_id)
    if product is None:
        abort(404, description="Product not found")

    related = (
        Product.query.filter(
            Product.is_active.is_(True),
            Product.id != product.id,
            Product.category_id == product.category_id,
        )
        .order_by(db.func.random())
        .limit(4)
        .all()
    )
    return jsonify({"data": [legacy_product(p) for p in related]})


# ----------------------------
# CATEGORIES (example API)
# ----------------------------
@app.route("/api/categories")
def list_categories():
    categories = (
        Category.query.filter_by(is_active=True)
        .order_by(Category.display_order, Category.id)
        .all()
    )
    return jsonify({"data": [category_payload(c) for c in categories]})


@app.route("/api/categories/stats")
def category_stats():
    rows = (
        db.session.query(
            Category.id,
            Category.name,
            Subcategory.id,
            Subcategory.name,
            db.func.count(Product.id),
        )
        .outerjoin(Subcategory, Subcategory.category_id == Category.id)
        .outerjoin(
            Product,
            and_(
                Product.category_id == Category.id,
                or_(Product.subcategory_id == Subcategory.id, Subcategory.id.is_(None)),
                Product.is_active.is_(True),
            ),
        )
        .filter(Category.is_active.is_(True))
        .group_by(
            Category.id, Category.name, Category.display_order,
            Subcategory.id, Subcategory.name, Subcategory.display_order,
        )
        .order_by(Category.display_order, Subcategory.display_order)
        .all()
    )
    return jsonify({"data": [
        {
            "category_id": category_id,
            "category_name": category_name,
            "subcategory_id": subcategory_id,
            "subcategory_name": subcategory_name,
            "product_count": int(count),
        }
        for category_id, category_name, subcategory_id, subcategory_name, count in rows
    ]})


@app.route("/api/categories/<int:category_id>")
def category_detail(category_id):
    category = Category.query.filter_by(id=category_id, is_active=True).first()
    if category is None:
        abort(404, description="Category not found")
    return jsonify({"data": category_payload(category)})


# ----------------------------
# CHECKOUT
# ----------------------------
@app.route("/api/v1/checkout", methods=["POST"])
def checkout():
    payload = request.get_json(silent=True)
    errors = validate_checkout(payload)
    if errors:
        return jsonify({
            "success": False,
            "message": "Please fill in all required fields",
            "errors": errors,
        }), 400

    customer = payload["customer"]
    shipping = payload["shipping"]
    method = payload["payment"]["method"]
    courier, service = find_shipping_service(shipping.get("courier"), shipping.get("service"))

    # ---------- price every line from the catalog ----------
    requested = Counter()
    for item in payload["items"]:
        requested[(int(item["id"]), str(item.get("size") or "").strip())] += int(item["quantity"])

    lines = []
    subtotal = 0
    for item in payload["items"]:
        product = db.session.get(Product, int(item["id"]), with_for_update=True)
        if product is None or not product.is_active:
            return jsonify({"success": False, "message": f"Product {item['id']} is not available"}), 400

        quantity = int(item["quantity"])
        size = str(item.get("size") or "").strip()
        size_row = None
        if size:
            size_row = (
                ProductSize.query.filter_by(product_id=product.id, size=size)
                .with_for_update()
                .first()
            )
            if size_row is None or not size_row.is_available:
                return jsonify({
                    "success": False,
                    "message": f"Size {size} of {product.name} is not available",
                }), 409
            in_stock = size_row.stock_quantity or 0
        else:
            in_stock = product.stock_quantity or 0

        # duplicate lines of the same product and size share one stock count
        if in_stock < requested[(product.id, size)]:
            return jsonify({
                "success": False,
                "message": f"Only {in_stock} left of {product.name}" + (f" ({size})" if size else ""),
            }), 409

        lines.append((product, size_row, size, quantity))
        subtotal += product.effective_price * quantity

    # ---------- create order ----------
    now = datetime.utcnow()
    order_number = generate_order_number(now)
    while Order.query.filter_by(order_number=order_number).first() is not None:
        order_number = generate_order_number(now)

    order = Order(
        order_id=generate_order_id(),
        order_number=order_number,
        guest_token=generate_guest_token(),
        status="awaiting_payment",
        payment_status="pending",
        customer_name=customer["fullName"].strip(),
        customer_email=customer["email"].strip(),
        customer_phone=str(customer.get("phone") or "").strip(),
        address=customer.get("address"),
        city=customer.get("city"),
        province=customer.get("province"),
        postal_code=str(customer.get("postalCode") or ""),
        notes=customer.get("notes") or None,
        shipping_courier=courier["name"],
        shipping_service=service["name"],
        shipping_duration=service["duration"],
        shipping_cost=service["price"],
        payment_method=method,
        subtotal=subtotal,
        total=subtotal + service["price"],
        created_at=now,
    )
    db.session.add(order)
    db.session.flush()

    for product, size_row, size, quantity in lines:
        db.session.add(OrderItem(
            order_id=order.id,
            product_db_id=product.id,
            product_name=product.name,
            product_category=product.category.name if product.category else None,
            product_price=product.effective_price,
            product_image=product.image_url,
            product_size=size or None,
            quantity=quantity,
        ))
        if size_row is not None:
            size_row.stock_quantity = (size_row.stock_quantity or 0) - quantity
            if size_row.stock_quantity <= 0:
                size_row.is_available = False
        product.stock_quantity = max(0, (product.stock_quantity or 0) - quantity)

    _add_history(order, order.status, "Order placed. Awaiting payment.")
    db.session.commit()

    app.logger.info("Order %s placed: %d line(s), total %s", order.order_number, len(lines), order.total)
    return jsonify({
        "success": True,
        "message": "Order placed successfully",
        "data": order_payload(order, include_token=True),
    }), 201


# ----------------------------
# ORDER LOOKUP
# ----------------------------
@app.route("/api/v1/orders/track", methods=["POST"])
def track_order():
    data = _json_body()
    code = str(data.get("orderCode") or "").strip()
    email = str(data.get("email") or "").strip().lower()
    if not code or not email:
        abort(400, description="Order code and email are required")

    order = _order_by_code(code)
    if order is None or order.customer_email.strip().lower() != email:
        abort(404, description="Order not found or email does not match")
    return jsonify({"success": True, "data": order_payload(order, include_token=True)})


@app.route("/api/v1/orders/<order_code>")
def get_order(order_code):
    token = (request.args.get("token") or "").strip()
    if not token:
        abort(401, description="Order token is required")

    order = _order_by_code(order_code)
    if order is None or not _token_matches(order, token):
        abort(404, description="Order not found")
    return jsonify({"success": True, "data": order_payload(order)})


@app.route("/api/v1/orders/<order_code>/confirm-payment", methods=["POST"])
def confirm_payment(order_code):
    data = request.get_json(silent=True) or {}
    token = str(data.get("token") or request.args.get("token") or "").strip()
    if not token:
        abort(401, description="Order token is required")

    order = _order_by_code(order_code)
    if order is None or not _token_matches(order, token):
        abort(404, description="Order not found")

    # already paid? just acknowledge
    if order.payment_status == "paid":
        return jsonify({"success": True, "message": "Payment already confirmed", "alreadyPaid": True})

    if order.status != "awaiting_payment":
        abort(409, description=f"Order cannot be confirmed while {order.status}")

    order.status = "payment_confirmed"
    order.payment_status = "paid"
    order.paid_at = datetime.utcnow()
    _add_history(order, order.status, "Payment confirmed by customer.")
    db.session.commit()

    app.logger.info("Payment confirmed for order %s", order.order_number)
    return jsonify({
        "success": True,
        "message": "Payment confirmed",
        "data": {"orderNumber": order.order_number, "status": order.status},
    })


# ----------------------------
# ADMIN AUTH
# ----------------------------
@app.route("/api/v1/admin/login", methods=["POST"])
def admin_login():
    data = _json_body()
    email = str(data.get("email") or "").strip().lower()
    password = str(data.get("password") or "")
    if not email or not password:
        abort(400, description="Email and password are required")

    user = User.query.filter(db.func.lower(User.email) == email).first()
    if not user or not user.is_admin or not check_password_hash(user.password_hash, password):
        return jsonify({"success": False, "message": "Invalid email or password"}), 401

    if not user.api_token:
        user.api_token = secrets.token_urlsafe(32)
        db.session.commit()

    return jsonify({
        "success": True,
        "token": user.api_token,
        "user": {"id": user.id, "email": user.email, "name": user.name, "initials": user.initials},
    })


# ----------------------------
# ADMIN PRODUCTS
# ----------------------------
def _apply_product_payload(product, data, partial=False):
    if not partial or "name" in data:
        name = str(data.get("name") or "").strip()
        if not name:
            abort(400, description="Product name is required")
        product.name = name

    if data.get("slug") or not product.slug:
        slug = slugify(data.get("slug") or product.name)
        if not slug:
            abort(400, description="Product slug is required")
        taken = Product.query.filter(Product.slug == slug)
        if product.id is not None:
            taken = taken.filter(Product.id != product.id)
        if taken.first() is not None:
            abort(409, description=f"Slug '{slug}' is already in use")
        product.slug = slug

    for key in ("description", "motif", "image_url"):
        if key in data:
            setattr(product, key, str(data.get(key) or "").strip() or None)

    if not partial or "price" in data:
        product.price = _price_field(data, "price")
    if "discount_price" in data:
        product.discount_price = _price_field(data, "discount_price", required=False)

    if not partial or "category_id" in data:
        category = db.session.get(Category, _int_field(data, "category_id"))
        if category is None:
            abort(400, description="Unknown category")
        product.category_id = category.id

    if "subcategory_id" in data:
        product.subcategory_id = _int_field(data, "subcategory_id", required=False)
    if product.subcategory_id is not None:
        subcategory = db.session.get(Subcategory, product.subcategory_id)
        if subcategory is None or subcategory.category_id != product.category_id:
            abort(400, description="Subcategory does not belong to the selected category")

    for flag in ("is_single_size", "is_new", "is_best_seller", "is_featured", "is_active"):
        if flag in data:
            setattr(product, flag, bool(data[flag]))

    if not partial or "stock_quantity" in data:
        product.stock_quantity = _int_field(data, "stock_quantity", minimum=0, required=False) or 0
    if "weight_grams" in data:
        product.weight_grams = _int_field(data, "weight_grams", minimum=0, required=False)

    if "sizes" in data:
        product.sizes = _size_rows(data.get("sizes"))
    if "colors" in data:
        product.colors = [
            ProductColor(color=str(color).strip())
            for color in (data.get("colors") or [])
            if str(color).strip()
        ]
    if "images" in data:
        product.images = [
            ProductImage(
                image_url=image["image_url"],
                alt_text=image.get("alt_text") or None,
                is_primary=bool(image.get("is_primary")),
                display_order=image.get("display_order") or 0,
            )
            for image in (data.get("images") or [])
            if isinstance(image, dict) and image.get("image_url")
        ]


def _size_rows(sizes):
    rows = []
    for entry in sizes or []:
        if not isinstance(entry, dict) or not str(entry.get("size") or "").strip():
            abort(400, description="Each size needs a size label")
        stock = _int_field(entry, "stock_quantity", minimum=0, required=False) or 0
        rows.append(ProductSize(
            size=str(entry["size"]).strip(),
            stock_quantity=stock,
            is_available=bool(entry.get("is_available", stock > 0)),
        ))
    return rows


def _admin_product_or_404(product_id):
    product = db.session.get(Product, product_id)
    if product is None:
        abort(404, description="Product not found")
    return product


@app.route("/api/v1/admin/products")
@admin_required
def admin_list_products():
    products = Product.query.order_by(Product.created_at.desc(), Product.id.desc()).all()
    return jsonify({"success": True, "products": [admin_product(p) for p in products]})


@app.route("/api/v1/admin/products/list")
@admin_required
def admin_list_products_minimal():
    products = Product.query.order_by(Product.created_at.desc(), Product.id.desc()).all()
    return jsonify({
        "success": True,
        "products": [
            {
                "id": p.id,
                "name": p.name,
                "slug": p.slug,
                "price": p.price,
                "discount_price": p.discount_price,
                "image_url": p.image_url,
                "category_name": p.category.name if p.category else None,
                "subcategory_name": p.subcategory.name if p.subcategory else None,
                "stock_quantity": p.stock_quantity or 0,
                "is_new": bool(p.is_new),
                "is_best_seller": bool(p.is_best_seller),
                "is_featured": bool(p.is_featured),
                "is_active": bool(p.is_active),
            }
            for p in products
        ],
        "total": len(products),
    })


@app.route("/api/v1/admin/products/<int:product_id>")
@admin_required
def admin_get_product(product_id):
    return jsonify({"success": True, "product": admin_product(_admin_product_or_404(product_id))})


@app.route("/api/v1/admin/products", methods=["POST"])
@admin_required
def admin_create_product():
    data = _json_body()
    product = Product(is_active=True)
    _apply_product_payload(product, data)
    db.session.add(product)
    db.session.commit()
    app.logger.info("Product %s created by %s", product.slug, current_user.email)
    return jsonify({"success": True, "message": "Product created", "product": admin_product(product)}), 201


@app.route("/api/v1/admin/products/<int:product_id>", methods=["PUT"])
@admin_required
def admin_update_product(product_id):
    product = _admin_product_or_404(product_id)
    _apply_product_payload(product, _json_body(), partial=True)
    db.session.commit()
    return jsonify({"success": True, "message": "Product updated", "product": admin_product(product)})


@app.route("/api/v1/admin/products/<int:product_id>", methods=["PATCH"])
@admin_required
def admin_update_stock(product_id):
    product = _admin_product_or_404(product_id)
    data = _json_body()
    product.stock_quantity = _int_field(data, "stock_quantity", minimum=0)
    if "sizes" in data:
        product.sizes = _size_rows(data.get("sizes"))
    db.session.commit()
    return jsonify({"success": True, "message": "Stock updated", "product": admin_product(product)})


@app.route("/api/v1/admin/products/<int:product_id>", methods=["DELETE"])
@admin_required
def admin_delete_product(product_id):
    product = _admin_product_or_404(product_id)
    db.session.delete(product)
    db.session.commit()
    app.logger.info("Product %s deleted by %s", product_id, current_user.email)
    return jsonify({"success": True, "message": "Product deleted"})


# ----------------------------
# ADMIN SUBCATEGORIES
# ----------------------------
def subcategory_payload(sub):
    return {
        "id": sub.id,
        "name": sub.name,
        "slug": sub.slug,
        "parentId": sub.category_id,
        "description": sub.description,
        "display_order": sub.display_order or 0,
        "is_active": bool(sub.is_active),
    }


def _subcategory_or_404(subcategory_id):
    sub = db.session.get(Subcategory, subcategory_id)
    if sub is None:
        abort(404, description="Subcategory not found")
    return sub


def _apply_subcategory_payload(sub, data, partial=False):
    if not partial or "name" in data:
        name = str(data.get("name") or "").strip()
        if not name:
            abort(400, description="Subcategory name is required")
        sub.name = name
        slug = slugify(name)
        taken = Subcategory.query.filter(Subcategory.slug == slug)
        if sub.id is not None:
            taken = taken.filter(Subcategory.id != sub.id)
        if taken.first() is not None:
            abort(409, description=f"Subcategory '{name}' already exists")
        sub.slug = slug
    if not partial or "category_id" in data:
        category = db.session.get(Category, _int_field(data, "category_id"))
        if category is None:
            abort(400, description="Unknown category")
        sub.category_id = category.id
    if "description" in data:
        sub.description = str(data.get("description") or "").strip() or None
    if "display_order" in data:
        sub.display_order = _int_field(data, "display_order", minimum=0, required=False) or 0
    if "is_active" in data:
        sub.is_active = bool(data["is_active"])


@app.route("/api/v1/admin/subcategories")
@admin_required
def admin_list_subcategories():
    query = Subcategory.query
    category_id = request.args.get("category_id", type=int)
    if category_id is not None:
        query = query.filter_by(category_id=category_id)
    subs = query.order_by(Subcategory.category_id, Subcategory.display_order, Subcategory.id).all()
    return jsonify({"data": [subcategory_payload(s) for s in subs]})


@app.route("/api/v1/admin/subcategories/<int:subcategory_id>")
@admin_required
def admin_get_subcategory(subcategory_id):
    return jsonify({"data": subcategory_payload(_subcategory_or_404(subcategory_id))})


@app.route("/api/v1/admin/subcategories", methods=["POST"])
@admin_required
def admin_create_subcategory():
    sub = Subcategory(is_active=True)
    _apply_subcategory_payload(sub, _json_body())
    db.session.add(sub)
    db.session.commit()
    return jsonify({"data": subcategory_payload(sub)}), 201


@app.route("/api/v1/admin/subcategories/<int:subcategory_id>", methods=["PUT"])
@admin_required
def admin_update_subcategory(subcategory_id):
    sub = _subcategory_or_404(subcategory_id)
    _apply_subcategory_payload(sub, _json_body(), partial=True)
    db.session.commit()
    return jsonify({"data": subcategory_payload(sub)})


@app.route("/api/v1/admin/subcategories/<int:subcategory_id>", methods=["DELETE"])
@admin_required
def admin_delete_subcategory(subcategory_id):
    sub = _subcategory_or_404(subcategory_id)
    if Product.query.filter_by(subcategory_id=sub.id).count():
        abort(409, description="Subcategory still has products")
    db.session.delete(sub)
    db.session.commit()
    return jsonify({"message": "Subcategory deleted"})


# ----------------------------
# ADMIN ORDERS
# ----------------------------
@app.route("/api/v1/admin/orders")
@admin_required
def admin_list_orders():
    orders = Order.query.order_by(Order.created_at.desc(), Order.id.desc()).all()
    total_revenue = sum(o.total for o in orders if o.payment_status == "paid")
    live_orders = [o for o in orders if o.status not in ("delivered", "cancelled")]
    return jsonify({
        "success": True,
        "orders": [
            {
                "orderId": o.order_id,
                "orderNumber": o.order_number,
                "status": o.status,
                "paymentStatus": o.payment_status,
                "customerName": o.customer_name,
                "total": o.total,
                "itemCount": sum(i.quantity for i in o.items),
                "firstItemImage": o.items[0].product_image if o.items else None,
                "createdAt": o.created_at.isoformat(),
            }
            for o in orders
        ],
        "total": len(orders),
        "totalRevenue": total_revenue,
        "liveOrders": len(live_orders),
    })


@app.route("/api/v1/admin/orders/<order_code>", methods=["PATCH"])
@admin_required
def admin_update_order(order_code):
    order = _order_by_code(order_code)
    if order is None:
        abort(404, description="Order not found")

    data = _json_body()
    status = data.get("status")
    notes = str(data.get("notes") or "").strip() or None

    if status is not None:
        if status not in ORDER_STATUSES:
            abort(400, description=f"Unknown status: {status}")
        if status != order.status:
            order.status = status
            _add_history(order, status, notes)
    if "trackingNumber" in data:
        order.tracking_number = str(data.get("trackingNumber") or "").strip() or None

    db.session.commit()
    return jsonify({"success": True, "message": "Order updated", "data": order_payload(order)})


# ----------------------------
# INIT
# ----------------------------
def create_tables_and_admin():
    with app.app_context():
        db.create_all()

        admin = User.query.filter_by(email=ADMIN_EMAIL).first()

        if not admin:
            admin = User(
                email=ADMIN_EMAIL,
                name="Store Admin",
                password_hash=generate_password_hash(app.config["ADMIN_PASSWORD"]),
                is_admin=True,
                api_token=app.config["ADMIN_TOKEN"] or secrets.token_urlsafe(32),
            )
            db.session.add(admin)
            db.session.commit()
            app.logger.info("Admin user created with email %s", ADMIN_EMAIL)
        elif app.config["ADMIN_TOKEN"] and admin.api_token != app.config["ADMIN_TOKEN"]:
            admin.api_token = app.config["ADMIN_TOKEN"]
            db.session.commit()


create_tables_and_admin()


if __name__ == "__main__":
    app.run(port=app.config["PORT"], debug=app.config["APP_ENV"] == "development")
