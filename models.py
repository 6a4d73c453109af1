from datetime import datetime

from flask_login import UserMixin
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


# ----------------------------
# CATALOG
# ----------------------------
class Category(db.Model):
    __tablename__ = "categories"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(150), nullable=False)
    slug = db.Column(db.String(150), unique=True, nullable=False)
    description = db.Column(db.Text)
    image_url = db.Column(db.String(500))
    display_order = db.Column(db.Integer, default=0)
    is_active = db.Column(db.Boolean, default=True)

    subcategories = db.relationship(
        "Subcategory",
        backref="category",
        lazy=True,
        order_by="Subcategory.display_order",
    )


class Subcategory(db.Model):
    __tablename__ = "subcategories"

    id = db.Column(db.Integer, primary_key=True)
    category_id = db.Column(db.Integer, db.ForeignKey("categories.id"), nullable=False)
    name = db.Column(db.String(150), nullable=False)
    slug = db.Column(db.String(150), unique=True, nullable=False)
    description = db.Column(db.Text)
    display_order = db.Column(db.Integer, default=0)
    is_active = db.Column(db.Boolean, default=True)


class Product(db.Model):
    __tablename__ = "products"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    slug = db.Column(db.String(255), unique=True, nullable=False)
    description = db.Column(db.Text)

    price = db.Column(db.Float, nullable=False)
    discount_price = db.Column(db.Float)
    image_url = db.Column(db.String(500))

    category_id = db.Column(db.Integer, db.ForeignKey("categories.id"), nullable=False)
    subcategory_id = db.Column(db.Integer, db.ForeignKey("subcategories.id"))

    motif = db.Column(db.String(150))
    is_single_size = db.Column(db.Boolean, default=False)
    is_new = db.Column(db.Boolean, default=False)
    is_best_seller = db.Column(db.Boolean, default=False)
    is_featured = db.Column(db.Boolean, default=False)
    is_active = db.Column(db.Boolean, default=True)

    stock_quantity = db.Column(db.Integer, default=0)
    weight_grams = db.Column(db.Integer)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    category = db.relationship("Category", lazy="joined")
    subcategory = db.relationship("Subcategory", lazy="joined")
    sizes = db.relationship("ProductSize", backref="product", lazy=True, cascade="all, delete-orphan")
    colors = db.relationship("ProductColor", backref="product", lazy=True, cascade="all, delete-orphan")
    images = db.relationship(
        "ProductImage",
        backref="product",
        lazy=True,
        cascade="all, delete-orphan",
        order_by=lambda: (ProductImage.is_primary.desc(), ProductImage.display_order),
    )

    @property
    def effective_price(self):
        if self.discount_price is not None and self.discount_price > 0:
            return self.discount_price
        return self.price


class ProductSize(db.Model):
    __tablename__ = "product_sizes"

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False)
    size = db.Column(db.String(20), nullable=False)
    stock_quantity = db.Column(db.Integer, default=0)
    is_available = db.Column(db.Boolean, default=True)


class ProductColor(db.Model):
    __tablename__ = "product_colors"

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False)
    color = db.Column(db.String(50), nullable=False)


class ProductImage(db.Model):
    __tablename__ = "product_images"

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False)
    image_url = db.Column(db.String(500), nullable=False)
    alt_text = db.Column(db.String(255))
    is_primary = db.Column(db.Boolean, default=False)
    display_order = db.Column(db.Integer, default=0)


# ----------------------------
# USERS
# ----------------------------
class User(UserMixin, db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(150), unique=True, nullable=False)
    name = db.Column(db.String(150))
    password_hash = db.Column(db.String(255), nullable=False)
    is_admin = db.Column(db.Boolean, default=False)
    api_token = db.Column(db.String(255), unique=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def get_id(self):
        return str(self.id)

    @property
    def initials(self):
        if self.name:
            parts = self.name.strip().split()
            if len(parts) == 1:
                return parts[0][:2].upper()
            return (parts[0][0] + parts[-1][0]).upper()
        return (self.email[:2] if self.email else "AD").upper()


# ----------------------------
# ORDERS
# ----------------------------
class Order(db.Model):
    __tablename__ = "orders"

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.String(36), unique=True, nullable=False)
    order_number = db.Column(db.String(40), unique=True, nullable=False)
    guest_token = db.Column(db.String(100), nullable=False)

    # pending, awaiting_payment, payment_confirmed, processing, shipped, delivered, cancelled
    status = db.Column(db.String(50), default="awaiting_payment")

    customer_name = db.Column(db.String(150), nullable=False)
    customer_email = db.Column(db.String(150), nullable=False)
    customer_phone = db.Column(db.String(30))
    address = db.Column(db.String(255))
    city = db.Column(db.String(150))
    province = db.Column(db.String(150))
    postal_code = db.Column(db.String(20))
    notes = db.Column(db.Text)

    shipping_courier = db.Column(db.String(50))
    shipping_service = db.Column(db.String(50))
    shipping_duration = db.Column(db.String(50))
    shipping_cost = db.Column(db.Float, default=0)
    tracking_number = db.Column(db.String(100))

    payment_method = db.Column(db.String(50))
    payment_status = db.Column(db.String(50), default="pending")  # pending / paid / failed / expired
    paid_at = db.Column(db.DateTime)

    subtotal = db.Column(db.Float, nullable=False)
    discount = db.Column(db.Float, default=0)
    total = db.Column(db.Float, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    items = db.relationship("OrderItem", backref="order", lazy=True, cascade="all, delete-orphan")
    history = db.relationship(
        "OrderStatusHistory",
        backref="order",
        lazy=True,
        cascade="all, delete-orphan",
        order_by="OrderStatusHistory.id",
    )


class OrderItem(db.Model):
    __tablename__ = "order_items"

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False)

    # plain id, not a foreign key: items keep their snapshot after a product is deleted
    product_db_id = db.Column(db.Integer)
    product_name = db.Column(db.String(255), nullable=False)
    product_category = db.Column(db.String(150))
    product_price = db.Column(db.Float, nullable=False)
    product_image = db.Column(db.String(500))
    product_size = db.Column(db.String(50))
    quantity = db.Column(db.Integer, default=1)


class OrderStatusHistory(db.Model):
    __tablename__ = "order_status_history"

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False)
    status = db.Column(db.String(50), nullable=False)
    notes = db.Column(db.String(255))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
