import itertools
import os
import tempfile
from datetime import datetime, timedelta

import pytest

_DB_DIR = tempfile.mkdtemp(prefix="tomo-batik-tests-")
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(_DB_DIR, "test.db")
os.environ["ADMIN_TOKEN"] = "test-admin-token"
os.environ["ADMIN_EMAIL"] = "admin@tomobatik.com"
os.environ["ADMIN_PASSWORD"] = "admin123"
os.environ["APP_ENV"] = "test"

from app import app as flask_app, create_tables_and_admin, slugify  # noqa: E402
from catalog_data import CATEGORIES, SUBCATEGORIES  # noqa: E402
from models import db, Category, Subcategory, Product, ProductSize, ProductColor  # noqa: E402

ADMIN_TOKEN = "test-admin-token"


@pytest.fixture()
def app():
    flask_app.config["TESTING"] = True
    with flask_app.app_context():
        db.drop_all()
    create_tables_and_admin()

    with flask_app.app_context():
        for data in CATEGORIES:
            db.session.add(Category(is_active=True, **data))
        db.session.flush()
        for data in SUBCATEGORIES:
            db.session.add(Subcategory(is_active=True, **data))
        db.session.commit()

        yield flask_app

        db.session.remove()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def admin_headers():
    return {"Authorization": f"Bearer {ADMIN_TOKEN}"}


@pytest.fixture()
def make_product(app):
    counter = itertools.count(1)

    def _make(name=None, price=100000, category_id=3, subcategory_id=None, sizes=None, colors=(), **fields):
        n = next(counter)
        name = name or f"Batik {n}"
        fields.setdefault("stock_quantity", 10)
        fields.setdefault("created_at", datetime(2024, 1, 1) + timedelta(minutes=n))
        product = Product(
            name=name,
            slug=f"{slugify(name)}-{n}",
            price=price,
            category_id=category_id,
            subcategory_id=subcategory_id,
            **fields,
        )
        product.sizes = [
            ProductSize(size=size, stock_quantity=qty, is_available=qty > 0)
            for size, qty in (sizes or {}).items()
        ]
        product.colors = [ProductColor(color=c) for c in colors]
        db.session.add(product)
        db.session.commit()
        return product

    return _make
