# seed_catalog.py
# Run: python3 seed_catalog.py
#
# Loads catalog_data.py into the database
# - categories/subcategories are inserted with their fixed ids
# - products get sizes, colours and a primary image
# - safe to re-run: existing slugs are skipped

from sqlalchemy import text

from app import app, db, slugify
from models import Category, Subcategory, Product, ProductSize, ProductColor, ProductImage
from catalog_data import CATEGORIES, SUBCATEGORIES, PRODUCTS

DRY_RUN = False          # True = just log what would be inserted
SKIP_IF_EXISTS = True    # True = do not update existing rows


def _unique_slug(base):
    """
    Ensure slug is unique in Product table. If taken, append -2, -3, ...
    """
    base = base or "product"
    candidate = base
    i = 2
    while Product.query.filter_by(slug=candidate).first() is not None:
        candidate = f"{base}-{i}"
        i += 1
    return candidate


def _seed_categories():
    created = 0
    for data in CATEGORIES:
        if db.session.get(Category, data["id"]) is None:
            db.session.add(Category(is_active=True, **data))
            created += 1
    db.session.flush()

    for data in SUBCATEGORIES:
        if db.session.get(Subcategory, data["id"]) is None:
            db.session.add(Subcategory(is_active=True, **data))
            created += 1
    db.session.flush()
    _sync_sequences()
    return created


def _sync_sequences():
    # explicit ids leave PostgreSQL serial sequences behind
    if db.engine.dialect.name != "postgresql":
        return
    for table in ("categories", "subcategories"):
        db.session.execute(text(
            f"SELECT setval(pg_get_serial_sequence('{table}', 'id'), "
            f"(SELECT COALESCE(MAX(id), 1) FROM {table}))"
        ))


def _build_product(item, slug):
    sizes = item.get("sizes") or {}
    stock = item.get("stock_quantity")
    if stock is None:
        stock = sum(sizes.values())

    product = Product(
        name=item["name"],
        slug=slug,
        description=item.get("description") or "",
        price=float(item["price"]),
        discount_price=item.get("discount_price"),
        image_url=item.get("image_url") or "",
        category_id=item["category_id"],
        subcategory_id=item.get("subcategory_id"),
        motif=item.get("motif"),
        is_single_size=bool(item.get("is_single_size")),
        is_new=bool(item.get("is_new")),
        is_best_seller=bool(item.get("is_best_seller")),
        is_featured=bool(item.get("is_featured")),
        is_active=True,
        stock_quantity=stock,
        weight_grams=item.get("weight_grams"),
    )
    product.sizes = [
        ProductSize(size=size, stock_quantity=qty, is_available=qty > 0)
        for size, qty in sizes.items()
    ]
    product.colors = [ProductColor(color=c) for c in item.get("colors") or []]
    if product.image_url:
        product.images = [ProductImage(image_url=product.image_url, alt_text=product.name, is_primary=True)]
    return product


def main():
    with app.app_context():
        categories_created = _seed_categories()

        created = 0
        skipped = 0

        for item in PRODUCTS:
            base = slugify(item.get("slug") or item["name"])

            if SKIP_IF_EXISTS and Product.query.filter_by(slug=base).first():
                skipped += 1
                continue

            product = _build_product(item, _unique_slug(base))

            if DRY_RUN:
                app.logger.info(
                    "[DRY] %s | %s | category %s | Rp %s | stock %s",
                    product.slug, product.name, product.category_id, product.price, product.stock_quantity,
                )
            else:
                db.session.add(product)
                created += 1

        if DRY_RUN:
            db.session.rollback()
        else:
            db.session.commit()

        app.logger.info("Seeding finished")
        app.logger.info("Categories/subcategories inserted: %d", categories_created)
        app.logger.info("Products inserted: %d", created)
        app.logger.info("Products skipped: %d", skipped)


if __name__ == "__main__":
    main()
