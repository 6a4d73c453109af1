"""Catalog query handler.

Turns catalog query parameters into a single parameterized statement. Every
optional filter is written as ``CAST(:param AS TYPE) IS NULL OR <predicate>``
so the SQL text never changes with the filters that happen to be present, and
``sort_by`` only ever selects between fixed ``CASE WHEN`` expressions.

The page, the total count and the facet summary are independent reads; they
run concurrently on their own connections.
"""
import logging
import math
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

from sqlalchemy import Boolean, Float, String, and_, bindparam, case, cast, distinct, func, or_, select
from sqlalchemy.orm import Session, aliased, selectinload

from models import Category, Product, ProductColor, ProductSize, Subcategory

logger = logging.getLogger(__name__)

SORT_OPTIONS = ("price_asc", "price_desc", "newest", "popular")
DEFAULT_SORT = "newest"
DEFAULT_LIMIT = 24
LEGACY_DEFAULT_LIMIT = 12
MAX_LIMIT = 100
MAX_PRICE = 999999999
SIZE_ORDER = ("S", "M", "L", "XL", "XXL", "Custom")
TRUE_VALUES = ("1", "true", "yes", "on")


class CatalogQueryError(ValueError):
    """Raised for query parameters that cannot be interpreted."""


# ----------------------------
# PARAMETER PARSING
# ----------------------------
def _split(value):
    if not value:
        return []
    return [part.strip() for part in str(value).split(",") if part.strip()]


def _id_list(value):
    # non-numeric entries are dropped, same as unmapped slugs on the client
    return [int(part) for part in _split(value) if part.isdigit()]


def _positive_int(args, name, default, maximum=None):
    raw = args.get(name)
    if raw is None or str(raw).strip() == "":
        return default
    try:
        value = int(str(raw).strip())
    except ValueError:
        raise CatalogQueryError(f"Invalid {name}: {raw}")
    if value < 1:
        raise CatalogQueryError(f"{name} must be at least 1")
    if maximum is not None:
        value = min(value, maximum)
    return value


def _price(args, name):
    raw = args.get(name)
    if raw is None or str(raw).strip() == "":
        return None
    try:
        value = float(str(raw).strip())
    except ValueError:
        raise CatalogQueryError(f"Invalid {name}: {raw}")
    if math.isnan(value) or math.isinf(value) or value < 0:
        raise CatalogQueryError(f"Invalid {name}: {raw}")
    return value


def _flag(args, name):
    return str(args.get(name) or "").strip().lower() in TRUE_VALUES


def _text(args, name):
    value = (args.get(name) or "").strip()
    return value or None


def _sort(value):
    value = (value or "").strip()
    return value if value in SORT_OPTIONS else DEFAULT_SORT


@dataclass
class CatalogQuery:
    category_ids: list = field(default_factory=list)
    subcategory_ids: list = field(default_factory=list)
    sizes: list = field(default_factory=list)
    colors: list = field(default_factory=list)
    min_price: float = None
    max_price: float = None
    search: str = None
    motif: str = None
    sort_by: str = DEFAULT_SORT
    is_new: bool = False
    is_best_seller: bool = False
    is_featured: bool = False
    page: int = 1
    limit: int = DEFAULT_LIMIT

    @classmethod
    def from_args(cls, args):
        """Parse ``/api/v1/catalog`` query parameters."""
        return cls(
            category_ids=_id_list(args.get("category_id")),
            subcategory_ids=_id_list(args.get("subcategory_id")),
            sizes=_split(args.get("sizes")),
            colors=_split(args.get("colors")),
            min_price=_price(args, "min_price"),
            max_price=_price(args, "max_price"),
            search=_text(args, "search"),
            motif=_text(args, "motif"),
            sort_by=_sort(args.get("sort_by")),
            is_new=_flag(args, "is_new"),
            is_best_seller=_flag(args, "is_best_seller"),
            is_featured=_flag(args, "is_featured"),
            page=_positive_int(args, "page", 1),
            limit=_positive_int(args, "limit", DEFAULT_LIMIT, MAX_LIMIT),
        )

    @classmethod
    def from_legacy_args(cls, args):
        """Parse the camelCase vocabulary of ``/api/products``."""
        return cls(
            category_ids=_id_list(args.get("category")),
            subcategory_ids=_id_list(args.get("subcategory")),
            sizes=_split(args.get("size")),
            min_price=_price(args, "minPrice"),
            max_price=_price(args, "maxPrice"),
            search=_text(args, "search"),
            sort_by=_sort(args.get("sortBy")),
            page=_positive_int(args, "page", 1),
            limit=_positive_int(args, "limit", LEGACY_DEFAULT_LIMIT, MAX_LIMIT),
        )

    @property
    def offset(self):
        return (self.page - 1) * self.limit

    def filter_params(self):
        """Bind values for the WHERE clause; ``None`` disables a filter."""
        colors = [c.lower() for c in self.colors]
        return {
            "category_filter": _joined(self.category_ids),
            "category_ids": list(self.category_ids),
            "subcategory_filter": _joined(self.subcategory_ids),
            "subcategory_ids": list(self.subcategory_ids),
            "size_filter": _joined(self.sizes),
            "sizes": list(self.sizes),
            "color_filter": _joined(colors),
            "colors": colors,
            "min_price": self.min_price,
            "max_price": self.max_price,
            "search_pattern": f"%{self.search}%" if self.search else None,
            "motif": self.motif,
            "is_new": True if self.is_new else None,
            "is_best_seller": True if self.is_best_seller else None,
            "is_featured": True if self.is_featured else None,
        }

    def page_params(self):
        params = self.filter_params()
        params["sort_by"] = self.sort_by
        return params


def _joined(values):
    return ",".join(str(v) for v in values) if values else None


# ----------------------------
# STATEMENT BUILDING
# ----------------------------
def _unless_null(name, type_, predicate):
    return or_(cast(bindparam(name), type_).is_(None), predicate)


def catalog_filter_clause():
    size_row = aliased(ProductSize)
    color_row = aliased(ProductColor)

    size_match = (
        select(size_row.id)
        .where(
            size_row.product_id == Product.id,
            size_row.size.in_(bindparam("sizes", expanding=True)),
            size_row.is_available.is_(True),
        )
        .correlate(Product)
        .exists()
    )
    color_match = (
        select(color_row.id)
        .where(
            color_row.product_id == Product.id,
            func.lower(color_row.color).in_(bindparam("colors", expanding=True)),
        )
        .correlate(Product)
        .exists()
    )
    pattern = bindparam("search_pattern")

    return and_(
        Product.is_active.is_(True),
        _unless_null("category_filter", String,
                     Product.category_id.in_(bindparam("category_ids", expanding=True))),
        _unless_null("subcategory_filter", String,
                     Product.subcategory_id.in_(bindparam("subcategory_ids", expanding=True))),
        Product.price >= func.coalesce(cast(bindparam("min_price"), Float), 0),
        Product.price <= func.coalesce(cast(bindparam("max_price"), Float), MAX_PRICE),
        _unless_null("size_filter", String, size_match),
        _unless_null("color_filter", String, color_match),
        _unless_null("search_pattern", String, or_(
            Product.name.ilike(pattern),
            Product.description.ilike(pattern),
            Product.motif.ilike(pattern),
        )),
        _unless_null("motif", String,
                     func.lower(Product.motif) == func.lower(cast(bindparam("motif"), String))),
        _unless_null("is_new", Boolean, Product.is_new.is_(True)),
        _unless_null("is_best_seller", Boolean, Product.is_best_seller.is_(True)),
        _unless_null("is_featured", Boolean, Product.is_featured.is_(True)),
    )


def catalog_ordering():
    sort_by = bindparam("sort_by", type_=String)
    return (
        case((sort_by == "price_asc", Product.price)).asc(),
        case((sort_by == "price_desc", Product.price)).desc(),
        case((sort_by == "newest", Product.created_at)).desc(),
        case((sort_by == "popular", Product.is_best_seller)).desc(),
        Product.created_at.desc(),
        Product.id.desc(),
    )


def page_statement(query):
    return (
        select(Product)
        .where(catalog_filter_clause())
        .options(selectinload(Product.sizes), selectinload(Product.colors))
        .order_by(*catalog_ordering())
        .limit(query.limit)
        .offset(query.offset)
    )


def count_statement():
    return select(func.count(distinct(Product.id))).where(catalog_filter_clause())


# ----------------------------
# EXECUTION
# ----------------------------
def _in_session(engine, label, work):
    start = time.perf_counter()
    try:
        with Session(engine) as session:
            result = work(session)
    except Exception as e:
        logger.error("Query error (%s): %s", label, e)
        raise
    rows = len(result) if isinstance(result, (list, dict)) else 1
    logger.info("Executed %s query in %.1fms (%d rows)", label, (time.perf_counter() - start) * 1000, rows)
    return result


def fetch_page(session, query, serializer):
    products = session.scalars(page_statement(query), query.page_params()).unique().all()
    return [serializer(p) for p in products]


def fetch_total(session, query):
    return int(session.execute(count_statement(), query.filter_params()).scalar_one())


def fetch_facets(session, query):
    params = query.filter_params()
    matching = (
        select(Product.id, Product.category_id, Product.subcategory_id, Product.price)
        .where(catalog_filter_clause())
        .subquery("matching")
    )

    categories = session.execute(
        select(Category.id, Category.name, func.count(matching.c.id))
        .outerjoin(matching, matching.c.category_id == Category.id)
        .where(Category.is_active.is_(True))
        .group_by(Category.id, Category.name, Category.display_order)
        .order_by(Category.display_order, Category.id),
        params,
    ).all()

    subcategories = session.execute(
        select(Subcategory.id, Subcategory.category_id, Subcategory.name, func.count(matching.c.id))
        .outerjoin(matching, matching.c.subcategory_id == Subcategory.id)
        .where(Subcategory.is_active.is_(True))
        .group_by(Subcategory.id, Subcategory.category_id, Subcategory.name, Subcategory.display_order)
        .order_by(Subcategory.display_order, Subcategory.id),
        params,
    ).all()

    sizes = session.execute(
        select(ProductSize.size)
        .distinct()
        .join(matching, matching.c.id == ProductSize.product_id)
        .where(ProductSize.is_available.is_(True)),
        params,
    ).scalars().all()

    low, high = session.execute(
        select(func.min(matching.c.price), func.max(matching.c.price)),
        params,
    ).one()

    return {
        "categories": [
            {"id": cid, "name": name, "product_count": int(count)}
            for cid, name, count in categories
        ],
        "subcategories": [
            {"id": sid, "category_id": cid, "name": name, "product_count": int(count)}
            for sid, cid, name, count in subcategories
        ],
        "sizes": sort_sizes(sizes),
        "price_range": {"min": low or 0, "max": high or 0},
    }


def run_catalog_query(engine, query, serializer=None, with_facets=True, workers=3):
    """Run page, count and (optionally) facets concurrently.

    ``total`` is the number of rows matching the WHERE clause before
    LIMIT/OFFSET, so ``ceil(total / limit)`` is the page count.
    """
    serializer = serializer or api_product
    with ThreadPoolExecutor(max_workers=max(1, workers)) as pool:
        page_job = pool.submit(_in_session, engine, "catalog page",
                               lambda session: fetch_page(session, query, serializer))
        count_job = pool.submit(_in_session, engine, "catalog count",
                                lambda session: fetch_total(session, query))
        facets_job = None
        if with_facets:
            facets_job = pool.submit(_in_session, engine, "catalog facets",
                                     lambda session: fetch_facets(session, query))

        result = {
            "products": page_job.result(),
            "total": count_job.result(),
            "page": query.page,
            "limit": query.limit,
        }
        if facets_job is not None:
            result["filters"] = facets_job.result()
    return result


def total_pages(total, limit):
    return math.ceil(total / limit) if limit else 0


# ----------------------------
# SERIALIZERS
# ----------------------------
def sort_sizes(sizes):
    order = {size: index for index, size in enumerate(SIZE_ORDER)}
    return sorted(sizes, key=lambda size: (order.get(size, len(order)), size))


def _iso(value):
    return value.isoformat() if value else None


def api_product(product):
    """ApiProduct: the snake_case shape of the v1 catalog."""
    return {
        "id": product.id,
        "name": product.name,
        "slug": product.slug,
        "description": product.description or "",
        "price": product.price,
        "discount_price": product.discount_price,
        "image_url": product.image_url or "",
        "motif": product.motif or "",
        "colors": [c.color for c in product.colors],
        "is_single_size": bool(product.is_single_size),
        "is_new": bool(product.is_new),
        "is_best_seller": bool(product.is_best_seller),
        "is_featured": bool(product.is_featured),
        "stock_quantity": product.stock_quantity or 0,
        "category_id": product.category_id,
        "category_name": product.category.name if product.category else "",
        "subcategory_id": product.subcategory_id,
        "subcategory_name": product.subcategory.name if product.subcategory else None,
        "available_sizes": sort_sizes([s.size for s in product.sizes if s.is_available]),
        "all_sizes": sort_sizes([s.size for s in product.sizes]),
        "created_at": _iso(product.created_at),
        "updated_at": _iso(product.updated_at),
    }


def admin_product(product):
    data = api_product(product)
    data["weight_grams"] = product.weight_grams
    data["is_active"] = bool(product.is_active)
    data["sizes"] = size_rows(product)
    data["images"] = [
        {
            "image_url": image.image_url,
            "alt_text": image.alt_text or "",
            "is_primary": bool(image.is_primary),
            "display_order": image.display_order or 0,
        }
        for image in product.images
    ]
    return data


def legacy_product(product):
    return {
        "id": product.id,
        "name": product.name,
        "slug": product.slug,
        "description": product.description,
        "price": product.price,
        "discount_price": product.discount_price,
        "image_url": product.image_url,
        "category": product.category.name if product.category else None,
        "subcategory": product.subcategory.name if product.subcategory else None,
        "motif": product.motif,
        "is_single_size": bool(product.is_single_size),
        "is_new": bool(product.is_new),
        "is_best_seller": bool(product.is_best_seller),
        "stock_quantity": product.stock_quantity or 0,
        "sizes": sort_sizes([s.size for s in product.sizes if s.is_available]),
        "created_at": _iso(product.created_at),
    }


def size_rows(product):
    order = {size: index for index, size in enumerate(SIZE_ORDER)}
    rows = sorted(product.sizes, key=lambda s: (order.get(s.size, len(order)), s.size))
    return [
        {"size": s.size, "stock_quantity": s.stock_quantity or 0, "is_available": bool(s.is_available)}
        for s in rows
    ]


def legacy_product_detail(product):
    data = legacy_product(product)
    data.update({
        "category_id": product.category_id,
        "subcategory_id": product.subcategory_id,
        "weight_grams": product.weight_grams,
        "updated_at": _iso(product.updated_at),
        "sizes": size_rows(product),
        "images": [
            {"image_url": i.image_url, "alt_text": i.alt_text, "is_primary": bool(i.is_primary)}
            for i in product.images
        ],
    })
    return data


def category_payload(category, slugs=False):
    subcategories = []
    for sub in category.subcategories:
        if not sub.is_active:
            continue
        item = {"id": sub.id, "name": sub.name, "parentId": sub.category_id}
        if slugs:
            item["slug"] = sub.slug
        subcategories.append(item)

    data = {
        "id": category.id,
        "name": category.name,
        "description": category.description,
        "image_url": category.image_url,
        "subcategories": subcategories,
    }
    if slugs:
        data["slug"] = category.slug
    return data
