"""API (snake_case) <-> storefront (camelCase) product shapes."""
import math
import re
from dataclasses import dataclass, field

DRIVE_PATTERNS = (
    re.compile(r"drive\.google\.com/uc\?id=([a-zA-Z0-9_-]+)"),
    re.compile(r"drive\.google\.com/file/d/([a-zA-Z0-9_-]+)"),
)
DRIVE_THUMBNAIL = "https://drive.google.com/thumbnail?id={}&sz=w800"


def transform_image_url(url):
    """Rewrite Google Drive share links to a displayable thumbnail URL."""
    if not url:
        return url
    for pattern in DRIVE_PATTERNS:
        match = pattern.search(url)
        if match:
            return DRIVE_THUMBNAIL.format(match.group(1))
    return url


@dataclass
class Product:
    id: int
    name: str
    slug: str
    price: float
    image: str
    category: str
    category_id: str
    subcategory: str = ""
    subcategory_id: str = ""
    description: str = None
    discount_price: float = None
    motif: str = None
    is_single_size: bool = False
    is_new: bool = False
    is_best_seller: bool = False
    is_featured: bool = False
    stock: int = 0
    sizes: list = field(default_factory=list)
    all_sizes: list = field(default_factory=list)
    created_at: str = None
    updated_at: str = None

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "description": self.description,
            "price": self.price,
            "discountPrice": self.discount_price,
            "image": self.image,
            "motif": self.motif,
            "isSingleSize": self.is_single_size,
            "isNew": self.is_new,
            "isBestSeller": self.is_best_seller,
            "isFeatured": self.is_featured,
            "stock": self.stock,
            "category": self.category,
            "categoryId": self.category_id,
            "subcategory": self.subcategory,
            "subcategoryId": self.subcategory_id,
            "sizes": list(self.sizes),
            "allSizes": list(self.all_sizes),
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


def transform_api_product(api):
    subcategory_id = api.get("subcategory_id")
    return Product(
        id=api["id"],
        name=api["name"],
        slug=api.get("slug") or "",
        description=api.get("description") or None,
        price=api["price"],
        discount_price=api.get("discount_price"),
        image=transform_image_url(api.get("image_url") or ""),
        motif=api.get("motif") or None,
        is_single_size=bool(api.get("is_single_size")),
        is_new=bool(api.get("is_new")),
        is_best_seller=bool(api.get("is_best_seller")),
        is_featured=bool(api.get("is_featured")),
        stock=api.get("stock_quantity") or 0,
        category=api.get("category_name") or "",
        category_id=str(api.get("category_id")),
        subcategory=api.get("subcategory_name") or "",
        subcategory_id=str(subcategory_id) if subcategory_id else "",
        sizes=list(api.get("available_sizes") or []),
        all_sizes=list(api.get("all_sizes") or []),
        created_at=api.get("created_at"),
        updated_at=api.get("updated_at"),
    )


def _numeric_id(value):
    text = str(value or "").strip()
    return int(text) if text.isdigit() else None


def to_api_product(product):
    """Inverse of ``transform_api_product``; numeric ids are restored."""
    return {
        "id": product.id,
        "name": product.name,
        "slug": product.slug,
        "description": product.description or "",
        "price": product.price,
        "discount_price": product.discount_price,
        "image_url": product.image,
        "motif": product.motif or "",
        "is_single_size": product.is_single_size,
        "is_new": product.is_new,
        "is_best_seller": product.is_best_seller,
        "is_featured": product.is_featured,
        "stock_quantity": product.stock,
        "category_id": _numeric_id(product.category_id),
        "category_name": product.category,
        "subcategory_id": _numeric_id(product.subcategory_id),
        "subcategory_name": product.subcategory or None,
        "available_sizes": list(product.sizes),
        "all_sizes": list(product.all_sizes),
        "created_at": product.created_at,
        "updated_at": product.updated_at,
    }


@dataclass
class FacetSummary:
    categories: list = field(default_factory=list)
    subcategories: list = field(default_factory=list)
    sizes: list = field(default_factory=list)
    price_min: float = 0
    price_max: float = 0

    @classmethod
    def from_api(cls, filters):
        filters = filters or {}
        price_range = filters.get("price_range") or {}
        return cls(
            categories=[
                {"id": str(c["id"]), "name": c["name"], "productCount": c.get("product_count", 0)}
                for c in filters.get("categories") or []
            ],
            subcategories=[
                {
                    "id": str(s["id"]),
                    "categoryId": str(s["category_id"]),
                    "name": s["name"],
                    "productCount": s.get("product_count", 0),
                }
                for s in filters.get("subcategories") or []
            ],
            sizes=list(filters.get("sizes") or []),
            price_min=price_range.get("min", 0),
            price_max=price_range.get("max", 0),
        )

    def to_dict(self):
        return {
            "categories": self.categories,
            "subcategories": self.subcategories,
            "sizes": self.sizes,
            "priceRange": {"min": self.price_min, "max": self.price_max},
        }


@dataclass
class ProductsResponse:
    products: list
    total: int
    page: int
    limit: int
    total_pages: int
    filters: FacetSummary = None


def transform_catalog_response(payload):
    total = payload.get("total") or 0
    limit = payload.get("limit") or 0
    return ProductsResponse(
        products=[transform_api_product(p) for p in payload.get("products") or []],
        total=total,
        page=payload.get("page") or 1,
        limit=limit,
        total_pages=math.ceil(total / limit) if limit else 0,
        filters=FacetSummary.from_api(payload["filters"]) if payload.get("filters") else None,
    )
