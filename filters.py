"""Catalog filter state and its query-string encoding."""
import json
import logging
from dataclasses import asdict, dataclass, field, replace
from urllib.parse import urlencode

from category_mapping import (
    CATEGORY_TREE,
    category_ids_to_slugs,
    category_slugs_to_ids,
    subcategory_ids_to_slugs,
    subcategory_slugs_to_ids,
)

logger = logging.getLogger(__name__)

PRICE_RANGE_MAX = 10_000_000
FULL_PRICE_RANGE = (0, PRICE_RANGE_MAX)
SORT_OPTIONS = ("price_asc", "price_desc", "newest", "popular")
TRUE_VALUES = ("1", "true", "yes", "on")


@dataclass(frozen=True)
class FilterState:
    """What the shopper has selected. Defaults are all no-ops.

    Toggle methods return a new state rather than changing this one, so two
    states can be compared through ``cache_key()``.
    """

    category: list = field(default_factory=list)
    subcategory: list = field(default_factory=list)
    size: list = field(default_factory=list)
    color: list = field(default_factory=list)
    price_range: tuple = FULL_PRICE_RANGE
    search: str = None
    motif: str = None
    sort_by: str = None
    is_new: bool = False
    is_best_seller: bool = False
    is_featured: bool = False

    def to_dict(self):
        data = asdict(self)
        data["price_range"] = list(self.price_range)
        return data

    def cache_key(self):
        return json.dumps(self.to_dict(), sort_keys=True)

    @classmethod
    def from_query_params(cls, params):
        """Hydrate from URL parameters such as ``category_id=3&sizes=M,L``."""
        get = params.get

        def _list(name):
            value = get(name) or ""
            return [part.strip() for part in value.split(",") if part.strip()]

        def _slugs(name, to_slugs):
            slugs = []
            for part in _list(name):
                if part.isdigit():
                    slugs.extend(to_slugs([int(part)]))
                else:
                    slugs.append(part)
            return slugs

        def _bound(name, default):
            value = get(name)
            if value is None or str(value).strip() == "":
                return default
            try:
                number = float(value)
            except ValueError:
                return default
            return int(number) if number.is_integer() else number

        sort_by = get("sort_by")
        return cls(
            category=_slugs("category_id", category_ids_to_slugs),
            subcategory=_slugs("subcategory_id", subcategory_ids_to_slugs),
            size=_list("sizes"),
            color=_list("colors"),
            price_range=(_bound("min_price", 0), _bound("max_price", PRICE_RANGE_MAX)),
            search=(get("search") or "").strip() or None,
            motif=(get("motif") or "").strip() or None,
            sort_by=sort_by if sort_by in SORT_OPTIONS else None,
            is_new=(get("is_new") or "").lower() in TRUE_VALUES,
            is_best_seller=(get("is_best_seller") or "").lower() in TRUE_VALUES,
            is_featured=(get("is_featured") or "").lower() in TRUE_VALUES,
        )

    # ---------- toggling ----------
    def toggle_category(self, slug, checked, tree=None):
        """Checking a category selects all of its subcategories; unchecking drops them."""
        children = (tree or CATEGORY_TREE).get(slug, [])
        if checked:
            category = self.category if slug in self.category else [*self.category, slug]
            subcategory = list(self.subcategory)
            for child in children:
                if child not in subcategory:
                    subcategory.append(child)
        else:
            category = [c for c in self.category if c != slug]
            subcategory = [s for s in self.subcategory if s not in children]
        return replace(self, category=category, subcategory=subcategory)

    def toggle_subcategory(self, slug, parent, checked, tree=None):
        """Selecting every child selects the parent; clearing every child clears it."""
        siblings = (tree or CATEGORY_TREE).get(parent, [])
        category = list(self.category)
        if checked:
            subcategory = self.subcategory if slug in self.subcategory else [*self.subcategory, slug]
            if siblings and all(s in subcategory for s in siblings) and parent not in category:
                category.append(parent)
        else:
            subcategory = [s for s in self.subcategory if s != slug]
            if not any(s in subcategory for s in siblings):
                category = [c for c in category if c != parent]
        return replace(self, category=category, subcategory=list(subcategory))

    def toggle_size(self, size):
        return replace(self, size=_toggled(self.size, size))

    def toggle_color(self, color):
        return replace(self, color=_toggled(self.color, color))

    def with_price_range(self, low, high):
        return replace(self, price_range=(low, high))

    def reset(self):
        return FilterState()

    @property
    def active_filter_count(self):
        count = len(self.category) + len(self.subcategory) + len(self.size) + len(self.color)
        if tuple(self.price_range) != FULL_PRICE_RANGE:
            count += 1
        return count


def _toggled(values, value):
    return [v for v in values if v != value] if value in values else [*values, value]


def _number(value):
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def build_query_string(filters):
    """Encode ``filters`` as catalog query parameters. Never raises.

    No-op values are left out; the price bounds are sent together whenever the
    range is narrower than the full range.
    """
    if filters is None:
        return ""

    params = []
    try:
        category_ids = category_slugs_to_ids(filters.category)
        if category_ids:
            params.append(("category_id", ",".join(str(i) for i in category_ids)))

        subcategory_ids = subcategory_slugs_to_ids(filters.subcategory)
        if subcategory_ids:
            params.append(("subcategory_id", ",".join(str(i) for i in subcategory_ids)))

        if filters.size:
            params.append(("sizes", ",".join(str(s) for s in filters.size)))
        if filters.color:
            params.append(("colors", ",".join(str(c) for c in filters.color)))

        price_range = filters.price_range
        if price_range and tuple(price_range) != FULL_PRICE_RANGE:
            low, high = price_range
            params.append(("min_price", _number(low)))
            params.append(("max_price", _number(high)))

        if filters.search:
            params.append(("search", filters.search))
        if filters.motif:
            params.append(("motif", filters.motif))
        if filters.sort_by:
            params.append(("sort_by", filters.sort_by))

        if filters.is_new:
            params.append(("is_new", "true"))
        if filters.is_best_seller:
            params.append(("is_best_seller", "true"))
        if filters.is_featured:
            params.append(("is_featured", "true"))
    except (AttributeError, TypeError, ValueError) as e:
        logger.warning("Ignoring malformed filter state: %s", e)

    return urlencode(params)
