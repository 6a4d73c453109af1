"""Category and subcategory slug <-> database id mapping.

The storefront speaks in slugs (``batik-tulis``), the catalog API in numeric
ids. Unmapped input maps to ``None``; the list helpers drop it and keep order.
"""

CATEGORY_SLUG_TO_ID = {
    "batik-tulis": 3,
    "ready-to-wear": 4,
}

SUBCATEGORY_SLUG_TO_ID = {
    "katun": 1,
    "sutra": 2,
    "batik-tulis-sutra": 3,
    "batik-casual": 4,
}

# parent category slug -> child subcategory slugs
CATEGORY_TREE = {
    "batik-tulis": ["katun", "sutra"],
    "ready-to-wear": ["batik-tulis-sutra", "batik-casual"],
}


def _as_id(value):
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    text = str(value).strip()
    return int(text) if text.isdigit() else None


class CategoryMapper:
    def __init__(self, categories, subcategories, tree=None):
        self.categories = dict(categories)
        self.subcategories = dict(subcategories)
        self.tree = {parent: list(children) for parent, children in (tree or {}).items()}
        self._category_slugs = {v: k for k, v in self.categories.items()}
        self._subcategory_slugs = {v: k for k, v in self.subcategories.items()}

    @classmethod
    def from_categories(cls, data):
        """Build a mapper from a ``/v1/categories`` payload.

        Accepts either the full ``{"data": [...]}`` response or its list.
        Entries without a slug are skipped.
        """
        if isinstance(data, dict):
            data = data.get("data") or []
        categories, subcategories, tree = {}, {}, {}
        for category in data or []:
            slug = category.get("slug")
            if not slug or category.get("id") is None:
                continue
            categories[slug] = int(category["id"])
            children = tree.setdefault(slug, [])
            for sub in category.get("subcategories") or []:
                if not sub.get("slug") or sub.get("id") is None:
                    continue
                subcategories[sub["slug"]] = int(sub["id"])
                children.append(sub["slug"])
        return cls(categories, subcategories, tree)

    def category_slug_to_id(self, slug):
        return self.categories.get(slug)

    def category_id_to_slug(self, category_id):
        return self._category_slugs.get(_as_id(category_id))

    def subcategory_slug_to_id(self, slug):
        return self.subcategories.get(slug)

    def subcategory_id_to_slug(self, subcategory_id):
        return self._subcategory_slugs.get(_as_id(subcategory_id))

    def category_slugs_to_ids(self, slugs):
        return [i for i in (self.category_slug_to_id(s) for s in slugs or []) if i is not None]

    def subcategory_slugs_to_ids(self, slugs):
        return [i for i in (self.subcategory_slug_to_id(s) for s in slugs or []) if i is not None]

    def category_ids_to_slugs(self, ids):
        return [s for s in (self.category_id_to_slug(i) for i in ids or []) if s is not None]

    def subcategory_ids_to_slugs(self, ids):
        return [s for s in (self.subcategory_id_to_slug(i) for i in ids or []) if s is not None]

    def children_of(self, category_slug):
        return list(self.tree.get(category_slug, []))

    def parent_of(self, subcategory_slug):
        for parent, children in self.tree.items():
            if subcategory_slug in children:
                return parent
        return None


default_mapper = CategoryMapper(CATEGORY_SLUG_TO_ID, SUBCATEGORY_SLUG_TO_ID, CATEGORY_TREE)


def category_slug_to_id(slug):
    return default_mapper.category_slug_to_id(slug)


def category_id_to_slug(category_id):
    return default_mapper.category_id_to_slug(category_id)


def subcategory_slug_to_id(slug):
    return default_mapper.subcategory_slug_to_id(slug)


def subcategory_id_to_slug(subcategory_id):
    return default_mapper.subcategory_id_to_slug(subcategory_id)


def category_slugs_to_ids(slugs):
    return default_mapper.category_slugs_to_ids(slugs)


def subcategory_slugs_to_ids(slugs):
    return default_mapper.subcategory_slugs_to_ids(slugs)


def category_ids_to_slugs(ids):
    return default_mapper.category_ids_to_slugs(ids)


def subcategory_ids_to_slugs(ids):
    return default_mapper.subcategory_ids_to_slugs(ids)
