import pytest

import category_mapping
from category_mapping import CategoryMapper


@pytest.mark.parametrize(
    ("slug", "expected"),
    [("batik-tulis", 3), ("ready-to-wear", 4), ("kebaya", None), ("", None)],
)
def test_category_slug_to_id(slug, expected):
    assert category_mapping.category_slug_to_id(slug) == expected


@pytest.mark.parametrize(
    ("value", "expected"),
    [(1, "katun"), ("2", "sutra"), (" 3 ", "batik-tulis-sutra"), (4, "batik-casual"), (9, None), ("x", None), (True, None)],
)
def test_subcategory_id_to_slug(value, expected):
    assert category_mapping.subcategory_id_to_slug(value) == expected


def test_batch_helpers_drop_unmapped_and_keep_order():
    assert category_mapping.category_slugs_to_ids(["ready-to-wear", "nope", "batik-tulis"]) == [4, 3]
    assert category_mapping.subcategory_slugs_to_ids(["sutra", "katun"]) == [2, 1]
    assert category_mapping.category_ids_to_slugs([3, 99, "4"]) == ["batik-tulis", "ready-to-wear"]
    assert category_mapping.subcategory_ids_to_slugs(None) == []


def test_tree_lookups():
    mapper = category_mapping.default_mapper
    assert mapper.children_of("ready-to-wear") == ["batik-tulis-sutra", "batik-casual"]
    assert mapper.parent_of("sutra") == "batik-tulis"
    assert mapper.parent_of("lurik") is None


def test_mapper_from_categories_payload():
    payload = {
        "data": [
            {
                "id": 7,
                "slug": "kebaya",
                "subcategories": [
                    {"id": 11, "slug": "kebaya-kartini"},
                    {"id": 12, "slug": None},
                ],
            },
            {"id": 8, "name": "No slug"},
        ]
    }
    mapper = CategoryMapper.from_categories(payload)

    assert mapper.category_slug_to_id("kebaya") == 7
    assert mapper.category_id_to_slug(8) is None
    assert mapper.subcategory_id_to_slug("11") == "kebaya-kartini"
    assert mapper.children_of("kebaya") == ["kebaya-kartini"]
    assert CategoryMapper.from_categories(payload["data"]).categories == {"kebaya": 7}
