from urllib.parse import parse_qs

import pytest

from filters import PRICE_RANGE_MAX, FilterState, build_query_string


def test_default_state_encodes_to_nothing():
    assert build_query_string(FilterState()) == ""
    assert build_query_string(None) == ""


def test_category_and_price_range():
    filters = FilterState(category=["batik-tulis"], price_range=(500000, 1000000))
    assert build_query_string(filters) == "category_id=3&min_price=500000&max_price=1000000"


@pytest.mark.parametrize(
    ("price_range", "expected"),
    [
        ((0, PRICE_RANGE_MAX), None),
        ((0, 500000), ("0", "500000")),
        ((250000, PRICE_RANGE_MAX), ("250000", str(PRICE_RANGE_MAX))),
        ((100.0, 200.5), ("100", "200.5")),
    ],
)
def test_price_bounds_are_sent_together(price_range, expected):
    params = parse_qs(build_query_string(FilterState(price_range=price_range)))
    if expected is None:
        assert "min_price" not in params and "max_price" not in params
    else:
        assert (params["min_price"][0], params["max_price"][0]) == expected


def test_slugs_map_to_ids_and_unknown_slugs_are_dropped():
    filters = FilterState(
        category=["ready-to-wear", "kebaya"],
        subcategory=["batik-casual", "batik-tulis-sutra", "lurik"],
    )
    params = parse_qs(build_query_string(filters))

    assert params["category_id"] == ["4"]
    assert params["subcategory_id"] == ["4,3"]


def test_only_unknown_slugs_means_no_parameter():
    assert build_query_string(FilterState(category=["kebaya"])) == ""


def test_full_parameter_order():
    filters = FilterState(
        category=["batik-tulis"],
        subcategory=["katun"],
        size=["M", "L"],
        color=["Blue"],
        price_range=(1, 2),
        search="kain parang",
        motif="Parang",
        sort_by="price_asc",
        is_new=True,
        is_best_seller=True,
        is_featured=True,
    )
    query = build_query_string(filters)
    names = [part.split("=")[0] for part in query.split("&")]

    assert names == [
        "category_id",
        "subcategory_id",
        "sizes",
        "colors",
        "min_price",
        "max_price",
        "search",
        "motif",
        "sort_by",
        "is_new",
        "is_best_seller",
        "is_featured",
    ]
    assert "search=kain+parang" in query
    assert parse_qs(query)["sizes"] == ["M,L"]


def test_false_flags_are_left_out():
    assert build_query_string(FilterState(is_new=False, sort_by=None)) == ""


def test_malformed_state_does_not_raise():
    assert build_query_string(FilterState(category=["batik-tulis"], price_range=(1,))) == "category_id=3"
    assert build_query_string("category=3") == ""


def test_from_query_params():
    filters = FilterState.from_query_params({
        "category_id": "3,4",
        "subcategory_id": "1,sutra",
        "sizes": "M, L",
        "colors": "",
        "min_price": "500000",
        "max_price": "",
        "search": "  parang ",
        "sort_by": "cheapest",
        "is_new": "true",
        "is_featured": "0",
    })

    assert filters.category == ["batik-tulis", "ready-to-wear"]
    assert filters.subcategory == ["katun", "sutra"]
    assert filters.size == ["M", "L"]
    assert filters.color == []
    assert filters.price_range == (500000, PRICE_RANGE_MAX)
    assert filters.search == "parang"
    assert filters.sort_by is None
    assert filters.is_new is True
    assert filters.is_featured is False


def test_query_params_survive_a_round_trip():
    filters = FilterState(category=["batik-tulis"], size=["S"], price_range=(0, 750000), sort_by="newest")
    hydrated = FilterState.from_query_params({k: v[0] for k, v in parse_qs(build_query_string(filters)).items()})
    assert hydrated.cache_key() == filters.cache_key()


def test_toggle_category_selects_children():
    checked = FilterState().toggle_category("batik-tulis", True)
    assert checked.category == ["batik-tulis"]
    assert checked.subcategory == ["katun", "sutra"]

    unchecked = checked.toggle_category("batik-tulis", False)
    assert unchecked.category == []
    assert unchecked.subcategory == []


def test_toggle_subcategory_auto_selects_parent():
    state = FilterState().toggle_subcategory("katun", "batik-tulis", True)
    assert state.category == []

    state = state.toggle_subcategory("sutra", "batik-tulis", True)
    assert state.category == ["batik-tulis"]

    state = state.toggle_subcategory("katun", "batik-tulis", False)
    assert state.category == ["batik-tulis"]
    assert state.subcategory == ["sutra"]

    state = state.toggle_subcategory("sutra", "batik-tulis", False)
    assert state.category == []
    assert state.subcategory == []


def test_toggles_return_new_states():
    original = FilterState()
    toggled = original.toggle_size("M").toggle_color("Red").with_price_range(0, 100)

    assert original == FilterState()
    assert toggled.size == ["M"]
    assert toggled.toggle_size("M").size == []
    assert toggled.active_filter_count == 3
    assert toggled.reset() == FilterState()


def test_cache_key_ignores_identity():
    a = FilterState(size=["M"], price_range=(0, 100))
    b = FilterState(size=["M"], price_range=(0, 100))
    assert a is not b
    assert a.cache_key() == b.cache_key()
    assert a.cache_key() != FilterState(size=["L"]).cache_key()
