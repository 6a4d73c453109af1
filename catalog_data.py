"""
Initial batik catalog.
Category and subcategory ids are fixed: the storefront maps its slugs to them.
"""

# ======================================================
# 1. CATEGORIES & SUBCATEGORIES (fixed ids)
# ======================================================

CATEGORIES = [
    {
        "id": 3,
        "name": "Batik Tulis",
        "slug": "batik-tulis",
        "description": "Hand-drawn batik cloth, waxed with a canting.",
        "display_order": 1,
    },
    {
        "id": 4,
        "name": "Ready to Wear",
        "slug": "ready-to-wear",
        "description": "Shirts and dresses tailored from batik.",
        "display_order": 2,
    },
]

SUBCATEGORIES = [
    {"id": 1, "category_id": 3, "name": "Katun", "slug": "katun", "display_order": 1},
    {"id": 2, "category_id": 3, "name": "Sutra", "slug": "sutra", "display_order": 2},
    {"id": 3, "category_id": 4, "name": "Batik Tulis Sutra", "slug": "batik-tulis-sutra", "display_order": 1},
    {"id": 4, "category_id": 4, "name": "Batik Casual", "slug": "batik-casual", "display_order": 2},
]

# ======================================================
# 2. PROFILES
# ======================================================

TULIS_KATUN = dict(
    category_id=3,
    subcategory_id=1,
    is_single_size=True,
    weight_grams=350,
)

TULIS_SUTRA = dict(
    category_id=3,
    subcategory_id=2,
    is_single_size=True,
    weight_grams=250,
)

RTW_SUTRA = dict(
    category_id=4,
    subcategory_id=3,
    sizes={"S": 2, "M": 4, "L": 4, "XL": 2},
    weight_grams=300,
)

RTW_CASUAL = dict(
    category_id=4,
    subcategory_id=4,
    sizes={"S": 5, "M": 8, "L": 8, "XL": 5, "XXL": 3},
    weight_grams=280,
)

# ======================================================
# 3. PRODUCTS
# ======================================================

PRODUCTS = [
    # Batik tulis, cotton
    {
        "name": "Kain Batik Tulis Parang Rusak",
        "price": 850000,
        "motif": "Parang",
        "colors": ["brown"],
        "stock_quantity": 6,
        "is_best_seller": True,
        "description": "Classic parang rusak drawn on primissima cotton, natural soga dye.",
        "image_url": "https://drive.google.com/uc?id=1parangRusakKatun",
        **TULIS_KATUN,
    },
    {
        "name": "Kain Batik Tulis Kawung Klasik",
        "price": 650000,
        "motif": "Kawung",
        "colors": ["brown", "blue"],
        "stock_quantity": 8,
        "description": "Kawung motif in indigo and soga on fine cotton.",
        "image_url": "https://drive.google.com/uc?id=1kawungKlasikKatun",
        **TULIS_KATUN,
    },
    {
        "name": "Kain Batik Tulis Truntum",
        "price": 720000,
        "discount_price": 640000,
        "motif": "Truntum",
        "colors": ["brown"],
        "stock_quantity": 4,
        "is_new": True,
        "description": "Truntum blossoms, traditionally worn by the parents of the bride.",
        "image_url": "https://drive.google.com/file/d/1truntumKatun/view",
        **TULIS_KATUN,
    },
    # Batik tulis, silk
    {
        "name": "Kain Batik Tulis Sutra Mega Mendung",
        "price": 1450000,
        "motif": "Mega Mendung",
        "colors": ["blue"],
        "stock_quantity": 3,
        "is_featured": True,
        "description": "Cirebon cloud motif on silk, seven shades of blue.",
        "image_url": "https://drive.google.com/uc?id=1megaMendungSutra",
        **TULIS_SUTRA,
    },
    {
        "name": "Kain Batik Tulis Sutra Sekar Jagad",
        "price": 1850000,
        "motif": "Sekar Jagad",
        "colors": ["red", "brown"],
        "stock_quantity": 2,
        "is_best_seller": True,
        "is_featured": True,
        "description": "A map of flowers on silk, each panel drawn by hand.",
        "image_url": "https://drive.google.com/uc?id=1sekarJagadSutra",
        **TULIS_SUTRA,
    },
    # Ready to wear, batik tulis silk
    {
        "name": "Kemeja Batik Tulis Sutra Lereng",
        "price": 1250000,
        "motif": "Lereng",
        "colors": ["brown"],
        "is_new": True,
        "description": "Long sleeve silk shirt cut from a single lereng cloth.",
        "image_url": "https://drive.google.com/uc?id=1kemejaLerengSutra",
        **RTW_SUTRA,
    },
    {
        "name": "Dress Batik Tulis Sutra Sidomukti",
        "price": 1650000,
        "discount_price": 1490000,
        "motif": "Sidomukti",
        "colors": ["brown", "red"],
        "is_featured": True,
        "description": "Wrap dress in sidomukti silk batik.",
        "image_url": "https://drive.google.com/uc?id=1dressSidomukti",
        **RTW_SUTRA,
    },
    # Ready to wear, casual
    {
        "name": "Kemeja Batik Casual Parang Modern",
        "price": 385000,
        "motif": "Parang",
        "colors": ["blue"],
        "is_best_seller": True,
        "description": "Short sleeve cotton shirt with a modern parang print.",
        "image_url": "https://drive.google.com/uc?id=1kemejaParangModern",
        **RTW_CASUAL,
    },
    {
        "name": "Blouse Batik Casual Kawung",
        "price": 295000,
        "motif": "Kawung",
        "colors": ["green"],
        "is_new": True,
        "description": "Relaxed cotton blouse with a small kawung repeat.",
        "image_url": "https://drive.google.com/uc?id=1blouseKawung",
        **RTW_CASUAL,
    },
    {
        "name": "Outer Batik Casual Mega Mendung",
        "price": 450000,
        "motif": "Mega Mendung",
        "colors": ["blue", "red"],
        "description": "Lightweight outer with mega mendung trim.",
        "image_url": "https://drive.google.com/uc?id=1outerMegaMendung",
        **RTW_CASUAL,
    },
]
