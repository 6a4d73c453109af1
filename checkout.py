"""Shipping/payment tables and checkout validation shared by the API and its client."""
import re
import secrets
import uuid
from datetime import datetime, timedelta

SHIPPING_OPTIONS = [
    {
        "id": "jnt",
        "name": "JNT",
        "services": [
            {"id": "jnt_reg", "name": "Regular", "price": 15000, "duration": "3-5 days"},
            {"id": "jnt_exp", "name": "Express", "price": 25000, "duration": "1-2 days"},
        ],
    },
    {
        "id": "jne",
        "name": "JNE",
        "services": [
            {"id": "jne_reg", "name": "REG", "price": 18000, "duration": "3-5 days"},
            {"id": "jne_yes", "name": "YES", "price": 28000, "duration": "1 day"},
            {"id": "jne_oke", "name": "OKE", "price": 12000, "duration": "4-6 days"},
        ],
    },
    {
        "id": "tiki",
        "name": "TIKI",
        "services": [
            {"id": "tiki_reg", "name": "Regular", "price": 16000, "duration": "3-4 days"},
            {"id": "tiki_ons", "name": "ONS", "price": 30000, "duration": "Next day"},
        ],
    },
]

PAYMENT_METHODS = {
    "bank_transfer": "Bank Transfer",
    "e_wallet": "E-Wallet",
    "credit_card": "Credit Card",
}

ORDER_STATUSES = (
    "pending",
    "awaiting_payment",
    "payment_confirmed",
    "processing",
    "shipped",
    "delivered",
    "cancelled",
)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

REQUIRED_CUSTOMER_FIELDS = (
    ("fullName", "Full name is required"),
    ("email", "Email is required"),
    ("phone", "Phone number is required"),
    ("address", "Address is required"),
    ("province", "Province is required"),
    ("city", "City is required"),
    ("postalCode", "Postal code is required"),
)


def find_shipping_service(courier, service):
    """Return (courier, service) for a courier/service given by id or name."""
    courier = (courier or "").strip().lower()
    service = (service or "").strip().lower()
    for option in SHIPPING_OPTIONS:
        if courier not in (option["id"], option["name"].lower()):
            continue
        for svc in option["services"]:
            if service in (svc["id"], svc["name"].lower()):
                return option, svc
    return None


def payment_method_name(method):
    return PAYMENT_METHODS.get(method, method)


def _positive_int(value):
    if isinstance(value, bool):
        return None
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


def validate_checkout(payload):
    """Return a mapping of field -> message; empty when the payload is usable."""
    if not isinstance(payload, dict):
        return {"payload": "Request body must be a JSON object"}

    errors = {}

    customer = payload.get("customer")
    if not isinstance(customer, dict):
        errors["customer"] = "Customer details are required"
    else:
        for key, message in REQUIRED_CUSTOMER_FIELDS:
            if not str(customer.get(key) or "").strip():
                errors[key] = message
        email = str(customer.get("email") or "").strip()
        if email and not EMAIL_RE.match(email):
            errors["email"] = "Please enter a valid email"

    shipping = payload.get("shipping")
    if not isinstance(shipping, dict) or not find_shipping_service(shipping.get("courier"), shipping.get("service")):
        errors["shipping"] = "Please choose a valid shipping service"

    payment = payload.get("payment")
    if not isinstance(payment, dict) or payment.get("method") not in PAYMENT_METHODS:
        errors["payment"] = "Please choose a valid payment method"

    items = payload.get("items")
    if not isinstance(items, list) or not items:
        errors["items"] = "Your cart is empty"
    else:
        for index, item in enumerate(items):
            if not isinstance(item, dict) or _positive_int(item.get("id")) is None:
                errors[f"items[{index}]"] = "Invalid product"
            elif _positive_int(item.get("quantity")) is None:
                errors[f"items[{index}]"] = "Quantity must be at least 1"

    return errors


def generate_order_number(now=None):
    now = now or datetime.utcnow()
    return f"TB-{now:%Y%m%d}-{secrets.token_hex(3).upper()}"


def generate_order_id():
    return str(uuid.uuid4())


def generate_guest_token():
    return secrets.token_urlsafe(24)


def estimated_delivery(duration, start=None):
    """'3-5 days' -> date of the latest expected day; None when unparseable."""
    start = start or datetime.utcnow()
    duration = (duration or "").strip().lower()
    if duration == "next day":
        days = 1
    else:
        numbers = [int(n) for n in re.findall(r"\d+", duration)]
        if not numbers:
            return None
        days = max(numbers)
    return (start + timedelta(days=days)).strftime("%d %b %Y")
