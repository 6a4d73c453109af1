"""Shopping cart kept in a store, and checkout submission."""
import logging
import time

from checkout import find_shipping_service, payment_method_name

logger = logging.getLogger(__name__)

NOTICE_SNOOZE_SECONDS = 3600


class Cart:
    """Lines are merged by product id and size; every change is saved."""

    def __init__(self, store):
        self.store = store
        self.items = list(store.load() or [])

    def _save(self):
        self.store.save(self.items)

    def _find(self, product_id, size):
        for item in self.items:
            if item["id"] == product_id and (item.get("size") or "") == (size or ""):
                return item
        return None

    def add(self, product, size="", quantity=1):
        """Add a storefront ``Product`` (or its dict form) to the cart."""
        if quantity < 1:
            return
        data = product.to_dict() if hasattr(product, "to_dict") else dict(product)
        line = self._find(data["id"], size)
        if line is not None:
            line["quantity"] += quantity
        else:
            price = data.get("discountPrice") or data["price"]
            self.items.append({
                "id": data["id"],
                "name": data["name"],
                "category": data.get("category") or "",
                "price": price,
                "image": data.get("image") or "",
                "size": size or "",
                "quantity": quantity,
            })
        self._save()

    def update_quantity(self, product_id, size, quantity):
        if quantity <= 0:
            self.remove(product_id, size)
            return
        line = self._find(product_id, size)
        if line is not None:
            line["quantity"] = quantity
            self._save()

    def remove(self, product_id, size=""):
        self.items = [
            item for item in self.items
            if not (item["id"] == product_id and (item.get("size") or "") == (size or ""))
        ]
        self._save()

    def clear(self):
        self.items = []
        self.store.clear()

    @property
    def total_items(self):
        return sum(item["quantity"] for item in self.items)

    @property
    def total_price(self):
        return sum(item["price"] * item["quantity"] for item in self.items)

    def __len__(self):
        return len(self.items)


def build_checkout_request(cart, customer, courier, service, payment_method):
    match = find_shipping_service(courier, service)
    if match is None:
        raise ValueError(f"Unknown shipping service: {courier} {service}")
    option, svc = match
    subtotal = cart.total_price
    return {
        "customer": dict(customer),
        "shipping": {
            "courier": option["name"],
            "service": svc["name"],
            "duration": svc["duration"],
            "cost": svc["price"],
        },
        "payment": {"method": payment_method},
        "items": [dict(item) for item in cart.items],
        "subtotal": subtotal,
        "total": subtotal + svc["price"],
    }


async def submit_checkout(cart, client, customer, courier, service, payment_method, last_order_store=None):
    """Place the order for everything in ``cart``.

    On success the order is remembered in ``last_order_store`` and the cart is
    emptied. On failure the cart is kept and the ``ApiError`` propagates.
    """
    if not cart.items:
        raise ValueError("Your cart is empty")

    payload = build_checkout_request(cart, customer, courier, service, payment_method)
    response = await client.place_order(payload)
    order = response.get("data") or {}

    if last_order_store is not None:
        payment = dict(order.get("payment") or {})
        payment.setdefault("method", payment_method)
        payment.setdefault("methodName", payment_method_name(payment_method))
        last_order_store.save({**order, "payment": payment})

    cart.clear()
    logger.info("Order %s placed", order.get("orderNumber"))
    return order


class OrderNotice:
    """Reminder about the last placed order, snoozed for an hour on dismiss."""

    def __init__(self, last_order_store, dismissed_store):
        self.last_order_store = last_order_store
        self.dismissed_store = dismissed_store

    def current(self, now=None):
        now = time.time() if now is None else now
        until = self.dismissed_store.load()
        if until is not None and now < until:
            return None
        return self.last_order_store.load()

    def needs_payment_confirmation(self, now=None):
        order = self.current(now)
        return bool(order) and (order.get("payment") or {}).get("method") == "bank_transfer"

    def dismiss(self, now=None):
        now = time.time() if now is None else now
        self.dismissed_store.save(now + NOTICE_SNOOZE_SECONDS)

    def clear(self):
        self.last_order_store.clear()
        self.dismissed_store.clear()
