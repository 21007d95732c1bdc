import logging
import re
from decimal import Decimal, InvalidOperation

from exceptions.cart import CartLineNotFoundException
from models.cart import CartLineItemDTO
from services.cart import CartStore

# Leading number of a free-text input ("12 pcs" -> 12, "abc" -> no match)
INTEGER_PREFIX = re.compile(r"^\s*([+-]?\d+)")
DECIMAL_PREFIX = re.compile(r"^\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+))")


def parse_quantity(text: str | None) -> int:
    """Quantity typed by the user. Non-numeric input counts as 0, negatives clamp to 0."""
    match = INTEGER_PREFIX.match(text or "")
    if not match:
        return 0
    return max(0, int(match.group(1)))


def parse_price(text: str | None) -> Decimal:
    """Unit price typed by the user. Non-numeric input counts as 0, negatives clamp to 0."""
    match = DECIMAL_PREFIX.match(text or "")
    if not match:
        return Decimal("0")
    try:
        price = Decimal(match.group(1))
    except InvalidOperation:
        return Decimal("0")
    return max(Decimal("0"), price)


class CartEditingService:
    """
    Line edits expressed through CartStore.add_or_update_line().

    Decrementing never removes a line: quantity stops at 0 and the line stays
    until CartStore.remove_line() is called.
    """

    @staticmethod
    def _current_line(cart_store: CartStore, product_id) -> CartLineItemDTO:
        line = cart_store.find_line(product_id)
        if line is None:
            raise CartLineNotFoundException(cart_store.active_customer_id, product_id)
        return line

    @staticmethod
    def increment(cart_store: CartStore, product_id) -> CartLineItemDTO:
        line = CartEditingService._current_line(cart_store, product_id)
        updated = line.model_copy(update={"quantity": line.quantity + 1})
        cart_store.add_or_update_line(updated)
        return updated

    @staticmethod
    def decrement(cart_store: CartStore, product_id) -> CartLineItemDTO:
        line = CartEditingService._current_line(cart_store, product_id)
        updated = line.model_copy(update={"quantity": max(0, line.quantity - 1)})
        cart_store.add_or_update_line(updated)
        return updated

    @staticmethod
    def set_quantity_from_text(cart_store: CartStore, product_id, text: str | None) -> CartLineItemDTO:
        line = CartEditingService._current_line(cart_store, product_id)
        updated = line.model_copy(update={"quantity": parse_quantity(text)})
        cart_store.add_or_update_line(updated)
        return updated

    @staticmethod
    def set_price_from_text(cart_store: CartStore, product_id, text: str | None) -> CartLineItemDTO:
        line = CartEditingService._current_line(cart_store, product_id)
        updated = line.model_copy(update={"unit_price": parse_price(text)})
        cart_store.add_or_update_line(updated)
        return updated

    @staticmethod
    def quick_add(cart_store: CartStore, product) -> CartLineItemDTO:
        """
        Add one unit of a product from the product list.

        An existing line keeps its price and gets its quantity raised by 1;
        otherwise the product is added with quantity 1.

        Args:
            cart_store: Session cart store (a customer must be active)
            product: CartLineItemDTO or raw product record
        """
        if not isinstance(product, CartLineItemDTO):
            product = CartLineItemDTO.model_validate(product)

        existing = cart_store.find_line(product.product_id)
        if existing is not None:
            updated = existing.model_copy(update={"quantity": existing.quantity + 1})
        else:
            updated = product.model_copy(update={"quantity": 1})
        cart_store.add_or_update_line(updated)
        logging.debug(f"Quick-added product {updated.product_id} (qty {updated.quantity})")
        return updated
