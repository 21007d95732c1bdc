"""
Ordered field-extraction rules for loosely shaped records.

Backend responses and screen-provided records carry the same value under
different keys depending on the endpoint (an order id in "result" or "id", a
customer address in "address" or "customer_address", a warehouse nested under
the user's "warehouse" object or flat). Each value is described once as an
ordered tuple of dotted paths and resolved by first_present(); call sites never
chain conditionals themselves.
"""

from collections.abc import Mapping, Sequence

# Submission responses
ORDER_ID_RULES = ("result", "id")
INVOICE_ID_RULES = ("id", "result")

# Customer record
CUSTOMER_ID_RULES = ("id", "_id", "customer_id")
CUSTOMER_CART_OWNER_RULES = ("id", "_id")
CUSTOMER_ADDRESS_RULES = ("address", "customer_address", "address_line")
CUSTOMER_NAME_RULES = ("name",)

# Session user
USER_WAREHOUSE_RULES = ("warehouse.warehouse_id", "warehouse.id", "warehouse_id")
SALES_PERSON_ID_RULES = ("related_profile._id",)
SALES_PERSON_NAME_RULES = ("related_profile.name",)

# Server error payloads (JSON-RPC "error" object or a plain message)
SERVER_MESSAGE_RULES = ("data.message", "message", "data.name")


def is_missing(value) -> bool:
    # Odoo reports empty fields as False
    return value is None or value is False or value == ""


def resolve_path(source, path: str):
    """Follow a dotted path through mappings; None when any step is absent."""
    current = source
    for part in path.split("."):
        if isinstance(current, Mapping):
            current = current.get(part)
        elif isinstance(current, Sequence) and not isinstance(current, str) and part.isdigit():
            index = int(part)
            current = current[index] if index < len(current) else None
        else:
            return None
        if current is None:
            return None
    return current


def first_present(source, rules: Sequence[str]):
    """
    Evaluate extraction rules in order and return the first usable value.

    Args:
        source: Mapping (or None) to read from
        rules: Ordered dotted paths, e.g. ("warehouse.warehouse_id", "warehouse_id")

    Returns:
        First value that is not None/False/empty string, or None
    """
    if not isinstance(source, Mapping):
        return None
    for rule in rules:
        value = resolve_path(source, rule)
        if not is_missing(value):
            return value
    return None
