from enum import Enum


class TaxAmountType(str, Enum):
    PERCENT = "percent"  # amount is a percentage of the line subtotal
    FIXED = "fixed"      # amount is charged once per unit
