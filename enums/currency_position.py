from enum import Enum


class CurrencyPosition(str, Enum):
    BEFORE = "before"
    AFTER = "after"
