from enum import Enum


class MessageEntity(Enum):
    CART = 1
    ORDER = 2
    COMMON = 3
