from enum import Enum


class CartStorageBackend(Enum):
    REDIS = "redis"
    SQLITE = "sqlite"
