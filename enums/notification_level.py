from enum import Enum


class NotificationLevel(Enum):
    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"
