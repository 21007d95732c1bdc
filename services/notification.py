import inspect
import logging
from collections.abc import Callable

from enums.message_entity import MessageEntity
from enums.notification_level import NotificationLevel
from models.notification import NotificationDTO
from utils.localizator import Localizator


class NotificationService:
    """
    Delivers non-blocking user notifications (toasts) to the UI layer.

    The sink is whatever the UI registers: a plain function or a coroutine
    function taking a NotificationDTO. A failing sink is logged and never
    interrupts the caller's workflow. Without a sink, notifications are only
    logged.
    """

    def __init__(self, sink: Callable | None = None):
        self.sink = sink

    async def notify(self, level: NotificationLevel, title: str, text: str = "") -> NotificationDTO:
        notification = NotificationDTO(level=level, title=title, text=text)
        logging.info(f"🔔 [{level.value}] {title}: {text}")
        if self.sink is None:
            return notification
        try:
            result = self.sink(notification)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logging.error(f"Notification sink failed: {e}")
        return notification

    async def default_warehouse_used(self, warehouse_id) -> NotificationDTO:
        return await self.notify(
            NotificationLevel.INFO,
            Localizator.get_text(MessageEntity.ORDER, "default_warehouse_title"),
            Localizator.get_text(MessageEntity.ORDER, "default_warehouse_text").format(warehouse_id=warehouse_id)
        )

    async def order_created(self) -> NotificationDTO:
        return await self.notify(
            NotificationLevel.SUCCESS,
            Localizator.get_text(MessageEntity.ORDER, "success_title"),
            Localizator.get_text(MessageEntity.ORDER, "order_created")
        )

    async def invoice_created(self) -> NotificationDTO:
        return await self.notify(
            NotificationLevel.SUCCESS,
            Localizator.get_text(MessageEntity.ORDER, "success_title"),
            Localizator.get_text(MessageEntity.ORDER, "invoice_created")
        )

    async def confirmation_failed(self, order_id) -> NotificationDTO:
        return await self.notify(
            NotificationLevel.INFO,
            Localizator.get_text(MessageEntity.ORDER, "success_title"),
            Localizator.get_text(MessageEntity.ORDER, "confirmation_failed_text").format(order_id=order_id)
        )

    async def cart_cleanup_failed(self) -> NotificationDTO:
        return await self.notify(
            NotificationLevel.INFO,
            Localizator.get_text(MessageEntity.COMMON, "error_title"),
            Localizator.get_text(MessageEntity.ORDER, "cart_cleanup_failed_text")
        )

    async def submission_failed(self, title: str, text: str) -> NotificationDTO:
        return await self.notify(NotificationLevel.ERROR, title, text)
