import json
from functools import lru_cache
from pathlib import Path
from typing import Optional

import config
from enums.message_entity import MessageEntity

L10N_DIR = Path(__file__).resolve().parent.parent / "l10n"


@lru_cache(maxsize=None)
def _load_messages(language: str) -> dict:
    with open(L10N_DIR / f"{language}.json", "r", encoding="UTF-8") as f:
        return json.loads(f.read())


class Localizator:

    @staticmethod
    def get_text(entity: MessageEntity, key: str, lang: Optional[str] = None) -> str:
        """
        Get localized text for given entity and key.

        Args:
            entity: Message group (CART, ORDER, COMMON)
            key: Localization key
            lang: Optional language code (e.g., "en").
                  If None, uses config.LANGUAGE (default).

        Returns:
            Localized text string

        Example:
            text = Localizator.get_text(MessageEntity.ORDER, "order_placed_title")
        """
        language = lang if lang is not None else config.LANGUAGE
        data = _load_messages(language)
        if entity == MessageEntity.CART:
            return data["cart"][key]
        elif entity == MessageEntity.ORDER:
            return data["order"][key]
        else:
            return data["common"][key]
