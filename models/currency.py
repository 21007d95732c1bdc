from pydantic import BaseModel, ConfigDict, Field

from enums.currency_position import CurrencyPosition


class CurrencyDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str                    # Currency code (e.g., "OMR", "USD", "AED")
    symbol: str                  # Currency symbol
    position: CurrencyPosition = CurrencyPosition.AFTER
    decimal_places: int = Field(default=3, ge=0)
