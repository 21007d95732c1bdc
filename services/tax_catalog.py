import logging
from collections.abc import Iterable, Mapping

from pydantic import ValidationError

from exceptions.tax import TaxCatalogUnavailableException
from models.tax import TaxDefinitionDTO


class TaxCatalog:
    """
    Read-only snapshot of the backend's tax definitions.

    refresh() swaps the whole snapshot at once; callers that captured
    `by_id` earlier keep a consistent view for the rest of their computation.
    A failed refresh leaves the catalog empty (not stale) so tax totals fall
    back to zero instead of blocking the cart.
    """

    def __init__(self, taxes: Iterable[TaxDefinitionDTO] = ()):
        self._taxes: dict = {tax.id: tax for tax in taxes}

    @property
    def by_id(self) -> Mapping:
        return self._taxes

    def __len__(self) -> int:
        return len(self._taxes)

    def __iter__(self):
        return iter(self._taxes.values())

    def get(self, tax_id) -> TaxDefinitionDTO | None:
        return self._taxes.get(tax_id)

    def snapshot(self) -> list[TaxDefinitionDTO]:
        return list(self._taxes.values())

    async def refresh(self, backend, type_tax_use: str = "sale") -> list[TaxDefinitionDTO]:
        """
        Reload the catalog from the sales backend.

        Args:
            backend: SalesBackend implementation
            type_tax_use: Tax usage filter passed to the backend ("sale", "purchase")

        Returns:
            The new catalog contents (empty on failure)
        """
        try:
            response = await backend.fetch_taxes(type_tax_use)
        except Exception as e:
            error = TaxCatalogUnavailableException(str(e))
            logging.warning(f"⚠️ {error} - tax totals will be zero until the next refresh")
            self._taxes = {}
            return []

        records = response.get("result") if isinstance(response, Mapping) else response
        taxes = {}
        for record in records or []:
            try:
                tax = record if isinstance(record, TaxDefinitionDTO) else TaxDefinitionDTO.model_validate(record)
            except ValidationError as e:
                logging.warning(f"Skipping malformed tax record {record!r}: {e.error_count()} error(s)")
                continue
            taxes[tax.id] = tax

        self._taxes = taxes
        logging.info(f"Tax catalog refreshed: {len(taxes)} tax(es) for '{type_tax_use}'")
        return list(taxes.values())
