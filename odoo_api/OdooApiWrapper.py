import asyncio
import itertools
import logging
from collections.abc import Mapping

import aiohttp

import config
from exceptions.remote import RemoteCallException, RemoteAuthenticationException
from models.invoice import InvoicePayloadDTO
from models.order import OrderPayloadDTO
from services.order_payload import odoo_product_id
from utils.response_fields import first_present, SERVER_MESSAGE_RULES

HTTP_STATUS_OK = 200


def _numeric_id(value):
    """Odoo record ids are integers; numeric strings are converted, other ids are sent unchanged."""
    converted = odoo_product_id(value)
    return converted if converted is not None else value


class OdooApiWrapper:
    """
    Odoo JSON-RPC client implementing the SalesBackend interface.

    Every call goes to <ODOO_URL>/jsonrpc: common.login once for the user id,
    then object.execute_kw for model methods. Transport errors, timeouts, HTTP
    errors and JSON-RPC "error" replies all raise RemoteCallException carrying
    the server's message when there is one.

    Usage:
        api = OdooApiWrapper()
        taxes = await api.fetch_taxes("sale")
        await api.close()
    """

    # sale.order.line many2many to account.tax ("tax_ids" from Odoo 18 on)
    ORDER_LINE_TAX_FIELD = "tax_id"
    TAX_FIELDS = ["id", "name", "amount_type", "amount"]
    PARTNER_FIELDS = ["id", "name", "street", "street2", "city", "zip", "phone", "mobile", "email"]
    CURRENCY_FIELDS = ["name", "symbol", "position", "decimal_places"]

    def __init__(
        self,
        url: str = config.ODOO_URL,
        db: str = config.ODOO_DB,
        username: str = config.ODOO_USERNAME,
        password: str = config.ODOO_PASSWORD,
        timeout_seconds: float = config.REMOTE_TIMEOUT_SECONDS
    ):
        self.url = url.rstrip("/")
        self.db = db
        self.username = username
        self.password = password
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self.uid: int | None = None
        self._session: aiohttp.ClientSession | None = None
        self._request_ids = itertools.count(1)

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
        return self._session

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def _call(self, service: str, method: str, *args):
        """
        Send one JSON-RPC call and return its "result".

        Raises:
            RemoteCallException: Transport failure, timeout, non-200 status or error reply
        """
        rpc_method = f"{service}.{method}"
        body = {
            "jsonrpc": "2.0",
            "method": "call",
            "params": {"service": service, "method": method, "args": list(args)},
            "id": next(self._request_ids),
        }
        try:
            async with self._get_session().post(f"{self.url}/jsonrpc", json=body) as response:
                if response.status != HTTP_STATUS_OK:
                    text = await response.text()
                    raise RemoteCallException(rpc_method, f"HTTP {response.status}", server_message=text[:200] or None)
                reply = await response.json(content_type=None)
        except asyncio.TimeoutError as e:
            raise RemoteCallException(rpc_method, f"timed out after {self.timeout.total}s") from e
        except aiohttp.ClientError as e:
            raise RemoteCallException(rpc_method, f"{type(e).__name__}: {e}") from e

        if not isinstance(reply, Mapping):
            raise RemoteCallException(rpc_method, "malformed reply", payload=reply)
        if reply.get("error"):
            error = reply["error"]
            message = first_present(error, SERVER_MESSAGE_RULES)
            raise RemoteCallException(
                rpc_method,
                "server error",
                server_message=str(message) if message is not None else None,
                payload=error
            )
        return reply.get("result")

    async def authenticate(self) -> int:
        uid = await self._call("common", "login", self.db, self.username, self.password)
        if not uid:
            raise RemoteAuthenticationException(self.username)
        self.uid = uid
        logging.info(f"🔑 Logged in to Odoo {self.url} as uid {uid}")
        return uid

    async def execute_kw(self, model: str, method: str, args: list, kwargs: dict | None = None):
        if self.uid is None:
            await self.authenticate()
        return await self._call(
            "object", "execute_kw",
            self.db, self.uid, self.password, model, method, args, kwargs or {}
        )

    # ------------------------------------------------------------------
    # SalesBackend
    # ------------------------------------------------------------------

    async def fetch_taxes(self, type_tax_use: str = "sale") -> dict:
        records = await self.execute_kw(
            "account.tax", "search_read",
            [[["type_tax_use", "=", type_tax_use]]],
            {"fields": self.TAX_FIELDS}
        )
        return {"result": records or []}

    async def fetch_customer_details(self, customer_id) -> dict:
        records = await self.execute_kw(
            "res.partner", "read",
            [[_numeric_id(customer_id)]],
            {"fields": self.PARTNER_FIELDS}
        )
        if not records:
            return {}
        partner = records[0]
        address_parts = [partner.get(field) for field in ("street", "street2", "city", "zip")]
        address = ", ".join(part for part in address_parts if part)
        return {**partner, "address": address or None}

    async def create_order(self, payload: OrderPayloadDTO) -> dict:
        order_lines = [
            (0, 0, {
                "product_id": line.product_odoo_id if line.product_odoo_id is not None else line.product_id,
                "name": line.product_name,
                "product_uom_qty": line.product_uom_qty,
                "price_unit": float(line.price_unit),
                self.ORDER_LINE_TAX_FIELD: [(6, 0, [_numeric_id(tax_id) for tax_id in line.tax_ids])],
            })
            for line in payload.crm_product_line_ids
        ]
        values = {
            "partner_id": _numeric_id(payload.customer_id),
            "warehouse_id": _numeric_id(payload.warehouse_id),
            "note": payload.note or "",
            "order_line": order_lines,
        }
        order_id = await self.execute_kw("sale.order", "create", [values])
        logging.info(f"Odoo sale.order {order_id} created for partner {payload.customer_id}")
        return {"result": order_id}

    async def confirm_order(self, order_id) -> dict:
        result = await self.execute_kw("sale.order", "action_confirm", [[_numeric_id(order_id)]])
        return {"result": result}

    async def create_invoice(self, payload: InvoicePayloadDTO) -> dict:
        """Create a customer invoice. Backend errors come back as {"error": {...}} like the REST API."""
        values = {
            "move_type": "out_invoice",
            "partner_id": _numeric_id(payload.customer_id),
            "invoice_line_ids": [
                (0, 0, {
                    "product_id": _numeric_id(line.id),
                    "name": line.name,
                    "quantity": line.quantity,
                    "price_unit": float(line.price),
                })
                for line in payload.lines
            ],
        }
        try:
            invoice_id = await self.execute_kw("account.move", "create", [values])
        except RemoteCallException as e:
            logging.error(f"Odoo invoice creation failed for partner {payload.customer_id}: {e}")
            return {"error": {"message": e.server_message or e.reason}}
        return {"id": invoice_id}

    async def fetch_company_currency(self) -> dict | None:
        """Currency of the user's company ({name, symbol, position, decimal_places}), or None."""
        companies = await self.execute_kw("res.company", "search_read", [[]], {"fields": ["currency_id"], "limit": 1})
        if not companies or not companies[0].get("currency_id"):
            return None
        currency_id = companies[0]["currency_id"][0]
        currencies = await self.execute_kw(
            "res.currency", "read", [[currency_id]], {"fields": self.CURRENCY_FIELDS}
        )
        return currencies[0] if currencies else None
