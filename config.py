import os
import sys

from dotenv import load_dotenv

from enums.cart_storage_backend import CartStorageBackend
from enums.currency_position import CurrencyPosition
from enums.runtime_environment import RuntimeEnvironment

# Load .env but don't override existing environment variables
# This allows test scripts to set RUNTIME_ENVIRONMENT=TEST before import
load_dotenv(".env", override=False)

# Parse RUNTIME_ENVIRONMENT with clear error message on misconfiguration
try:
    RUNTIME_ENVIRONMENT = RuntimeEnvironment(os.environ.get("RUNTIME_ENVIRONMENT", "DEV"))
except ValueError as e:
    valid_values = [env.value for env in RuntimeEnvironment]
    print(f"\n ERROR: Invalid RUNTIME_ENVIRONMENT configuration\n", file=sys.stderr)
    print(f"Reason: {e}", file=sys.stderr)
    print(f"Valid values: {', '.join(valid_values)}", file=sys.stderr)
    print(f"Current value: {os.environ.get('RUNTIME_ENVIRONMENT', '(not set)')}", file=sys.stderr)
    print(f"\nAdd to .env: RUNTIME_ENVIRONMENT={valid_values[0]}\n", file=sys.stderr)
    sys.exit(1)

LANGUAGE = os.environ.get("POS_LANGUAGE", "en")  # Default to English

# Sales backend (Odoo JSON-RPC)
ODOO_URL = os.environ.get("ODOO_URL", "")
ODOO_DB = os.environ.get("ODOO_DB", "")
ODOO_USERNAME = os.environ.get("ODOO_USERNAME", "")
ODOO_PASSWORD = os.environ.get("ODOO_PASSWORD", "")
REMOTE_TIMEOUT_SECONDS = float(os.environ.get("REMOTE_TIMEOUT_SECONDS", "30"))
TAX_TYPE_USE = os.environ.get("TAX_TYPE_USE", "sale")  # Tax catalog filter (sale/purchase)

# Cart storage
# redis: shared durable store, sqlite: local file via SQLAlchemy
try:
    CART_STORAGE_BACKEND = CartStorageBackend(os.environ.get("CART_STORAGE_BACKEND", "redis").lower())
except ValueError as e:
    valid_backends = [b.value for b in CartStorageBackend]
    print(f"\n ERROR: Invalid CART_STORAGE_BACKEND configuration\n", file=sys.stderr)
    print(f"Reason: {e}", file=sys.stderr)
    print(f"Valid values: {', '.join(valid_backends)}", file=sys.stderr)
    print(f"Current value: {os.environ.get('CART_STORAGE_BACKEND', '(not set)')}\n", file=sys.stderr)
    sys.exit(1)
REDIS_HOST = os.environ.get("REDIS_HOST", "localhost")
REDIS_PORT = int(os.environ.get("REDIS_PORT", "6379"))
REDIS_DB = int(os.environ.get("REDIS_DB", "0"))
REDIS_PASSWORD = os.environ.get("REDIS_PASSWORD") or None
DB_NAME = os.environ.get("DB_NAME", "carts.db")

# Order submission
# Empty DEFAULT_WAREHOUSE_ID disables the last-resort warehouse fallback
try:
    _default_warehouse_str = os.environ.get("DEFAULT_WAREHOUSE_ID", "1").strip()
    DEFAULT_WAREHOUSE_ID = int(_default_warehouse_str) if _default_warehouse_str else None
except ValueError as e:
    print(f"\n ERROR: Invalid DEFAULT_WAREHOUSE_ID configuration\n", file=sys.stderr)
    print(f"Reason: {e}", file=sys.stderr)
    print(f"Expected: integer warehouse id, or empty to disable the fallback", file=sys.stderr)
    print(f"Current value: {os.environ.get('DEFAULT_WAREHOUSE_ID', '(not set)')}\n", file=sys.stderr)
    sys.exit(1)
POS_GUEST_CUSTOMER_ID = os.environ.get("POS_GUEST_CUSTOMER_ID", "pos_guest")
ORDER_NOTE = os.environ.get("ORDER_NOTE", "Created from mobile app")

# Currency display (overridden at runtime from backend company data when available)
CURRENCY_NAME = os.environ.get("CURRENCY_NAME", "OMR")
CURRENCY_SYMBOL = os.environ.get("CURRENCY_SYMBOL", "ر.ع.")
try:
    CURRENCY_POSITION = CurrencyPosition(os.environ.get("CURRENCY_POSITION", "after").lower())
    CURRENCY_DECIMAL_PLACES = int(os.environ.get("CURRENCY_DECIMAL_PLACES", "3"))
    if CURRENCY_DECIMAL_PLACES < 0:
        raise ValueError(f"CURRENCY_DECIMAL_PLACES must not be negative (got: {CURRENCY_DECIMAL_PLACES})")
except ValueError as e:
    print(f"\n ERROR: Invalid currency configuration\n", file=sys.stderr)
    print(f"Reason: {e}", file=sys.stderr)
    print(f"Expected: CURRENCY_POSITION=before|after, CURRENCY_DECIMAL_PLACES=0..n\n", file=sys.stderr)
    sys.exit(1)

# Logging Configuration
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")  # DEBUG, INFO, WARNING, ERROR, CRITICAL
LOG_MASK_SECRETS = os.environ.get("LOG_MASK_SECRETS", "true") == "true"  # Mask sensitive data in logs
LOG_DIR = os.environ.get("LOG_DIR", "logs")

# Log Retention: Environment-specific defaults
# Dev: keep 30 days for debugging
# Prod: Use 5 days default to save disk space
if RUNTIME_ENVIRONMENT == RuntimeEnvironment.DEV:
    LOG_RETENTION_DAYS = int(os.environ.get("LOG_RETENTION_DAYS", "30"))
else:
    LOG_RETENTION_DAYS = int(os.environ.get("LOG_RETENTION_DAYS", "5"))
