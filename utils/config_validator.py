"""
Configuration Validation Module

Validates critical configuration values at startup to fail-fast
with clear error messages instead of failures on the first order.
"""

import sys
from typing import Optional
from urllib.parse import urlparse

from enums.cart_storage_backend import CartStorageBackend


class ConfigValidationError(Exception):
    """Raised when configuration validation fails."""
    pass


def validate_backend_url(url: Optional[str]) -> None:
    """
    Validate the sales backend base URL.

    Args:
        url: The ODOO_URL value from config

    Raises:
        ConfigValidationError: If the URL is missing or not http(s)
    """
    if not url:
        raise ConfigValidationError(
            "ODOO_URL is required to load taxes and submit orders!\n"
            "Add to .env: ODOO_URL=https://erp.example.com"
        )

    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigValidationError(
            f"ODOO_URL must be an http(s) URL (got: {url})\n"
            "Add to .env: ODOO_URL=https://erp.example.com"
        )


def validate_required_config(value: Optional[str], name: str, example: str = "") -> None:
    """
    Validate that a required config value is set.

    Args:
        value: The config value to check
        name: Name of the config variable
        example: Optional example value to show in error message

    Raises:
        ConfigValidationError: If value is missing
    """
    if not value:
        error_msg = f"{name} is required but not set!"
        if example:
            error_msg += f"\nAdd to .env: {name}={example}"
        raise ConfigValidationError(error_msg)


def validate_positive_number(value, name: str) -> None:
    if value is None or value <= 0:
        raise ConfigValidationError(f"{name} must be a positive number (got: {value})")


def validate_startup_config(config_module) -> None:
    """
    Validate all critical configuration at startup.

    Args:
        config_module: The config module to validate

    Raises:
        ConfigValidationError: If any validation fails
    """
    validate_backend_url(getattr(config_module, 'ODOO_URL', None))
    validate_required_config(getattr(config_module, 'ODOO_DB', None), 'ODOO_DB', '<database-name>')
    validate_required_config(getattr(config_module, 'ODOO_USERNAME', None), 'ODOO_USERNAME', '<login>')
    validate_required_config(getattr(config_module, 'ODOO_PASSWORD', None), 'ODOO_PASSWORD', '<password-or-api-key>')
    validate_positive_number(getattr(config_module, 'REMOTE_TIMEOUT_SECONDS', None), 'REMOTE_TIMEOUT_SECONDS')

    if getattr(config_module, 'CART_STORAGE_BACKEND', None) == CartStorageBackend.REDIS:
        validate_required_config(getattr(config_module, 'REDIS_HOST', None), 'REDIS_HOST', 'localhost')


def validate_or_exit(config_module) -> None:
    """
    Validate configuration and exit with error code 1 if validation fails.

    This is the main entry point for startup validation.

    Args:
        config_module: The config module to validate
    """
    try:
        validate_startup_config(config_module)
    except ConfigValidationError as e:
        print(f"\n ERROR: Configuration Validation Failed\n", file=sys.stderr)
        print(str(e), file=sys.stderr)
        print("\nPOS startup aborted. Please fix configuration and try again.\n", file=sys.stderr)
        sys.exit(1)
