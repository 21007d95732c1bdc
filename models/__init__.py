"""
Models Package

This file ensures the SQLAlchemy models are imported and registered on
Base.metadata before create_all() runs. Pydantic DTOs live in the sibling
modules and are imported directly where needed.
"""

from models.base import Base
from models.cart_snapshot import CartSnapshot

__all__ = [
    'Base',
    'CartSnapshot',
]
