"""
Core module containing configuration, database, stores, security and utilities
"""

from .config import config
from .database import get_db_manager, close_db_manager

__all__ = [
    "config",
    "get_db_manager",
    "close_db_manager"
]
