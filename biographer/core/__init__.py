"""
Biographer Core Module
"""

from .config import settings, get_settings
from .logging_config import setup_logging, get_logger
from .supabase import get_supabase_admin

__all__ = [
    "settings",
    "get_settings",
    "setup_logging",
    "get_logger",
    "get_supabase_admin",
]
