"""
API Routes Module
"""

from . import functions, health, stories

__all__ = ["functions", "health", "stories"]
