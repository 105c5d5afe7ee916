"""
Persistence Layer
"""

from .repository import StoryRepository

__all__ = ["StoryRepository"]
