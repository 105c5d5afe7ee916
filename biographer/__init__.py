"""
AI Biographer

Turns a narrated life memory into an illustrated multi-panel cartoon.
"""

__version__ = "1.0.0"
