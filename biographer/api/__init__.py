"""
Biographer HTTP API
"""
