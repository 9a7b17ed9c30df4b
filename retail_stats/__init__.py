"""
Retail Sales Statistics Service
"""
__version__ = "1.0.0"
