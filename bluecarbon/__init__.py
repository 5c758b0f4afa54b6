"""
Blue Carbon Registry - Coastal restoration verification service.

Tracks mangrove and seagrass restoration evidence submitted by field
members through AI screening, NGO scientific review and final registry
approval, and mints purchasable carbon credits from approved evidence.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
