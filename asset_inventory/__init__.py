"""
Asset Inventory.

Asset-management service that keeps an inventory of storage controllers
attached to inventoried nodes and exposes it through a JSON HTTP API.
"""

__version__ = "0.1.0"
