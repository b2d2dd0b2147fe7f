"""Maple Tours admin client - API clients and the maple-admin command line."""

__version__ = "1.0.0"
