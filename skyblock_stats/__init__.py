"""Skyblock Stats banner service."""

__version__ = "0.1.0"
