"""Upstream API adapter package.

This package contains the client for the username directory, profiles,
weight and avatar services.
"""

from .client import SkyblockAPIClient

__all__ = ["SkyblockAPIClient"]
