"""HTTP adapter package.

This package contains the aiohttp application and the PNG delivery helpers.
"""

from .delivery import (
    FORUM_SIGNATURE_USER_AGENT,
    encode_and_respond,
    encode_png,
    prepare_card,
)
from .server import BannerServer, create_app

__all__ = [
    "BannerServer",
    "create_app",
    "FORUM_SIGNATURE_USER_AGENT",
    "encode_and_respond",
    "encode_png",
    "prepare_card",
]
