"""Core layer for the Skyblock Stats banner service.

This module provides the domain entities parsed from upstream payloads and
the exception hierarchy shared by every stage of the banner pipeline.
"""

from .entities import (
    PlayerIdentity,
    GameProfile,
    WeightScore,
    Dungeons,
    Networth,
    SKILL_NAMES,
    SLAYER_NAMES,
    select_latest_profile,
)
from .errors import (
    SkyblockStatsError,
    ValidationError,
    UpstreamError,
    UpstreamStatusError,
    UpstreamFailureError,
    EmptyResultError,
    DecodeError,
    AssetError,
)

__all__ = [
    "PlayerIdentity",
    "GameProfile",
    "WeightScore",
    "Dungeons",
    "Networth",
    "SKILL_NAMES",
    "SLAYER_NAMES",
    "select_latest_profile",
    "SkyblockStatsError",
    "ValidationError",
    "UpstreamError",
    "UpstreamStatusError",
    "UpstreamFailureError",
    "EmptyResultError",
    "DecodeError",
    "AssetError",
]
