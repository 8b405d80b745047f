"""Client for the upstream services the banner is built from.

Four services are involved: the Mojang username directory, the profiles API,
the lily weight worker and the Crafthead avatar renderer. None of them are
retried; every failure is turned into an ``UpstreamError`` subclass.
"""

import io
import struct
from contextlib import nullcontext
from typing import Any, Dict, Optional

import httpx
import structlog
from PIL import Image

from ...config import Config
from ...core.entities import GameProfile, PlayerIdentity, WeightScore, select_latest_profile
from ...core.errors import (
    DecodeError,
    EmptyResultError,
    UpstreamError,
    UpstreamFailureError,
    UpstreamStatusError,
)
from ..observability.metrics import get_metrics_provider

logger = structlog.get_logger()

PARSE_ERRORS = (KeyError, TypeError, ValueError)

# Pillow reports corrupt or truncated image streams with any of these
IMAGE_ERRORS = (OSError, ValueError, SyntaxError, EOFError, struct.error, Image.DecompressionBombError)


def _skip_record(status_code: int, error_type: Optional[str] = None) -> None:
    pass


class SkyblockAPIClient:
    """Async client for the directory, profiles, weight and avatar services."""

    def __init__(
        self,
        profiles_api_key: str,
        weight_api_key: str,
        directory_url: str = "https://api.mojang.com",
        profiles_url: str = "https://api.altpapier.dev",
        weight_url: str = "https://lilyweight.antonio32a.workers.dev",
        avatar_url: str = "https://crafthead.net",
        avatar_size: int = 50,
        request_timeout: float = 10.0,
    ):
        """Initialize the client.

        Args:
            profiles_api_key: Key forwarded to the profiles API
            weight_api_key: Key forwarded to the weight service
            directory_url: Base URL of the username directory
            profiles_url: Base URL of the profiles API
            weight_url: Base URL of the weight service
            avatar_url: Base URL of the avatar renderer
            avatar_size: Avatar edge length in pixels
            request_timeout: Request timeout in seconds
        """
        self.profiles_api_key = profiles_api_key
        self.weight_api_key = weight_api_key
        self.directory_url = directory_url.rstrip("/")
        self.profiles_url = profiles_url.rstrip("/")
        self.weight_url = weight_url.rstrip("/")
        self.avatar_url = avatar_url.rstrip("/")
        self.avatar_size = avatar_size
        self.request_timeout = request_timeout
        self.client = httpx.AsyncClient(timeout=request_timeout)

    @classmethod
    def from_config(cls, config: Config) -> "SkyblockAPIClient":
        return cls(
            profiles_api_key=config.profiles_api_key,
            weight_api_key=config.weight_api_key,
            directory_url=config.directory_api_url,
            profiles_url=config.profiles_api_url,
            weight_url=config.weight_api_url,
            avatar_url=config.avatar_api_url,
            avatar_size=config.avatar_size,
            request_timeout=config.upstream_timeout_seconds,
        )

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.client.aclose()

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()

    async def _make_request(
        self, service: str, url: str, params: Optional[Dict[str, str]] = None
    ) -> httpx.Response:
        """Issue a GET request against an upstream service.

        Args:
            service: Short upstream name used in logs and metrics
            url: The URL to request
            params: Optional query parameters

        Raises:
            UpstreamError: If the request could not be completed
        """
        metrics = get_metrics_provider()
        measure = metrics.measure_upstream_call(service) if metrics else nullcontext(_skip_record)

        with measure as record:
            try:
                response = await self.client.get(url, params=params)
            except httpx.RequestError as e:
                record(0, type(e).__name__)
                logger.error("HTTP request failed", service=service, error=str(e))
                raise UpstreamError(f"Request to {service} failed: {e}") from e

            record(response.status_code)

        logger.debug("Upstream responded", service=service, status_code=response.status_code)
        return response

    def _decode_json(self, service: str, response: httpx.Response) -> Dict[str, Any]:
        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamError(f"Malformed {service} response: {e}") from e
        if not isinstance(data, dict):
            raise UpstreamError(f"Malformed {service} response: expected an object")
        return data

    async def resolve(self, username: str) -> PlayerIdentity:
        """Resolve a username to a player identity.

        Raises:
            UpstreamError: If the directory is unreachable or does not know the name
        """
        url = f"{self.directory_url}/users/profiles/minecraft/{username}"
        response = await self._make_request("directory", url)

        # The directory answers unknown names with 204/404 and an empty body
        if response.status_code != 200:
            raise UpstreamError(f"Player lookup failed: {response.status_code}")

        data = self._decode_json("directory", response)
        try:
            player = PlayerIdentity.from_dict(data)
        except PARSE_ERRORS as e:
            raise UpstreamError(f"Malformed directory response: {e!r}") from e

        logger.info("Resolved player", username=username, player_id=player.id)
        return player

    async def fetch_profiles(self, player: PlayerIdentity) -> GameProfile:
        """Fetch the player's profiles and return the most recently saved one.

        Raises:
            UpstreamError: On transport failures or malformed bodies
            UpstreamStatusError: If the envelope status is not 200
            EmptyResultError: If the player has no profiles
        """
        url = f"{self.profiles_url}/v1/profiles/{player.id}"
        response = await self._make_request("profiles", url, params={"key": self.profiles_api_key})
        data = self._decode_json("profiles", response)

        try:
            status = int(data["status"])
        except PARSE_ERRORS as e:
            raise UpstreamError(f"Malformed profiles response: {e!r}") from e

        if status != 200:
            raise UpstreamStatusError(status)

        raw_profiles = data.get("data")
        if not raw_profiles:
            raise EmptyResultError("no profiles found")

        try:
            profiles = [GameProfile.from_dict(raw) for raw in raw_profiles]
        except PARSE_ERRORS as e:
            raise UpstreamError(f"Malformed profile: {e!r}") from e

        profile = select_latest_profile(profiles)
        logger.info(
            "Selected latest profile",
            player_id=player.id,
            profile=profile.name,
            profile_count=len(profiles),
        )
        return profile

    async def fetch_weight(self, player: PlayerIdentity) -> WeightScore:
        """Fetch the player's lily weight.

        Raises:
            UpstreamError: On transport failures or malformed bodies
            UpstreamFailureError: If the service reports success=false
            EmptyResultError: If the service succeeds without a payload
        """
        url = f"{self.weight_url}/{player.id}"
        response = await self._make_request("weight", url, params={"key": self.weight_api_key})
        data = self._decode_json("weight", response)

        if not data.get("success"):
            raise UpstreamFailureError(f"failed to get lily weight: {response.status_code}")

        payload = data.get("data")
        if payload is None:
            raise EmptyResultError("weight service returned no data")

        try:
            return WeightScore.from_dict(payload)
        except PARSE_ERRORS as e:
            raise UpstreamError(f"Malformed weight response: {e!r}") from e

    async def fetch_avatar(self, player: PlayerIdentity) -> Image.Image:
        """Fetch the player's avatar as an RGBA image.

        Raises:
            UpstreamError: On transport failures or error statuses
            DecodeError: If the body is not an image
        """
        url = f"{self.avatar_url}/avatar/{player.id}/{self.avatar_size}"
        response = await self._make_request("avatar", url)

        if response.status_code >= 400:
            raise UpstreamError(f"Avatar request failed: {response.status_code}")

        try:
            with Image.open(io.BytesIO(response.content)) as image:
                return image.convert("RGBA")
        except IMAGE_ERRORS as e:
            raise DecodeError(f"Could not decode avatar: {e}") from e
