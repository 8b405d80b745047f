"""Banner pipeline for the Skyblock Stats service.

The player is resolved first since every other fetch is keyed by their id.
Profile, weight and avatar are then fetched concurrently and the card is
rendered only once all three succeeded.
"""

import asyncio
import logging
import re
from dataclasses import dataclass
from enum import Enum

from PIL import Image

from ..adapters.upstream.client import SkyblockAPIClient
from ..core.entities import GameProfile, PlayerIdentity, WeightScore
from ..core.errors import SkyblockStatsError, ValidationError
from ..rendering.renderer import CardRenderer


logger = logging.getLogger(__name__)

USERNAME_PATTERN = re.compile(r"^\w{1,16}$", re.ASCII)


def validate_username(username: str) -> str:
    """Check a username is 1-16 word characters.

    Raises:
        ValidationError: If the username is malformed
    """
    if not USERNAME_PATTERN.match(username):
        raise ValidationError(f"Invalid username: {username!r}")
    return username


class PipelineStage(Enum):
    """Pipeline stages with the message and status reported when they fail."""

    PLAYER = ("player", "Could not fetch player", 400)
    PROFILE = ("profile", "Could not fetch player's profile", 500)
    WEIGHT = ("weight", "Could not fetch player's lily weight", 500)
    AVATAR = ("avatar", "Could not fetch player's head", 500)

    @property
    def label(self) -> str:
        return self.value[0]

    @property
    def message(self) -> str:
        return self.value[1]

    @property
    def status(self) -> int:
        return self.value[2]


class StageError(SkyblockStatsError):
    """A pipeline stage failed. The original error is chained as ``__cause__``."""

    def __init__(self, stage: PipelineStage, error: Exception):
        super().__init__(f"{stage.label} stage failed: {error}")
        self.stage = stage
        self.error = error


@dataclass(frozen=True)
class CardInputs:
    """Everything the renderer needs for one card."""

    player: PlayerIdentity
    profile: GameProfile
    weight: WeightScore
    avatar: Image.Image


class StatCardService:
    """Fetches a player's data and renders their stat card."""

    def __init__(self, api: SkyblockAPIClient, renderer: CardRenderer):
        """Initialize the service.

        Args:
            api: Client for the upstream services
            renderer: Renderer holding the loaded template and font
        """
        self.api = api
        self.renderer = renderer

    async def close(self) -> None:
        await self.api.close()

    async def gather_inputs(self, username: str) -> CardInputs:
        """Resolve the player, then fetch profile, weight and avatar concurrently.

        Raises:
            ValidationError: If the username is malformed
            StageError: If any stage fails; profile, weight and avatar
                failures are checked in that order
        """
        validate_username(username)

        try:
            player = await self.api.resolve(username)
        except SkyblockStatsError as e:
            raise StageError(PipelineStage.PLAYER, e) from e

        profile, weight, avatar = await asyncio.gather(
            self.api.fetch_profiles(player),
            self.api.fetch_weight(player),
            self.api.fetch_avatar(player),
            return_exceptions=True,
        )

        for stage, result in (
            (PipelineStage.PROFILE, profile),
            (PipelineStage.WEIGHT, weight),
            (PipelineStage.AVATAR, avatar),
        ):
            if isinstance(result, SkyblockStatsError):
                raise StageError(stage, result) from result
            if isinstance(result, BaseException):
                raise result

        return CardInputs(player=player, profile=profile, weight=weight, avatar=avatar)

    async def build_card(self, username: str) -> Image.Image:
        """Fetch everything for ``username`` and render the card off the event loop."""
        inputs = await self.gather_inputs(username)

        loop = asyncio.get_running_loop()
        card = await loop.run_in_executor(
            None,
            self.renderer.render,
            inputs.player,
            inputs.profile,
            inputs.weight,
            inputs.avatar,
        )
        logger.info(f"Rendered card for {inputs.player.name} ({inputs.profile.name})")
        return card
