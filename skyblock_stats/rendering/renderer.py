"""Stat card renderer.

The card is the bundled 800x400 template with the avatar pasted in the top
left corner and every value drawn at a fixed anchor. Layout is computed
separately from drawing so the text and its placement can be inspected
without decoding pixels.
"""

from dataclasses import dataclass
from typing import List, Tuple

from PIL import Image, ImageDraw

from ..core.entities import GameProfile, PlayerIdentity, WeightScore
from .assets import CardAssets
from .formatting import (
    format_networth,
    format_senither_weight,
    format_skill_average,
    format_slayer_xp,
    format_thousands,
)

Color = Tuple[int, int, int, int]

# Colors
BLACK: Color = (0, 0, 0, 255)
LIGHT_GRAY: Color = (137, 137, 137, 255)
DARK_GRAY: Color = (100, 100, 100, 255)

WATERMARK = "skyblock-stats.antonio32a.com"

SMALL = 20
LARGE = 30

AVATAR_POSITION = (20, 20)
NAME_POSITION = (80, 20)
ID_POSITION = (80, 50)
RIGHT_MARGIN = 15

STAT_LEFT = 20
STAT_TOP = 100
STAT_ROW_PITCH = 75
STAT_VALUE_OFFSET = 30

SKILL_CELL_WIDTH = 40
# Reading order of the 3x4 skill grid, catacombs takes the last cell
SKILL_GRID: Tuple[Tuple[str, Tuple[int, int]], ...] = (
    ("taming", (520, 105)),
    ("farming", (630, 105)),
    ("carpentry", (740, 105)),
    ("mining", (520, 165)),
    ("combat", (630, 165)),
    ("runecrafting", (740, 165)),
    ("foraging", (520, 225)),
    ("fishing", (630, 225)),
    ("social", (740, 225)),
    ("enchanting", (520, 285)),
    ("alchemy", (630, 285)),
    ("catacombs", (740, 285)),
)
AVERAGED_SKILLS = (
    "taming",
    "farming",
    "mining",
    "combat",
    "foraging",
    "fishing",
    "enchanting",
    "alchemy",
)
SKILL_AVERAGE_LEFT = 460
SKILL_AVERAGE_TOP = 345
SKILL_AVERAGE_WIDTH = 320

SLAYER_CELL_WIDTH = 100
SLAYER_ANCHORS: Tuple[Tuple[str, Tuple[int, int]], ...] = (
    ("zombie", (350, 105)),
    ("spider", (350, 165)),
    ("wolf", (350, 225)),
    ("enderman", (350, 285)),
    ("blaze", (350, 345)),
)


@dataclass(frozen=True)
class TextItem:
    """A piece of text placed on the card."""

    text: str
    position: Tuple[int, int]
    size: int
    color: Color


class CardRenderer:
    """Composites player data onto the banner template."""

    def __init__(self, assets: CardAssets):
        self.assets = assets

    @property
    def width(self) -> int:
        return self.assets.template.width

    @property
    def height(self) -> int:
        return self.assets.template.height

    def text_width(self, text: str, size: int) -> int:
        return int(self.assets.measure(text, size))

    def right_aligned_x(self, text: str, size: int) -> int:
        return self.width - RIGHT_MARGIN - self.text_width(text, size)

    def centered_x(self, text: str, size: int, left: int, cell_width: int) -> int:
        # Truncate toward zero so text wider than its cell shifts symmetrically
        return left + int((cell_width - self.text_width(text, size)) / 2)

    def layout(self, player: PlayerIdentity, profile: GameProfile, weight: WeightScore) -> List[TextItem]:
        """Compute every text item drawn on the card."""
        return (
            self._header_items(player, profile)
            + self._stat_items(profile, weight)
            + self._skill_items(profile)
            + [self._skill_average_item(profile)]
            + self._slayer_items(profile)
        )

    def _header_items(self, player: PlayerIdentity, profile: GameProfile) -> List[TextItem]:
        return [
            TextItem(player.name, NAME_POSITION, LARGE, BLACK),
            TextItem(player.id, ID_POSITION, SMALL, LIGHT_GRAY),
            TextItem(profile.name, (self.right_aligned_x(profile.name, LARGE), 20), LARGE, DARK_GRAY),
            TextItem(WATERMARK, (self.right_aligned_x(WATERMARK, SMALL), 50), SMALL, LIGHT_GRAY),
        ]

    def _stat_items(self, profile: GameProfile, weight: WeightScore) -> List[TextItem]:
        dungeons = profile.dungeons_or_empty()
        stats = [
            ("Networth", format_networth(profile.networth.total_networth)),
            ("Secrets", format_thousands(dungeons.secrets_found)),
            ("Senither Weight", format_senither_weight(profile.weight)),
            ("Lily Weight", format_thousands(weight.total)),
        ]

        items = []
        for index, (label, value) in enumerate(stats):
            top = STAT_TOP + STAT_ROW_PITCH * index
            items.append(TextItem(label, (STAT_LEFT, top), LARGE, BLACK))
            items.append(TextItem(value, (STAT_LEFT, top + STAT_VALUE_OFFSET), LARGE, DARK_GRAY))
        return items

    def skill_levels(self, profile: GameProfile) -> dict:
        """Map every skill on the grid to its level, catacombs included."""
        levels = {name: getattr(profile.skills, name).level for name, _ in SKILL_GRID if name != "catacombs"}
        levels["catacombs"] = profile.dungeons_or_empty().catacombs.skill.level
        return levels

    def _skill_items(self, profile: GameProfile) -> List[TextItem]:
        levels = self.skill_levels(profile)
        items = []
        for name, (left, top) in SKILL_GRID:
            text = str(levels[name])
            x = self.centered_x(text, LARGE, left, SKILL_CELL_WIDTH)
            items.append(TextItem(text, (x, top), LARGE, DARK_GRAY))
        return items

    def _skill_average_item(self, profile: GameProfile) -> TextItem:
        levels = [getattr(profile.skills, name).level for name in AVERAGED_SKILLS]
        text = format_skill_average(levels)
        x = self.centered_x(text, LARGE, SKILL_AVERAGE_LEFT, SKILL_AVERAGE_WIDTH)
        return TextItem(text, (x, SKILL_AVERAGE_TOP), LARGE, DARK_GRAY)

    def _slayer_items(self, profile: GameProfile) -> List[TextItem]:
        items = []
        for name, (left, top) in SLAYER_ANCHORS:
            text = format_slayer_xp(getattr(profile.slayer, name).xp)
            x = self.centered_x(text, LARGE, left, SLAYER_CELL_WIDTH)
            items.append(TextItem(text, (x, top), LARGE, DARK_GRAY))
        return items

    def render(
        self,
        player: PlayerIdentity,
        profile: GameProfile,
        weight: WeightScore,
        avatar: Image.Image,
    ) -> Image.Image:
        """Render the stat card. The template is never modified."""
        card = self.assets.template.copy()
        if avatar.mode != "RGBA":
            avatar = avatar.convert("RGBA")
        card.alpha_composite(avatar, dest=AVATAR_POSITION)

        draw = ImageDraw.Draw(card)
        for item in self.layout(player, profile, weight):
            draw.text(item.position, item.text, font=self.assets.font(item.size), fill=item.color)

        return card
