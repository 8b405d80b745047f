"""Core entities for the Skyblock Stats banner service.

Every entity is parsed straight from an upstream JSON payload through its
``from_dict`` constructor. Parsing errors surface as ``KeyError``,
``TypeError`` or ``ValueError`` and are wrapped by the API client.
"""

import math
from dataclasses import dataclass
from functools import reduce
from typing import Any, Dict, Iterable, Optional, Tuple

from .errors import EmptyResultError


SKILL_NAMES: Tuple[str, ...] = (
    "farming",
    "mining",
    "combat",
    "foraging",
    "fishing",
    "enchanting",
    "alchemy",
    "carpentry",
    "runecrafting",
    "social",
    "taming",
)

SLAYER_NAMES: Tuple[str, ...] = ("zombie", "spider", "wolf", "enderman", "blaze")


def _finite_float(value: Any) -> float:
    """Convert to float, rejecting NaN and infinities that JSON decoders let through."""
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"expected a finite number, got {value!r}")
    return number


def _optional_float(value: Any) -> Optional[float]:
    return None if value is None else _finite_float(value)


@dataclass(frozen=True)
class PlayerIdentity:
    """A username resolved through the username directory."""

    name: str
    id: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlayerIdentity":
        return cls(name=str(data["name"]), id=str(data["id"]))

    def __str__(self) -> str:
        return f"PlayerIdentity({self.name}, {self.id})"


@dataclass(frozen=True)
class Skill:
    """Progress in a single skill."""

    xp: int
    level: int
    xp_current: int
    xp_for_next: int
    progress: float
    level_with_progress: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Skill":
        return cls(
            xp=int(data["xp"]),
            level=int(data["level"]),
            xp_current=int(data["xpCurrent"]),
            xp_for_next=int(data["xpForNext"]),
            progress=float(data["progress"]),
            level_with_progress=_optional_float(data.get("levelWithProgress")),
        )

    @classmethod
    def empty(cls) -> "Skill":
        return cls(xp=0, level=0, xp_current=0, xp_for_next=0, progress=0.0)


@dataclass(frozen=True)
class Skills:
    """All eleven profile skills."""

    farming: Skill
    mining: Skill
    combat: Skill
    foraging: Skill
    fishing: Skill
    enchanting: Skill
    alchemy: Skill
    carpentry: Skill
    runecrafting: Skill
    social: Skill
    taming: Skill

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Skills":
        return cls(**{name: Skill.from_dict(data[name]) for name in SKILL_NAMES})


@dataclass(frozen=True)
class Networth:
    """Networth summary. Totals are absent when the inventory API is disabled."""

    total_networth: Optional[float] = None
    purse: Optional[float] = None
    bank: Optional[float] = None
    no_inventory: Optional[bool] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Networth":
        no_inventory = data.get("no_inventory")
        return cls(
            total_networth=_optional_float(data.get("total_networth")),
            purse=_optional_float(data.get("purse")),
            bank=_optional_float(data.get("bank")),
            no_inventory=None if no_inventory is None else bool(no_inventory),
        )


@dataclass(frozen=True)
class SenitherWeight:
    """Senither weight with and without overflow."""

    total_weight: float
    total_weight_with_overflow: float

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SenitherWeight":
        return cls(
            total_weight=_finite_float(data["total_weight"]),
            total_weight_with_overflow=_finite_float(data["total_weight_with_overflow"]),
        )


@dataclass(frozen=True)
class Catacombs:
    skill: Skill
    highest_tier_completed: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Catacombs":
        return cls(
            skill=Skill.from_dict(data["skill"]),
            highest_tier_completed=data.get("highest_tier_completed"),
        )


@dataclass(frozen=True)
class Dungeons:
    """Dungeon summary of a profile."""

    secrets_found: int
    catacombs: Catacombs
    selected_class: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Dungeons":
        return cls(
            secrets_found=int(data["secrets_found"]),
            catacombs=Catacombs.from_dict(data["catacombs"]),
            selected_class=data.get("selected_class"),
        )

    @classmethod
    def empty(cls) -> "Dungeons":
        """All-zero record used for profiles that never entered a dungeon."""
        return cls(secrets_found=0, catacombs=Catacombs(skill=Skill.empty()))


@dataclass(frozen=True)
class Slayer:
    xp: int
    level: int
    xp_for_next: int
    progress: float

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Slayer":
        return cls(
            xp=int(data["xp"]),
            level=int(data["level"]),
            xp_for_next=int(data["xpForNext"]),
            progress=float(data["progress"]),
        )


@dataclass(frozen=True)
class Slayers:
    zombie: Slayer
    spider: Slayer
    wolf: Slayer
    enderman: Slayer
    blaze: Slayer

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Slayers":
        return cls(**{name: Slayer.from_dict(data[name]) for name in SLAYER_NAMES})


@dataclass(frozen=True)
class GameProfile:
    """One Skyblock save of a player."""

    id: str
    name: str
    last_save: int
    fairy_souls: int
    networth: Networth
    weight: SenitherWeight
    skills: Skills
    slayer: Slayers
    dungeons: Optional[Dungeons] = None
    username: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GameProfile":
        dungeons = data.get("dungeons")
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            last_save=int(data["last_save"]),
            fairy_souls=int(data["fairy_souls"]),
            networth=Networth.from_dict(data["networth"]),
            weight=SenitherWeight.from_dict(data["weight"]),
            skills=Skills.from_dict(data["skills"]),
            slayer=Slayers.from_dict(data["slayer"]),
            dungeons=None if dungeons is None else Dungeons.from_dict(dungeons),
            username=data.get("username"),
        )

    def dungeons_or_empty(self) -> Dungeons:
        """Get the dungeon summary, or an all-zero one when the profile has none."""
        if self.dungeons is None:
            return Dungeons.empty()
        return self.dungeons


@dataclass(frozen=True)
class WeightScore:
    """Lily weight of a player."""

    id: str
    total: float
    slayer_component: float

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WeightScore":
        return cls(
            id=str(data["uuid"]),
            total=_finite_float(data["total"]),
            slayer_component=_finite_float(data["slayer"]),
        )


def select_latest_profile(profiles: Iterable[GameProfile]) -> GameProfile:
    """Pick the most recently saved profile.

    On equal ``last_save`` the later profile wins.

    Raises:
        EmptyResultError: If there are no profiles at all
    """
    latest = reduce(
        lambda best, profile: profile if best is None or profile.last_save >= best.last_save else best,
        profiles,
        None,
    )
    if latest is None:
        raise EmptyResultError("no profiles found")
    return latest
