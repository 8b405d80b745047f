"""Builders for upstream JSON payloads.

Shared by the mock server and the test suite so both speak exactly the
shape the real services return.
"""

from typing import Any, Dict, List, Optional

SKILLS = (
    "farming", "mining", "combat", "foraging", "fishing", "enchanting",
    "alchemy", "carpentry", "runecrafting", "social", "taming",
)
SLAYERS = ("zombie", "spider", "wolf", "enderman", "blaze")


def skill_payload(level: int = 0, xp: int = 0) -> Dict[str, Any]:
    return {
        "xp": xp,
        "level": level,
        "xpCurrent": 0,
        "xpForNext": 100,
        "progress": 0.0,
        "levelWithProgress": float(level),
    }


def slayer_payload(xp: int = 0, level: int = 0) -> Dict[str, Any]:
    return {"xp": xp, "level": level, "xpForNext": 5, "progress": 0.0}


def dungeons_payload(secrets_found: int = 0, catacombs_level: int = 0) -> Dict[str, Any]:
    return {
        "selected_class": "mage",
        "secrets_found": secrets_found,
        "catacombs": {
            "skill": skill_payload(catacombs_level),
            "highest_tier_completed": "F7",
        },
    }


def profile_payload(
    name: str = "Apple",
    last_save: int = 1_650_000_000_000,
    profile_id: Optional[str] = None,
    username: str = "TestPlayer",
    total_networth: Optional[float] = 1_234_567.0,
    skill_levels: Optional[Dict[str, int]] = None,
    slayer_xp: Optional[Dict[str, int]] = None,
    dungeons: Optional[Dict[str, Any]] = None,
    total_weight: float = 5432.1,
    total_weight_with_overflow: float = 6543.2,
) -> Dict[str, Any]:
    """Build one entry of the profiles API ``data`` list."""
    skill_levels = skill_levels or {}
    slayer_xp = slayer_xp or {}
    networth: Dict[str, Any] = {"no_inventory": total_networth is None}
    if total_networth is not None:
        networth.update({"total_networth": total_networth, "purse": 1000.0, "bank": 2000.0})

    return {
        "username": username,
        "id": profile_id or f"profile-{name.lower()}",
        "name": name,
        "last_save": last_save,
        "fairy_souls": 200,
        "networth": networth,
        "weight": {
            "total_weight": total_weight,
            "total_weight_with_overflow": total_weight_with_overflow,
        },
        "skills": {skill: skill_payload(skill_levels.get(skill, 0)) for skill in SKILLS},
        "dungeons": dungeons,
        "slayer": {slayer: slayer_payload(slayer_xp.get(slayer, 0)) for slayer in SLAYERS},
    }


def profiles_envelope(profiles: Optional[List[Dict[str, Any]]], status: int = 200) -> Dict[str, Any]:
    return {"status": status, "data": profiles}


def weight_payload(player_id: str, total: float = 12345.6, slayer: float = 789.0) -> Dict[str, Any]:
    return {"uuid": player_id, "total": total, "slayer": slayer}


def weight_envelope(data: Optional[Dict[str, Any]], success: bool = True) -> Dict[str, Any]:
    return {"success": success, "data": data}
