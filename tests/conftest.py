"""Shared pytest fixtures for the Skyblock Stats tests."""

import pytest

from skyblock_stats.config import Config, Environment
from skyblock_stats.rendering import CardRenderer, load_assets

from tests.factories import PlayerFactory, ProfileFactory, WeightFactory, make_avatar


@pytest.fixture
def test_config():
    """Configuration pointing at the real upstream hosts, never contacted in tests."""
    return Config(
        profiles_api_key="profiles-test-key",
        weight_api_key="weight-test-key",
        environment=Environment.CI,
    )


@pytest.fixture(scope="session")
def card_assets():
    return load_assets()


@pytest.fixture
def renderer(card_assets):
    return CardRenderer(card_assets)


@pytest.fixture
def player():
    return PlayerFactory.create("TestPlayer", "0123456789abcdef0123456789abcdef")


@pytest.fixture
def profile():
    return ProfileFactory.create(
        name="Apple",
        skill_levels={
            "taming": 10, "farming": 20, "mining": 30, "combat": 40,
            "foraging": 50, "fishing": 60, "enchanting": 70, "alchemy": 80,
            "carpentry": 5, "runecrafting": 6, "social": 7,
        },
        slayer_xp={"zombie": 999, "spider": 1500, "wolf": 2_340_000, "enderman": 0, "blaze": 12_000},
    )


@pytest.fixture
def weight(player):
    return WeightFactory.create(player.id)


@pytest.fixture
def avatar():
    return make_avatar()
