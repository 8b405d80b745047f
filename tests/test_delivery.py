"""Tests for PNG delivery and the forum signature downscale."""

import io

import pytest
from PIL import Image

from skyblock_stats.adapters.http.delivery import (
    FORUM_SIGNATURE_USER_AGENT,
    encode_and_respond,
    encode_png,
    is_forum_signature,
    prepare_card,
)

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


@pytest.fixture
def card():
    return Image.new("RGBA", (800, 400), (255, 255, 255, 255))


def decode(body: bytes) -> Image.Image:
    return Image.open(io.BytesIO(body))


@pytest.mark.parametrize(
    "user_agent, expected",
    [
        (FORUM_SIGNATURE_USER_AGENT, True),
        ("XenForo/2.x", False),
        ("xenforo/2.x (https://hypixel.net)", False),
        ("Mozilla/5.0 (X11; Linux x86_64)", False),
        ("", False),
    ],
)
def test_is_forum_signature(user_agent, expected):
    assert is_forum_signature(user_agent) is expected


def test_forum_signature_is_downscaled(card):
    assert prepare_card(card, FORUM_SIGNATURE_USER_AGENT).size == (592, 296)


def test_other_user_agents_get_full_size(card):
    assert prepare_card(card, "Mozilla/5.0") is card
    assert prepare_card(card, "") is card


def test_downscale_uses_nearest_neighbour():
    card = Image.new("RGBA", (800, 400), (10, 20, 30, 255))
    card.paste((200, 100, 50, 255), (0, 0, 400, 400))

    small = prepare_card(card, FORUM_SIGNATURE_USER_AGENT)
    colors = {color for _, color in small.getcolors(maxcolors=16)}
    assert colors == {(10, 20, 30, 255), (200, 100, 50, 255)}


def test_encode_png(card):
    body = encode_png(card)

    assert body.startswith(PNG_SIGNATURE)
    image = decode(body)
    assert image.size == (800, 400)
    assert image.mode == "RGBA"


def test_encode_and_respond(card):
    response = encode_and_respond(card, "curl/8.0")

    assert response.status == 200
    assert response.content_type == "image/png"
    assert decode(response.body).size == (800, 400)


def test_encode_and_respond_for_forum(card):
    response = encode_and_respond(card, FORUM_SIGNATURE_USER_AGENT)
    assert decode(response.body).size == (592, 296)
