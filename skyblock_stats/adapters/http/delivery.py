"""PNG delivery of rendered cards."""

import io

from aiohttp import web
from PIL import Image

from ..observability.metrics import get_metrics_provider

# Hypixel forum signatures are fetched with this exact user agent and must be
# smaller than the full card to fit.
FORUM_SIGNATURE_USER_AGENT = "XenForo/2.x (https://hypixel.net)"
FORUM_DOWNSCALE_RATIO = 1.35


def is_forum_signature(user_agent: str) -> bool:
    return user_agent == FORUM_SIGNATURE_USER_AGENT


def downscale_for_forum(card: Image.Image) -> Image.Image:
    size = (int(card.width / FORUM_DOWNSCALE_RATIO), int(card.height / FORUM_DOWNSCALE_RATIO))
    return card.resize(size, Image.Resampling.NEAREST)


def prepare_card(card: Image.Image, user_agent: str) -> Image.Image:
    """Downscale the card when it is requested as a forum signature."""
    if is_forum_signature(user_agent):
        return downscale_for_forum(card)
    return card


def encode_png(card: Image.Image) -> bytes:
    buffer = io.BytesIO()
    card.convert("RGBA").save(buffer, format="PNG")
    return buffer.getvalue()


def encode_and_respond(card: Image.Image, user_agent: str) -> web.Response:
    """Encode the card as PNG and wrap it in an ``image/png`` response."""
    downscaled = is_forum_signature(user_agent)
    body = encode_png(prepare_card(card, user_agent))

    metrics = get_metrics_provider()
    if metrics:
        metrics.record_card_rendered(downscaled)

    return web.Response(body=body, content_type="image/png")
