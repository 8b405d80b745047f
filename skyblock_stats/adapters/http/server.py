"""HTTP surface of the banner service."""

from typing import Optional

from aiohttp import web
import structlog

from ...application.card_service import StageError, StatCardService, validate_username
from ...config import Config
from ...core.errors import ValidationError
from ..observability.metrics import get_metrics_provider
from .delivery import encode_and_respond

logger = structlog.get_logger()


class BannerServer:
    """aiohttp application serving banners by username."""

    def __init__(self, config: Config, service: StatCardService):
        self.config = config
        self.service = service
        self.app = web.Application()
        self.setup_routes()
        self.app.on_cleanup.append(self.on_cleanup)

    def setup_routes(self):
        """Set up all routes."""
        self.app.router.add_get('/', self.index)
        # '-' is not a word character so this never shadows a username
        self.app.router.add_get('/-/health', self.health)
        self.app.router.add_get('/{name}', self.banner)

    async def on_cleanup(self, app: web.Application):
        await self.service.close()

    async def index(self, request: web.Request) -> web.Response:
        """Redirect to the project page."""
        raise web.HTTPFound(self.config.project_url)

    async def health(self, request: web.Request) -> web.Response:
        return web.json_response({"status": "ok"})

    async def banner(self, request: web.Request) -> web.Response:
        """Render the banner for ``name``."""
        name = request.match_info['name']

        try:
            validate_username(name)
        except ValidationError:
            return web.Response(status=400, text="Bad Request")

        try:
            card = await self.service.build_card(name)
        except StageError as e:
            logger.error(
                "Banner request failed",
                stage=e.stage.label,
                username=name,
                error_type=type(e.error).__name__,
                error=str(e.error),
            )
            metrics = get_metrics_provider()
            if metrics:
                metrics.record_card_failure(e.stage.label, type(e.error).__name__)
            return web.Response(status=e.stage.status, text=e.stage.message)

        return encode_and_respond(card, request.headers.get("User-Agent", ""))


def create_app(config: Config, service: Optional[StatCardService] = None) -> web.Application:
    """Build the aiohttp application.

    Args:
        config: Application configuration
        service: Banner service, built from ``config`` when omitted

    Raises:
        AssetError: If the bundled template or font cannot be loaded
    """
    if service is None:
        from ...adapters.upstream.client import SkyblockAPIClient
        from ...rendering import CardRenderer, load_assets

        service = StatCardService(SkyblockAPIClient.from_config(config), CardRenderer(load_assets()))

    return BannerServer(config, service).app
