#!/usr/bin/env python3
"""
Skyblock Stats - Main entry point

Serves PNG stat banners for Hypixel Skyblock players over HTTP, or renders a
single banner to a file.
"""
import argparse
import asyncio
import logging
import sys

import hupper
import structlog
from aiohttp import web

from skyblock_stats.adapters.http.delivery import FORUM_SIGNATURE_USER_AGENT, encode_png, prepare_card
from skyblock_stats.adapters.http.server import create_app
from skyblock_stats.adapters.observability.metrics import initialize_metrics, shutdown_metrics
from skyblock_stats.adapters.upstream.client import SkyblockAPIClient
from skyblock_stats.application.card_service import StageError, StatCardService
from skyblock_stats.config import Config, get_config, init_config
from skyblock_stats.core.errors import SkyblockStatsError
from skyblock_stats.rendering import CardRenderer, load_assets


logger = logging.getLogger(__name__)


def configure_logging(config: Config) -> None:
    """Route stdlib and structlog output through one handler."""
    logging.basicConfig(
        level=config.log_level,
        format="%(message)s" if config.log_format == "json" else "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stdout,
    )

    # Set httpx and httpcore loggers to WARNING to reduce noise
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    renderer = (
        structlog.processors.JSONRenderer()
        if config.log_format == "json"
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def run_service():
    """Run the HTTP server (called by hupper in worker process)."""
    config = get_config()
    configure_logging(config)
    initialize_metrics(config)

    logger.info(f"Starting Skyblock Stats on {config.http_host}:{config.http_port}")
    try:
        web.run_app(create_app(config), host=config.http_host, port=config.http_port, print=None)
    finally:
        shutdown_metrics()
        logger.info("Skyblock Stats stopped")


def start_with_reloader():
    """Start the server with hot reload using hupper."""
    # hupper.start_reloader returns a reloader object in the monitor process
    # and returns None in the worker process
    reloader = hupper.start_reloader('skyblock_stats.main.run_service')

    if reloader:
        logger.info("Hot reload enabled, monitoring file changes...")


async def render_to_file(config: Config, username: str, output: str, forum: bool = False) -> None:
    """Render a single banner and write it as PNG."""
    service = StatCardService(SkyblockAPIClient.from_config(config), CardRenderer(load_assets()))
    try:
        card = await service.build_card(username)
    finally:
        await service.close()

    user_agent = FORUM_SIGNATURE_USER_AGENT if forum else ""
    with open(output, "wb") as f:
        f.write(encode_png(prepare_card(card, user_agent)))
    logger.info(f"Saved banner for {username} to {output}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Skyblock Stats banner service')
    subparsers = parser.add_subparsers(dest='command')

    serve = subparsers.add_parser('serve', help='Run the HTTP server')
    serve.add_argument('--no-reload', action='store_true', help='Disable hot reload in development')

    render = subparsers.add_parser('render', help='Render one banner to a PNG file')
    render.add_argument('username', help='Minecraft username')
    render.add_argument('output', help='Path for the output PNG')
    render.add_argument(
        '--forum',
        action='store_true',
        help='Downscale the banner the way forum signatures receive it'
    )
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    command = args.command or 'serve'

    config = init_config()

    if command == 'render':
        configure_logging(config)
        try:
            asyncio.run(render_to_file(config, args.username, args.output, forum=args.forum))
        except StageError as e:
            logger.error(f"{e.stage.message}: {e.error}")
            sys.exit(1)
        except SkyblockStatsError as e:
            logger.error(f"Could not render banner: {e}")
            sys.exit(1)
        return

    configure_logging(config)

    # Enable hot reload in development
    if config.is_development() and not getattr(args, 'no_reload', False):
        start_with_reloader()
    else:
        run_service()


if __name__ == "__main__":
    main()
