"""Mock upstream server for local development and testing.

This module serves the username directory, profiles API, weight service and
avatar renderer from a single aiohttp application. Point the banner service
at it with:

    DIRECTORY_API_URL=http://localhost:8081
    PROFILES_API_URL=http://localhost:8081
    WEIGHT_API_URL=http://localhost:8081/weight
    AVATAR_API_URL=http://localhost:8081

Players, their profiles and failure modes are managed through the
``/control`` endpoints.
"""

import asyncio
import hashlib
import io
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from aiohttp import web
from PIL import Image
import structlog

from .payloads import profile_payload, profiles_envelope, weight_envelope, weight_payload

logger = structlog.get_logger()


@dataclass
class MockPlayer:
    """Mock player data."""
    name: str
    id: str
    profiles: List[Dict[str, Any]] = field(default_factory=list)
    weight: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "id": self.id,
            "profiles": [profile["name"] for profile in self.profiles],
            "has_weight": self.weight is not None,
        }


def avatar_png(player_id: str, size: int) -> bytes:
    """Solid square avatar whose color is derived from the player id."""
    digest = hashlib.sha1(player_id.encode()).digest()
    image = Image.new("RGBA", (size, size), (digest[0], digest[1], digest[2], 255))
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


class MockUpstreamServer:
    """Mock upstream server with control endpoints."""

    def __init__(self, port: int = 8081):
        self.port = port
        self.app = web.Application()
        self.players: Dict[str, MockPlayer] = {}
        self.request_delay: float = 0
        self.profiles_status: int = 200  # Envelope status of the profiles API
        self.weight_success: bool = True
        self.broken_avatar: bool = False
        self.setup_routes()

    def setup_routes(self):
        """Set up all API routes."""
        # Upstream endpoints
        self.app.router.add_get('/users/profiles/minecraft/{username}', self.get_player)
        self.app.router.add_get('/v1/profiles/{player_id}', self.get_profiles)
        self.app.router.add_get('/weight/{player_id}', self.get_weight)
        self.app.router.add_get('/avatar/{player_id}/{size}', self.get_avatar)

        # Control endpoints
        self.app.router.add_post('/control/players', self.create_player)
        self.app.router.add_get('/control/players', self.list_players)
        self.app.router.add_put('/control/players/{player_id}/profiles', self.set_profiles)
        self.app.router.add_put('/control/players/{player_id}/weight', self.set_weight)
        self.app.router.add_delete('/control/players/{player_id}', self.delete_player)
        self.app.router.add_put('/control/settings', self.update_settings)
        self.app.router.add_post('/control/reset', self.reset_server)

    async def apply_request_delay(self):
        """Apply configured request delay."""
        if self.request_delay > 0:
            await asyncio.sleep(self.request_delay)

    def find_player_by_name(self, username: str) -> Optional[MockPlayer]:
        for player in self.players.values():
            if player.name.lower() == username.lower():
                return player
        return None

    # Upstream endpoints
    async def get_player(self, request: web.Request) -> web.Response:
        """Mock the username directory."""
        await self.apply_request_delay()

        player = self.find_player_by_name(request.match_info['username'])
        if player is None:
            return web.json_response(
                {"errorMessage": f"Couldn't find any profile with name {request.match_info['username']}"},
                status=404
            )
        return web.json_response({"name": player.name, "id": player.id})

    async def get_profiles(self, request: web.Request) -> web.Response:
        """Mock the profiles API."""
        await self.apply_request_delay()

        if not request.query.get('key'):
            return web.json_response(profiles_envelope(None, status=403), status=403)

        player = self.players.get(request.match_info['player_id'])
        if player is None:
            return web.json_response(profiles_envelope(None, status=404), status=404)

        if self.profiles_status != 200:
            return web.json_response(profiles_envelope(None, status=self.profiles_status))

        return web.json_response(profiles_envelope(player.profiles))

    async def get_weight(self, request: web.Request) -> web.Response:
        """Mock the lily weight service."""
        await self.apply_request_delay()

        player = self.players.get(request.match_info['player_id'])
        if not request.query.get('key') or player is None or not self.weight_success:
            return web.json_response(weight_envelope(None, success=False), status=400)

        return web.json_response(weight_envelope(player.weight))

    async def get_avatar(self, request: web.Request) -> web.Response:
        """Mock the avatar renderer."""
        await self.apply_request_delay()

        if self.broken_avatar:
            return web.Response(body=b"not an image", content_type="image/png")

        try:
            size = int(request.match_info['size'])
        except ValueError:
            return web.Response(status=400, text="Bad size")

        return web.Response(body=avatar_png(request.match_info['player_id'], size), content_type="image/png")

    # Control endpoints
    async def create_player(self, request: web.Request) -> web.Response:
        """Create a new mock player with one default profile and a weight."""
        data = await request.json()

        player_id = data.get("id", uuid.uuid4().hex)
        player = MockPlayer(
            name=data["name"],
            id=player_id,
            profiles=data.get("profiles", [profile_payload(username=data["name"])]),
            weight=data.get("weight", weight_payload(player_id)),
        )
        self.players[player_id] = player

        logger.info("Created mock player", name=player.name, player_id=player_id)

        return web.json_response(player.to_dict())

    async def list_players(self, request: web.Request) -> web.Response:
        """List all mock players."""
        return web.json_response({"players": [player.to_dict() for player in self.players.values()]})

    async def set_profiles(self, request: web.Request) -> web.Response:
        """Replace a player's profiles."""
        player = self.players.get(request.match_info['player_id'])
        if player is None:
            return web.json_response({"error": "Player not found"}, status=404)

        player.profiles = await request.json()
        return web.json_response(player.to_dict())

    async def set_weight(self, request: web.Request) -> web.Response:
        """Replace a player's weight payload. ``null`` or an empty body removes it."""
        player = self.players.get(request.match_info['player_id'])
        if player is None:
            return web.json_response({"error": "Player not found"}, status=404)

        player.weight = await request.json() if request.body_exists else None
        return web.json_response(player.to_dict())

    async def delete_player(self, request: web.Request) -> web.Response:
        """Delete a mock player."""
        player_id = request.match_info['player_id']

        if player_id not in self.players:
            return web.json_response({"error": "Player not found"}, status=404)

        del self.players[player_id]
        logger.info("Deleted mock player", player_id=player_id)

        return web.json_response({"status": "deleted"})

    def settings(self) -> Dict[str, Any]:
        return {
            "request_delay": self.request_delay,
            "profiles_status": self.profiles_status,
            "weight_success": self.weight_success,
            "broken_avatar": self.broken_avatar,
        }

    async def update_settings(self, request: web.Request) -> web.Response:
        """Update server settings."""
        data = await request.json()

        if "request_delay" in data:
            self.request_delay = float(data["request_delay"])
        if "profiles_status" in data:
            self.profiles_status = int(data["profiles_status"])
        if "weight_success" in data:
            self.weight_success = bool(data["weight_success"])
        if "broken_avatar" in data:
            self.broken_avatar = bool(data["broken_avatar"])

        logger.info("Updated server settings", **self.settings())

        return web.json_response(self.settings())

    async def reset_server(self, request: web.Request) -> web.Response:
        """Reset server to initial state."""
        self.players.clear()
        self.request_delay = 0
        self.profiles_status = 200
        self.weight_success = True
        self.broken_avatar = False

        logger.info("Reset mock server to initial state")

        return web.json_response({"status": "reset"})

    def run(self):
        """Run the mock server."""
        logger.info("Starting mock upstream server", port=self.port)
        web.run_app(self.app, host='0.0.0.0', port=self.port)


def main():
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(description='Mock upstream server')
    parser.add_argument('--port', type=int, default=8081, help='Port to run on')
    args = parser.parse_args()

    server = MockUpstreamServer(port=args.port)
    server.run()


if __name__ == '__main__':
    main()
