"""Control client for the mock upstream server.

This module provides a Python client and CLI for controlling the mock server,
making it easy to set up players and failure scenarios by hand.
"""

import asyncio
import json
from typing import Any, Dict, List, Optional

import click
import httpx


class MockUpstreamControlClient:
    """Client for controlling the mock upstream server."""

    def __init__(self, base_url: str = "http://localhost:8081"):
        self.base_url = base_url
        self.control_url = f"{base_url}/control"

    async def create_player(
        self,
        name: str,
        player_id: Optional[str] = None,
        profiles: Optional[List[Dict[str, Any]]] = None,
    ) -> Dict[str, Any]:
        """Create a new mock player."""
        async with httpx.AsyncClient() as client:
            data: Dict[str, Any] = {"name": name}
            if player_id:
                data["id"] = player_id
            if profiles is not None:
                data["profiles"] = profiles

            response = await client.post(f"{self.control_url}/players", json=data)
            response.raise_for_status()
            return response.json()

    async def set_profiles(self, player_id: str, profiles: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Replace a player's profiles."""
        async with httpx.AsyncClient() as client:
            response = await client.put(f"{self.control_url}/players/{player_id}/profiles", json=profiles)
            response.raise_for_status()
            return response.json()

    async def set_weight(self, player_id: str, weight: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        """Replace a player's weight payload."""
        async with httpx.AsyncClient() as client:
            response = await client.put(f"{self.control_url}/players/{player_id}/weight", json=weight)
            response.raise_for_status()
            return response.json()

    async def list_players(self) -> Dict[str, Any]:
        """List all mock players."""
        async with httpx.AsyncClient() as client:
            response = await client.get(f"{self.control_url}/players")
            response.raise_for_status()
            return response.json()

    async def delete_player(self, player_id: str) -> Dict[str, Any]:
        """Delete a mock player."""
        async with httpx.AsyncClient() as client:
            response = await client.delete(f"{self.control_url}/players/{player_id}")
            response.raise_for_status()
            return response.json()

    async def update_settings(
        self,
        request_delay: Optional[float] = None,
        profiles_status: Optional[int] = None,
        weight_success: Optional[bool] = None,
        broken_avatar: Optional[bool] = None,
    ) -> Dict[str, Any]:
        """Update server settings."""
        async with httpx.AsyncClient() as client:
            data: Dict[str, Any] = {}
            if request_delay is not None:
                data["request_delay"] = request_delay
            if profiles_status is not None:
                data["profiles_status"] = profiles_status
            if weight_success is not None:
                data["weight_success"] = weight_success
            if broken_avatar is not None:
                data["broken_avatar"] = broken_avatar

            response = await client.put(f"{self.control_url}/settings", json=data)
            response.raise_for_status()
            return response.json()

    async def reset_server(self) -> Dict[str, Any]:
        """Reset server to initial state."""
        async with httpx.AsyncClient() as client:
            response = await client.post(f"{self.control_url}/reset")
            response.raise_for_status()
            return response.json()


# CLI Commands
@click.group()
@click.option('--server-url', default='http://localhost:8081', help='Mock server URL')
@click.pass_context
def cli(ctx, server_url):
    """Mock upstream control CLI."""
    ctx.ensure_object(dict)
    ctx.obj['client'] = MockUpstreamControlClient(server_url)


@cli.command()
@click.argument('name')
@click.option('--id', 'player_id', help='Specific player id to use')
@click.option('--profiles-file', type=click.File('r'), help='JSON file with a list of profiles')
@click.pass_context
def create_player(ctx, name, player_id, profiles_file):
    """Create a new mock player."""
    client = ctx.obj['client']
    profiles = json.load(profiles_file) if profiles_file else None
    result = asyncio.run(client.create_player(name, player_id, profiles))
    click.echo(f"Created player: {result}")


@cli.command()
@click.pass_context
def list_players(ctx):
    """List all mock players."""
    client = ctx.obj['client']
    result = asyncio.run(client.list_players())

    players = result.get('players', [])
    if not players:
        click.echo("No players found")
        return

    for player in players:
        click.echo(f"\n{player['name']} ({player['id']})")
        click.echo(f"  Profiles: {', '.join(player['profiles']) or 'none'}")
        click.echo(f"  Weight: {'yes' if player['has_weight'] else 'no'}")


@cli.command()
@click.argument('player_id')
@click.pass_context
def delete_player(ctx, player_id):
    """Delete a mock player."""
    client = ctx.obj['client']
    asyncio.run(client.delete_player(player_id))
    click.echo(f"Deleted player {player_id}")


@cli.command()
@click.option('--delay', type=float, help='Request delay in seconds')
@click.option('--profiles-status', type=int, help='Envelope status returned by the profiles API')
@click.option('--weight-success/--weight-failure', default=None, help='Weight service success flag')
@click.option('--broken-avatar/--valid-avatar', default=None, help='Serve undecodable avatars')
@click.pass_context
def settings(ctx, delay, profiles_status, weight_success, broken_avatar):
    """Update server settings."""
    client = ctx.obj['client']
    result = asyncio.run(client.update_settings(
        request_delay=delay,
        profiles_status=profiles_status,
        weight_success=weight_success,
        broken_avatar=broken_avatar,
    ))
    click.echo(f"Settings updated: {result}")


@cli.command()
@click.pass_context
def reset(ctx):
    """Reset server to initial state."""
    client = ctx.obj['client']
    asyncio.run(client.reset_server())
    click.echo("Server reset")


if __name__ == '__main__':
    cli()
