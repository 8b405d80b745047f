"""Tests for the upstream API client."""

import json
import struct
import zlib

import pytest
import httpx
import respx

from mock_upstream.payloads import profiles_envelope, weight_envelope, weight_payload
from skyblock_stats.adapters.observability.metrics import MetricsProvider
from skyblock_stats.adapters.upstream import SkyblockAPIClient
from skyblock_stats.adapters.upstream import client as client_module
from skyblock_stats.core.errors import (
    DecodeError,
    EmptyResultError,
    UpstreamError,
    UpstreamFailureError,
    UpstreamStatusError,
)

from tests.factories import PlayerFactory, ProfileFactory, make_avatar, png_bytes

PLAYER = PlayerFactory.create("Steve", "abc123")


def make_client(**kwargs) -> SkyblockAPIClient:
    return SkyblockAPIClient("profiles_key", "weight_key", **kwargs)


def png_chunk(chunk_type: bytes, body: bytes) -> bytes:
    crc = zlib.crc32(chunk_type + body) & 0xFFFFFFFF
    return struct.pack(">I", len(body)) + chunk_type + body + struct.pack(">I", crc)


def split_idat_png(body: bytes, second_type: bytes) -> bytes:
    """Split the image data of a PNG in two, giving the second chunk ``second_type``."""
    out, pos = [body[:8]], 8
    while pos < len(body):
        (length,) = struct.unpack(">I", body[pos:pos + 4])
        chunk_type = body[pos + 4:pos + 8]
        data = body[pos + 8:pos + 8 + length]
        pos += 12 + length
        if chunk_type == b"IDAT":
            half = len(data) // 2
            out.append(png_chunk(b"IDAT", data[:half]))
            out.append(png_chunk(second_type, data[half:]))
        else:
            out.append(png_chunk(chunk_type, data))
    return b"".join(out)


class TestSkyblockAPIClient:
    """Test cases for SkyblockAPIClient."""

    def test_initialization(self):
        """Test client initialization."""
        client = make_client()
        assert client.profiles_api_key == "profiles_key"
        assert client.weight_api_key == "weight_key"
        assert client.request_timeout == 10.0
        assert client.avatar_size == 50

    def test_from_config(self, test_config):
        client = SkyblockAPIClient.from_config(test_config)
        assert client.profiles_api_key == "profiles-test-key"
        assert client.weight_api_key == "weight-test-key"
        assert client.weight_url == test_config.weight_api_url

    def test_trailing_slashes_are_stripped(self):
        client = make_client(weight_url="http://localhost:8081/weight/")
        assert client.weight_url == "http://localhost:8081/weight"

    @pytest.mark.asyncio
    async def test_context_manager(self):
        """Test async context manager functionality."""
        async with make_client() as client:
            assert client.client is not None
        assert client.client.is_closed


class TestResolve:
    """Username directory lookups."""

    @pytest.mark.asyncio
    async def test_resolve_success(self):
        async with respx.mock() as router:
            route = router.get("https://api.mojang.com/users/profiles/minecraft/Steve").mock(
                return_value=httpx.Response(200, json={"name": "Steve", "id": "abc123"})
            )
            async with make_client() as client:
                player = await client.resolve("Steve")

        assert route.called
        assert player.name == "Steve"
        assert player.id == "abc123"

    @pytest.mark.asyncio
    async def test_resolve_unknown_player(self):
        async with respx.mock() as router:
            router.get("https://api.mojang.com/users/profiles/minecraft/Nobody").mock(
                return_value=httpx.Response(204)
            )
            async with make_client() as client:
                with pytest.raises(UpstreamError) as exc_info:
                    await client.resolve("Nobody")

        assert "204" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_resolve_malformed_body(self):
        async with respx.mock() as router:
            router.get("https://api.mojang.com/users/profiles/minecraft/Steve").mock(
                return_value=httpx.Response(200, json={"name": "Steve"})
            )
            async with make_client() as client:
                with pytest.raises(UpstreamError):
                    await client.resolve("Steve")

    @pytest.mark.asyncio
    async def test_resolve_not_json(self):
        async with respx.mock() as router:
            router.get("https://api.mojang.com/users/profiles/minecraft/Steve").mock(
                return_value=httpx.Response(200, text="<html>oops</html>")
            )
            async with make_client() as client:
                with pytest.raises(UpstreamError) as exc_info:
                    await client.resolve("Steve")

        assert "Malformed directory response" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_transport_failure(self):
        async with respx.mock() as router:
            router.get("https://api.mojang.com/users/profiles/minecraft/Steve").mock(
                side_effect=httpx.ConnectError("Connection failed")
            )
            async with make_client() as client:
                with pytest.raises(UpstreamError) as exc_info:
                    await client.resolve("Steve")

        assert "Request to directory failed" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_timeout(self):
        async with respx.mock() as router:
            router.get("https://api.mojang.com/users/profiles/minecraft/Steve").mock(
                side_effect=httpx.ReadTimeout("timed out")
            )
            async with make_client() as client:
                with pytest.raises(UpstreamError):
                    await client.resolve("Steve")


class TestFetchProfiles:
    """Profiles API envelope handling."""

    @pytest.mark.asyncio
    async def test_returns_latest_profile_and_forwards_key(self):
        profiles = [
            ProfileFactory.payload(name="Old", last_save=100),
            ProfileFactory.payload(name="New", last_save=500),
            ProfileFactory.payload(name="Middle", last_save=300),
        ]
        async with respx.mock() as router:
            route = router.get(host="api.altpapier.dev", path="/v1/profiles/abc123").mock(
                return_value=httpx.Response(200, json=profiles_envelope(profiles))
            )
            async with make_client() as client:
                profile = await client.fetch_profiles(PLAYER)

        assert profile.name == "New"
        assert route.calls.last.request.url.params["key"] == "profiles_key"

    @pytest.mark.asyncio
    async def test_envelope_status_error(self):
        async with respx.mock() as router:
            router.get(host="api.altpapier.dev", path="/v1/profiles/abc123").mock(
                return_value=httpx.Response(403, json=profiles_envelope(None, status=403))
            )
            async with make_client() as client:
                with pytest.raises(UpstreamStatusError) as exc_info:
                    await client.fetch_profiles(PLAYER)

        assert exc_info.value.status == 403

    @pytest.mark.asyncio
    async def test_empty_profile_list(self):
        async with respx.mock() as router:
            router.get(host="api.altpapier.dev", path="/v1/profiles/abc123").mock(
                return_value=httpx.Response(200, json=profiles_envelope([]))
            )
            async with make_client() as client:
                with pytest.raises(EmptyResultError):
                    await client.fetch_profiles(PLAYER)

    @pytest.mark.asyncio
    async def test_missing_profile_list(self):
        async with respx.mock() as router:
            router.get(host="api.altpapier.dev", path="/v1/profiles/abc123").mock(
                return_value=httpx.Response(200, json=profiles_envelope(None))
            )
            async with make_client() as client:
                with pytest.raises(EmptyResultError):
                    await client.fetch_profiles(PLAYER)

    @pytest.mark.asyncio
    async def test_malformed_profile(self):
        broken = ProfileFactory.payload()
        del broken["slayer"]
        async with respx.mock() as router:
            router.get(host="api.altpapier.dev", path="/v1/profiles/abc123").mock(
                return_value=httpx.Response(200, json=profiles_envelope([broken]))
            )
            async with make_client() as client:
                with pytest.raises(UpstreamError) as exc_info:
                    await client.fetch_profiles(PLAYER)

        assert "Malformed profile" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_non_finite_networth(self):
        body = json.dumps(profiles_envelope([ProfileFactory.payload(total_networth=float("nan"))]))
        async with respx.mock() as router:
            router.get(host="api.altpapier.dev", path="/v1/profiles/abc123").mock(
                return_value=httpx.Response(200, content=body, headers={"Content-Type": "application/json"})
            )
            async with make_client() as client:
                with pytest.raises(UpstreamError) as exc_info:
                    await client.fetch_profiles(PLAYER)

        assert "Malformed profile" in str(exc_info.value)


class TestFetchWeight:
    """Weight service envelope handling."""

    @pytest.mark.asyncio
    async def test_success(self):
        async with respx.mock() as router:
            route = router.get(host="lilyweight.antonio32a.workers.dev", path="/abc123").mock(
                return_value=httpx.Response(200, json=weight_envelope(weight_payload("abc123", total=4321.5)))
            )
            async with make_client() as client:
                weight = await client.fetch_weight(PLAYER)

        assert weight.id == "abc123"
        assert weight.total == 4321.5
        assert route.calls.last.request.url.params["key"] == "weight_key"

    @pytest.mark.asyncio
    async def test_success_false(self):
        async with respx.mock() as router:
            router.get(host="lilyweight.antonio32a.workers.dev", path="/abc123").mock(
                return_value=httpx.Response(400, json=weight_envelope(None, success=False))
            )
            async with make_client() as client:
                with pytest.raises(UpstreamFailureError):
                    await client.fetch_weight(PLAYER)

    @pytest.mark.asyncio
    async def test_success_without_data(self):
        async with respx.mock() as router:
            router.get(host="lilyweight.antonio32a.workers.dev", path="/abc123").mock(
                return_value=httpx.Response(200, json=weight_envelope(None))
            )
            async with make_client() as client:
                with pytest.raises(EmptyResultError):
                    await client.fetch_weight(PLAYER)

    @pytest.mark.asyncio
    async def test_configured_host(self):
        async with respx.mock() as router:
            route = router.get(host="lily.antonio32a.com", path="/abc123").mock(
                return_value=httpx.Response(200, json=weight_envelope(weight_payload("abc123")))
            )
            async with make_client(weight_url="https://lily.antonio32a.com") as client:
                await client.fetch_weight(PLAYER)

        assert route.called

    @pytest.mark.asyncio
    async def test_non_finite_total(self):
        body = json.dumps(weight_envelope(weight_payload("abc123", total=float("inf"))))
        async with respx.mock() as router:
            router.get(host="lilyweight.antonio32a.workers.dev", path="/abc123").mock(
                return_value=httpx.Response(200, content=body, headers={"Content-Type": "application/json"})
            )
            async with make_client() as client:
                with pytest.raises(UpstreamError) as exc_info:
                    await client.fetch_weight(PLAYER)

        assert "Malformed weight response" in str(exc_info.value)


class TestFetchAvatar:
    """Avatar download and decoding."""

    @pytest.mark.asyncio
    async def test_decodes_to_rgba(self):
        body = png_bytes(make_avatar().convert("RGB"))
        async with respx.mock() as router:
            router.get("https://crafthead.net/avatar/abc123/50").mock(
                return_value=httpx.Response(200, content=body, headers={"Content-Type": "image/png"})
            )
            async with make_client() as client:
                avatar = await client.fetch_avatar(PLAYER)

        assert avatar.mode == "RGBA"
        assert avatar.size == (50, 50)

    @pytest.mark.asyncio
    async def test_undecodable_body(self):
        async with respx.mock() as router:
            router.get("https://crafthead.net/avatar/abc123/50").mock(
                return_value=httpx.Response(200, content=b"definitely not a png")
            )
            async with make_client() as client:
                with pytest.raises(DecodeError):
                    await client.fetch_avatar(PLAYER)

    @pytest.mark.asyncio
    async def test_error_status(self):
        async with respx.mock() as router:
            router.get("https://crafthead.net/avatar/abc123/50").mock(
                return_value=httpx.Response(502, text="Bad Gateway")
            )
            async with make_client() as client:
                with pytest.raises(UpstreamError) as exc_info:
                    await client.fetch_avatar(PLAYER)

        assert not isinstance(exc_info.value, DecodeError)

    @pytest.mark.asyncio
    async def test_corrupt_chunk_stream(self):
        body = split_idat_png(png_bytes(make_avatar()), b"\x00\x01\x02\x03")
        async with respx.mock() as router:
            router.get("https://crafthead.net/avatar/abc123/50").mock(
                return_value=httpx.Response(200, content=body, headers={"Content-Type": "image/png"})
            )
            async with make_client() as client:
                with pytest.raises(DecodeError):
                    await client.fetch_avatar(PLAYER)

    @pytest.mark.asyncio
    async def test_truncated_image_data(self):
        body = png_bytes(make_avatar())
        iend = body.rindex(b"IEND") - 4
        truncated = body[:iend - 20]
        async with respx.mock() as router:
            router.get("https://crafthead.net/avatar/abc123/50").mock(
                return_value=httpx.Response(200, content=truncated)
            )
            async with make_client() as client:
                with pytest.raises(DecodeError):
                    await client.fetch_avatar(PLAYER)


class TestCallMetrics:
    """Every upstream call is timed through the metrics provider."""

    @pytest.fixture
    def recorded(self, monkeypatch, test_config):
        provider = MetricsProvider(test_config)
        calls = []
        monkeypatch.setattr(provider, "record_upstream_call", lambda **kwargs: calls.append(kwargs))
        monkeypatch.setattr(client_module, "get_metrics_provider", lambda: provider)
        return calls

    @pytest.mark.asyncio
    async def test_records_status(self, recorded):
        async with respx.mock() as router:
            router.get("https://api.mojang.com/users/profiles/minecraft/Steve").mock(
                return_value=httpx.Response(200, json={"name": "Steve", "id": "abc123"})
            )
            async with make_client() as client:
                await client.resolve("Steve")

        assert len(recorded) == 1
        assert recorded[0]["service"] == "directory"
        assert recorded[0]["status_code"] == 200
        assert recorded[0]["error_type"] is None
        assert recorded[0]["duration"] >= 0

    @pytest.mark.asyncio
    async def test_records_transport_error(self, recorded):
        async with respx.mock() as router:
            router.get("https://crafthead.net/avatar/abc123/50").mock(
                side_effect=httpx.ConnectError("Connection failed")
            )
            async with make_client() as client:
                with pytest.raises(UpstreamError):
                    await client.fetch_avatar(PLAYER)

        assert len(recorded) == 1
        assert recorded[0]["service"] == "avatar"
        assert recorded[0]["status_code"] == 0
        assert recorded[0]["error_type"] == "ConnectError"

    @pytest.mark.asyncio
    async def test_without_provider(self, monkeypatch):
        monkeypatch.setattr(client_module, "get_metrics_provider", lambda: None)
        async with respx.mock() as router:
            router.get("https://api.mojang.com/users/profiles/minecraft/Steve").mock(
                return_value=httpx.Response(200, json={"name": "Steve", "id": "abc123"})
            )
            async with make_client() as client:
                player = await client.resolve("Steve")

        assert player.id == "abc123"
