"""Exception hierarchy for the Skyblock Stats banner service."""


class SkyblockStatsError(Exception):
    """Base exception for banner pipeline errors."""

    pass


class ValidationError(SkyblockStatsError):
    """The requested username is malformed."""

    pass


class UpstreamError(SkyblockStatsError):
    """An upstream service could not be reached or answered with garbage."""

    pass


class UpstreamStatusError(UpstreamError):
    """The profiles service answered with a non-200 status in its envelope."""

    def __init__(self, status: int):
        super().__init__(f"failed to get profile: {status}")
        self.status = status


class UpstreamFailureError(UpstreamError):
    """The weight service reported success=false."""

    pass


class EmptyResultError(UpstreamError):
    """An upstream service succeeded but returned nothing usable."""

    pass


class DecodeError(UpstreamError):
    """The avatar body is not a decodable image."""

    pass


class AssetError(SkyblockStatsError):
    """The bundled template or font could not be loaded."""

    pass
