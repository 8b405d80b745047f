"""Application layer for the Skyblock Stats service."""

from .card_service import StatCardService, StageError, PipelineStage, validate_username

__all__ = ["StatCardService", "StageError", "PipelineStage", "validate_username"]
