"""Adapters layer for external integrations."""
