"""Banner rendering package."""

from .assets import CardAssets, load_assets
from .renderer import CardRenderer, TextItem

__all__ = ["CardAssets", "CardRenderer", "TextItem", "load_assets"]
