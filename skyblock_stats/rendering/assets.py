"""Loading of the bundled template image and font."""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable

from PIL import Image, ImageFont

from ..core.errors import AssetError

ASSETS_DIR = Path(__file__).parent / "assets"
TEMPLATE_FILE = "template.png"
FONT_FILE = "SourceCodePro-Regular.ttf"
FONT_SIZES = (20, 30)


@dataclass(frozen=True)
class CardAssets:
    """The template and the font at every size the banner uses."""

    template: Image.Image
    fonts: Dict[int, ImageFont.FreeTypeFont]

    def font(self, size: int) -> ImageFont.FreeTypeFont:
        return self.fonts[size]

    def measure(self, text: str, size: int) -> float:
        """Width of ``text`` as the sum of its glyph advances."""
        return self.fonts[size].getlength(text)


def load_assets(assets_dir: Path = ASSETS_DIR, font_sizes: Iterable[int] = FONT_SIZES) -> CardAssets:
    """Load the template and font from disk.

    Raises:
        AssetError: If a file is missing or cannot be decoded
    """
    try:
        with Image.open(assets_dir / TEMPLATE_FILE) as template:
            template_rgba = template.convert("RGBA")
        fonts = {size: ImageFont.truetype(str(assets_dir / FONT_FILE), size) for size in font_sizes}
    except OSError as e:
        raise AssetError(f"Could not load banner assets from {assets_dir}: {e}") from e

    return CardAssets(template=template_rgba, fonts=fonts)
