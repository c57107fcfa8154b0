"""Pillow-backed offscreen surface for the local host."""

from __future__ import annotations

import asyncio
import io
from typing import Optional, Union

from PIL import Image, ImageDraw, ImageFont

from .host import CanvasSurface, RGBA

FontType = Union[ImageFont.ImageFont, ImageFont.FreeTypeFont]


def load_font(family: str, size_px: int) -> FontType:
    """Resolve a family through FreeType, falling back to Pillow's bundled face."""
    for candidate in (family, f"{family}.ttf", f"{family.lower()}.ttf"):
        try:
            return ImageFont.truetype(candidate, size_px)
        except OSError:
            continue
    return ImageFont.load_default(size=size_px)


class PillowCanvas(CanvasSurface):
    def __init__(self, width: int, height: int, font_family: Optional[str] = None):
        self.width = width
        self.height = height
        self.font_family = font_family
        self.image = Image.new("RGBA", (width, height), (0, 0, 0, 0))
        self.font: FontType = ImageFont.load_default()

    def set_font(self, family: str, size_px: int) -> None:
        self.font = load_font(self.font_family or family, size_px)

    def fill_rect(self, x: int, y: int, width: int, height: int, color: RGBA) -> None:
        overlay = Image.new("RGBA", self.image.size, (0, 0, 0, 0))
        ImageDraw.Draw(overlay).rectangle((x, y, x + width - 1, y + height - 1), fill=color)
        self._composite(overlay)

    def fill_text(self, text: str, x: int, y: int, color: RGBA) -> None:
        overlay = Image.new("RGBA", self.image.size, (0, 0, 0, 0))
        draw = ImageDraw.Draw(overlay)
        if isinstance(self.font, ImageFont.FreeTypeFont):
            draw.text((x, y), text, fill=color, font=self.font, anchor="ls")
        else:
            # Bitmap fonts only support top-left anchoring.
            top = y - (self.font.getbbox(text)[3])
            draw.text((x, top), text, fill=color, font=self.font)
        self._composite(overlay)

    async def encode_png(self) -> bytes:
        return await asyncio.to_thread(self._encode)

    def _composite(self, overlay: Image.Image) -> None:
        self.image = Image.alpha_composite(self.image, overlay)

    def _encode(self) -> bytes:
        buffer = io.BytesIO()
        self.image.save(buffer, format="PNG")
        return buffer.getvalue()
