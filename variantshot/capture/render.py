"""Reference renderer: turns themed content into a Pillow image."""

from __future__ import annotations

from dataclasses import dataclass

from PIL import Image, ImageColor, ImageDraw, ImageFont

from ..harness.context import Themed


@dataclass(frozen=True)
class TextContent:
    text: str
    width: int = 320
    height: int = 96
    padding: int = 12


def render_surface(surface: Themed) -> Image.Image:
    content = surface.content
    context = surface.context
    if isinstance(content, Image.Image):
        return content.copy().convert("RGB")
    if isinstance(content, TextContent):
        return _render_text(content, context.background, context.foreground)
    if callable(content):
        image = content(context)
        if not isinstance(image, Image.Image):
            raise TypeError(f"Content callable returned {type(image).__name__}, expected PIL.Image.Image.")
        return image.convert("RGB")
    raise TypeError(f"Cannot render content of type {type(content).__name__}.")


def _render_text(content: TextContent, background: str, foreground: str) -> Image.Image:
    image = Image.new("RGB", (content.width, content.height), ImageColor.getrgb(background))
    draw = ImageDraw.Draw(image)
    font = ImageFont.load_default()
    draw.multiline_text(
        (content.padding, content.padding),
        content.text,
        fill=ImageColor.getrgb(foreground),
        font=font,
    )
    return image
