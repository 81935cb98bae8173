import colorsys
import os
import zlib
from functools import lru_cache
from typing import List, NamedTuple, Optional, Sequence

from PIL import Image, ImageDraw, ImageFont

from siv.cells import Cell, Row
from siv.settings import SivSettings


DEFAULT_CELL_SIZE = 32
BACKGROUND = (0, 0, 0)


class CellLayout(NamedTuple):
    lines: List[str]
    font_size: int
    line_height: int
    x_offset: int


def layout_text(text: str) -> CellLayout:
    """
    Break an upper-cased token into lines and pick a font size for it.
    Sizes are relative to a 32 pixel cell.
    """
    length = len(text)
    if length <= 2:
        return CellLayout([text], 24, 30, 0)
    if length == 3:
        return CellLayout([text], 14, 21, 1)
    if length == 4:
        return CellLayout([text[:2], text[2:]], 14, 14, 1)
    if length <= 6:
        return CellLayout([text], 14, 14, 1)
    if length == 7:
        return CellLayout([text[:3], text[3:5], text[5:]], 11, 10, 2)
    if length <= 9:
        return CellLayout([text[:3], text[3:6], text[6:]], 11, 10, 2)
    return CellLayout([text[:3], text[3:6], text[6:8] + "…"], 11, 10, 2)


def cell_color(text: str) -> tuple:
    """Pale colour with a hue derived from *text*; stable across runs."""
    hue = zlib.crc32(text.encode("utf8")) / 2**32
    r, g, b = colorsys.hsv_to_rgb(hue, 0.2, 1.0)
    return int(r * 255), int(g * 255), int(b * 255)


@lru_cache(maxsize=64)
def _load_font(font_path: Optional[str], size: int):
    if font_path:
        try:
            return ImageFont.truetype(font_path, size)
        except OSError:
            pass
    return ImageFont.load_default(size=size)


@lru_cache(maxsize=256)
def _load_tile(tiles_dir: Optional[str], value: str, size: int) -> Optional[Image.Image]:
    if not tiles_dir or not value:
        return None
    path = os.path.join(tiles_dir, f"{value}.png")
    if not os.path.isfile(path):
        return None
    with Image.open(path) as tile:
        return tile.convert("RGBA").resize((size, size))


class GridPainter:
    """Draws cell rows onto a Pillow image."""

    def __init__(self, settings: Optional[SivSettings] = None) -> None:
        settings = settings or SivSettings()
        self.cell_size = settings.cell_size
        self.font_path = settings.font_path
        self.tiles_dir = settings.tiles_dir

    def draw_cell(self, image: Image.Image, cell: Cell, x: int, y: int) -> None:
        if cell.is_empty:
            return
        text = cell.value.upper()
        tile = _load_tile(self.tiles_dir, text, self.cell_size)
        if tile is not None:
            image.paste(tile, (x, y), tile)
            return

        layout = layout_text(text)
        scale = self.cell_size / DEFAULT_CELL_SIZE
        font = _load_font(self.font_path, max(1, round(layout.font_size * scale)))
        spacing = max(0, round((layout.line_height - layout.font_size) * scale))

        draw = ImageDraw.Draw(image)
        draw.multiline_text(
            (x + self.cell_size / 2, y + (self.cell_size - 2 * scale) / 2),
            "\n".join(layout.lines),
            font=font,
            fill=cell_color(text),
            anchor="mm",
            align="center",
            spacing=spacing,
        )

    def draw_row(self, image: Image.Image, row: Row, y: int) -> None:
        for index, cell in enumerate(row):
            self.draw_cell(image, cell, index * self.cell_size, y)

    def to_image(self, grid: Sequence[Row]) -> Image.Image:
        """Render *grid* top to bottom on a black background."""
        longest = max((len(row) for row in grid), default=0)
        size = (self.cell_size * longest, self.cell_size * len(grid))
        image = Image.new("RGB", size, BACKGROUND)
        if longest == 0:
            return image
        for index, row in enumerate(grid):
            self.draw_row(image, row, index * self.cell_size)
        return image


def draw_grid(grid: Sequence[Row], settings: Optional[SivSettings] = None) -> Image.Image:
    return GridPainter(settings).to_image(grid)
