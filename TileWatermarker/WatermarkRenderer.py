import io
import math
from dataclasses import dataclass
from typing import Dict, Iterator, Tuple

from reportlab.pdfgen import canvas
from pypdf import PdfReader, PageObject

from .ColorParser import hex_to_rgb
from .FontResolver import FontHandle
from .WatermarkConfig import MIN_TILE_STEP, WatermarkConfig

# ==========================================
# Tiling Geometry
# ==========================================

@dataclass(frozen=True)
class PageGeometry:
    """
    Size of a page in points plus the oversized area the lattice covers.

    The lattice extends half a diagonal past every edge so that a rotated
    pattern still reaches the corners of the visible page.
    """
    width: float
    height: float

    @property
    def diagonal(self) -> float:
        return math.sqrt(self.width * self.width + self.height * self.height)

    @property
    def bounds(self) -> Tuple[float, float, float, float]:
        """(start_x, end_x, start_y, end_y); the end values are exclusive."""
        half = self.diagonal / 2
        return -half, self.width + half, -half, self.height + half


def effective_step(spacing: float) -> float:
    if not math.isfinite(spacing):
        return MIN_TILE_STEP
    return max(spacing, MIN_TILE_STEP)


def _axis(start: float, end: float, step: float) -> Iterator[float]:
    # Multiplying instead of accumulating keeps the count exact.
    for i in range(math.ceil((end - start) / step)):
        yield start + i * step


def tile_anchors(geometry: PageGeometry, spacing_x: float, spacing_y: float) -> Iterator[Tuple[float, float]]:
    """Yields every lattice point column by column (x outer, y inner)."""
    step_x = effective_step(spacing_x)
    step_y = effective_step(spacing_y)
    start_x, end_x, start_y, end_y = geometry.bounds

    for x in _axis(start_x, end_x, step_x):
        for y in _axis(start_y, end_y, step_y):
            yield x, y


def tile_count(geometry: PageGeometry, spacing_x: float, spacing_y: float) -> int:
    start_x, end_x, start_y, end_y = geometry.bounds
    columns = math.ceil((end_x - start_x) / effective_step(spacing_x))
    rows = math.ceil((end_y - start_y) / effective_step(spacing_y))
    return columns * rows

# ==========================================
# Watermark Renderer
# ==========================================

class WatermarkRenderer:
    """
    Handles the generation of watermark overlay pages using ReportLab.

    This class is responsible for:
    1. Creating an in-memory PDF stream for the overlay.
    2. Walking the tile lattice for the page size.
    3. Drawing the rotated text at every lattice point.
    4. Caching generated pages so uniform page sizes render only once.
    """

    def __init__(self, config: WatermarkConfig, font: FontHandle):
        self.config = config
        self.font = font
        self.color = hex_to_rgb(config.color)
        # Cache key: (width, height), Value: (pypdf.PageObject, tiles drawn)
        self._cache: Dict[Tuple[float, float], Tuple[PageObject, int]] = {}

    def get_watermark(self, page_width: float, page_height: float) -> Tuple[PageObject, int]:
        """
        Retrieves the overlay for the given page size and the number of tiles on it.
        Returns a cached object if available, otherwise renders a new one.
        """
        # Round dimensions to avoid cache misses on negligible float differences
        key = (round(page_width, 2), round(page_height, 2))

        if key not in self._cache:
            self._cache[key] = self._render_watermark_page(page_width, page_height)

        return self._cache[key]

    def _render_watermark_page(self, width: float, height: float) -> Tuple[PageObject, int]:
        """Internal method to draw the tiled text on a fresh PDF page."""
        packet = io.BytesIO()
        c = canvas.Canvas(packet, pagesize=(width, height))

        # ReportLab handles alpha via fillAlpha
        c.setFillAlpha(self.config.opacity)
        c.setFillColorRGB(*self.color)
        c.setFont(self.font.name, self.config.font_size)

        drawn = 0
        geometry = PageGeometry(width, height)
        for x, y in tile_anchors(geometry, self.config.spacing_x, self.config.spacing_y):
            self._draw_tile(c, x, y)
            drawn += 1

        c.save()
        packet.seek(0)

        reader = PdfReader(packet)
        return reader.pages[0], drawn

    def _draw_tile(self, c: canvas.Canvas, x: float, y: float):
        # Rotation pivots on the tile's own anchor, not the page center
        c.saveState()
        c.translate(x, y)
        c.rotate(self.config.rotation)
        c.drawString(0, 0, self.config.text)
        c.restoreState()
