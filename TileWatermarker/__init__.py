from .ColorParser import DEFAULT_RGB, hex_to_rgb, rgb_to_hex
from .FontResolver import (
    DEFAULT_FONT_SOURCES,
    FontCache,
    FontHandle,
    FontResolver,
    FontSource,
    is_non_latin,
    session_cache,
)
from .PreviewRenderer import render_preview
from .StatusEvents import Phase, StatusEvent
from .WatermarkCompositor import WatermarkCompositor, apply_watermark
from .WatermarkConfig import (
    EncryptedInputError,
    FontEmbedError,
    FontUnavailableError,
    InvalidInputError,
    InvalidInputFormatError,
    PDFProcessingError,
    ResourceError,
    SerializationError,
    WatermarkConfig,
    WatermarkError,
)
from .WatermarkRenderer import PageGeometry, WatermarkRenderer, effective_step, tile_anchors, tile_count

__version__ = "1.0.0"
