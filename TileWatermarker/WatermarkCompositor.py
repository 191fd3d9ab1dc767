import io
import logging
from typing import List, Optional, Tuple

from pypdf import PdfReader, PdfWriter
from pypdf.errors import DependencyError

from .FontResolver import FontResolver
from .StatusEvents import Phase, StatusCallback, emit
from .WatermarkConfig import (
    EncryptedInputError,
    InvalidInputFormatError,
    PDFProcessingError,
    SerializationError,
    WatermarkConfig,
    WatermarkError,
)
from .WatermarkRenderer import WatermarkRenderer

logger = logging.getLogger(__name__)

# ==========================================
# Watermark Compositor
# ==========================================

class WatermarkCompositor:
    """
    Stamps the tiled watermark onto every page of a PDF held in memory.

    Responsibilities:
    1. Opening the input bytes and refusing encrypted documents.
    2. Resolving the font before any page is drawn.
    3. Merging one overlay per page via WatermarkRenderer.
    4. Serializing the result back to bytes.

    Either the whole document is watermarked and returned, or an error
    derived from WatermarkError is raised and nothing is returned.
    """

    def __init__(self, resolver: Optional[FontResolver] = None):
        self.resolver = resolver if resolver is not None else FontResolver()
        # Tiles drawn on each page during the last successful apply()
        self.tile_counts: List[int] = []

    async def apply(
        self,
        data: bytes,
        config: WatermarkConfig,
        on_status: Optional[StatusCallback] = None,
    ) -> bytes:
        try:
            emit(on_status, Phase.LOAD, "Loading document...")
            reader = self._open(data)
            sizes = self._page_sizes(reader)

            font = await self.resolver.resolve(config.text, on_status)

            emit(on_status, Phase.APPLY, "Applying watermark pattern...")
            renderer = WatermarkRenderer(config, font)
            writer = PdfWriter()
            counts = []

            for page, (width, height) in zip(reader.pages, sizes):
                overlay, drawn = renderer.get_watermark(width, height)
                # Watermark goes ON TOP of the existing content
                page.merge_page(overlay)
                writer.add_page(page)
                counts.append(drawn)

            if reader.metadata:
                writer.add_metadata(reader.metadata)

            emit(on_status, Phase.FINALIZE, "Finalizing document...")
            output = self._serialize(writer)

        except WatermarkError:
            raise
        except Exception as e:
            raise PDFProcessingError(f"Error during processing loop: {e}") from e

        logger.info("Watermarked %d pages (%d tiles)", len(counts), sum(counts))
        self.tile_counts = counts
        return output

    def _open(self, data: bytes) -> PdfReader:
        """Parses the input; encrypted documents are rejected, never decrypted."""
        try:
            reader = PdfReader(io.BytesIO(bytes(data)))
        except DependencyError as e:
            # Raised for AES encryption when no crypto backend is installed
            raise EncryptedInputError(f"This PDF is encrypted. Please remove protection first. ({e})") from e
        except Exception as e:
            raise InvalidInputFormatError(f"Failed to load PDF: {e}") from e

        if reader.is_encrypted:
            raise EncryptedInputError("This PDF is encrypted. Please remove protection first.")

        return reader

    def _page_sizes(self, reader: PdfReader) -> List[Tuple[float, float]]:
        # float() cast ensures compatibility with reportlab
        try:
            return [(float(p.mediabox.width), float(p.mediabox.height)) for p in reader.pages]
        except Exception as e:
            raise InvalidInputFormatError(f"Failed to read pages: {e}") from e

    def _serialize(self, writer: PdfWriter) -> bytes:
        buffer = io.BytesIO()
        try:
            writer.write(buffer)
        except Exception as e:
            raise SerializationError(f"Failed to save output PDF: {e}") from e
        return buffer.getvalue()


async def apply_watermark(
    data: bytes,
    config: WatermarkConfig,
    on_status: Optional[StatusCallback] = None,
    resolver: Optional[FontResolver] = None,
) -> bytes:
    """Runs a one-off compositor over the given bytes."""
    return await WatermarkCompositor(resolver).apply(data, config, on_status)
