#!/usr/bin/env python3
"""
Tiled PDF Watermark Module - Configuration & Infrastructure

This module describes a repeating text watermark that is stamped across
every page of an existing PDF.

Architecture:
1. Configuration: Immutable data class holding appearance and tiling geometry.
2. Fonts: Standard font or a downloaded, session-cached non-Latin font.
3. Rendering: ReportLab generation of the tiled overlay (in-memory).
4. Processing: pypdf integration to merge overlays with source PDFs.
5. CLI: Command-line interface for standalone usage.

Dependencies:
- reportlab
- pypdf
- httpx
- PyMuPDF (preview only)
"""

from dataclasses import dataclass, fields
from typing import Tuple

# ==========================================
# Custom Exceptions
# ==========================================

class WatermarkError(Exception):
    """Base exception for all watermarking operations."""
    pass

class InvalidInputError(WatermarkError):
    """Raised when input parameters are invalid."""
    pass

class InvalidInputFormatError(InvalidInputError):
    """Raised when the supplied bytes are not a well-formed PDF."""
    pass

class PDFProcessingError(WatermarkError):
    """Raised when the PDF processing/merging fails."""
    pass

class EncryptedInputError(PDFProcessingError):
    """Raised when the source PDF requires a password."""
    pass

class SerializationError(PDFProcessingError):
    """Raised when the watermarked document cannot be written out."""
    pass

class ResourceError(WatermarkError):
    """Raised when external resources (fonts) cannot be loaded."""
    pass

class FontUnavailableError(ResourceError):
    """Raised when every remote font source failed or timed out."""
    pass

class FontEmbedError(ResourceError):
    """Raised when downloaded font bytes cannot be embedded."""
    pass

# ==========================================
# Constants
# ==========================================

# Smallest grid step used while tiling, whatever the configured spacing.
MIN_TILE_STEP = 20.0

OPACITY_RANGE: Tuple[float, float] = (0.05, 1.0)
FONT_SIZE_RANGE: Tuple[float, float] = (10.0, 200.0)
ROTATION_RANGE: Tuple[float, float] = (-360.0, 360.0)
SPACING_RANGE: Tuple[float, float] = (50.0, 1000.0)

OUTPUT_PREFIX = "watermarked_"

# ==========================================
# Configuration Data Class
# ==========================================

@dataclass(frozen=True)
class WatermarkConfig:
    """
    Appearance and tiling geometry of the watermark.

    The object is never mutated while a document is being processed. Range
    checks live in validate() and are left to the caller; the compositor
    copes with out-of-range spacing and malformed colors on its own.
    """

    text: str = "Confidential"
    color: str = "#e5e7eb"      # 6 hex digits, '#' optional
    opacity: float = 0.3        # 0.05 (faint) to 1.0 (solid)
    font_size: float = 50.0     # Text height in points
    rotation: float = 45.0      # Degrees (counter-clockwise), per tile
    spacing_x: float = 250.0    # Horizontal grid step in points
    spacing_y: float = 250.0    # Vertical grid step in points

    def validate(self) -> "WatermarkConfig":
        """Checks every numeric field against its documented range."""
        self._check_range("opacity", self.opacity, OPACITY_RANGE)
        self._check_range("font_size", self.font_size, FONT_SIZE_RANGE)
        self._check_range("rotation", self.rotation, ROTATION_RANGE)
        self._check_range("spacing_x", self.spacing_x, SPACING_RANGE)
        self._check_range("spacing_y", self.spacing_y, SPACING_RANGE)
        return self

    @staticmethod
    def _check_range(name: str, value: float, bounds: Tuple[float, float]):
        low, high = bounds
        if not (low <= value <= high):
            raise InvalidInputError(f"{name} must be between {low:g} and {high:g}, got {value}")

    def to_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}
