import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .FontResolver import DEFAULT_FETCH_TIMEOUT, DEFAULT_FONT_SOURCES, FontResolver, FontSource
from .PreviewRenderer import render_preview
from .StatusEvents import StatusEvent
from .WatermarkCompositor import WatermarkCompositor
from .WatermarkConfig import OUTPUT_PREFIX, InvalidInputError, WatermarkConfig, WatermarkError

logger = logging.getLogger(__name__)

# ==========================================
# CLI & Execution
# ==========================================

def default_output_path(input_pdf: Path) -> Path:
    return input_pdf.with_name(OUTPUT_PREFIX + input_pdf.name)


def _print_status(event: StatusEvent):
    print(f"[{event.phase.value}] {event.message}")


def run_watermark_service(
    input_pdf: str,
    output_pdf: Optional[str] = None,
    config: Optional[WatermarkConfig] = None,
    font_sources: Optional[List[str]] = None,
    font_timeout: float = DEFAULT_FETCH_TIMEOUT,
    preview: Optional[str] = None,
) -> Path:
    """
    High-level entry point to initialize and run the watermarking process.
    Returns the path the watermarked PDF was written to.
    """
    # 1. Validate inputs
    source = Path(input_pdf)
    if not source.is_file():
        raise InvalidInputError(f"Input file not found: {source}")

    config = (config or WatermarkConfig()).validate()
    target = Path(output_pdf) if output_pdf else default_output_path(source)
    logger.debug("Watermark settings: %s", config.to_dict())

    # 2. Build the font resolver
    sources = [FontSource(url) for url in font_sources] if font_sources else DEFAULT_FONT_SOURCES
    resolver = FontResolver(sources=sources, timeout=font_timeout)

    # 3. Process
    compositor = WatermarkCompositor(resolver)
    output = asyncio.run(compositor.apply(source.read_bytes(), config, on_status=_print_status))

    # 4. Save
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(output)
    except OSError as e:
        raise WatermarkError(f"Failed to save output PDF: {e}") from e
    print(f"Successfully saved to: {target}")

    if preview:
        Path(preview).write_bytes(render_preview(output))
        print(f"Preview written to: {preview}")

    return target


def build_parser() -> argparse.ArgumentParser:
    defaults = WatermarkConfig()
    parser = argparse.ArgumentParser(
        description="Tiled text watermark for PDF files",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    # Files
    parser.add_argument("-i", "--input", required=True, help="Path to source PDF")
    parser.add_argument("-o", "--output", help="Path to save watermarked PDF (default: watermarked_<input>)")
    parser.add_argument("--preview", help="Also write a PNG preview of the first page here")

    # Appearance
    parser.add_argument("-t", "--text", default=defaults.text, help="Text to use as watermark")
    parser.add_argument("--color", default=defaults.color, help="Hex color, e.g. '#ff0000'")
    parser.add_argument("--opacity", type=float, default=defaults.opacity, help="Opacity (0.05 to 1.0)")
    parser.add_argument("--font-size", type=float, default=defaults.font_size, help="Font size in points")
    parser.add_argument("--rotate", type=float, default=defaults.rotation, help="Rotation in degrees")
    parser.add_argument("--spacing-x", type=float, default=defaults.spacing_x, help="Horizontal grid spacing")
    parser.add_argument("--spacing-y", type=float, default=defaults.spacing_y, help="Vertical grid spacing")

    # Fonts
    parser.add_argument("--font-source", action="append", dest="font_sources",
                        help="URL of a TTF font for non-Latin text (repeatable, tried in order)")
    parser.add_argument("--font-timeout", type=float, default=DEFAULT_FETCH_TIMEOUT,
                        help="Seconds to wait for each font source")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    config = WatermarkConfig(
        text=args.text,
        color=args.color,
        opacity=args.opacity,
        font_size=args.font_size,
        rotation=args.rotate,
        spacing_x=args.spacing_x,
        spacing_y=args.spacing_y,
    )

    try:
        run_watermark_service(
            input_pdf=args.input,
            output_pdf=args.output,
            config=config,
            font_sources=args.font_sources,
            font_timeout=args.font_timeout,
            preview=args.preview,
        )
    except WatermarkError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"An unexpected error occurred: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
