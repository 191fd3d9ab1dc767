import fitz  # PyMuPDF

from .WatermarkConfig import InvalidInputError, InvalidInputFormatError


def render_preview(data: bytes, page_index: int = 0, zoom: float = 1.0) -> bytes:
    """Renders one page of a PDF held in memory to PNG bytes."""
    try:
        doc = fitz.open(stream=bytes(data), filetype="pdf")
    except Exception as e:
        raise InvalidInputFormatError(f"Failed to open PDF for preview: {e}") from e

    try:
        total_pages = doc.page_count
        if not (0 <= page_index < total_pages):
            raise InvalidInputError(f"Page {page_index + 1} out of range (Doc has {total_pages} pages)")

        page = doc.load_page(page_index)
        pix = page.get_pixmap(matrix=fitz.Matrix(zoom, zoom))
        return pix.tobytes("png")
    finally:
        doc.close()
