import asyncio
import hashlib
import io
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Sequence

import httpx
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont

from .StatusEvents import Phase, StatusCallback, emit
from .WatermarkConfig import FontEmbedError, FontUnavailableError

logger = logging.getLogger(__name__)

# ==========================================
# Font Sources
# ==========================================

STANDARD_FONT = "Helvetica-Bold"

# Large CJK fonts can take a while on slow links.
DEFAULT_FETCH_TIMEOUT = 120.0


@dataclass(frozen=True)
class FontSource:
    """
    A remote location serving raw font bytes.

    When sha256 is given, a download whose digest differs is rejected and
    the next source is tried.
    """
    url: str
    sha256: Optional[str] = None


DEFAULT_FONT_SOURCES = (
    FontSource("https://cdn.jsdelivr.net/gh/google/fonts@main/ofl/notoserifsc/NotoSerifSC-Regular.ttf"),
    FontSource("https://raw.githubusercontent.com/google/fonts/main/ofl/notoserifsc/NotoSerifSC-Regular.ttf"),
    FontSource("https://cdn.jsdelivr.net/gh/adobe-fonts/source-han-serif@2.001R/SubsetOTF/CN/SourceHanSerifCN-Regular.otf"),
)


@dataclass(frozen=True)
class FontHandle:
    """Name under which ReportLab knows the font."""
    name: str
    embedded: bool = False


def is_non_latin(text: str) -> bool:
    """True if any character falls outside 7-bit ASCII."""
    return any(ord(ch) > 0x7F for ch in text)

# ==========================================
# Font Cache
# ==========================================

class FontCache:
    """
    Session-scoped holder for the downloaded non-Latin font.

    Holds a single entry that is filled at most once. Concurrent callers
    share one in-flight download; a failed download is not remembered, so
    the next caller starts over.
    """

    def __init__(self, data: Optional[bytes] = None):
        self._data = data
        self._inflight: Optional[asyncio.Future] = None
        self.fetch_count = 0

    def get(self) -> Optional[bytes]:
        return self._data

    def seed(self, data: bytes):
        self._data = bytes(data)

    def clear(self):
        self._data = None
        self._inflight = None
        self.fetch_count = 0

    async def get_or_fetch(self, fetch: Callable[[], Awaitable[bytes]]) -> bytes:
        if self._data is not None:
            return self._data

        if self._inflight is None:
            self.fetch_count += 1
            self._inflight = asyncio.ensure_future(fetch())

        task = self._inflight
        try:
            data = await asyncio.shield(task)
        finally:
            if self._inflight is task and task.done():
                self._inflight = None

        if self._data is None:
            self._data = data
        return self._data


# Shared by every resolver that is not handed its own cache.
session_cache = FontCache()

# ==========================================
# Font Resolver
# ==========================================

class FontResolver:
    """
    Picks the font used to draw the watermark text.

    ASCII-only text uses the built-in Helvetica-Bold. Anything else needs a
    wide-glyph font, which is downloaded from the first working source,
    cached for the session and registered with ReportLab.
    """

    def __init__(
        self,
        sources: Sequence[FontSource] = DEFAULT_FONT_SOURCES,
        cache: Optional[FontCache] = None,
        timeout: float = DEFAULT_FETCH_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.sources = tuple(sources)
        self.cache = cache if cache is not None else session_cache
        self.timeout = timeout
        self._transport = transport

    async def resolve(self, text: str, on_status: Optional[StatusCallback] = None) -> FontHandle:
        if not is_non_latin(text):
            emit(on_status, Phase.FONT_STANDARD, "Loading standard font...")
            return FontHandle(STANDARD_FONT)

        if self.cache.get() is not None:
            logger.debug("Reusing cached font (%d bytes)", len(self.cache.get()))

        data = await self.cache.get_or_fetch(lambda: self._download(on_status))

        emit(on_status, Phase.FONT_EMBED, "Embedding font subset...")
        return self.embed(data)

    async def _download(self, on_status: Optional[StatusCallback]) -> bytes:
        """Tries each source in order; the first successful response wins."""
        emit(on_status, Phase.FONT_DOWNLOAD, "Downloading fallback font...")
        last_error = "no font sources configured"

        async with httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            follow_redirects=True,
            transport=self._transport,
        ) as client:
            for source in self.sources:
                emit(on_status, Phase.FONT_SOURCE_ATTEMPT, "Trying font source...")
                try:
                    # Total deadline for the attempt, not just per network step
                    response = await asyncio.wait_for(client.get(source.url), self.timeout)
                except asyncio.TimeoutError:
                    last_error = f"Timed out after {self.timeout:g}s"
                    logger.warning("Failed to fetch font from %s: %s", source.url, last_error)
                    continue
                except httpx.HTTPError as e:
                    last_error = str(e) or type(e).__name__
                    logger.warning("Failed to fetch font from %s: %s", source.url, last_error)
                    continue

                if not response.is_success:
                    last_error = f"HTTP {response.status_code}: {response.reason_phrase}"
                    logger.warning("Failed to fetch font from %s: %s", source.url, last_error)
                    continue

                data = response.content
                if source.sha256 and hashlib.sha256(data).hexdigest() != source.sha256.lower():
                    last_error = f"Checksum mismatch for {source.url}"
                    logger.warning(last_error)
                    continue

                logger.info("Fetched font from %s (%d bytes)", source.url, len(data))
                return data

        raise FontUnavailableError(
            f"Font Load Failed: {last_error}. "
            "Please check your internet connection or try a different network."
        )

    def embed(self, data: bytes) -> FontHandle:
        """Registers the font bytes with ReportLab so canvases can embed a subset."""
        name = "WatermarkFont-" + hashlib.sha1(data).hexdigest()[:12]

        if name not in pdfmetrics.getRegisteredFontNames():
            try:
                pdfmetrics.registerFont(TTFont(name, io.BytesIO(data)))
            except Exception as e:
                raise FontEmbedError(f"Failed to embed font: {e}") from e

        return FontHandle(name, embedded=True)
