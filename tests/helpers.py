"""
tests/helpers.py

In-memory PDFs, font bytes and a fake HTTP transport shared by the tests.
"""

from __future__ import annotations

import asyncio
import io
import os
from typing import Iterable

import fitz  # PyMuPDF
import httpx
import reportlab
from pypdf import PdfReader, PdfWriter

VERA_TTF = os.path.join(os.path.dirname(reportlab.__file__), "fonts", "Vera.ttf")


def vera_bytes() -> bytes:
    with open(VERA_TTF, "rb") as f:
        return f.read()


def make_pdf(sizes: Iterable[tuple] = ((595, 842),), password: str | None = None,
             title: str | None = None) -> bytes:
    writer = PdfWriter()
    for width, height in sizes:
        writer.add_blank_page(width=width, height=height)
    if title:
        writer.add_metadata({"/Title": title})
    if password:
        writer.encrypt(password)
    buf = io.BytesIO()
    writer.write(buf)
    return buf.getvalue()


def make_aes_pdf(user_password: str = "", owner_password: str = "owner") -> bytes:
    """AES-256 protected single-page PDF, built with PyMuPDF."""
    doc = fitz.open()
    doc.new_page(width=595, height=842)
    try:
        return doc.tobytes(
            encryption=fitz.PDF_ENCRYPT_AES_256,
            owner_pw=owner_password,
            user_pw=user_password,
        )
    finally:
        doc.close()


def text_draws(data: bytes) -> list[int]:
    """Number of text-show operators on each page of a PDF."""
    reader = PdfReader(io.BytesIO(data))
    counts = []
    for page in reader.pages:
        contents = page.get_contents()
        counts.append(contents.get_data().count(b" Tj") if contents is not None else 0)
    return counts


class FakeFontServer:
    """Answers font requests from a url -> response table and records every hit."""

    def __init__(self, routes: dict, delay: float = 0.0, delays: dict | None = None):
        self.routes = routes
        self.delay = delay
        self.delays = delays or {}
        self.requests: list[str] = []

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requests.append(url)
        delay = self.delays.get(url, self.delay)
        if delay:
            await asyncio.sleep(delay)
        answer = self.routes.get(url, 404)
        if isinstance(answer, Exception):
            raise answer
        if isinstance(answer, int):
            return httpx.Response(answer)
        return httpx.Response(200, content=answer)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)
