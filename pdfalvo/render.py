"""
pdfalvo/render.py

Colaboradores da rasterização:
- `FitzRenderer`: abre o PDF e renderiza uma página por vez (PyMuPDF).
- `PillowJpegEncoder`: bitmap -> JPEG com qualidade 0..1.
- `FitzAssembler`: monta o PDF só-imagem, página a página.

Os Protocols abaixo permitem trocar qualquer um por stubs nos testes.
"""

from __future__ import annotations

import io
from contextlib import contextmanager
from typing import Any, ContextManager, Iterator, Protocol, Tuple

import fitz  # PyMuPDF
from PIL import Image

from .exceptions import PageRenderFailed, RasterizationUnavailable

JPEG_MAX_QUALITY = 95


class Renderer(Protocol):
    def open_document(self, data: bytes) -> Any: ...
    def page_count(self, handle: Any) -> int: ...
    def page_size(self, handle: Any, index: int) -> Tuple[float, float]: ...
    def render_page(self, handle: Any, index: int, scale: float) -> ContextManager[Any]: ...
    def release_document(self, handle: Any) -> None: ...


class ImageEncoder(Protocol):
    def encode(self, bitmap: Any, quality: float) -> bytes: ...


class PageAssembler(Protocol):
    def new_document(self) -> Any: ...
    def add_page(self, doc: Any, width: float, height: float) -> Any: ...
    def draw_image(self, page: Any, image_bytes: bytes, x: float, y: float, width: float, height: float) -> None: ...
    def save(self, doc: Any) -> bytes: ...
    def close(self, doc: Any) -> None: ...


class FitzRenderer:
    """Renderiza com PyMuPDF; 1.0 de escala = 1 px por ponto PDF."""

    def open_document(self, data: bytes) -> fitz.Document:
        try:
            doc = fitz.open(stream=data, filetype="pdf")
        except Exception as e:
            raise RasterizationUnavailable(f"Não foi possível abrir o PDF para renderizar: {e}") from e
        if doc.needs_pass or doc.page_count == 0:
            doc.close()
            raise RasterizationUnavailable()
        return doc

    def page_count(self, handle: fitz.Document) -> int:
        return handle.page_count

    def page_size(self, handle: fitz.Document, index: int) -> Tuple[float, float]:
        try:
            rect = handle.load_page(index).rect
        except Exception as e:
            raise PageRenderFailed(f"Falha ao ler a página {index + 1}: {e}") from e
        return rect.width, rect.height

    @contextmanager
    def render_page(self, handle: fitz.Document, index: int, scale: float) -> Iterator[Image.Image]:
        """Bitmap RGB opaco (fundo branco) da página; liberado ao sair do `with`."""
        try:
            page: Any = handle.load_page(index)  # tipagem frouxa p/ pylance
            mat = fitz.Matrix(scale, scale)
            pix = page.get_pixmap(matrix=mat, alpha=False, colorspace=fitz.csRGB)
            img = Image.frombytes("RGB", (pix.width, pix.height), pix.samples)
            del pix
        except Exception as e:
            raise PageRenderFailed(f"Falha ao renderizar a página {index + 1}: {e}") from e
        try:
            yield img
        finally:
            img.close()

    def release_document(self, handle: fitz.Document) -> None:
        handle.close()


def jpeg_quality(quality: float) -> int:
    """Qualidade normalizada (0, 1] -> escala do Pillow (1..95)."""
    return max(1, min(int(round(quality * 100)), JPEG_MAX_QUALITY))


class PillowJpegEncoder:
    def encode(self, bitmap: Image.Image, quality: float) -> bytes:
        buf = io.BytesIO()
        try:
            img = bitmap if bitmap.mode == "RGB" else bitmap.convert("RGB")
            img.save(buf, format="JPEG", quality=jpeg_quality(quality), optimize=True)
        except (OSError, ValueError) as e:
            raise PageRenderFailed(f"Falha ao gerar JPEG: {e}") from e
        return buf.getvalue()


class FitzAssembler:
    def new_document(self) -> fitz.Document:
        return fitz.open()

    def add_page(self, doc: fitz.Document, width: float, height: float) -> Any:
        return doc.new_page(width=width, height=height)

    def draw_image(self, page: Any, image_bytes: bytes, x: float, y: float, width: float, height: float) -> None:
        # embute o JPEG como está (DCT) e estica na área pedida
        rect = fitz.Rect(x, y, x + width, y + height)
        try:
            page.insert_image(rect, stream=image_bytes, keep_proportion=False)
        except Exception as e:
            raise PageRenderFailed(f"Falha ao inserir a imagem da página: {e}") from e

    def save(self, doc: fitz.Document) -> bytes:
        try:
            return doc.write(garbage=4, deflate=True)  # pyright: ignore[reportArgumentType]
        except Exception as e:
            raise PageRenderFailed(f"Falha ao gravar o PDF rasterizado: {e}") from e

    def close(self, doc: fitz.Document) -> None:
        doc.close()
