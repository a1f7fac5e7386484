"""Colaboradores falsos para testar as buscas sem PDF de verdade."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional, Sequence, Set, Tuple

from pdfalvo.exceptions import PageRenderFailed, RasterizationUnavailable, RecompressionFailed
from pdfalvo.lossy import RasterResult


class SizedRecompressor:
    """Devolve `size` bytes por conjunto de diretivas (ou a própria entrada)."""

    def __init__(self, sizes: Dict[Tuple[str, ...], int]):
        self.sizes = sizes
        self.calls: List[Tuple[str, ...]] = []

    def run(self, data: bytes, directives: Sequence[str]) -> bytes:
        key = tuple(directives)
        self.calls.append(key)
        return b"%" * self.sizes.get(key, len(data))


class FailingRecompressor:
    def __init__(self, exc: Optional[BaseException] = None):
        self.exc = exc or RecompressionFailed("qpdf saiu com código 2")

    def run(self, data: bytes, directives: Sequence[str]) -> bytes:
        raise self.exc


class FakeRenderer:
    def __init__(self, page_sizes: Sequence[Tuple[float, float]], available: bool = True):
        self.page_sizes = list(page_sizes)
        self.available = available
        self.opened = 0
        self.released = 0
        self.live_bitmaps = 0
        self.max_live_bitmaps = 0
        self.scales: List[float] = []
        self.opened_with: List[bytes] = []

    def open_document(self, data: bytes):
        if not self.available:
            raise RasterizationUnavailable()
        self.opened += 1
        self.opened_with.append(data)
        return "handle"

    def page_count(self, handle) -> int:
        return len(self.page_sizes)

    def page_size(self, handle, index: int) -> Tuple[float, float]:
        return self.page_sizes[index]

    @contextmanager
    def render_page(self, handle, index: int, scale: float) -> Iterator[str]:
        self.scales.append(scale)
        self.live_bitmaps += 1
        self.max_live_bitmaps = max(self.max_live_bitmaps, self.live_bitmaps)
        try:
            yield f"bitmap-{index}"
        finally:
            self.live_bitmaps -= 1

    def release_document(self, handle) -> None:
        self.released += 1


class FakeEncoder:
    """Tamanho do "JPEG" por qualidade; qualidades em `fail` quebram."""

    def __init__(
        self,
        sizes: Optional[Dict[float, int]] = None,
        fail: Set[float] = frozenset(),
        exc: Optional[BaseException] = None,
    ):
        self.sizes = sizes
        self.fail = set(fail)
        self.exc = exc
        self.qualities: List[float] = []

    def encode(self, bitmap, quality: float) -> bytes:
        self.qualities.append(quality)
        if quality in self.fail:
            raise self.exc or PageRenderFailed("falha simulada")
        size = self.sizes[quality] if self.sizes is not None else int(quality * 1000)
        return b"j" * size


class FakeAssembler:
    def __init__(self):
        self.pages: List[Tuple[float, float]] = []
        self.opened = 0
        self.closed = 0

    def new_document(self):
        self.opened += 1
        return []

    def add_page(self, doc, width: float, height: float):
        self.pages.append((width, height))
        page: list = []
        doc.append(page)
        return page

    def draw_image(self, page, image_bytes: bytes, x: float, y: float, width: float, height: float) -> None:
        page.append(image_bytes)

    def save(self, doc) -> bytes:
        return b"".join(img for page in doc for img in page)

    def close(self, doc) -> None:
        self.closed += 1


class SpyRasterizer:
    """Registra a chamada e devolve um resultado pronto (ou levanta)."""

    def __init__(self, result: Optional[RasterResult] = None, exc: Optional[BaseException] = None):
        self.result = result
        self.exc = exc
        self.calls: List[Tuple[bytes, int]] = []

    def run(self, data: bytes, target_bytes: int) -> RasterResult:
        self.calls.append((data, target_bytes))
        if self.exc is not None:
            raise self.exc
        assert self.result is not None
        return self.result
