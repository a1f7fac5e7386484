"""
pdfalvo/lossy.py

Fallback com perdas: rasteriza TODAS as páginas do PDF original e remonta um
PDF só-imagem, descendo a escada de perfis (alta fidelidade -> menor).

- Escala de render limitada por largura máx. do perfil e tetos de canvas
  (4096 px por lado, 16 MP de área), com piso de 0.1.
- Uma página renderizada por vez; o bitmap é liberado logo após o JPEG.
- Falha em qualquer página abandona o perfil inteiro (sem PDF parcial) e a
  busca segue no próximo.
- Com alvo > 0, o primeiro perfil que couber no alvo é devolvido na hora.
"""

# pdfalvo/lossy.py
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from .engine_config import (
    MAX_CANVAS_AREA,
    MAX_CANVAS_HEIGHT,
    MAX_CANVAS_WIDTH,
    MIN_RENDER_SCALE,
    RASTER_PROFILES,
)
from .exceptions import LossyFallbackFailed, PageRenderFailed, RasterizationUnavailable
from .log import get_logger
from .render import (
    FitzAssembler,
    FitzRenderer,
    ImageEncoder,
    PageAssembler,
    PillowJpegEncoder,
    Renderer,
)
from .schemas import RasterProfile

LOGGER = get_logger("pdfalvo.lossy")


@dataclass(frozen=True)
class RasterResult:
    """`profile` None = entrada devolvida; `available` False = sem renderizador."""
    data: bytes = field(repr=False)
    profile: Optional[str] = None
    available: bool = True

    @property
    def size(self) -> int:
        return len(self.data)


def safe_render_scale(page_width: float, page_height: float, profile: RasterProfile) -> float:
    """Escala que respeita o perfil e os tetos do bitmap.

    Args:
        page_width (float): Largura nativa da página (pontos).
        page_height (float): Altura nativa da página (pontos).
        profile (RasterProfile): Perfil em uso.

    Returns:
        float: Escala >= MIN_RENDER_SCALE.
    """
    scale = profile.render_scale
    if page_width > 0:
        scale = min(scale, profile.max_render_width / page_width, MAX_CANVAS_WIDTH / page_width)
    if page_height > 0:
        scale = min(scale, MAX_CANVAS_HEIGHT / page_height)

    area = page_width * page_height
    if area > 0:
        scale = min(scale, math.sqrt(MAX_CANVAS_AREA / area))

    if not math.isfinite(scale) or scale <= 0:
        scale = MIN_RENDER_SCALE
    return max(scale, MIN_RENDER_SCALE)


class Rasterizer:
    def __init__(
        self,
        renderer: Optional[Renderer] = None,
        encoder: Optional[ImageEncoder] = None,
        assembler: Optional[PageAssembler] = None,
        profiles: Sequence[RasterProfile] = RASTER_PROFILES,
    ) -> None:
        self.renderer = renderer or FitzRenderer()
        self.encoder = encoder or PillowJpegEncoder()
        self.assembler = assembler or FitzAssembler()
        self.profiles = profiles

    def build_document(self, handle: Any, profile: RasterProfile) -> bytes:
        """Gera o PDF só-imagem de um perfil; `PageRenderFailed` se alguma página falhar."""
        doc = self.assembler.new_document()
        try:
            for index in range(self.renderer.page_count(handle)):
                width, height = self.renderer.page_size(handle, index)
                scale = safe_render_scale(width, height, profile)
                with self.renderer.render_page(handle, index, scale) as bitmap:
                    image = self.encoder.encode(bitmap, profile.image_quality)
                # página de saída no tamanho original (sem escala)
                page = self.assembler.add_page(doc, width, height)
                self.assembler.draw_image(page, image, 0, 0, width, height)
            return self.assembler.save(doc)
        finally:
            self.assembler.close(doc)

    def run(self, data: bytes, target_bytes: int) -> RasterResult:
        try:
            handle = self.renderer.open_document(data)
        except RasterizationUnavailable as e:
            LOGGER.warning("Rasterização indisponível: %s", e)
            return RasterResult(data, available=False)

        smallest = RasterResult(data)
        succeeded = 0
        try:
            for profile in self.profiles:
                try:
                    out = self.build_document(handle, profile)
                except PageRenderFailed as e:
                    LOGGER.warning("Perfil %s abandonado: %s", profile.name, e)
                    continue
                except Exception as e:
                    # ex.: MemoryError num bitmap grande; o próximo perfil é mais leve
                    LOGGER.warning("Perfil %s abandonado por erro inesperado: %r", profile.name, e)
                    continue

                succeeded += 1
                current = RasterResult(out, profile.name)
                LOGGER.debug("Perfil %s: %d bytes", profile.name, current.size)
                if current.size < smallest.size:
                    smallest = current
                if target_bytes > 0 and current.size <= target_bytes:
                    LOGGER.info("Alvo de %d bytes atingido pelo perfil %s", target_bytes, profile.name)
                    return current
        finally:
            self.renderer.release_document(handle)

        if not succeeded:
            raise LossyFallbackFailed()
        return smallest


def rasterize_pdf(data: bytes, target_bytes: int, rasterizer: Optional[Rasterizer] = None) -> bytes:
    """Atalho: devolve só os bytes (a entrada, se não houver como renderizar)."""
    return (rasterizer or Rasterizer()).run(data, target_bytes).data
