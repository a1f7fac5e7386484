"""
pdfalvo/engine_config.py

Presets do motor de compressão por tamanho-alvo.
- `LOSSLESS_PROFILES`: escada de recompressão estrutural (leve -> forte).
- `RASTER_PROFILES`: escada de rasterização (alta fidelidade -> menor tamanho).
- Limites do alvo (% do original), corte de "PDF grande" e tetos de canvas.

Valores podem ser ajustados por variáveis de ambiente (lidas no import).
"""

# pdfalvo/engine_config.py
from __future__ import annotations

import os
from typing import Tuple

from .schemas import CompressionProfile, RasterProfile

BYTES_PER_KB = 1024
BYTES_PER_MB = 1024 * 1024

# Faixa válida do alvo em % do tamanho original
MIN_PERCENT = float(os.getenv("PDFALVO_MIN_PERCENT", "20"))
MAX_PERCENT = float(os.getenv("PDFALVO_MAX_PERCENT", "90"))

if not (0 < MIN_PERCENT <= MAX_PERCENT <= 100):
    raise ValueError(
        f"Faixa de alvo inválida: min={MIN_PERCENT} max={MAX_PERCENT} "
        "(esperado 0 < min <= max <= 100)"
    )

# PDFs a partir deste tamanho (com alvo) só rodam os perfis mais leves
LARGE_INPUT_THRESHOLD = int(float(os.getenv("PDFALVO_LARGE_INPUT_MB", "20")) * BYTES_PER_MB)
LARGE_INPUT_PROFILE_COUNT = 2

# Mesmas opções do qpdf, sem os "--"
BASE_DIRECTIVES: Tuple[str, ...] = (
    "compress-streams=y",
    "stream-data=compress",
    "recompress-flate",
)

LOSSLESS_PROFILES: Tuple[CompressionProfile, ...] = (
    CompressionProfile("light", BASE_DIRECTIVES + (
        "compression-level=3",
    )),
    CompressionProfile("objstm", BASE_DIRECTIVES + (
        "compression-level=6", "object-streams=generate",
    )),
    CompressionProfile("normalize", BASE_DIRECTIVES + (
        "compression-level=9", "object-streams=generate", "normalize-content=y",
    )),
    CompressionProfile("images", BASE_DIRECTIVES + (
        "compression-level=9", "object-streams=generate", "normalize-content=y",
        "optimize-images",
    )),
)

# JPEG usado por "optimize-images" (padrão do libjpeg)
OPTIMIZE_IMAGES_JPEG_QUALITY = 75

# (escala, largura máx. em px, qualidade 0..1)
RASTER_PROFILES: Tuple[RasterProfile, ...] = (
    RasterProfile(1.0,  2200, 0.82),
    RasterProfile(0.9,  1900, 0.68),
    RasterProfile(0.8,  1600, 0.56),
    RasterProfile(0.7,  1400, 0.46),
    RasterProfile(0.55, 1100, 0.36),
    RasterProfile(0.45, 900,  0.27),
    RasterProfile(0.35, 700,  0.20),
)

# Tetos do bitmap renderizado (protege contra falta de memória)
MIN_RENDER_SCALE = 0.1
MAX_CANVAS_WIDTH = 4096
MAX_CANVAS_HEIGHT = 4096
MAX_CANVAS_AREA = 16_000_000

# Modos e unidades aceitos na borda (bridge)
MODE_STANDARD = "standard"
MODE_AGGRESSIVE = "aggressive"
DEFAULT_MODE = MODE_AGGRESSIVE

UNIT_KB = "kb"
UNIT_MB = "mb"
DEFAULT_UNIT = UNIT_MB

TTL_MIN = int(os.getenv("TTL_MINUTES", "15"))
