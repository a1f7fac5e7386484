"""
pdfalvo/schemas.py

Objetos de valor do motor (dataclasses imutáveis, vivem só durante um pedido)
e modelos de entrada/saída da bridge (pydantic).
"""

# pdfalvo/schemas.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Optional, Tuple

from pydantic import BaseModel


@dataclass(frozen=True)
class CompressionProfile:
    """Perfil lossless: lista ordenada de diretivas do recompressor."""
    name: str
    directives: Tuple[str, ...]


@dataclass(frozen=True)
class RasterProfile:
    """Perfil lossy: escala de render, largura máxima (px) e qualidade (0, 1]."""
    render_scale: float
    max_render_width: int
    image_quality: float

    @property
    def name(self) -> str:
        return f"raster-{self.render_scale:g}x-{self.max_render_width}px-q{self.image_quality:g}"


@dataclass(frozen=True)
class AttemptResult:
    """Resultado de uma tentativa; `profile` None = entrada devolvida intacta."""
    data: bytes = field(repr=False)
    profile: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class TargetSizeBounds:
    min_bytes: int
    max_bytes: int


@dataclass(frozen=True)
class CompressionRequest:
    """`requested_target_bytes == 0` significa "sem alvo, só minimizar"."""
    input_bytes: bytes = field(repr=False)
    requested_target_bytes: int = 0
    mode: Literal["standard", "aggressive"] = "aggressive"


@dataclass(frozen=True)
class CompressionOutcome:
    output_bytes: bytes = field(repr=False)
    original_size: int
    compressed_size: int
    requested_target_bytes: int
    target_achieved: bool
    lossy_attempted: bool = False
    used_lossy_compression: bool = False
    lossy_attempt_failed: bool = False
    source: Literal["lossless", "lossy"] = "lossless"
    profile: Optional[str] = None

    @property
    def saved_bytes(self) -> int:
        return max(self.original_size - self.compressed_size, 0)

    @property
    def saved_percent(self) -> float:
        if self.original_size <= 0:
            return 0.0
        return self.saved_bytes * 100.0 / self.original_size


# ====== Bridge (JS <-> Python) ======
class CompressIn(BaseModel):
    name: str = ""
    type: str = ""
    bytes_b64: Optional[str] = None
    target_size_value: Optional[str] = None
    target_size_unit: Optional[str] = None
    mode: Optional[str] = None


class CompressOut(BaseModel):
    job_id: str
    filename: str
    original_size: int
    compressed_size: int
    requested_target_bytes: int
    target_achieved: bool
    lossy_attempted: bool
    used_lossy_compression: bool
    lossy_attempt_failed: bool
    source: str
    profile: Optional[str] = None
    saved_percent: float


class SaveIn(BaseModel):
    job_id: str
    filename_out: Optional[str] = None
