"""
pdfalvo/targets.py

Resolução do tamanho-alvo e validação do arquivo de entrada.
- `compute_bounds(size)`: faixa válida [min, max] em bytes (% do original).
- `clamp_target_bytes(size, target)`: satura o alvo pedido dentro da faixa.
- `parse_target_size(texto, unidade)`: texto + unidade -> bytes (0 = sem alvo).
- `normalize_target_unit(valor)`: 'kb' ou, para qualquer outra coisa, 'mb'.
- `validate_pdf_candidate(nome, mime)` / `sniff_pdf(data)`: filtros da borda.
"""

# pdfalvo/targets.py
from __future__ import annotations

import io
import math
from typing import NamedTuple, Optional

from pypdf import PdfReader
from pypdf.errors import PyPdfError

from .engine_config import (
    BYTES_PER_KB,
    BYTES_PER_MB,
    MAX_PERCENT,
    MIN_PERCENT,
    UNIT_KB,
    UNIT_MB,
)
from .exceptions import InvalidTargetSize, UnsupportedFileType
from .schemas import TargetSizeBounds

PDF_EXTENSION = ".pdf"
PDF_MIME = "application/pdf"
OCTET_STREAM_MIME = "application/octet-stream"

UNIT_BYTES = {
    UNIT_KB: BYTES_PER_KB,
    UNIT_MB: BYTES_PER_MB,
}


class ParsedTarget(NamedTuple):
    bytes: int
    error: Optional[InvalidTargetSize] = None


def compute_bounds(original_size: int) -> TargetSizeBounds:
    min_bytes = max(math.ceil(original_size * MIN_PERCENT / 100), 1)
    max_bytes = max(math.floor(original_size * MAX_PERCENT / 100), min_bytes)
    return TargetSizeBounds(min_bytes=min_bytes, max_bytes=max_bytes)


def clamp_target_bytes(original_size: int, requested: int) -> int:
    """Nunca falha: devolve o alvo pedido ou o limite mais próximo."""
    bounds = compute_bounds(original_size)
    if requested < bounds.min_bytes:
        return bounds.min_bytes
    if requested > bounds.max_bytes:
        return bounds.max_bytes
    return requested


def normalize_target_unit(value: Optional[str]) -> str:
    # qualquer coisa que não seja 'kb' vira 'mb' (fail-safe, não é erro)
    if value == UNIT_KB:
        return UNIT_KB
    return UNIT_MB


def parse_target_size(value: Optional[str], unit: str) -> ParsedTarget:
    """Converte o valor digitado para bytes.

    Vazio -> 0 sem erro ("sem alvo"). Negativo, infinito ou ilegível ->
    `InvalidTargetSize` com bytes=0. Aceita vírgula como separador decimal.

    Args:
        value (str | None): Texto digitado (ex.: "1.5").
        unit (str): 'kb' ou 'mb' (já normalizada).

    Returns:
        ParsedTarget: (bytes, erro ou None).
    """
    text = (value or "").strip()
    if not text:
        return ParsedTarget(0)

    try:
        number = float(text.replace(",", "."))
    except ValueError:
        return ParsedTarget(0, InvalidTargetSize())

    if not math.isfinite(number) or number < 0:
        return ParsedTarget(0, InvalidTargetSize())

    multiplier = UNIT_BYTES.get(unit, BYTES_PER_MB)
    return ParsedTarget(math.floor(number * multiplier))


def validate_pdf_candidate(name: str, mime: str) -> None:
    """Confere extensão e MIME declarados; levanta `UnsupportedFileType`."""
    if not (name or "").lower().endswith(PDF_EXTENSION):
        raise UnsupportedFileType("A extensão do arquivo deve ser .pdf.")

    mime = (mime or "").lower()
    if mime and mime not in (PDF_MIME, OCTET_STREAM_MIME):
        raise UnsupportedFileType()


def sniff_pdf(data: bytes) -> int:
    """Garante que os bytes são um PDF legível; devolve o nº de páginas."""
    if b"%PDF-" not in data[:1024]:
        raise UnsupportedFileType("O arquivo não parece ser um PDF.")
    try:
        reader = PdfReader(io.BytesIO(data))
        if reader.is_encrypted:
            # PDFs com senha de usuário vazia ainda podem ser comprimidos
            reader.decrypt("")
        return len(reader.pages)
    except (PyPdfError, ValueError, KeyError) as e:
        raise UnsupportedFileType(f"PDF corrompido ou ilegível: {e}") from e
