"""
pdf_ops.py

Motor de compressão por tamanho-alvo:
- Satura o alvo pedido na faixa válida (% do original)
- Busca lossless sempre
- Fallback lossy (rasterização do ORIGINAL) só no modo agressivo e quando o
  lossless não coube no alvo
- Compõe o resultado final com as flags de qual caminho venceu

Tudo trabalha com bytes; nada sobrevive entre pedidos.
"""

from __future__ import annotations

from typing import Optional

from .engine_config import MODE_AGGRESSIVE
from .exceptions import LossyFallbackFailed
from .log import get_logger
from .lossless import LosslessSummary, search_lossless
from .lossy import RasterResult, Rasterizer
from .recompressor import Recompressor
from .schemas import AttemptResult, CompressionOutcome, CompressionRequest
from .targets import clamp_target_bytes

LOGGER = get_logger("pdfalvo.pdf_ops")


def _from_lossless(
    attempt: AttemptResult,
    original_size: int,
    target_bytes: int,
    achieved: bool,
    **flags: bool,
) -> CompressionOutcome:
    return CompressionOutcome(
        output_bytes=attempt.data,
        original_size=original_size,
        compressed_size=attempt.size,
        requested_target_bytes=target_bytes,
        target_achieved=achieved,
        source="lossless",
        profile=attempt.profile,
        **flags,
    )


def compose_outcome(
    original_size: int,
    target_bytes: int,
    mode: str,
    lossless: LosslessSummary,
    lossy: Optional[RasterResult] = None,
    lossy_failed: bool = False,
) -> CompressionOutcome:
    """Junta o resumo lossless e o (eventual) resultado lossy.

    Args:
        original_size (int): Tamanho do PDF de entrada.
        target_bytes (int): Alvo saturado; 0 = sem alvo.
        mode (str): 'standard' ou 'aggressive'.
        lossless (LosslessSummary): Saída de `search_lossless`.
        lossy (RasterResult | None): Saída do `Rasterizer`, se rodou.
        lossy_failed (bool): True se o fallback falhou por inteiro.

    Returns:
        CompressionOutcome: Bytes finais, tamanhos e flags.
    """
    smallest = lossless.smallest

    if target_bytes == 0:
        return _from_lossless(smallest, original_size, 0, True)

    if lossless.matched is not None:
        return _from_lossless(lossless.matched, original_size, target_bytes, True)

    if mode != MODE_AGGRESSIVE:
        return _from_lossless(smallest, original_size, target_bytes, False)

    # agressivo e o lossless não coube
    if lossy_failed or lossy is None or not lossy.available:
        return _from_lossless(
            smallest, original_size, target_bytes, smallest.size <= target_bytes,
            lossy_attempted=True, lossy_attempt_failed=True,
        )

    if lossy.profile is not None and lossy.size < smallest.size:
        return CompressionOutcome(
            output_bytes=lossy.data,
            original_size=original_size,
            compressed_size=lossy.size,
            requested_target_bytes=target_bytes,
            target_achieved=lossy.size <= target_bytes,
            lossy_attempted=True,
            used_lossy_compression=True,
            source="lossy",
            profile=lossy.profile,
        )

    # lossy sem ganho sobre o melhor lossless
    return _from_lossless(
        smallest, original_size, target_bytes, smallest.size <= target_bytes,
        lossy_attempted=True,
    )


def compress_pdf(
    request: CompressionRequest,
    recompressor: Optional[Recompressor] = None,
    rasterizer: Optional[Rasterizer] = None,
) -> CompressionOutcome:
    """Roda o pedido inteiro: alvo -> lossless -> (lossy) -> resultado.

    `RecompressionFailed` do lossless sobe sem tratamento (fatal); falhas do
    lossy voltam para o melhor resultado lossless.
    """
    data = request.input_bytes
    original_size = len(data)
    target = request.requested_target_bytes
    target_bytes = clamp_target_bytes(original_size, target) if target > 0 else 0

    lossless = search_lossless(data, target_bytes, recompressor=recompressor)

    needs_lossy = (
        request.mode == MODE_AGGRESSIVE
        and target_bytes > 0
        and lossless.matched is None
    )
    if not needs_lossy:
        return compose_outcome(original_size, target_bytes, request.mode, lossless)

    LOGGER.info("Lossless não atingiu %d bytes; tentando rasterização", target_bytes)
    try:
        # sempre sobre o ORIGINAL, nunca sobre a saída lossless
        lossy = (rasterizer or Rasterizer()).run(data, target_bytes)
    except LossyFallbackFailed as e:
        LOGGER.warning("Fallback lossy falhou: %s", e)
        return compose_outcome(original_size, target_bytes, request.mode, lossless, lossy_failed=True)
    except Exception:
        # volta ao melhor lossless
        LOGGER.exception("Erro inesperado no fallback lossy")
        return compose_outcome(original_size, target_bytes, request.mode, lossless, lossy_failed=True)

    outcome = compose_outcome(original_size, target_bytes, request.mode, lossless, lossy)
    LOGGER.info(
        "Resultado: %d -> %d bytes (%s, alvo %s)",
        original_size, outcome.compressed_size, outcome.source,
        "atingido" if outcome.target_achieved else "não atingido",
    )
    return outcome
