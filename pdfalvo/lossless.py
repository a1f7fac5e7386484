"""
pdfalvo/lossless.py

Busca pela escada de perfis lossless (leve -> forte).

- Cada tentativa roda o recompressor com as diretivas do perfil; se a saída
  crescer, a tentativa fica com a entrada intacta.
- Com alvo > 0, o primeiro perfil que caber no alvo é aceito na hora
  (não procura um menor depois disso).
- PDFs grandes (com alvo) só rodam os perfis mais leves.
- Falha do recompressor derruba a busca inteira (sem pular perfil).
"""

# pdfalvo/lossless.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from .engine_config import LARGE_INPUT_PROFILE_COUNT, LARGE_INPUT_THRESHOLD, LOSSLESS_PROFILES
from .log import get_logger
from .recompressor import PikepdfRecompressor, Recompressor
from .schemas import AttemptResult, CompressionProfile

LOGGER = get_logger("pdfalvo.lossless")


@dataclass(frozen=True)
class LosslessSummary:
    matched: Optional[AttemptResult]
    smallest: AttemptResult
    attempts: int


def select_profiles(
    input_size: int,
    target_bytes: int,
    profiles: Sequence[CompressionProfile] = LOSSLESS_PROFILES,
) -> Sequence[CompressionProfile]:
    if target_bytes > 0 and input_size >= LARGE_INPUT_THRESHOLD:
        return profiles[:LARGE_INPUT_PROFILE_COUNT]
    return profiles


def run_attempt(recompressor: Recompressor, data: bytes, profile: CompressionProfile) -> AttemptResult:
    out = recompressor.run(data, profile.directives)
    if len(out) > len(data):
        # nunca piora: devolve a entrada
        return AttemptResult(data)
    return AttemptResult(out, profile.name)


def search_lossless(
    data: bytes,
    target_bytes: int,
    recompressor: Optional[Recompressor] = None,
    profiles: Sequence[CompressionProfile] = LOSSLESS_PROFILES,
) -> LosslessSummary:
    """Roda os perfis em ordem até casar o alvo ou esgotar a escada.

    Args:
        data (bytes): PDF original.
        target_bytes (int): Alvo já saturado; 0 = minimizar sem alvo.
        recompressor (Recompressor | None): Padrão `PikepdfRecompressor`.
        profiles (Sequence[CompressionProfile]): Escada completa.

    Returns:
        LosslessSummary: `matched` (primeiro que coube) e `smallest`.
    """
    recompressor = recompressor or PikepdfRecompressor()
    ladder = select_profiles(len(data), target_bytes, profiles)

    smallest: Optional[AttemptResult] = None
    for count, profile in enumerate(ladder, start=1):
        attempt = run_attempt(recompressor, data, profile)
        LOGGER.debug("Perfil %s: %d -> %d bytes", profile.name, len(data), attempt.size)

        if smallest is None or attempt.size < smallest.size:
            smallest = attempt

        if target_bytes > 0 and attempt.size <= target_bytes:
            LOGGER.info("Alvo de %d bytes atingido pelo perfil %s", target_bytes, profile.name)
            return LosslessSummary(matched=attempt, smallest=smallest, attempts=count)

    if smallest is None:
        smallest = AttemptResult(data)
    LOGGER.info("Lossless sem casar alvo; menor resultado: %d bytes", smallest.size)
    return LosslessSummary(matched=None, smallest=smallest, attempts=len(ladder))
