"""Exceções do pdfalvo.

Cada classe traz a mensagem exibida ao usuário e a classe de status HTTP
que a bridge devolve para a interface.
"""

from __future__ import annotations

from typing import Optional

RESOURCE_LIMIT_MARKERS = (
    "memory",
    "memória",
    "out of memory",
    "cannot allocate",
    "timeout",
    "timed out",
    "time limit",
    "cpu",
    "resource limit",
    "killed",
)


class PdfAlvoError(Exception):
    """Base de todos os erros do pdfalvo."""

    message = "Falha ao processar a compressão do PDF."
    status = 500

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.message)
        self.message = message or self.message


class InvalidRequestError(PdfAlvoError):
    status = 400
    message = "Pedido inválido."


class MissingFile(InvalidRequestError):
    message = "O arquivo PDF é obrigatório."


class InvalidTargetSize(InvalidRequestError):
    message = "Tamanho-alvo inválido."


class UnsupportedFileType(InvalidRequestError):
    message = "Tipo de arquivo não suportado. Use um arquivo PDF."


class RecompressionFailed(PdfAlvoError):
    """O recompressor estrutural falhou; fatal para o pedido inteiro."""


class RasterizationUnavailable(PdfAlvoError):
    """Não há como renderizar o documento; o fallback lossy é pulado."""

    message = "Renderização indisponível para este documento."


class PageRenderFailed(PdfAlvoError):
    """Uma página não renderizou/codificou; o perfil atual é abandonado."""

    message = "Falha ao renderizar a página."


class LossyFallbackFailed(PdfAlvoError):
    """Nenhum perfil de rasterização gerou documento."""

    message = "Nenhum perfil de rasterização conseguiu gerar o PDF."


class ResourceLimitExceeded(PdfAlvoError):
    message = (
        "O processamento atingiu o limite de recursos. Tente um tamanho-alvo "
        "maior ou use um PDF menor."
    )


def is_resource_limit_error(exc: BaseException) -> bool:
    """Falha por memória/CPU/tempo, deduzida pelo tipo ou pelo texto da mensagem."""
    if isinstance(exc, (MemoryError, ResourceLimitExceeded)):
        return True
    text = str(exc).lower()
    return any(marker in text for marker in RESOURCE_LIMIT_MARKERS)
