"""Motor do PDF Alvo: compressão de PDF em direção a um tamanho-alvo."""

from .pdf_ops import compose_outcome, compress_pdf
from .schemas import CompressionOutcome, CompressionRequest

__all__ = ["CompressionOutcome", "CompressionRequest", "compose_outcome", "compress_pdf"]
