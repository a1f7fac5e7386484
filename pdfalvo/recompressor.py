"""
pdfalvo/recompressor.py

Recompressor estrutural (sem perdas) sobre o pikepdf/qpdf.

As diretivas usam os nomes das opções do qpdf sem os "--", por exemplo
``compression-level=9`` ou ``object-streams=generate``. O resultado é sempre
o PDF regravado; quem chama decide descartar uma saída maior que a entrada.
"""

# pdfalvo/recompressor.py
from __future__ import annotations

import io
import threading
from dataclasses import dataclass
from typing import Protocol, Sequence

import pikepdf
from pikepdf import settings as pikepdf_settings
from pikepdf.models.image import UnsupportedImageTypeError
from PIL import Image

from .engine_config import OPTIMIZE_IMAGES_JPEG_QUALITY
from .exceptions import RecompressionFailed
from .log import get_logger

LOGGER = get_logger("pdfalvo.recompressor")

# nível do flate no pikepdf é global do processo
_FLATE_LOCK = threading.Lock()
DEFAULT_FLATE_LEVEL = -1

_YES_NO = {"y": True, "n": False}

_STREAM_DATA = {
    "compress": (True, pikepdf.StreamDecodeLevel.generalized),
    "preserve": (None, pikepdf.StreamDecodeLevel.none),
    "uncompress": (False, pikepdf.StreamDecodeLevel.generalized),
}

_OBJECT_STREAMS = {
    "generate": pikepdf.ObjectStreamMode.generate,
    "preserve": pikepdf.ObjectStreamMode.preserve,
    "disable": pikepdf.ObjectStreamMode.disable,
}

_JPEG_FILTERS = (pikepdf.Name.DCTDecode, pikepdf.Name.JPXDecode)


class Recompressor(Protocol):
    """Colaborador usado pela busca lossless (trocável por stub nos testes)."""

    def run(self, data: bytes, directives: Sequence[str]) -> bytes:
        """Regrava `data` conforme as diretivas ou levanta `RecompressionFailed`."""


@dataclass
class SaveOptions:
    compress_streams: bool = True
    stream_decode_level: pikepdf.StreamDecodeLevel = pikepdf.StreamDecodeLevel.generalized
    recompress_flate: bool = False
    object_stream_mode: pikepdf.ObjectStreamMode = pikepdf.ObjectStreamMode.preserve
    normalize_content: bool = False
    compression_level: int = DEFAULT_FLATE_LEVEL
    optimize_images: bool = False

    def save_kwargs(self) -> dict:
        return {
            "compress_streams": self.compress_streams,
            "stream_decode_level": self.stream_decode_level,
            "recompress_flate": self.recompress_flate,
            "object_stream_mode": self.object_stream_mode,
            "normalize_content": self.normalize_content,
        }


def parse_directives(directives: Sequence[str]) -> SaveOptions:
    """Traduz diretivas estilo qpdf para opções do `pikepdf.Pdf.save`."""
    opts = SaveOptions()
    for directive in directives:
        key, _, value = directive.partition("=")
        try:
            if key == "compress-streams":
                opts.compress_streams = _YES_NO[value]
            elif key == "stream-data":
                compress, level = _STREAM_DATA[value]
                if compress is not None:
                    opts.compress_streams = compress
                opts.stream_decode_level = level
            elif key == "recompress-flate" and not value:
                opts.recompress_flate = True
            elif key == "compression-level":
                level = int(value)
                if not 1 <= level <= 9:
                    raise ValueError(level)
                opts.compression_level = level
            elif key == "object-streams":
                opts.object_stream_mode = _OBJECT_STREAMS[value]
            elif key == "normalize-content":
                opts.normalize_content = _YES_NO[value]
            elif key == "optimize-images" and not value:
                opts.optimize_images = True
            else:
                raise KeyError(key)
        except (KeyError, ValueError) as e:
            raise RecompressionFailed(f"Diretiva de compressão inválida: {directive!r}") from e
    return opts


def _is_jpeg_stream(obj: pikepdf.Stream) -> bool:
    filters = obj.get("/Filter")
    if filters is None:
        return False
    if isinstance(filters, pikepdf.Array):
        return any(f in _JPEG_FILTERS for f in filters)
    return filters in _JPEG_FILTERS


def optimize_images(pdf: pikepdf.Pdf, quality: int = OPTIMIZE_IMAGES_JPEG_QUALITY) -> int:
    """Recodifica imagens RGB/cinza de 8 bits em JPEG quando ficar menor.

    Pula máscaras, imagens com SMask/Decode e o que já é JPEG/JPX.
    Devolve quantas imagens foram trocadas.
    """
    replaced = 0
    for obj in pdf.objects:
        if not isinstance(obj, pikepdf.Stream) or obj.get("/Subtype") != pikepdf.Name.Image:
            continue
        if "/SMask" in obj or "/Mask" in obj or "/Decode" in obj or obj.get("/ImageMask", False):
            continue
        if obj.get("/BitsPerComponent") != 8 or _is_jpeg_stream(obj):
            continue
        color_space = obj.get("/ColorSpace")
        if color_space == pikepdf.Name.DeviceRGB:
            pil_mode = "RGB"
        elif color_space == pikepdf.Name.DeviceGray:
            pil_mode = "L"
        else:
            continue

        try:
            pil = pikepdf.PdfImage(obj).as_pil_image()
        except (UnsupportedImageTypeError, pikepdf.PdfError, NotImplementedError, ValueError, OSError) as e:
            LOGGER.debug("Imagem %s ignorada: %s", obj.objgen, e)
            continue

        buf = io.BytesIO()
        with pil:
            img: Image.Image = pil if pil.mode == pil_mode else pil.convert(pil_mode)
            img.save(buf, "JPEG", quality=quality, optimize=True)
        jpeg = buf.getvalue()

        if len(jpeg) < len(obj.read_raw_bytes()):
            obj.write(jpeg, filter=pikepdf.Name.DCTDecode)
            if "/DecodeParms" in obj:
                del obj["/DecodeParms"]
            replaced += 1
    return replaced


class PikepdfRecompressor:
    """Implementação padrão de `Recompressor` (pikepdf em memória)."""

    def run(self, data: bytes, directives: Sequence[str]) -> bytes:
        opts = parse_directives(directives)
        out = io.BytesIO()
        try:
            with pikepdf.open(io.BytesIO(data)) as pdf:
                if opts.optimize_images:
                    count = optimize_images(pdf)
                    LOGGER.debug("optimize-images trocou %d imagem(ns)", count)
                with _FLATE_LOCK:
                    pikepdf_settings.set_flate_compression_level(opts.compression_level)
                    try:
                        pdf.save(out, **opts.save_kwargs())
                    finally:
                        pikepdf_settings.set_flate_compression_level(DEFAULT_FLATE_LEVEL)
        except pikepdf.PdfError as e:
            raise RecompressionFailed(f"Falha na recompressão do PDF: {e}") from e
        return out.getvalue()
