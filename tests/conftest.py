from __future__ import annotations

import io
import os
from typing import Dict, Tuple

import fitz  # PyMuPDF
import pytest
from PIL import Image

from pdfalvo import jobs
from pdfalvo.engine_config import LOSSLESS_PROFILES


@pytest.fixture()
def text_pdf() -> bytes:
    doc = fitz.open()
    for i in range(3):
        page = doc.new_page(width=612, height=792)
        page.insert_text((72, 72), f"Pagina {i + 1} - relatorio de teste", fontsize=24)
        page.draw_rect(fitz.Rect(72, 100, 540, 700), color=(0, 0, 1), width=2)
        for y in range(110, 690, 4):
            page.draw_line(fitz.Point(80, y), fitz.Point(530, y), color=(0.5, 0.5, 0.5), width=0.5)
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture()
def noise_png() -> bytes:
    # alfa aleatório força SMask: o "optimize-images" não consegue encolher
    img = Image.frombytes("RGBA", (600, 600), os.urandom(600 * 600 * 4))
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture()
def image_pdf(noise_png: bytes) -> bytes:
    """PDF pesado: uma página com foto de ruído (não comprime sem perdas)."""
    doc = fitz.open()
    for _ in range(2):
        page = doc.new_page(width=612, height=792)
        page.insert_image(fitz.Rect(36, 36, 576, 576), stream=noise_png)
    data = doc.tobytes(garbage=4, deflate=True)
    doc.close()
    return data


@pytest.fixture()
def ladder_sizes():
    """Fábrica: tamanhos por perfil lossless, na ordem da escada."""
    def _make(*sizes: int) -> Dict[Tuple[str, ...], int]:
        return {p.directives: s for p, s in zip(LOSSLESS_PROFILES, sizes)}
    return _make


@pytest.fixture(autouse=True)
def clear_jobs():
    jobs.JOBS.clear()
    yield
    jobs.JOBS.clear()
