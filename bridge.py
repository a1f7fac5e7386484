# bridge.py
from __future__ import annotations

import base64
import binascii
from pathlib import Path
from typing import Any, Dict, Optional

import webview
from pydantic import ValidationError

from pdfalvo.engine_config import (
    DEFAULT_MODE,
    DEFAULT_UNIT,
    MAX_PERCENT,
    MIN_PERCENT,
    MODE_STANDARD,
)
from pdfalvo.exceptions import (
    InvalidRequestError,
    InvalidTargetSize,
    MissingFile,
    PdfAlvoError,
    ResourceLimitExceeded,
    UnsupportedFileType,
    is_resource_limit_error,
)
from pdfalvo.jobs import pop_job, purge_expired_jobs, save_job
from pdfalvo.log import get_logger
from pdfalvo.lossy import Rasterizer
from pdfalvo.pdf_ops import compress_pdf
from pdfalvo.recompressor import Recompressor
from pdfalvo.schemas import CompressIn, CompressionRequest, CompressOut, SaveIn
from pdfalvo.targets import (
    compute_bounds,
    normalize_target_unit,
    parse_target_size,
    sniff_pdf,
    validate_pdf_candidate,
)

LOGGER = get_logger("pdfalvo.bridge")

OUTPUT_FALLBACK_NAME = "comprimido.pdf"
OUTPUT_SUFFIX = "-comprimido.pdf"
TARGET_FIELDS = ("target_size_value", "target_size_unit")


def error_response(message: str, status: int) -> Dict[str, Any]:
    return {"error": message, "status": status}


def normalize_mode(value: Optional[str]) -> str:
    # só 'standard' desliga a rasterização; o resto cai no padrão
    if value == MODE_STANDARD:
        return MODE_STANDARD
    return DEFAULT_MODE


def output_filename(name: str) -> str:
    stem = Path(name or "").stem
    return f"{stem}{OUTPUT_SUFFIX}" if stem else OUTPUT_FALLBACK_NAME


class Api:
    """
    Ponte JS <-> Python do PDF Alvo (sem servidor).
    Cada chamada devolve um dict; erros viram {error, status}.
    """
    def __init__(
        self,
        recompressor: Optional[Recompressor] = None,
        rasterizer: Optional[Rasterizer] = None,
    ) -> None:
        self.recompressor = recompressor
        self.rasterizer = rasterizer

    # ---------- helpers ----------
    def _b64_to_bytes(self, b64: Optional[str]) -> bytes:
        if not b64:
            raise MissingFile()
        try:
            data = base64.b64decode(b64.encode("ascii"), validate=True)
        except (binascii.Error, UnicodeEncodeError) as e:
            raise UnsupportedFileType("Conteúdo do arquivo ilegível.") from e
        if not data:
            raise MissingFile()
        return data

    def _failure(self, exc: Exception) -> Dict[str, Any]:
        if isinstance(exc, InvalidRequestError):
            return error_response(exc.message, exc.status)
        if is_resource_limit_error(exc):
            LOGGER.warning("Limite de recursos atingido: %s", exc)
            return error_response(ResourceLimitExceeded.message, ResourceLimitExceeded.status)
        if isinstance(exc, PdfAlvoError):
            LOGGER.error("Falha na compressão: %s", exc)
            return error_response(PdfAlvoError.message, exc.status)
        LOGGER.exception("Erro inesperado na compressão")
        return error_response(PdfAlvoError.message, PdfAlvoError.status)

    # ---------- API: BOUNDS ----------
    def bounds(self, size: int) -> Dict[str, Any]:
        """Faixa válida do alvo para um arquivo de `size` bytes (para a UI)."""
        b = compute_bounds(max(int(size), 0))
        return {
            "min_bytes": b.min_bytes,
            "max_bytes": b.max_bytes,
            "min_percent": MIN_PERCENT,
            "max_percent": MAX_PERCENT,
        }

    # ---------- API: COMPRESS ----------
    def compress(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        payload: { name, type, bytes_b64, target_size_value?, target_size_unit?, mode? }
        Retorna: { job_id, filename, original_size, compressed_size, ... } ou { error, status }
        """
        try:
            try:
                req = CompressIn.model_validate(payload)
            except ValidationError as e:
                fields = {err["loc"][0] for err in e.errors() if err.get("loc")}
                if fields & set(TARGET_FIELDS):
                    raise InvalidTargetSize() from e
                raise InvalidRequestError() from e

            data = self._b64_to_bytes(req.bytes_b64)
            validate_pdf_candidate(req.name, req.type)

            unit = normalize_target_unit(req.target_size_unit or DEFAULT_UNIT)
            parsed = parse_target_size(req.target_size_value, unit)
            if parsed.error is not None:
                raise parsed.error

            sniff_pdf(data)
            request = CompressionRequest(
                input_bytes=data,
                requested_target_bytes=parsed.bytes,
                mode=normalize_mode(req.mode),
            )
            outcome = compress_pdf(request, recompressor=self.recompressor, rasterizer=self.rasterizer)
        except Exception as e:
            return self._failure(e)

        purge_expired_jobs()
        filename = output_filename(req.name)
        job_id = save_job(outcome.output_bytes, filename)
        return CompressOut(
            job_id=job_id,
            filename=filename,
            original_size=outcome.original_size,
            compressed_size=outcome.compressed_size,
            requested_target_bytes=outcome.requested_target_bytes,
            target_achieved=outcome.target_achieved,
            lossy_attempted=outcome.lossy_attempted,
            used_lossy_compression=outcome.used_lossy_compression,
            lossy_attempt_failed=outcome.lossy_attempt_failed,
            source=outcome.source,
            profile=outcome.profile,
            saved_percent=round(outcome.saved_percent, 2),
        ).model_dump()

    # ---------- API: SAVE ----------
    def save(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        payload: { job_id, filename_out? }
        Abre o diálogo de salvar e grava o PDF (download único por job).
        """
        try:
            req = SaveIn.model_validate(payload)
        except ValidationError:
            return error_response(InvalidRequestError.message, InvalidRequestError.status)

        purge_expired_jobs()
        job = pop_job(req.job_id)
        if job is None:
            return error_response("Resultado expirado; comprima o arquivo de novo.", 400)
        data, default_name = job

        filename_out = (req.filename_out or default_name).strip()
        if not filename_out.lower().endswith(".pdf"):
            filename_out += ".pdf"

        dlg = webview.windows[0].create_file_dialog(
            webview.FileDialog.SAVE,
            save_filename=filename_out,
        )
        if not dlg:
            # usuário cancelou: o job volta para outra tentativa
            save_job(data, default_name, job_id=req.job_id)
            return {"saved": False, "path": None}

        save_path = dlg if isinstance(dlg, str) else dlg[0]
        if not str(save_path).lower().endswith(".pdf"):
            save_path = str(save_path) + ".pdf"

        try:
            Path(save_path).write_bytes(data)
        except OSError as e:
            LOGGER.error("Falha ao gravar %s: %s", save_path, e)
            return error_response(f"Não foi possível salvar o arquivo: {e}", 500)
        return {"saved": True, "path": str(save_path)}
