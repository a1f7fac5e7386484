"""
pdfalvo/jobs.py

PDFs comprimidos aguardando o usuário salvar (memória, com TTL).
- `save_job(data, filename) -> job_id`
- `pop_job(job_id) -> (bytes, filename) | None`: download único.
- `purge_expired_jobs()`: descarta o que passou do TTL.
"""

# pdfalvo/jobs.py
from __future__ import annotations

import secrets
import threading
import time
from dataclasses import dataclass, field
from typing import Dict, Tuple

from .engine_config import TTL_MIN


@dataclass
class Job:
    data: bytes = field(repr=False)
    filename: str
    created_at: float = field(default_factory=time.time)


JOBS: Dict[str, Job] = {}  # job_id -> Job
_LOCK = threading.Lock()


def save_job(data: bytes, filename: str, job_id: str | None = None) -> str:
    job_id = job_id or secrets.token_urlsafe(12)
    with _LOCK:
        JOBS[job_id] = Job(data, filename)
    return job_id


def pop_job(job_id: str) -> Tuple[bytes, str] | None:
    with _LOCK:
        job = JOBS.pop(job_id, None)
    if job is None:
        return None
    return job.data, job.filename


def purge_expired_jobs(now: float | None = None) -> int:
    now = time.time() if now is None else now
    ttl = TTL_MIN * 60
    with _LOCK:
        expired = [k for k, job in JOBS.items() if now - job.created_at > ttl]
        for k in expired:
            del JOBS[k]
    return len(expired)
