"""Logger compartilhado pelos módulos do motor.

Só o logger do pacote (`pdfalvo`) ganha handler; os dos módulos
(`pdfalvo.lossy`, `pdfalvo.bridge`...) propagam para ele. Quem embute o
motor pode reconfigurar tudo por `logging.getLogger("pdfalvo")`.
"""

from __future__ import annotations

import logging

PACKAGE_LOGGER = "pdfalvo"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _package_logger() -> logging.Logger:
    logger = logging.getLogger(PACKAGE_LOGGER)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
    return logger


def get_logger(name: str) -> logging.Logger:
    root = _package_logger()
    if name == PACKAGE_LOGGER:
        return root
    if not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)
