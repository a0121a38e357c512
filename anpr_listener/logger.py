"""Configuración global de logging.

Importar ``logger`` desde este módulo deja configurado el logger raíz del
paquete (consola, nivel según ``LOG_LEVEL``).
"""
from __future__ import annotations

import logging
import sys

from anpr_listener.config import settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _configure(name: str = "anpr_listener") -> logging.Logger:
    package_logger = logging.getLogger(name)
    level = getattr(logging, (settings.log_level or "INFO").upper(), logging.INFO)
    package_logger.setLevel(level)

    # Evita duplicar handlers si el módulo se recarga
    if package_logger.handlers:
        return package_logger

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    package_logger.addHandler(handler)
    return package_logger


logger = _configure()
