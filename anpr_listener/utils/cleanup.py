"""Rutinas compartidas de recuento y limpieza de ficheros almacenados."""
from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


def count_files(directory: str) -> int:
    """Cuenta los ficheros regulares de un directorio (0 si no existe)."""

    base = Path(directory)
    if not base.is_dir():
        return 0
    return sum(1 for entry in base.iterdir() if entry.is_file())


def purge_older_than(directory: str, days: float, now: Optional[float] = None) -> int:
    """Elimina los ficheros con mtime anterior a ``days`` días.

    Devuelve cuántos ficheros se eliminaron.
    """

    base = Path(directory)
    if not base.is_dir():
        logger.debug("[CLEANUP] Directorio inexistente: %s", base)
        return 0

    cutoff = (now if now is not None else time.time()) - days * 86400
    deleted = 0
    for entry in base.iterdir():
        if not entry.is_file():
            continue
        try:
            if entry.stat().st_mtime < cutoff:
                entry.unlink()
                deleted += 1
        except OSError as exc:  # pragma: no cover - defensivo
            logger.warning("[CLEANUP] Error al borrar %s: %s", entry, exc)
    return deleted
