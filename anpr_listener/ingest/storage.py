"""Helpers para guardar en disco las imágenes y los XML recibidos."""
from __future__ import annotations

import os
import time
from typing import Optional

from anpr_listener.config import settings
from anpr_listener.logger import logger


class MissingFilenameError(ValueError):
    """Una parte de imagen llegó sin ``filename`` declarado."""


def _resolve_image_name(filename: str) -> str:
    if settings.sanitize_filenames:
        return os.path.basename(filename.replace("\\", "/"))
    return filename


def save_image(filename: Optional[str], content: bytes) -> str:
    """Guarda la imagen con el nombre declarado por la cámara.

    Devuelve la ruta del fichero escrito. Si ya existía se sobrescribe. Los
    errores de disco (``OSError``) se propagan al llamador.
    """

    if not filename:
        raise MissingFilenameError("La parte de imagen no declara filename")

    target_dir = settings.IMAGES_DIR
    os.makedirs(target_dir, exist_ok=True)

    name = _resolve_image_name(filename)
    if not name:
        raise MissingFilenameError(f"Filename no utilizable: {filename!r}")
    full_path = os.path.join(target_dir, name)
    with open(full_path, "wb") as f:
        f.write(content)

    logger.info("[IMAGEN] Imagen guardada %s", full_path)
    return full_path


def build_xml_log_path(now_ms: Optional[int] = None) -> str:
    """Ruta del XML de evento: ``<xml_logs_dir>/<epoch en ms>.xml``."""

    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000
    return os.path.join(settings.XML_LOGS_DIR, f"{now_ms}.xml")


def save_event_xml(xml_text: str) -> str:
    """Guarda el texto XML tal cual se recibió y devuelve la ruta escrita."""

    os.makedirs(settings.XML_LOGS_DIR, exist_ok=True)
    full_path = build_xml_log_path()
    with open(full_path, "w", encoding="utf-8", newline="") as f:
        f.write(xml_text)

    logger.info("[XML] XML guardado %s", full_path)
    return full_path
