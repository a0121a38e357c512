"""Decide qué hacer con cada parte extraída de una petición."""
from __future__ import annotations

import enum
from typing import Callable, Iterable, Optional

from anpr_listener.config import settings
from anpr_listener.ingest.multipart import Part
from anpr_listener.ingest.parser import AnprEventRecord, EventDecodeError, parse_anpr_event_xml
from anpr_listener.ingest.sink import SinkUnavailableError, store_event
from anpr_listener.ingest.storage import MissingFilenameError, save_event_xml, save_image
from anpr_listener.logger import logger

IMAGE_PREFIX = "image/"
XML_PREFIX = "application/xml"

EventSink = Callable[[AnprEventRecord], object]


class RouteOutcome(str, enum.Enum):
    IMAGE_SAVED = "IMAGE_SAVED"
    XML_SAVED = "XML_SAVED"
    EVENT_STORED = "EVENT_STORED"
    IGNORED = "IGNORED"
    SKIPPED = "SKIPPED"
    DECODE_FAILED = "DECODE_FAILED"
    SINK_FAILED = "SINK_FAILED"


def _route_image(part: Part) -> RouteOutcome:
    try:
        save_image(part.filename, part.to_bytes())
    except MissingFilenameError as exc:
        logger.warning("[IMAGEN][ADVERTENCIA] Parte %s descartada: %s", part.content_type, exc)
        return RouteOutcome.SKIPPED
    except (OSError, ValueError) as exc:
        # ValueError: filename con bytes nulos u otros caracteres no válidos
        logger.error("[IMAGEN][ERROR] No se pudo escribir la imagen %r: %s", part.filename, exc)
        return RouteOutcome.SKIPPED
    return RouteOutcome.IMAGE_SAVED


def _route_xml(part: Part, sink: Optional[EventSink]) -> RouteOutcome:
    xml_text = part.to_bytes().decode("utf-8", errors="replace")
    try:
        save_event_xml(xml_text)
    except OSError as exc:
        logger.error("[XML][ERROR] No se pudo escribir el XML de evento: %s", exc)
        return RouteOutcome.SKIPPED

    try:
        record = parse_anpr_event_xml(xml_text)
    except EventDecodeError as exc:
        logger.warning("[EVENT][ADVERTENCIA] XML guardado pero no decodificable: %s", exc)
        return RouteOutcome.DECODE_FAILED

    if sink is None:
        return RouteOutcome.XML_SAVED

    try:
        sink(record)
    except SinkUnavailableError as exc:
        logger.error(
            "[SINK][ERROR] Evento descartado matrícula=%s: %s", record.license_plate, exc
        )
        return RouteOutcome.SINK_FAILED
    return RouteOutcome.EVENT_STORED


# Marca "usar el almacén según settings.sink_enabled"; None desactiva el envío.
SETTINGS_SINK = object()


def _resolve_sink(sink) -> Optional[EventSink]:
    if sink is SETTINGS_SINK:
        return store_event if settings.sink_enabled else None
    return sink


def route_part(part: Part, *, sink=SETTINGS_SINK) -> RouteOutcome:
    """Persiste una parte según su content type.

    - ``image/*``: se escribe en el directorio de imágenes con su filename.
    - ``application/xml``: se escribe en el directorio de logs XML, se
      decodifica y, si procede, se envía el evento al almacén externo.
    - Cualquier otro tipo se ignora.

    Ningún fallo por parte se propaga; el resultado solo sirve para trazas.
    """

    if part.content_type.startswith(IMAGE_PREFIX):
        return _route_image(part)
    if part.content_type.startswith(XML_PREFIX):
        return _route_xml(part, _resolve_sink(sink))
    logger.debug("[EVENT] Parte %s ignorada", part.content_type)
    return RouteOutcome.IGNORED


def route_parts(parts: Iterable[Part], *, sink=SETTINGS_SINK) -> list[RouteOutcome]:
    sink = _resolve_sink(sink)
    outcomes = []
    for part in parts:
        try:
            outcomes.append(route_part(part, sink=sink))
        except Exception:
            logger.exception(
                "[EVENT][ERROR] Error inesperado procesando parte %s (%r)",
                part.content_type,
                part.filename,
            )
            outcomes.append(RouteOutcome.SKIPPED)
    return outcomes
