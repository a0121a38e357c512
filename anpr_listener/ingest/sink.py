"""Escritura de eventos decodificados en el almacén externo (best-effort)."""
from __future__ import annotations

from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from anpr_listener.ingest.parser import AnprEventRecord
from anpr_listener.logger import logger
from anpr_listener.models import AnprEvent, SessionLocal


class SinkUnavailableError(RuntimeError):
    """El almacén no es accesible o ha rechazado la escritura."""


def store_event(
    record: AnprEventRecord,
    session_factory: Optional[Callable[[], Session]] = None,
) -> int:
    """Inserta un evento y devuelve su id.

    Abre una sesión (y conexión) propia que se cierra al terminar. No hay
    reintentos: cualquier fallo de base de datos se convierte en
    :class:`SinkUnavailableError`.
    """

    factory = session_factory or SessionLocal
    session = factory()
    try:
        event = AnprEvent(**record.as_dict())
        session.add(event)
        session.commit()
        logger.info(
            "[SINK] Evento guardado id=%s matrícula=%s ip=%s",
            event.id,
            record.license_plate,
            record.ip_address,
        )
        return event.id
    except SQLAlchemyError as exc:
        session.rollback()
        raise SinkUnavailableError(f"No se pudo guardar el evento: {exc}") from exc
    finally:
        session.close()
