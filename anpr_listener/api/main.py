"""Aplicación FastAPI mínima para ANPR Listener.

Expone un endpoint `/health` con el recuento de ficheros almacenados y de
eventos guardados en la base de datos. Se lanza con
`uvicorn anpr_listener.api.main:app`.
"""
from typing import Optional

from fastapi import FastAPI
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from anpr_listener.config import settings
from anpr_listener.logger import logger
from anpr_listener.models import AnprEvent, SessionLocal
from anpr_listener.utils.cleanup import count_files

app = FastAPI(title="ANPR Listener", version="0.1.0")


def _count_events() -> Optional[int]:
    session = SessionLocal()
    try:
        return int(session.query(func.count(AnprEvent.id)).scalar() or 0)
    except SQLAlchemyError as exc:
        logger.warning("[API] Base de datos no disponible: %s", exc)
        return None
    finally:
        session.close()


@app.get("/health")
def healthcheck() -> dict[str, Optional[int] | str]:
    """Endpoint de salud y conteo mínimo de ficheros y eventos.

    Si la base de datos no responde el estado pasa a ``degraded`` y
    ``stored_events`` es ``null``.
    """

    stored_events = _count_events()
    return {
        "status": "ok" if stored_events is not None else "degraded",
        "stored_images": count_files(settings.images_dir),
        "stored_xml_logs": count_files(settings.xml_logs_dir),
        "stored_events": stored_events,
    }
