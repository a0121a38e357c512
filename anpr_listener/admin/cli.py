"""CLI administrativa para consultar eventos y limpiar ficheros almacenados."""
from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from anpr_listener.config import settings
from anpr_listener.models import AnprEvent, Base, SessionLocal, engine
from anpr_listener.utils.cleanup import purge_older_than

logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
logger = logging.getLogger(__name__)


def _parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Herramientas administrativas")
    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list-events", help="Listar los últimos eventos")
    list_parser.add_argument("--limit", type=int, default=50, help="Número máximo de eventos")

    purge_parser = subparsers.add_parser(
        "purge-files", help="Borrar imágenes y XML antiguos"
    )
    purge_parser.add_argument(
        "--older-than-days",
        type=float,
        required=True,
        help="Antigüedad mínima (en días) de los ficheros a borrar",
    )
    purge_parser.add_argument(
        "--images", action="store_true", help="Limitar el borrado a las imágenes"
    )
    purge_parser.add_argument(
        "--xml-logs", action="store_true", help="Limitar el borrado a los XML de eventos"
    )

    subparsers.add_parser("init-db", help="Crear la tabla de eventos")

    return parser.parse_args(argv)


def _list_events(session, limit: int) -> None:
    print("ID | fecha | matrícula | tipo | color | velocidad | ip")
    events = session.query(AnprEvent).order_by(AnprEvent.id.desc()).limit(limit).all()
    for event in events:
        print(
            f"{event.id} | {event.date_time} | {event.license_plate} | {event.vehicle_type}"
            f" | {event.vehicle_color} | {event.vehicle_speed} | {event.ip_address}"
        )


def _purge_files(args: argparse.Namespace) -> None:
    # Sin filtros se limpian ambas áreas
    both = not args.images and not args.xml_logs
    if args.images or both:
        deleted = purge_older_than(settings.images_dir, args.older_than_days)
        print(f"Imágenes eliminadas: {deleted}")
    if args.xml_logs or both:
        deleted = purge_older_than(settings.xml_logs_dir, args.older_than_days)
        print(f"XML eliminados: {deleted}")


def main(argv: Optional[list[str]] = None) -> int:
    args = _parse_args(argv)

    if args.command == "purge-files":
        _purge_files(args)
        return 0

    try:
        if args.command == "init-db":
            Base.metadata.create_all(engine)
            print("Tabla anpr_events creada")
            return 0

        session = SessionLocal()
        try:
            if args.command == "list-events":
                _list_events(session, args.limit)
        finally:
            session.close()
    except SQLAlchemyError as exc:
        logger.error("Error de base de datos: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
