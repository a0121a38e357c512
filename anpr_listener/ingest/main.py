"""Entry point para lanzar el servicio de ingesta.

Ejecuta este módulo con `python -m anpr_listener.ingest.main`; leerá el puerto
de `LISTEN_PORT` (9091 por defecto) y la dirección de `LISTEN_HOST` o, si no
está definida, la IPv4 local del equipo.
"""
from __future__ import annotations

import argparse
from typing import Optional

from anpr_listener.ingest.service import run_ingest_service


def _parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Listener de eventos ANPR")
    parser.add_argument("--host", help="Dirección de escucha (por defecto IPv4 local)")
    parser.add_argument("--port", type=int, help="Puerto de escucha")
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> None:
    args = _parse_args(argv)
    run_ingest_service(host=args.host, port=args.port)


if __name__ == "__main__":
    main()
