"""Servicio de ingesta de envíos multipart de cámaras ANPR.

Cada conexión se atiende en su propio hilo: se acumulan los bytes hasta que la
cámara cierra su lado de escritura, se resuelve el boundary, se extraen las
partes y se persisten en orden. La respuesta es siempre ``200`` salvo cuando la
petición no declara boundary (``400``).
"""
from __future__ import annotations

import enum
import socket
import threading
from typing import Optional

from anpr_listener.config import settings
from anpr_listener.ingest.multipart import extract_parts, resolve_boundary
from anpr_listener.ingest.router import route_parts
from anpr_listener.logger import logger

RESPONSE_OK = b"HTTP/1.1 200 OK\r\nContent-Length: 0\r\n\r\n"
RESPONSE_BAD_REQUEST = b"HTTP/1.1 400 Bad Request\r\nContent-Length: 0\r\n\r\n"


class NoNetworkAdapterError(RuntimeError):
    """No hay ninguna interfaz con IPv4 no local en el equipo."""


class ConnectionState(str, enum.Enum):
    ACCUMULATING = "ACCUMULATING"
    RESOLVING = "RESOLVING"
    EXTRACTING = "EXTRACTING"
    ROUTING = "ROUTING"
    RESPONDING = "RESPONDING"
    CLOSED = "CLOSED"
    FAILED = "FAILED"


def discover_local_ip() -> str:
    """Devuelve la primera IPv4 no loopback del equipo."""

    # Un connect UDP no envía nada, solo fija la interfaz de salida.
    probe = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        probe.connect(("10.255.255.255", 1))
        address = probe.getsockname()[0]
        if address and not address.startswith("127.") and address != "0.0.0.0":
            return address
    except OSError:
        pass
    finally:
        probe.close()

    try:
        _, _, addresses = socket.gethostbyname_ex(socket.gethostname())
    except OSError:
        addresses = []
    for address in addresses:
        if not address.startswith("127."):
            return address

    raise NoNetworkAdapterError("No hay adaptadores de red con dirección IPv4 en el sistema")


def _receive_all(conn: socket.socket) -> bytes:
    data_chunks: list[bytes] = []
    while True:
        chunk = conn.recv(settings.recv_chunk_size)
        if not chunk:
            break
        data_chunks.append(chunk)
    return b"".join(data_chunks)


def _respond(conn: socket.socket, payload: bytes, addr) -> None:
    try:
        conn.sendall(payload)
        conn.shutdown(socket.SHUT_WR)
    except OSError as exc:
        logger.warning("[LISTENER] No se pudo enviar la respuesta a %s: %s", addr, exc)


def _enter(state: ConnectionState, addr) -> ConnectionState:
    logger.debug("[LISTENER] %s -> %s", addr, state.value)
    return state


def serve_connection(conn: socket.socket, addr) -> ConnectionState:
    """Atiende una conexión completa y devuelve el estado final.

    Recorre ACCUMULATING, RESOLVING, EXTRACTING, ROUTING y RESPONDING hasta
    CLOSED, o termina en FAILED si la petición no declara boundary. Los errores
    de transporte durante la recepción cierran la conexión sin respuesta. Los
    fallos de cada parte se registran pero no cambian la respuesta ``200``.
    """

    logger.info("[LISTENER] %s enviando datos", addr)
    with conn:
        state = _enter(ConnectionState.ACCUMULATING, addr)
        if settings.socket_timeout_seconds:
            conn.settimeout(settings.socket_timeout_seconds)

        try:
            data = _receive_all(conn)
        except OSError as exc:
            logger.error("[LISTENER][ERROR] Error recibiendo datos de %s: %s", addr, exc)
            return _enter(ConnectionState.CLOSED, addr)

        state = _enter(ConnectionState.RESOLVING, addr)
        boundary = resolve_boundary(data)
        if boundary is None:
            logger.warning("[LISTENER] Boundary no encontrado en la petición de %s", addr)
            _respond(conn, RESPONSE_BAD_REQUEST, addr)
            return _enter(ConnectionState.FAILED, addr)

        state = _enter(ConnectionState.EXTRACTING, addr)
        parts = extract_parts(data, boundary)
        logger.debug("[LISTENER] %s partes extraídas de %s", len(parts), addr)

        state = _enter(ConnectionState.ROUTING, addr)
        try:
            outcomes = route_parts(parts)
            logger.debug("[LISTENER] Resultado de %s: %s", addr, [o.value for o in outcomes])
        except Exception:  # pragma: no cover - logging defensivo
            logger.exception("[LISTENER][ERROR] Error procesando partes desde %s", addr)
        finally:
            # Las partes son vistas sobre ``data``; se liberan antes de cerrar.
            for part in parts:
                part.content.release()

        state = _enter(ConnectionState.RESPONDING, addr)
        _respond(conn, RESPONSE_OK, addr)
        logger.info("[LISTENER] Datos procesados y respuesta enviada a %s (%s)", addr, state.value)
    return _enter(ConnectionState.CLOSED, addr)


def _serve_in_thread(conn: socket.socket, addr) -> threading.Thread:
    worker = threading.Thread(
        target=serve_connection,
        args=(conn, addr),
        name=f"anpr-conn-{addr[0]}:{addr[1]}",
        daemon=True,
    )
    worker.start()
    return worker


def serve_forever(server_socket: socket.socket, stop_event: Optional[threading.Event] = None) -> None:
    """Acepta conexiones y lanza un hilo por cada una.

    Con ``stop_event`` el bucle termina cuando se activa; el socket debe tener
    timeout para que el evento se compruebe entre ``accept``.
    """

    while stop_event is None or not stop_event.is_set():
        try:
            conn, addr = server_socket.accept()
        except socket.timeout:
            continue
        except OSError as exc:
            logger.error("[LISTENER][ERROR] Error del servidor: %s", exc)
            raise
        logger.debug("[LISTENER] Conexión entrante desde %s", addr)
        _serve_in_thread(conn, addr)


def run_ingest_service(host: Optional[str] = None, port: Optional[int] = None) -> None:
    """Punto de entrada del servicio de ingesta."""

    listen_host = host or settings.listen_host or discover_local_ip()
    listen_port = port or settings.LISTEN_PORT

    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as server_socket:
        server_socket.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        server_socket.bind((listen_host, listen_port))
        server_socket.listen()
        logger.info("[LISTENER] Servicio de ingesta escuchando en %s:%s", listen_host, listen_port)
        serve_forever(server_socket)
