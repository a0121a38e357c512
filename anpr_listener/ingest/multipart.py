"""Parser multipart/form-data para los envíos de las cámaras ANPR.

Las cámaras envían por un socket TCP crudo un cuerpo multipart con una imagen
y un XML de evento. No se usa ninguna librería HTTP: se localiza el token
``boundary=`` en la cabecera y se recorren los bytes buscando cada bloque
``Content-Disposition: form-data;``.

Todas las funciones son puras sobre ``bytes`` inmutables. El final de las
partes no se señala con excepciones: simplemente se deja de producir partes.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator, Optional

BOUNDARY_KEY = b"boundary="
CRLF = b"\r\n"
HEADER_TERMINATOR = b"\r\n\r\n"
DISPOSITION_MARKER = b"Content-Disposition: form-data;"
DEFAULT_CONTENT_TYPE = "application/octet-stream"

_FILENAME_RE = re.compile(r'filename="([^"]+)"')
_CONTENT_TYPE_RE = re.compile(r"Content-Type: ([^\r\n]+)")


class ProtocolError(ValueError):
    """La petición no declara un ``boundary`` utilizable."""


@dataclass(frozen=True)
class Part:
    """Una parte del cuerpo multipart.

    ``content`` es una vista de memoria sobre el buffer de la conexión, no una
    copia; no debe sobrevivir al procesamiento de la petición.
    """

    content_type: str
    filename: Optional[str]
    content: memoryview

    def to_bytes(self) -> bytes:
        return self.content.tobytes()


def resolve_boundary(data: bytes) -> Optional[bytes]:
    """Devuelve el delimitador (``--`` + token) declarado en la cabecera.

    Solo se mira la cabecera de transporte (hasta el primer doble CRLF, o todo
    el buffer si no lo hay). La búsqueda es byte a byte; el token termina en el
    siguiente CRLF o al final del buffer. Devuelve ``None`` si no hay
    ``boundary=`` o el token está vacío.
    """

    header_end = data.find(HEADER_TERMINATOR)
    if header_end == -1:
        header_end = len(data)
    start = data.find(BOUNDARY_KEY, 0, header_end)
    if start == -1:
        return None
    start += len(BOUNDARY_KEY)
    end = data.find(CRLF, start)
    if end == -1:
        end = len(data)
    token = bytes(data[start:end]).strip()
    if not token:
        return None
    return b"--" + token


def require_boundary(data: bytes) -> bytes:
    boundary = resolve_boundary(data)
    if boundary is None:
        raise ProtocolError("No se ha encontrado boundary en la petición")
    return boundary


def _parse_part_header(header: str) -> tuple[str, Optional[str]]:
    filename_match = _FILENAME_RE.search(header)
    content_type_match = _CONTENT_TYPE_RE.search(header)
    filename = filename_match.group(1) if filename_match else None
    content_type = content_type_match.group(1).strip() if content_type_match else DEFAULT_CONTENT_TYPE
    return content_type, filename


def iter_parts(data: bytes, boundary: bytes) -> Iterator[Part]:
    """Recorre ``data`` y produce cada :class:`Part` en orden de aparición.

    - Sin más marcadores ``Content-Disposition`` se termina sin error.
    - Una cabecera de parte sin doble CRLF (parte truncada) se descarta.
    - Si el delimitador no vuelve a aparecer, el contenido llega hasta el final
      del buffer.
    """

    view = memoryview(data)
    cursor = 0
    total = len(data)

    while cursor < total:
        header_start = data.find(DISPOSITION_MARKER, cursor)
        if header_start == -1:
            return
        header_end = data.find(HEADER_TERMINATOR, header_start)
        if header_end == -1:
            return

        header = bytes(data[header_start:header_end]).decode("ascii", errors="replace")
        content_type, filename = _parse_part_header(header)

        content_start = header_end + len(HEADER_TERMINATOR)
        boundary_index = data.find(boundary, content_start)
        if boundary_index == -1:
            boundary_index = total

        yield Part(
            content_type=content_type,
            filename=filename,
            content=view[content_start:boundary_index],
        )

        cursor = boundary_index + len(boundary)


def extract_parts(data: bytes, boundary: bytes) -> list[Part]:
    """Versión en lista de :func:`iter_parts`."""

    return list(iter_parts(data, boundary))
