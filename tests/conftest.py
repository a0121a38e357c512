import os
import sys

# Asegura que el paquete anpr_listener sea importable desde la raíz del repo durante los tests
ROOT_DIR = os.path.dirname(os.path.dirname(__file__))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Los tests nunca deben tocar la base de datos real
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SINK_ENABLED", "false")

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from anpr_listener.config import settings  # noqa: E402
from anpr_listener.models import Base  # noqa: E402


EVENT_XML = """<?xml version="1.0" encoding="UTF-8"?>
<EventNotificationAlert version="2.0" xmlns="http://www.isapi.org/ver20/XMLSchema">
<ipAddress>192.168.1.64</ipAddress>
<dateTime>2024-05-01T08:10:11+02:00</dateTime>
<eventType>ANPR</eventType>
<ANPR>
<licensePlate>5555AAA</licensePlate>
<vehicleInfo>
<vehicleType>car</vehicleType>
<color>white</color>
<speed>42</speed>
</vehicleInfo>
</ANPR>
</EventNotificationAlert>
"""

JPEG_BYTES = bytes([0xFF, 0xD8, 0xFF, 0xE0, 0x00, 0x10, 0x4A, 0x46, 0x49, 0x46, 0xFF, 0xD9])


def build_request(boundary: str, parts: list[tuple[str, bytes]], closing: bool = True) -> bytes:
    """Construye una petición como la que envían las cámaras.

    ``parts`` es una lista de (cabeceras de la parte, contenido).
    """

    delimiter = b"--" + boundary.encode()
    body = b""
    for headers, content in parts:
        body += delimiter + b"\r\n" + headers.encode() + b"\r\n\r\n" + content + b"\r\n"
    if closing:
        body += delimiter + b"--\r\n"
    header = (
        "POST /anpr HTTP/1.1\r\n"
        "Host: 192.168.1.10:9091\r\n"
        f"Content-Type: multipart/form-data; boundary={boundary}\r\n"
        f"Content-Length: {len(body)}\r\n"
        "\r\n"
    ).encode()
    return header + body


@pytest.fixture
def storage_dirs(tmp_path, monkeypatch):
    images_dir = tmp_path / "images" / "lpr_images"
    xml_dir = tmp_path / "xml" / "lpr_logs"
    monkeypatch.setattr(settings, "images_dir", str(images_dir))
    monkeypatch.setattr(settings, "xml_logs_dir", str(xml_dir))
    monkeypatch.setattr(settings, "sanitize_filenames", False)
    return images_dir, xml_dir


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(engine)
    factory = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    yield factory
    engine.dispose()
