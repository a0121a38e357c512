"""Parser del XML de eventos ANPR enviado por las cámaras."""
from __future__ import annotations

from dataclasses import asdict, dataclass
from xml.etree import ElementTree as ET

ROOT_TAG = "EventNotificationAlert"


class EventDecodeError(ValueError):
    """El XML no está bien formado o no sigue el esquema de evento ANPR."""


@dataclass(frozen=True)
class AnprEventRecord:
    ip_address: str
    date_time: str
    event_type: str
    license_plate: str
    vehicle_type: str
    vehicle_color: str
    vehicle_speed: str

    def as_dict(self) -> dict[str, str]:
        return asdict(self)


def _strip_namespaces(root: ET.Element) -> ET.Element:
    for element in root.iter():
        if isinstance(element.tag, str) and "}" in element.tag:
            element.tag = element.tag.split("}", 1)[1]
    return root


def _single(parent: ET.Element, tag: str) -> ET.Element:
    matches = parent.findall(tag)
    if not matches:
        raise EventDecodeError(f"Nodo obligatorio {parent.tag}/{tag} ausente")
    if len(matches) > 1:
        raise EventDecodeError(f"Nodo {parent.tag}/{tag} repetido ({len(matches)} veces)")
    return matches[0]


def _get_text(parent: ET.Element, tag: str) -> str:
    element = _single(parent, tag)
    if element.text is None:
        return ""
    return element.text.strip()


def parse_anpr_event_xml(xml_str: str) -> AnprEventRecord:
    """
    Recibe el XML bruto del evento y devuelve un :class:`AnprEventRecord`.

    Esquema esperado (con o sin namespace)::

        EventNotificationAlert
            ipAddress, dateTime, eventType
            ANPR
                licensePlate
                vehicleInfo
                    vehicleType, color, speed
    """

    try:
        root = ET.fromstring(xml_str)
    except ET.ParseError as exc:
        raise EventDecodeError(f"XML inválido: {exc}") from exc

    root = _strip_namespaces(root)
    if root.tag != ROOT_TAG:
        raise EventDecodeError(f"Raíz inesperada <{root.tag}>, se esperaba <{ROOT_TAG}>")

    anpr = _single(root, "ANPR")
    vehicle_info = _single(anpr, "vehicleInfo")

    return AnprEventRecord(
        ip_address=_get_text(root, "ipAddress"),
        date_time=_get_text(root, "dateTime"),
        event_type=_get_text(root, "eventType"),
        license_plate=_get_text(anpr, "licensePlate"),
        vehicle_type=_get_text(vehicle_info, "vehicleType"),
        vehicle_color=_get_text(vehicle_info, "color"),
        vehicle_speed=_get_text(vehicle_info, "speed"),
    )
