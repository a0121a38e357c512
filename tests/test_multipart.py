import pytest

from anpr_listener.ingest.multipart import (
    DEFAULT_CONTENT_TYPE,
    ProtocolError,
    extract_parts,
    require_boundary,
    resolve_boundary,
)
from conftest import EVENT_XML, JPEG_BYTES, build_request


IMAGE_HEADERS = 'Content-Disposition: form-data; name="file"; filename="plate.jpg"\r\nContent-Type: image/jpeg'
XML_HEADERS = 'Content-Disposition: form-data; name="anpr.xml"; filename="anpr.xml"\r\nContent-Type: application/xml'


def test_resolve_boundary_from_header():
    data = build_request("XYZ", [(IMAGE_HEADERS, JPEG_BYTES)])

    assert resolve_boundary(data) == b"--XYZ"
    # Idempotente sobre los mismos bytes
    assert resolve_boundary(data) == resolve_boundary(data)


def test_resolve_boundary_trims_and_runs_to_end_of_buffer():
    assert resolve_boundary(b"Content-Type: multipart/form-data; boundary=  abc123  ") == b"--abc123"


@pytest.mark.parametrize(
    "data",
    [
        b"POST / HTTP/1.1\r\nContent-Type: text/plain\r\n\r\nhola",
        b"",
        b"Content-Type: multipart/form-data; boundary=\r\n\r\n",
        # El boundary solo cuenta si aparece en la cabecera de transporte
        b"POST / HTTP/1.1\r\n\r\nboundary=XYZ\r\n",
    ],
)
def test_resolve_boundary_not_found(data):
    assert resolve_boundary(data) is None
    with pytest.raises(ProtocolError):
        require_boundary(data)


def test_resolve_boundary_is_case_sensitive():
    assert resolve_boundary(b"Content-Type: multipart/form-data; BOUNDARY=XYZ\r\n\r\n") is None


def test_extract_image_and_xml_parts_in_order():
    xml_bytes = EVENT_XML.encode("utf-8")
    data = build_request("XYZ", [(IMAGE_HEADERS, JPEG_BYTES), (XML_HEADERS, xml_bytes)])

    parts = extract_parts(data, resolve_boundary(data))

    assert len(parts) == 2
    image, xml = parts
    assert image.content_type == "image/jpeg"
    assert image.filename == "plate.jpg"
    # El CRLF previo al delimitador forma parte del contenido
    assert image.to_bytes() == JPEG_BYTES + b"\r\n"
    assert xml.content_type == "application/xml"
    assert xml.filename == "anpr.xml"
    assert xml.to_bytes() == xml_bytes + b"\r\n"


def test_extract_single_image_scenario():
    data = (
        b"POST / HTTP/1.1\r\nContent-Type: multipart/form-data; boundary=XYZ\r\n\r\n"
        b"--XYZ\r\n"
        b'Content-Disposition: form-data; name="file"; filename="plate.jpg"\r\n'
        b"Content-Type: image/jpeg\r\n\r\n" + JPEG_BYTES + b"--XYZ--"
    )

    parts = extract_parts(data, resolve_boundary(data))

    assert len(parts) == 1
    assert parts[0].filename == "plate.jpg"
    assert parts[0].content_type == "image/jpeg"
    assert parts[0].to_bytes() == JPEG_BYTES


def test_extract_defaults_when_headers_missing():
    data = build_request("b1", [('Content-Disposition: form-data; name="comment"', b"hola")])

    parts = extract_parts(data, b"--b1")

    assert len(parts) == 1
    assert parts[0].filename is None
    assert parts[0].content_type == DEFAULT_CONTENT_TYPE
    assert parts[0].to_bytes() == b"hola\r\n"


def test_extract_without_disposition_marker_returns_no_parts():
    data = b"POST / HTTP/1.1\r\nContent-Type: multipart/form-data; boundary=XYZ\r\n\r\n--XYZ\r\nsin partes\r\n--XYZ--"

    assert extract_parts(data, resolve_boundary(data)) == []


def test_extract_drops_truncated_trailing_header():
    data = build_request("XYZ", [(IMAGE_HEADERS, JPEG_BYTES)], closing=False)
    data += b'--XYZ\r\nContent-Disposition: form-data; name="x"; filename="cut.jpg"\r\nContent-Ty'

    parts = extract_parts(data, b"--XYZ")

    assert [p.filename for p in parts] == ["plate.jpg"]


def test_extract_last_part_runs_to_end_without_delimiter():
    data = (
        b"Content-Type: multipart/form-data; boundary=XYZ\r\n\r\n--XYZ\r\n"
        b'Content-Disposition: form-data; name="file"; filename="a.jpg"\r\n'
        b"Content-Type: image/jpeg\r\n\r\n" + JPEG_BYTES
    )

    parts = extract_parts(data, b"--XYZ")

    assert len(parts) == 1
    assert parts[0].to_bytes() == JPEG_BYTES


def test_extract_empty_part_is_emitted():
    data = (
        b"Content-Type: multipart/form-data; boundary=XYZ\r\n\r\n--XYZ\r\n"
        b'Content-Disposition: form-data; name="file"; filename="empty.jpg"\r\n'
        b"Content-Type: image/jpeg\r\n\r\n--XYZ--"
    )

    parts = extract_parts(data, b"--XYZ")

    assert len(parts) == 1
    assert parts[0].to_bytes() == b""


def test_boundary_like_bytes_inside_content_cut_the_part():
    # Comportamiento conocido: no hay longitud explícita, manda el delimitador
    payload = b"\xff\xd8--XYZ\xff\xd9"
    data = build_request("XYZ", [(IMAGE_HEADERS, payload)])

    parts = extract_parts(data, b"--XYZ")

    assert parts[0].to_bytes() == b"\xff\xd8"
