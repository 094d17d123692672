from __future__ import annotations

import base64
import gzip

import pytest

FUEL_PUBLICATION = """<?xml version="1.0" encoding="UTF-8"?>
<d2:payload xmlns:d2="http://datex2.eu/schema/3/d2Payload"
    xmlns:fp="http://datex2.eu/schema/3/energyInfrastructure"
    xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance"
    extensionName="FuelPricePublication">
  <d2:payloadPublication xsi:type="fp:FuelPricePublication" id="pub-1" lang="de">
    <fp:petrolStationInformation>
      <fp:petrolStationReference id="S1" version="3" targetClass="PetrolStation"/>
      <fp:fuelPriceDiesel>
        <fp:price>1.659</fp:price>
        <fp:dateOfPrice>2024-01-02T08:00:00Z</fp:dateOfPrice>
      </fp:fuelPriceDiesel>
    </fp:petrolStationInformation>
  </d2:payloadPublication>
</d2:payload>
"""


def b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def response_xml(*binaries: tuple[str | None, str | None, str]) -> str:
    """Outer response with one ``<binary>`` per (id, type, base64) tuple."""
    parts = []
    for binary_id, binary_type, content in binaries:
        attrs = ""
        if binary_id is not None:
            attrs += f' id="{binary_id}"'
        if binary_type is not None:
            attrs += f' type="{binary_type}"'
        parts.append(f"    <m:binary{attrs}>{content}</m:binary>")
    body = "\n".join(parts)
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<m:response xmlns:m="urn:mobilithek:container">\n'
        "  <m:container>\n"
        f"{body}\n"
        "  </m:container>\n"
        "</m:response>\n"
    )


@pytest.fixture
def fuel_publication_bytes() -> bytes:
    return FUEL_PUBLICATION.encode("utf-8")


@pytest.fixture
def gzip_fuel_response(fuel_publication_bytes: bytes) -> str:
    return response_xml(
        ("b1", "t", b64(gzip.compress(fuel_publication_bytes))),
        ("b2", "t", b64(b"plain text payload without separators")),
    )


@pytest.fixture
def make_response():
    return response_xml


@pytest.fixture
def encode_b64():
    return b64
