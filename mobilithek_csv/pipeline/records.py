"""FuelPricePublication record extraction from decoded XML payloads."""

from __future__ import annotations

from typing import Iterable
from xml.etree import ElementTree as ET

from mobilithek_csv.common.constants import FUEL_PRICE_PUBLICATION
from mobilithek_csv.common.models import DecodedItem, ExtractionResult, FuelPriceRow, OverridePeriodRow
from mobilithek_csv.decode.sniff import decode_text
from mobilithek_csv.decode.xml_tree import (
    attribute_local,
    children,
    find_local,
    iter_all_local,
    iter_local,
    local_name,
    text_of,
    xsi_type,
)

FUEL_PRICE_PREFIX = "fuelPrice"


def parse_payload_xml(data: bytes) -> ET.Element | None:
    """Parse payload bytes; ``None`` for anything that is not well-formed XML."""
    text = decode_text(data).strip()
    if not text.startswith("<"):
        return None
    try:
        return ET.fromstring(text)
    except (ET.ParseError, ValueError):
        return None


def is_fuel_price_publication(root: ET.Element) -> bool:
    if (attribute_local(root, "extensionName") or "") == FUEL_PRICE_PUBLICATION:
        return True
    return any(FUEL_PRICE_PUBLICATION in xsi_type(p) for p in iter_all_local(root, "payloadPublication"))


def _station_reference(info: ET.Element) -> tuple[str, str]:
    ref = find_local(info, "petrolStationReference")
    if ref is None:
        return "", ""
    return ref.get("id") or "", ref.get("version") or ""


def _fuel_rows(info: ET.Element, station: tuple[str, str], publication: tuple[str, str], binary_id: str):
    station_id, station_version = station
    publication_id, publication_type = publication
    for child in children(info):
        name = local_name(child.tag)
        if not name.startswith(FUEL_PRICE_PREFIX):
            continue
        price = text_of(find_local(child, "price"))
        date_of_price = text_of(find_local(child, "dateOfPrice"))
        if not price and not date_of_price:
            continue
        yield FuelPriceRow(
            station_id=station_id,
            station_version=station_version,
            fuel=name[len(FUEL_PRICE_PREFIX) :] or "Unknown",
            price=price,
            date_of_price=date_of_price,
            publication_id=publication_id,
            publication_type=publication_type,
            binary_id=binary_id,
        )


def _override_rows(info: ET.Element, station: tuple[str, str], publication: tuple[str, str], binary_id: str):
    station_id, station_version = station
    publication_id, publication_type = publication
    for override in iter_local(info, "overrideOpen"):
        start = text_of(find_local(override, "startOfPeriod"))
        end = text_of(find_local(override, "endOfPeriod"))
        if not start and not end:
            continue
        yield OverridePeriodRow(
            station_id=station_id,
            station_version=station_version,
            start_of_period=start,
            end_of_period=end,
            publication_id=publication_id,
            publication_type=publication_type,
            binary_id=binary_id,
        )


def extract_fuel_price_publication(
    root: ET.Element,
    binary_id: str,
) -> tuple[list[FuelPriceRow], list[OverridePeriodRow]] | None:
    if not is_fuel_price_publication(root):
        return None

    extension_name = attribute_local(root, "extensionName") or ""
    fuel_rows: list[FuelPriceRow] = []
    override_rows: list[OverridePeriodRow] = []

    for payload in iter_all_local(root, "payloadPublication"):
        publication = (payload.get("id") or "", xsi_type(payload) or extension_name)
        for info in iter_local(payload, "petrolStationInformation"):
            station = _station_reference(info)
            fuel_rows.extend(_fuel_rows(info, station, publication, binary_id))
            override_rows.extend(_override_rows(info, station, publication, binary_id))

    return fuel_rows, override_rows


def extract_records(items: Iterable[DecodedItem]) -> ExtractionResult:
    fuel_rows: list[FuelPriceRow] = []
    override_rows: list[OverridePeriodRow] = []
    parsed_xml = 0
    fuel_binaries = 0

    for item in items:
        if item.error or item.decoded_bytes is None or item.decoded_info is None:
            continue
        if item.decoded_info.extension != "xml":
            continue
        root = parse_payload_xml(item.decoded_bytes)
        if root is None:
            continue
        parsed_xml += 1

        extracted = extract_fuel_price_publication(root, item.binary_id)
        if extracted is None:
            continue
        fuel_binaries += 1
        fuel_rows.extend(extracted[0])
        override_rows.extend(extracted[1])

    return ExtractionResult(
        fuel_rows=fuel_rows,
        override_rows=override_rows,
        parsed_xml_binaries=parsed_xml,
        fuel_binaries=fuel_binaries,
    )
