"""Locate ``<binary>`` payloads in a response document."""

from __future__ import annotations

import re
from xml.etree import ElementTree as ET

from mobilithek_csv.common.errors import InvalidXmlError
from mobilithek_csv.common.models import RawBinaryDescriptor
from mobilithek_csv.decode.xml_tree import iter_all_local

_WHITESPACE = re.compile(r"\s+")


def parse_document(xml_text: str) -> ET.Element:
    if not xml_text or not xml_text.strip():
        raise InvalidXmlError("Invalid XML (document is empty).")
    try:
        return ET.fromstring(xml_text.strip())
    except (ET.ParseError, ValueError) as exc:
        raise InvalidXmlError(f"Invalid XML (parser error): {exc}") from exc


def extract_binaries(xml_text: str) -> list[RawBinaryDescriptor]:
    root = parse_document(xml_text)
    descriptors = []
    for index, element in enumerate(iter_all_local(root, "binary")):
        text = "".join(element.itertext())
        descriptors.append(
            RawBinaryDescriptor(
                index=index,
                id=element.get("id") or f"binary-{index + 1}",
                type=element.get("type") or "binary",
                base64_text=_WHITESPACE.sub("", text),
            )
        )
    return descriptors
