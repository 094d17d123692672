"""Namespace-agnostic helpers over ElementTree nodes."""

from __future__ import annotations

from typing import Iterator
from xml.etree.ElementTree import Element

XSI_NAMESPACE = "http://www.w3.org/2001/XMLSchema-instance"


def local_name(tag: object) -> str:
    # comments and processing instructions carry callables as tags
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def iter_local(element: Element, name: str) -> Iterator[Element]:
    """Yield descendants (excluding ``element``) whose local name is ``name``."""
    for node in element.iter():
        if node is element:
            continue
        if local_name(node.tag) == name:
            yield node


def iter_all_local(element: Element, name: str) -> Iterator[Element]:
    """Like ``iter_local`` but includes ``element`` itself."""
    if local_name(element.tag) == name:
        yield element
    yield from iter_local(element, name)


def find_local(element: Element, name: str) -> Element | None:
    return next(iter_local(element, name), None)


def children(element: Element) -> list[Element]:
    return [child for child in element if isinstance(child.tag, str)]


def text_of(element: Element | None) -> str:
    if element is None:
        return ""
    return "".join(element.itertext()).strip()


def attribute_local(element: Element, name: str) -> str | None:
    """Attribute lookup by local name; an un-namespaced attribute wins."""
    if name in element.attrib:
        return element.attrib[name]
    for key, value in element.attrib.items():
        if local_name(key) == name:
            return value
    return None


def xsi_type(element: Element) -> str:
    return element.get(f"{{{XSI_NAMESPACE}}}type") or ""
