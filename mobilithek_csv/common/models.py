"""Data models used across the pipeline."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any


@dataclass(frozen=True)
class RawBinaryDescriptor:
    index: int
    id: str
    type: str
    base64_text: str


@dataclass(frozen=True)
class ContentDescriptor:
    extension: str
    mime_type: str
    is_text: bool


@dataclass(frozen=True)
class GunzipResult:
    """Outcome of a best-effort gunzip; ``data`` is always usable bytes."""

    data: bytes
    decompressed: bool
    reason: str | None = None


@dataclass(frozen=True)
class DecodedItem:
    index: int
    id: str
    type: str
    raw_bytes: bytes | None = None
    raw_info: ContentDescriptor | None = None
    decoded_bytes: bytes | None = None
    decoded_info: ContentDescriptor | None = None
    was_gunzipped: bool = False
    gunzip_error: str | None = None
    error: str | None = None
    preview: str = ""
    raw_filename: str | None = None
    decoded_filename: str | None = None

    @property
    def binary_id(self) -> str:
        return self.id or str(self.index + 1)

    @property
    def failed(self) -> bool:
        return self.error is not None


@dataclass(frozen=True)
class FuelPriceRow:
    station_id: str
    station_version: str
    fuel: str
    price: str
    date_of_price: str
    publication_id: str
    publication_type: str
    binary_id: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class OverridePeriodRow:
    station_id: str
    station_version: str
    start_of_period: str
    end_of_period: str
    publication_id: str
    publication_type: str
    binary_id: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ExtractionResult:
    fuel_rows: list[FuelPriceRow] = field(default_factory=list)
    override_rows: list[OverridePeriodRow] = field(default_factory=list)
    parsed_xml_binaries: int = 0
    fuel_binaries: int = 0


@dataclass(frozen=True)
class DecodeSession:
    """The decoded items together with the exact source text they came from."""

    source_text: str
    items: tuple[DecodedItem, ...]
