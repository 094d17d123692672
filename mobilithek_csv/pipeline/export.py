"""CSV export of fuel-price and override-period rows."""

from __future__ import annotations

import csv
import io
from typing import Iterable, Mapping, Sequence

from mobilithek_csv.common.constants import FUEL_LONG_COLUMNS, MISSING_STATION_ID, OVERRIDE_COLUMNS
from mobilithek_csv.common.models import FuelPriceRow, OverridePeriodRow

_NEEDS_QUOTING = (",", '"', "\r", "\n")


def csv_escape(value: object) -> str:
    """Escape one field: quote it when it holds a comma, quote or line break.

    ``rows_to_csv`` writes through ``csv.DictWriter`` with ``QUOTE_MINIMAL``,
    which produces the same field text for every multi-column row.
    """
    text = "" if value is None else str(value)
    if any(ch in text for ch in _NEEDS_QUOTING):
        return '"' + text.replace('"', '""') + '"'
    return text


def _serialize_row(row: Mapping[str, object], columns: Sequence[str]) -> dict:
    out = {}
    for key in columns:
        value = row.get(key)
        out[key] = "" if value is None else str(value)
    return out


def rows_to_csv(rows: Iterable[Mapping[str, object]], columns: Sequence[str]) -> str:
    """Header plus one record per row, CRLF separated with a trailing CRLF."""
    buffer = io.StringIO()
    writer = csv.DictWriter(
        buffer,
        fieldnames=list(columns),
        extrasaction="ignore",
        lineterminator="\r\n",
        quoting=csv.QUOTE_MINIMAL,
    )
    writer.writeheader()
    for row in rows:
        writer.writerow(_serialize_row(row, columns))
    return buffer.getvalue()


def sort_fuel_rows(rows: Iterable[FuelPriceRow]) -> list[FuelPriceRow]:
    # plain string order on the ISO-like text, not calendar aware
    return sorted(rows, key=lambda row: row.date_of_price)


def sort_override_rows(rows: Iterable[OverridePeriodRow]) -> list[OverridePeriodRow]:
    return sorted(rows, key=lambda row: row.start_of_period)


def fuel_rows_long_csv(rows: Iterable[FuelPriceRow]) -> str:
    return rows_to_csv((row.to_dict() for row in sort_fuel_rows(rows)), FUEL_LONG_COLUMNS)


def override_rows_csv(rows: Iterable[OverridePeriodRow]) -> str:
    return rows_to_csv((row.to_dict() for row in sort_override_rows(rows)), OVERRIDE_COLUMNS)


def group_by_station(rows: Iterable[FuelPriceRow]) -> dict[str, list[FuelPriceRow]]:
    grouped: dict[str, list[FuelPriceRow]] = {}
    for row in rows:
        grouped.setdefault(row.station_id or MISSING_STATION_ID, []).append(row)
    return grouped


def wide_fuel_rows_for_station(rows: Sequence[FuelPriceRow]) -> tuple[list[str], list[dict[str, str]]]:
    """Pivot one station's rows to one row per date and one column per fuel."""
    fuels = sorted({row.fuel for row in rows if row.fuel})
    by_date: dict[str, list[FuelPriceRow]] = {}
    for row in rows:
        by_date.setdefault(row.date_of_price or "", []).append(row)

    wide_rows = []
    for date in sorted(d for d in by_date if d):
        wide = {"date_of_price": date}
        wide.update({fuel: "" for fuel in fuels})
        for row in by_date[date]:
            wide[row.fuel] = row.price
        wide_rows.append(wide)
    return fuels, wide_rows


def station_wide_csv(rows: Sequence[FuelPriceRow]) -> str:
    fuels, wide_rows = wide_fuel_rows_for_station(rows)
    return rows_to_csv(wide_rows, ["date_of_price", *fuels])


def station_summaries(rows: Iterable[FuelPriceRow]) -> list[dict]:
    summaries = []
    grouped = group_by_station(rows)
    for station_id in sorted(grouped):
        station_rows = grouped[station_id]
        dates = sorted(row.date_of_price for row in station_rows if row.date_of_price)
        summaries.append(
            {
                "station_id": station_id,
                "rows": len(station_rows),
                "first_date": dates[0] if dates else None,
                "last_date": dates[-1] if dates else None,
                "fuels": sorted({row.fuel for row in station_rows if row.fuel}),
            }
        )
    return summaries
