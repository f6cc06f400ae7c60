"""Source-specific record variants recognized by field probing.

Tool results are untyped JSON. :func:`parse_records` turns each raw row into
one of the record classes below, or drops it when no variant's required
fields are present. Unknown shapes are skipped one row at a time.
"""

from __future__ import annotations

import numbers
from dataclasses import dataclass
from typing import Any, Iterator, Optional, Union

from econchat.log import get_logger

logger = get_logger(__name__)

OWID_KEY_FIELDS = frozenset({"Entity", "entity", "Country", "country", "Code", "code", "Year", "year"})


@dataclass(frozen=True, slots=True)
class WorldBankRecord:
    entity: str
    iso_code: Optional[str]
    year: int
    value: Optional[float]
    indicator: Optional[str] = None

    @property
    def metric(self) -> Optional[str]:
        return self.indicator


@dataclass(frozen=True, slots=True)
class IMFRecord:
    entity: str
    year: int
    value: Optional[float]
    indicator: Optional[str] = None
    iso_code: Optional[str] = None

    @property
    def metric(self) -> Optional[str]:
        return self.indicator


@dataclass(frozen=True, slots=True)
class FAORecord:
    entity: str
    year: int
    value: Optional[float]
    element: Optional[str] = None
    item: Optional[str] = None
    iso_code: Optional[str] = None

    @property
    def metric(self) -> Optional[str]:
        if self.item and self.element:
            return f"{self.item} {self.element}"
        return self.element


@dataclass(frozen=True, slots=True)
class OWIDRecord:
    entity: str
    iso_code: Optional[str]
    year: int
    value: float
    metric: str


@dataclass(frozen=True, slots=True)
class TradePartnerRecord:
    partner: str
    value: float
    year: Optional[int] = None


@dataclass(frozen=True, slots=True)
class TradeFlowRecord:
    flow: str
    year: int
    value: float


Observation = Union[WorldBankRecord, IMFRecord, FAORecord, OWIDRecord]
Record = Union[Observation, TradePartnerRecord, TradeFlowRecord]


def _number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, numbers.Real):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.replace(",", ""))
        except ValueError:
            return None
    return None


def _measure(raw: Any) -> tuple[bool, Optional[float]]:
    """``(usable, value)``. A null is a usable gap; a non-numeric value is not."""
    if raw is None:
        return True, None
    value = _number(raw)
    return value is not None, value


def _year(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def _text(value: Any) -> Optional[str]:
    if isinstance(value, dict):
        value = value.get("value")
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _first(row: dict, *keys: str) -> Any:
    for key in keys:
        value = row.get(key)
        if value is not None:
            return value
    return None


def probe_world_bank(row: dict) -> Optional[WorldBankRecord]:
    entity = _text(_first(row, "country", "countryiso3code", "countryCode"))
    year = _year(_first(row, "year", "date"))
    usable, value = _measure(row.get("value"))
    if entity is None or year is None or not usable:
        return None
    return WorldBankRecord(
        entity=entity,
        iso_code=_text(_first(row, "countryCode", "countryiso3code")),
        year=year,
        value=value,
        indicator=_text(_first(row, "indicator", "indicatorName")),
    )


def probe_imf(row: dict) -> list[IMFRecord]:
    indicator = _text(row.get("indicator"))
    entity = _text(_first(row, "country", "@UNIT", "ISO"))
    if entity is None:
        return []

    # {country, values: {year: value}}
    values = row.get("values")
    if isinstance(values, dict):
        records = []
        for raw_year, raw_value in values.items():
            year = _year(raw_year)
            usable, value = _measure(raw_value)
            if year is not None and usable:
                records.append(IMFRecord(entity=entity, year=year, value=value, indicator=indicator))
        return records

    year = _year(_first(row, "year", "@TIME_PERIOD"))
    usable, value = _measure(_first(row, "value", "@OBS_VALUE"))
    if year is None or not usable:
        return []
    return [IMFRecord(entity=entity, year=year, value=value, indicator=indicator)]


def probe_fao(row: dict) -> Optional[FAORecord]:
    entity = _text(_first(row, "Area", "area", "country"))
    year = _year(_first(row, "Year", "year"))
    usable, value = _measure(_first(row, "Value", "value"))
    if entity is None or year is None or not usable:
        return None
    return FAORecord(
        entity=entity,
        year=year,
        value=value,
        element=_text(_first(row, "Element", "element")),
        item=_text(_first(row, "Item", "item")),
    )


def probe_owid(row: dict) -> Optional[OWIDRecord]:
    entity = _text(_first(row, "Entity", "entity", "Country", "country"))
    year = _year(_first(row, "Year", "year"))
    if entity is None or year is None:
        return None
    numeric = [
        (key, _number(val))
        for key, val in row.items()
        if key not in OWID_KEY_FIELDS and isinstance(val, numbers.Real) and not isinstance(val, bool)
    ]
    if len(numeric) != 1:
        return None
    metric, value = numeric[0]
    return OWIDRecord(
        entity=entity,
        iso_code=_text(_first(row, "Code", "code")),
        year=year,
        value=value,
        metric=metric,
    )


def probe_trade_partner(row: dict) -> Optional[TradePartnerRecord]:
    partner = _text(_first(row, "partner", "partnerDesc"))
    value = _number(_first(row, "tradeValue", "primaryValue", "TradeValue", "value"))
    if partner is None or value is None:
        return None
    return TradePartnerRecord(partner=partner, value=value, year=_year(_first(row, "year", "period")))


def probe_trade_flow(row: dict) -> Optional[TradeFlowRecord]:
    year = _year(_first(row, "year", "period"))
    value = _number(_first(row, "tradeValue", "primaryValue", "TradeValue", "value"))
    if year is None or value is None:
        return None
    flow = _text(_first(row, "flow", "flowDesc")) or "Trade"
    return TradeFlowRecord(flow=flow, year=year, value=value)


def rows_of(result: Any) -> list[dict]:
    """Raw rows of a tool result: a list, or a ``{"data": [...]}`` envelope."""
    if isinstance(result, dict):
        if "error" in result:
            return []
        result = result.get("data")
    if not isinstance(result, list):
        return []
    return [row for row in result if isinstance(row, dict)]


def parse_records(tool: str, result: Any) -> Iterator[Record]:
    """Yield recognized records of ``result`` for the tool that produced it."""
    source = tool.split("_", 1)[0]
    skipped = 0
    for row in rows_of(result):
        match source:
            case "wb":
                parsed = [probe_world_bank(row)]
            case "imf":
                parsed = probe_imf(row)
            case "fao":
                parsed = [probe_fao(row)]
            case "owid":
                parsed = [probe_owid(row)]
            case "comtrade" if tool == "comtrade_get_top_partners":
                parsed = [probe_trade_partner(row)]
            case "comtrade":
                parsed = [probe_trade_flow(row)]
            case _:
                parsed = []
        parsed = [record for record in parsed if record is not None]
        if not parsed:
            skipped += 1
        yield from parsed
    if skipped:
        logger.debug("records_skipped", tool=tool, count=skipped)
