"""Turn heterogeneous tool outcomes into deduplicated :class:`ChartData` objects."""

from __future__ import annotations

from typing import Iterable, Optional

from econchat.ai.tools.base import ToolOutcome
from econchat.ai.tools.definitions import SOURCE_LABELS
from econchat.charts.entities import (
    entity_matches,
    iso_for_name,
    iso_name,
    is_global,
    is_regional,
    requested_entities,
    wants_map,
)
from econchat.charts.models import ChartData, ChartPoint, ChartSeries, MapPoint
from econchat.charts.records import (
    Observation,
    TradeFlowRecord,
    TradePartnerRecord,
    parse_records,
)
from econchat.core.types import ChartKind
from econchat.log import get_logger

logger = get_logger(__name__)

MIN_CHART_POINTS = 2
TOP_PARTNERS = 10


def normalize(outcomes: Iterable[ToolOutcome], query: str) -> list[ChartData]:
    """Charts for every successful outcome with a chartable shape, in outcome order.

    Null values stay in as gaps. Charts with fewer than two points, charts with
    no value at all, and charts whose fingerprint was already emitted are dropped,
    so normalizing the same outcomes twice gives the same list.
    """
    charts: list[ChartData] = []
    seen: set[str] = set()
    for outcome in outcomes:
        if not outcome.ok:
            continue
        chart = build_chart(outcome.tool, outcome.result, query)
        if chart is None or chart.point_count < MIN_CHART_POINTS or not chart.has_values:
            continue
        if chart.fingerprint in seen:
            logger.debug("duplicate_chart_dropped", tool=outcome.tool, title=chart.title)
            continue
        seen.add(chart.fingerprint)
        charts.append(chart)
    return charts


def build_chart(tool: str, result: object, query: str) -> Optional[ChartData]:
    source = SOURCE_LABELS.get(tool.split("_", 1)[0])
    if source is None:
        return None

    observations: list[Observation] = []
    partners: list[TradePartnerRecord] = []
    flows: list[TradeFlowRecord] = []
    for record in parse_records(tool, result):
        match record:
            case TradePartnerRecord():
                partners.append(record)
            case TradeFlowRecord():
                flows.append(record)
            case _:
                observations.append(record)

    if partners:
        return _partner_chart(partners, source)
    if flows:
        return _flow_chart(flows, source)
    if observations:
        return _observation_chart(observations, query, source)
    return None


def _display(record: Observation) -> tuple[str, Optional[str]]:
    """Series name and ISO3 code for a record's entity."""
    name = iso_name(record.entity) if record.entity.isupper() else None
    if name is not None:
        return name, record.entity.upper()
    return record.entity, record.iso_code or iso_for_name(record.entity)


def _observation_chart(records: list[Observation], query: str, source: str) -> Optional[ChartData]:
    title = next((r.metric for r in records if r.metric), None) or "Value"

    # entity -> {year: value}; first non-null value per (entity, year) wins
    by_entity: dict[str, dict[int, Optional[float]]] = {}
    iso_codes: dict[str, Optional[str]] = {}
    for record in records:
        name, iso = _display(record)
        points = by_entity.setdefault(name, {})
        if points.get(record.year) is None:
            points[record.year] = record.value
        if iso_codes.get(name) is None:
            iso_codes[name] = iso

    if not (is_global(query) or is_regional(query)):
        requested = requested_entities(query, by_entity)
        if requested:
            matched = {name: points for name, points in by_entity.items() if entity_matches(name, requested)}
            # filter only when the data actually contains a requested entity
            if matched:
                by_entity = matched

    years = sorted({year for points in by_entity.values() for year in points})
    if not years:
        return None

    if wants_map(query) and len(by_entity) > 1:
        valued = [year for year in years if any(points.get(year) is not None for points in by_entity.values())]
        reference_year = (valued or years)[-1]
        return ChartData(
            kind=ChartKind.MAP,
            title=title,
            y_label=title,
            source=source,
            map_points=[
                MapPoint(entity=name, iso_code=iso_codes.get(name), value=points[reference_year])
                for name, points in by_entity.items()
                if reference_year in points
            ],
            reference_year=reference_year,
        )

    if len(by_entity) > 1 and len(years) <= 2:
        return ChartData(
            kind=ChartKind.BAR,
            title=title,
            x_label="Country",
            y_label=title,
            source=source,
            series=[
                ChartSeries(
                    name=str(year),
                    points=[
                        ChartPoint(x=name, y=points[year]) for name, points in by_entity.items() if year in points
                    ],
                )
                for year in years
            ],
        )

    return ChartData(
        kind=ChartKind.LINE,
        title=title,
        x_label="Year",
        y_label=title,
        source=source,
        series=[
            ChartSeries(
                name=name,
                points=[ChartPoint(x=year, y=points[year]) for year in sorted(points)],
                iso_code=iso_codes.get(name),
            )
            for name, points in by_entity.items()
        ],
    )


def _partner_chart(records: list[TradePartnerRecord], source: str) -> ChartData:
    values: dict[str, float] = {}
    for record in records:
        values.setdefault(record.partner, record.value)
    ranked = sorted(values.items(), key=lambda item: item[1], reverse=True)[:TOP_PARTNERS]
    return ChartData(
        kind=ChartKind.BAR,
        title="Top Trade Partners",
        x_label="Partner",
        y_label="Trade Value (USD)",
        source=source,
        series=[ChartSeries(name="Trade Value", points=[ChartPoint(x=p, y=v) for p, v in ranked])],
    )


def _flow_chart(records: list[TradeFlowRecord], source: str) -> ChartData:
    by_flow: dict[str, dict[int, float]] = {}
    for record in records:
        by_flow.setdefault(record.flow, {}).setdefault(record.year, record.value)
    return ChartData(
        kind=ChartKind.LINE,
        title="Trade Flow",
        x_label="Year",
        y_label="Trade Value (USD)",
        source=source,
        series=[
            ChartSeries(name=flow, points=[ChartPoint(x=year, y=points[year]) for year in sorted(points)])
            for flow, points in by_flow.items()
        ],
    )
