"""Canonical chart representation returned with every answer."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from econchat.core.types import ChartKind

XValue = Union[int, str]

_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True, slots=True)
class ChartPoint:
    x: XValue
    y: Optional[float]

    def to_dict(self) -> dict[str, Any]:
        return {"x": self.x, "y": self.y}


@dataclass(slots=True)
class ChartSeries:
    name: str
    points: list[ChartPoint] = field(default_factory=list)
    iso_code: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name, "data": [p.to_dict() for p in self.points]}
        if self.iso_code:
            data["iso_code"] = self.iso_code
        return data


@dataclass(frozen=True, slots=True)
class MapPoint:
    entity: str
    iso_code: Optional[str]
    value: Optional[float]

    def to_dict(self) -> dict[str, Any]:
        return {"entity": self.entity, "iso_code": self.iso_code, "value": self.value}


@dataclass(slots=True)
class ChartData:
    """One chart. ``map_points`` is used only for maps, ``series`` only otherwise."""

    kind: ChartKind
    title: str
    x_label: str = "Year"
    y_label: str = "Value"
    source: Optional[str] = None
    series: list[ChartSeries] = field(default_factory=list)
    map_points: list[MapPoint] = field(default_factory=list)
    reference_year: Optional[int] = None

    @property
    def fingerprint(self) -> str:
        return fingerprint(self.title)

    @property
    def point_count(self) -> int:
        if self.kind is ChartKind.MAP:
            return len(self.map_points)
        return sum(len(s.points) for s in self.series)

    @property
    def has_values(self) -> bool:
        """False when every point is a null gap."""
        if self.kind is ChartKind.MAP:
            return any(p.value is not None for p in self.map_points)
        return any(p.y is not None for s in self.series for p in s.points)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "type": self.kind.value,
            "title": self.title,
            "xLabel": self.x_label,
            "yLabel": self.y_label,
            "source": self.source,
        }
        if self.kind is ChartKind.MAP:
            data["mapData"] = [p.to_dict() for p in self.map_points]
            data["year"] = self.reference_year
        else:
            data["series"] = [s.to_dict() for s in self.series]
        return data


def fingerprint(title: str) -> str:
    """Dedup key: case-folded title with runs of whitespace collapsed."""
    return _WHITESPACE.sub(" ", title).strip().casefold()
