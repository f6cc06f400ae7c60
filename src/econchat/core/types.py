"""Shared types and enumerations."""

from __future__ import annotations

from enum import StrEnum


class Tier(StrEnum):
    PREMIUM = "premium"
    STANDARD = "standard"


class GatewayRole(StrEnum):
    """Which configured model a gateway plays; also the usage-rate key."""

    PREMIUM = "premium"
    STANDARD = "standard"
    FALLBACK = "fallback"


class ChartKind(StrEnum):
    LINE = "line"
    BAR = "bar"
    MAP = "map"
