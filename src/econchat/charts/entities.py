"""Country vocabulary used to read entity intent out of a query."""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Iterable, Optional

ISO3_NAMES: dict[str, str] = {
    "AGO": "Angola", "ARG": "Argentina", "AUS": "Australia", "BDI": "Burundi",
    "BEN": "Benin", "BFA": "Burkina Faso", "BGD": "Bangladesh", "BRA": "Brazil",
    "BWA": "Botswana", "CAF": "Central African Republic", "CAN": "Canada", "CHN": "China",
    "CIV": "Cote d'Ivoire", "CMR": "Cameroon", "COD": "Democratic Republic of Congo",
    "COG": "Republic of Congo", "COM": "Comoros", "CPV": "Cape Verde", "DEU": "Germany",
    "DJI": "Djibouti", "DZA": "Algeria", "EGY": "Egypt", "ERI": "Eritrea", "ETH": "Ethiopia",
    "FRA": "France", "GAB": "Gabon", "GBR": "United Kingdom", "GHA": "Ghana", "GIN": "Guinea",
    "GMB": "Gambia", "GNQ": "Equatorial Guinea", "IDN": "Indonesia", "IND": "India",
    "ITA": "Italy", "JPN": "Japan", "KEN": "Kenya", "KOR": "South Korea", "LBR": "Liberia",
    "LBY": "Libya", "LSO": "Lesotho", "MAR": "Morocco", "MDG": "Madagascar", "MEX": "Mexico",
    "MLI": "Mali", "MOZ": "Mozambique", "MRT": "Mauritania", "MUS": "Mauritius",
    "MWI": "Malawi", "MYS": "Malaysia", "NAM": "Namibia", "NER": "Niger", "NGA": "Nigeria",
    "PAK": "Pakistan", "PHL": "Philippines", "RUS": "Russia", "RWA": "Rwanda",
    "SAU": "Saudi Arabia", "SDN": "Sudan", "SEN": "Senegal", "SGP": "Singapore",
    "SLE": "Sierra Leone", "SOM": "Somalia", "STP": "Sao Tome and Principe",
    "SWZ": "Eswatini", "SYC": "Seychelles", "TCD": "Chad", "TGO": "Togo", "THA": "Thailand",
    "TUN": "Tunisia", "TUR": "Turkey", "TZA": "Tanzania", "UGA": "Uganda",
    "USA": "United States", "VNM": "Vietnam", "ZAF": "South Africa", "ZMB": "Zambia",
    "ZWE": "Zimbabwe",
}

COUNTRY_PATTERNS: tuple[str, ...] = (
    "djibouti", "nigeria", "niger", "uganda", "kenya", "ethiopia", "tanzania", "ghana", "senegal",
    "south africa", "egypt", "morocco", "algeria", "tunisia", "libya", "sudan", "somalia", "rwanda",
    "cameroon", "angola", "mozambique", "madagascar", "zambia", "zimbabwe", "botswana", "namibia",
    "malawi", "mali", "burkina faso", "benin", "togo", "guinea", "sierra leone", "liberia",
    "mauritania", "gambia", "cape verde", "mauritius", "seychelles", "comoros", "sao tome",
    "eritrea", "burundi", "central african", "chad", "gabon", "equatorial guinea", "congo",
    "lesotho", "eswatini", "swaziland",
    "china", "india", "japan", "germany", "france", "brazil", "mexico", "russia", "canada",
    "australia", "indonesia", "pakistan", "bangladesh", "vietnam", "thailand", "philippines",
    "malaysia", "singapore", "united states", "united kingdom", "saudi arabia", "argentina",
    "turkey", "italy", "south korea",
)

# alias -> name used for matching data entities
COUNTRY_ALIASES: dict[str, str] = {
    "usa": "united states",
    "u.s.": "united states",
    "uk": "united kingdom",
    "britain": "united kingdom",
    "england": "united kingdom",
    "korea, republic of": "south korea",
    "republic of korea": "south korea",
    "dprk": "north korea",
    "dr congo": "democratic republic of congo",
    "drc": "democratic republic of congo",
    "congo, dem. rep.": "democratic republic of congo",
    "congo-kinshasa": "democratic republic of congo",
    "congo, rep.": "republic of congo",
    "congo-brazzaville": "republic of congo",
    "ivory coast": "cote d'ivoire",
}

GLOBAL_PATTERNS: tuple[str, ...] = (
    r"\bworld\b(?!\s+bank)",
    r"\bglobal(?:ly)?\b",
    r"\ball\s+countries\b",
    r"\bby\s+country\b",
    r"\bcompare\s+countries\b",
)

# regional aggregates: no entity filtering, but still charted as series
REGIONAL_PATTERNS: tuple[str, ...] = (
    r"\bcontinent(?:s|al)?\b",
    r"(?<!south )\bafrica\b",
    r"\basia\b",
    r"\beurope\b",
    r"\bamericas\b",
)

MAP_PATTERNS: tuple[str, ...] = (r"\bmaps?\b", r"\bchoropleth\b")

_GLOBAL = re.compile("|".join(GLOBAL_PATTERNS), re.IGNORECASE)
_REGIONAL = re.compile("|".join(REGIONAL_PATTERNS), re.IGNORECASE)
_MAP = re.compile("|".join(MAP_PATTERNS), re.IGNORECASE)
_NAME_TO_ISO = {name.casefold(): code for code, name in ISO3_NAMES.items()}


@lru_cache(maxsize=512)
def _word(term: str) -> re.Pattern:
    return re.compile(rf"(?<![\w.]){re.escape(term)}(?![\w])", re.IGNORECASE)


def contains_term(text: str, term: str) -> bool:
    """True when ``term`` occurs in ``text`` as whole words, case-insensitively."""
    return bool(term) and _word(term).search(text) is not None


def is_global(query: str) -> bool:
    return _GLOBAL.search(query or "") is not None


def is_regional(query: str) -> bool:
    return _REGIONAL.search(query or "") is not None


def wants_map(query: str) -> bool:
    return _MAP.search(query or "") is not None


def iso_name(code: str) -> Optional[str]:
    return ISO3_NAMES.get(code.upper()) if len(code) == 3 else None


def iso_for_name(name: str) -> Optional[str]:
    return _NAME_TO_ISO.get(name.casefold())


def requested_entities(query: str, data_entities: Iterable[str] = ()) -> list[str]:
    """Lower-cased entity names named in ``query``.

    Known country names and aliases are found with word-boundary matching, so
    "Niger" does not pick up "Nigeria". Entity names present in the data that
    the query also mentions are added too.
    """
    text = query or ""
    found: list[str] = []

    def _add(name: str) -> None:
        if name not in found:
            found.append(name)

    for pattern in COUNTRY_PATTERNS:
        if contains_term(text, pattern):
            _add(pattern)
    for alias, canonical in COUNTRY_ALIASES.items():
        if contains_term(text, alias):
            _add(canonical)
    for entity in data_entities:
        if contains_term(text, entity):
            _add(entity.casefold())
    return found


def entity_matches(entity: str, requested: Iterable[str]) -> bool:
    """Bidirectional, case-insensitive, whole-word containment against any requested name."""
    for req in requested:
        if contains_term(entity, req) or contains_term(req, entity):
            return True
    return False
