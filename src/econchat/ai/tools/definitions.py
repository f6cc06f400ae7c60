"""Catalog of data tools exposed to the model, grouped by statistical source."""

from __future__ import annotations

from econchat.ai.tools.base import ToolSpec

SOURCE_LABELS = {
    "wb": "World Bank",
    "imf": "IMF",
    "fao": "FAO",
    "comtrade": "UN Comtrade",
    "owid": "Our World in Data",
}


def _countries(description: str) -> dict:
    return {"type": "array", "items": {"type": "string"}, "description": description}


def _year(description: str) -> dict:
    return {"type": "number", "description": description}


_NO_PARAMS = {"type": "object", "properties": {}, "required": []}


WORLD_BANK_TOOLS = (
    ToolSpec(
        name="wb_list_countries",
        description=(
            "List all countries available in World Bank data with their ISO codes and regions. "
            "Use this to find country codes."
        ),
        input_schema=_NO_PARAMS,
    ),
    ToolSpec(
        name="wb_search_indicators",
        description=(
            "Search World Bank indicators by keyword. Returns indicator codes and descriptions. "
            "Use this to find the right indicator code before fetching data. "
            "Common searches: 'gdp', 'population', 'poverty', 'education', 'health'"
        ),
        input_schema={
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": "Search term (e.g., 'gdp', 'poverty', 'population', 'education')",
                },
            },
            "required": ["query"],
        },
    ),
    ToolSpec(
        name="wb_get_indicator_data",
        description=(
            "Get World Bank indicator data for specific countries and years. Common indicators: "
            "NY.GDP.MKTP.CD (GDP current USD), NY.GDP.PCAP.CD (GDP per capita), SP.POP.TOTL (population), "
            "SI.POV.DDAY (poverty headcount), SE.ADT.LITR.ZS (literacy rate)"
        ),
        input_schema={
            "type": "object",
            "properties": {
                "indicator": {"type": "string", "description": "Indicator code (e.g., 'NY.GDP.MKTP.CD' for GDP)"},
                "countries": _countries("ISO3 country codes (e.g., ['NGA', 'EGY', 'SAU'])"),
                "start_year": _year("Start year (e.g., 2015)"),
                "end_year": _year("End year (e.g., 2023)"),
            },
            "required": ["indicator", "countries"],
        },
    ),
)

IMF_TOOLS = (
    ToolSpec(
        name="imf_list_datasets",
        description=(
            "List available IMF datasets. Key datasets: WEO (World Economic Outlook with forecasts), "
            "IFS (International Financial Statistics), DOT (Direction of Trade), BOP (Balance of Payments), "
            "GFS (Government Finance Statistics)"
        ),
        input_schema=_NO_PARAMS,
    ),
    ToolSpec(
        name="imf_get_weo_data",
        description=(
            "Get IMF World Economic Outlook data - includes GDP forecasts, inflation, unemployment, fiscal "
            "indicators. This is THE source for macroeconomic forecasts. Key indicators: NGDP_RPCH (real GDP "
            "growth %), PCPIPCH (inflation %), LUR (unemployment %), GGXWDG_NGDP (govt debt % GDP), "
            "BCA_NGDPD (current account % GDP)"
        ),
        input_schema={
            "type": "object",
            "properties": {
                "indicator": {
                    "type": "string",
                    "description": (
                        "WEO indicator: NGDP_RPCH (real GDP growth), PCPIPCH (inflation), "
                        "LUR (unemployment), GGXWDG_NGDP (govt debt % GDP)"
                    ),
                },
                "countries": _countries("ISO3 country codes (e.g., ['ARG', 'BRA'])"),
                "start_year": _year("Start year (e.g., 2020)"),
                "end_year": _year("End year - can be future for forecasts (e.g., 2028)"),
            },
            "required": ["indicator", "countries"],
        },
    ),
    ToolSpec(
        name="imf_list_countries",
        description=(
            "List countries available in IMF data with their codes. "
            "Returns country codes that can be used with other IMF tools."
        ),
        input_schema={
            "type": "object",
            "properties": {
                "dataset": {"type": "string", "description": "Dataset to get countries for (e.g., 'IFS', 'DOT', 'BOP')"},
            },
            "required": ["dataset"],
        },
    ),
)

FAO_TOOLS = (
    ToolSpec(
        name="fao_list_datasets",
        description=(
            "List all FAO FAOSTAT datasets. Key domains: QCL (crops/livestock production), FBS (food balances), "
            "TP (trade), PP (producer prices), FS (food security), RL (land use), EM (emissions)"
        ),
        input_schema=_NO_PARAMS,
    ),
    ToolSpec(
        name="fao_search_items",
        description=(
            "Search FAO items (crops, livestock, commodities) by name. "
            "Returns item codes for use in data queries."
        ),
        input_schema={
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "Search term (e.g., 'wheat', 'rice', 'cattle', 'maize')"},
            },
            "required": ["query"],
        },
    ),
    ToolSpec(
        name="fao_get_production_data",
        description=(
            "Get agricultural production data from FAO - crop yields, livestock numbers, production quantities. "
            "Use for wheat, rice, maize, cattle, etc."
        ),
        input_schema={
            "type": "object",
            "properties": {
                "item": {"type": "string", "description": "Crop or livestock item (e.g., 'Wheat', 'Rice', 'Maize', 'Cattle')"},
                "countries": _countries("Country names (e.g., ['Egypt', 'Morocco'])"),
                "element": {
                    "type": "string",
                    "enum": ["Production", "Area harvested", "Yield"],
                    "description": "What to measure: Production (tonnes), Area harvested (ha), Yield (kg/ha)",
                },
                "start_year": _year("Start year"),
                "end_year": _year("End year"),
            },
            "required": ["item", "countries", "element"],
        },
    ),
)

COMTRADE_TOOLS = (
    ToolSpec(
        name="comtrade_get_trade_data",
        description=(
            "Get bilateral trade data - imports/exports between countries by commodity. Use for trade flow "
            "analysis. Commodity codes: TOTAL (all), 27 (mineral fuels/oil), 84 (machinery), 85 (electronics), "
            "87 (vehicles)"
        ),
        input_schema={
            "type": "object",
            "properties": {
                "reporter": {"type": "string", "description": "Reporting country name or code (e.g., 'Saudi Arabia', 'USA')"},
                "partner": {"type": "string", "description": "Partner country name, or 'World' for all partners"},
                "flow": {"type": "string", "enum": ["import", "export"], "description": "Trade flow direction"},
                "commodity": {
                    "type": "string",
                    "description": "HS commodity code or 'TOTAL'. Examples: '27' (mineral fuels), '84' (machinery), '85' (electronics)",
                },
                "year": _year("Reference year"),
            },
            "required": ["reporter", "flow", "year"],
        },
    ),
    ToolSpec(
        name="comtrade_get_top_partners",
        description=(
            "Get top trading partners for a country - ranked by trade value. "
            "Great for answering 'who does X trade with most?'"
        ),
        input_schema={
            "type": "object",
            "properties": {
                "country": {"type": "string", "description": "Country name (e.g., 'Saudi Arabia', 'Nigeria')"},
                "flow": {"type": "string", "enum": ["import", "export"], "description": "Trade flow: import or export"},
                "year": _year("Reference year"),
                "limit": {"type": "number", "description": "Number of top partners to return (default 10)"},
            },
            "required": ["country", "flow", "year"],
        },
    ),
    ToolSpec(
        name="comtrade_get_reference_data",
        description="Get reference data - country codes, commodity codes for UN Comtrade queries",
        input_schema={
            "type": "object",
            "properties": {
                "type": {"type": "string", "enum": ["countries", "commodities"], "description": "Type of reference data"},
                "search": {"type": "string", "description": "Optional search term to filter results"},
            },
            "required": ["type"],
        },
    ),
)

OWID_TOOLS = (
    ToolSpec(
        name="owid_search_charts",
        description=(
            "Search Our World in Data charts by topic. Returns chart slugs that can be used to fetch data. "
            "Good for finding cross-domain indicators on topics like health, poverty, energy, climate."
        ),
        input_schema={
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": "Search term (e.g., 'life expectancy', 'poverty', 'co2 emissions', 'education')",
                },
            },
            "required": ["query"],
        },
    ),
    ToolSpec(
        name="owid_get_chart_data",
        description=(
            "Get data from an Our World in Data chart. Common charts: life-expectancy, gdp-per-capita-worldbank, "
            "share-of-population-in-extreme-poverty, human-development-index, co2-emissions-per-capita, "
            "literacy-rate-adult-total. Continents ('Africa', 'Asia', ...) and 'World' are valid country names."
        ),
        input_schema={
            "type": "object",
            "properties": {
                "chart_slug": {
                    "type": "string",
                    "description": "Chart identifier (e.g., 'life-expectancy', 'gdp-per-capita-worldbank')",
                },
                "countries": _countries("Country names (e.g., ['Japan', 'United States', 'Bangladesh'])"),
                "start_year": _year("Start year"),
                "end_year": _year("End year"),
                "for_map": {"type": "boolean", "description": "Return one year for every country, for world maps"},
            },
            "required": ["chart_slug"],
        },
    ),
)

ALL_TOOLS: tuple[ToolSpec, ...] = WORLD_BANK_TOOLS + IMF_TOOLS + FAO_TOOLS + COMTRADE_TOOLS + OWID_TOOLS


def sources_for_tools(tool_names) -> list[str]:
    """Human-readable source labels for the given tool names, in first-seen order."""
    sources: list[str] = []
    for name in tool_names:
        label = SOURCE_LABELS.get(name.split("_", 1)[0])
        if label and label not in sources:
            sources.append(label)
    return sources
