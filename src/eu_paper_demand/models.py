"""
Core data models for the EU paper demand cleaning pipeline.

This module defines the column names shared by the input datasets and the
output bundle, the EU country reference record, and the categorical values
used by the reshaped tables.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List


# Shared key columns
COUNTRY = "Country"
YEAR = "Year"
ITEM = "Item"
FAOST_CODE = "FAOST_CODE"
ISO2_WB_CODE = "ISO2_WB_CODE"

# EU reference table
EXCH_LCU_TO_EURO = "ExchRLCUtoEuro"
EURO_START_YEAR = "Euro_Start_Year"

# World Bank macro table
GDP_CURRENT_LCU = "GDPcurrentLCU"
DEFLATOR = "Deflator"
EXCH_RATE = "ExchR"
POPULATION = "Population"
EXCH_RATE_EURO = "ExchReur"
DEFLATOR_BASE = "DeflBase"
GDP_CONSTANT_USD = "GDPconstantUSD"
DEFLATOR_US = "DeflUS"

# FAOSTAT paper table
PRODUCTION = "Production"
IMPORT_QUANTITY = "Import_Quantity"
EXPORT_QUANTITY = "Export_Quantity"
IMPORT_VALUE = "Import_Value"
EXPORT_VALUE = "Export_Value"
CONSUMPTION = "Consumption"
PRICE = "Price"
IMPORT_PRICE = "Import_Price"
EXPORT_PRICE = "Export_Price"

# Long tables
TRADE = "Trade"
QUANTITY = "Quantity"
VALUE = "Value"
PRICE_TRADE = "Price_Trade"
ELEMENT = "Element"

EU_COUNTRY_COLUMNS: List[str] = [
    COUNTRY, FAOST_CODE, ISO2_WB_CODE, EXCH_LCU_TO_EURO, EURO_START_YEAR,
]

MACRO_COLUMNS: List[str] = [
    COUNTRY, ISO2_WB_CODE, YEAR, GDP_CURRENT_LCU, DEFLATOR, EXCH_RATE,
]

PAPER_COLUMNS: List[str] = [
    COUNTRY, FAOST_CODE, YEAR, ITEM, PRODUCTION,
    IMPORT_QUANTITY, EXPORT_QUANTITY, IMPORT_VALUE, EXPORT_VALUE,
]

PAPER_PRODUCTS_COLUMNS: List[str] = [
    YEAR, COUNTRY, ITEM, PRICE, CONSUMPTION, GDP_CONSTANT_USD,
    IMPORT_PRICE, EXPORT_PRICE,
]


class TradeDirection(str, Enum):
    """Trade flow direction in the long trade table."""
    IMPORT = "Import"
    EXPORT = "Export"


class AggregateElement(str, Enum):
    """Element dimension of the EU aggregate table."""
    CONSUMPTION = "Consumption"
    PRODUCTION = "Production"
    IMPORT = "Import"
    EXPORT = "Export"


class ExchangeRateClass(str, Enum):
    """Monetary history class of a macro table row."""
    NON_EURO = "non_euro"
    EURO_BEFORE = "euro_before"
    EURO_AFTER = "euro_after"


# World Bank names that differ from the EU reference table
COUNTRY_RENAMES: Dict[str, str] = {
    "Slovak Republic": "Slovakia",
}

# FAOSTAT item labels to the labels used in Chas-Amil and Buongiorno (2000)
ITEM_RENAMES: Dict[str, str] = {
    "Paper and Paperboard": "Total Paper and Paperboard",
    "Other Paper+Paperboard": "Other Paper and Paperboard",
    "Printing+Writing Paper": "Printing and Writing Paper",
}

ITEM_ORDER: List[str] = [
    "Total Paper and Paperboard",
    "Newsprint",
    "Printing and Writing Paper",
    "Other Paper and Paperboard",
]


@dataclass(frozen=True)
class EUCountry:
    """
    Row of the EU country reference table.

    Attributes:
        name: Country name as used in FAOSTAT and the EU table
        faostat_code: FAOSTAT country code
        wb_code: World Bank ISO2 code
        lcu_to_euro: Local currency units per Euro (irrevocable rate)
        euro_start_year: Year of Euro adoption, 0 for non-Euro countries
    """
    name: str
    faostat_code: int
    wb_code: str
    lcu_to_euro: float
    euro_start_year: int = 0

    def __post_init__(self):
        """Validate codes and Euro membership consistency."""
        if len(self.wb_code) != 2:
            raise ValueError(f"World Bank code must be 2 characters: {self.wb_code}")

        if self.euro_start_year < 0:
            raise ValueError(f"Euro start year cannot be negative: {self.name}")

        if self.is_euro_member and not self.lcu_to_euro > 0:
            raise ValueError(f"Euro member must have a positive conversion rate: {self.name}")

    @property
    def is_euro_member(self) -> bool:
        """Whether the country has adopted the Euro."""
        return self.euro_start_year > 0
