"""
Derived quantities: GDP in constant USD, apparent consumption and prices.

Prices follow the trade-weighted unit value of Chas-Amil and Buongiorno
(2000): the value of imports and exports divided by their volume, deflated
by the US deflator so that every country's price is in constant USD of the
base year.
"""

from typing import Any, Dict, List, Optional, Union

import numpy as np
import pandas as pd

from .base import DataProcessor, ProcessingResult
from ..models import (
    CONSUMPTION, COUNTRY, DEFLATOR_BASE, DEFLATOR_US, EXCH_RATE_EURO,
    EXPORT_PRICE, EXPORT_QUANTITY, EXPORT_VALUE, GDP_CONSTANT_USD,
    GDP_CURRENT_LCU, IMPORT_PRICE, IMPORT_QUANTITY, IMPORT_VALUE, ITEM,
    ITEM_ORDER, ITEM_RENAMES, PRICE, PRODUCTION, YEAR,
)
from ..utils.logging import get_logger
from ..utils.validation import DataValidator, ValidationResult

logger = get_logger(__name__)


def _safe_divide(numerator: pd.Series, denominator: pd.Series) -> pd.Series:
    """Division where a zero denominator gives NaN instead of infinity."""
    return numerator / denominator.replace(0, np.nan)


def gdp_constant_usd(macro: pd.DataFrame, base_year: int) -> pd.Series:
    """
    GDP in constant USD of the base year.

    Current local currency GDP is divided by the chained deflator and by the
    country's own Euro exchange rate in the base year.
    """
    base_rates = (
        macro.loc[macro[YEAR] == base_year, [COUNTRY, EXCH_RATE_EURO]]
        .drop_duplicates(subset=COUNTRY)
        .set_index(COUNTRY)[EXCH_RATE_EURO]
    )
    rate_at_base = macro[COUNTRY].map(base_rates)
    return _safe_divide(macro[GDP_CURRENT_LCU], macro[DEFLATOR_BASE] * rate_at_base)


def zero_fill(data: pd.DataFrame, columns: Optional[List[str]] = None) -> pd.DataFrame:
    """
    Replace missing values with zero.

    This turns "no data" into "none traded". It is a simplification kept on
    purpose: imports into Finland and Sweden really are zero in several years.
    """
    columns = columns or list(data.select_dtypes(include=[np.number]).columns)
    n_missing = int(data[columns].isna().sum().sum())
    if n_missing:
        logger.info(f"Zero-filling {n_missing} missing values in {len(columns)} columns")

    filled = data.copy()
    filled[columns] = filled[columns].fillna(0)
    return filled


def apparent_consumption(data: pd.DataFrame) -> pd.Series:
    """Production plus imports minus exports."""
    return data[PRODUCTION] + data[IMPORT_QUANTITY] - data[EXPORT_QUANTITY]


def rename_items(data: pd.DataFrame) -> pd.DataFrame:
    """
    Relabel FAOSTAT items and order them as in Chas-Amil and Buongiorno (2000).

    Items outside ``ITEM_ORDER`` become missing.
    """
    renamed = data.copy()
    items = renamed[ITEM].astype(str).replace(ITEM_RENAMES)
    items = items.where(items.isin(ITEM_ORDER))
    renamed[ITEM] = items.astype(pd.CategoricalDtype(ITEM_ORDER, ordered=True))
    return renamed


def add_prices(data: pd.DataFrame, scale: float = 1000.0) -> pd.DataFrame:
    """
    Add trade-weighted, import and export prices in constant USD.

    ``data`` must carry ``DeflUS``.
    """
    priced = data.copy()
    deflator = priced[DEFLATOR_US]

    priced[PRICE] = _safe_divide(
        priced[IMPORT_VALUE] + priced[EXPORT_VALUE],
        priced[IMPORT_QUANTITY] + priced[EXPORT_QUANTITY],
    ) / deflator * scale
    priced[IMPORT_PRICE] = _safe_divide(priced[IMPORT_VALUE], priced[IMPORT_QUANTITY]) / deflator * scale
    priced[EXPORT_PRICE] = _safe_divide(priced[EXPORT_VALUE], priced[EXPORT_QUANTITY]) / deflator * scale
    return priced


class PaperQuantityCalculator(DataProcessor):
    """
    Derived quantities processor for the paper table.

    Expects a dictionary with the EU paper table under ``"paper"``, the
    cleaned macro table (with ``GDPconstantUSD``) under ``"macro"`` and the
    numeraire deflator (``Year``, ``DeflUS``) under ``"numeraire"``.
    """

    REQUIRED_DATASETS = ["paper", "macro", "numeraire"]
    QUANTITY_COLUMNS = [
        PRODUCTION, IMPORT_QUANTITY, EXPORT_QUANTITY, IMPORT_VALUE, EXPORT_VALUE,
    ]

    def __init__(
        self,
        price_scale: float = 1000.0,
        zero_fill_missing: bool = True,
        name: Optional[str] = None
    ):
        """
        Initialize derived quantities calculator.

        Args:
            price_scale: Multiplier applied to deflated unit values
            zero_fill_missing: Treat missing production and trade as zero
            name: Processor name
        """
        super().__init__(name or "PaperQuantityCalculator")
        self.price_scale = price_scale
        self.zero_fill_missing = zero_fill_missing

    def process(
        self,
        data: Union[pd.DataFrame, Dict[str, pd.DataFrame]],
        parameters: Optional[Dict[str, Any]] = None
    ) -> ProcessingResult:
        """Compute consumption, merge GDP and the US deflator, compute prices."""
        paper = data["paper"]
        if self.zero_fill_missing:
            paper = zero_fill(paper, [c for c in self.QUANTITY_COLUMNS if c in paper.columns])

        paper = paper.assign(**{CONSUMPTION: apparent_consumption(paper)})
        paper = paper.merge(data["macro"][[YEAR, COUNTRY, GDP_CONSTANT_USD]], on=[YEAR, COUNTRY])
        paper = rename_items(paper)
        paper = paper.merge(data["numeraire"][[YEAR, DEFLATOR_US]], on=YEAR)
        paper = add_prices(paper, self.price_scale)

        return self._make_result(paper.reset_index(drop=True), parameters)

    def validate_input(
        self,
        data: Union[pd.DataFrame, Dict[str, pd.DataFrame]],
        parameters: Optional[Dict[str, Any]] = None
    ) -> ValidationResult:
        """Validate input data for the derived quantities."""
        result = super().validate_input(data, parameters)

        if not isinstance(data, dict):
            result.add_error("Derived quantities expect a dictionary of tables")
            return result

        for dataset in self.REQUIRED_DATASETS:
            if dataset not in data:
                result.add_error(f"Dataset '{dataset}' is required")

        macro = data.get("macro")
        if isinstance(macro, pd.DataFrame) and GDP_CONSTANT_USD not in macro.columns:
            result.add_error(f"Macro table lacks '{GDP_CONSTANT_USD}'")

        paper = data.get("paper")
        if isinstance(paper, pd.DataFrame):
            columns = [c for c in self.QUANTITY_COLUMNS if c in paper.columns]
            result.merge(DataValidator().validate_missing_values(paper, columns, "paper"))

        return result

    def validate_output(
        self,
        data: Union[pd.DataFrame, Dict[str, pd.DataFrame]],
        parameters: Optional[Dict[str, Any]] = None
    ) -> ValidationResult:
        """Report items outside the known item list."""
        result = super().validate_output(data, parameters)

        unknown = int(data[ITEM].isna().sum())
        if unknown:
            result.add_warning(f"{unknown} rows with an item outside {ITEM_ORDER}")

        return result
