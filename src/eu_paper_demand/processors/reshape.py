"""
Reshaping of the paper table.

Two long tables are built from the wide paper table: the trade table, with
imports and exports as a ``Trade`` dimension, and the EU aggregate, with
consumption, production, imports and exports as an ``Element`` dimension.
"""

from typing import Any, Dict, List, Optional, Tuple, Union

import numpy as np
import pandas as pd

from .base import DataProcessor, IntegrityError, ProcessingResult
from ..models import (
    CONSUMPTION, DEFLATOR_US, ELEMENT, EXPORT_PRICE, EXPORT_QUANTITY,
    EXPORT_VALUE, IMPORT_PRICE, IMPORT_QUANTITY, IMPORT_VALUE, ITEM, PRICE,
    PRICE_TRADE, PRODUCTION, QUANTITY, TRADE, VALUE, YEAR,
    AggregateElement, TradeDirection,
)
from ..utils.validation import check_row_count


class ReshapeIntegrityError(IntegrityError):
    """The long trade table does not mirror the wide paper table."""
    pass


# Source columns of (Quantity, Value, Price_Trade) per trade direction
TRADE_COLUMNS: Dict[TradeDirection, Tuple[str, str, str]] = {
    TradeDirection.IMPORT: (IMPORT_QUANTITY, IMPORT_VALUE, IMPORT_PRICE),
    TradeDirection.EXPORT: (EXPORT_QUANTITY, EXPORT_VALUE, EXPORT_PRICE),
}

# Source columns of (Quantity, Price) per aggregate element
AGGREGATE_COLUMNS: Dict[AggregateElement, Tuple[str, str]] = {
    AggregateElement.CONSUMPTION: (CONSUMPTION, PRICE),
    AggregateElement.PRODUCTION: (PRODUCTION, PRICE),
    AggregateElement.IMPORT: (IMPORT_QUANTITY, IMPORT_PRICE),
    AggregateElement.EXPORT: (EXPORT_QUANTITY, EXPORT_PRICE),
}

AGGREGATE_SELECTION: List[str] = [
    ITEM, YEAR, CONSUMPTION, PRODUCTION, IMPORT_QUANTITY, EXPORT_QUANTITY,
    PRICE, IMPORT_PRICE, EXPORT_PRICE,
]


def trade_to_long(paper: pd.DataFrame) -> pd.DataFrame:
    """
    Stack import and export columns into a long trade table.

    ``Production``, ``DeflUS`` and ``Price`` are dropped; every other column
    is carried to both the import and the export row. Import rows come first.

    Raises:
        ReshapeIntegrityError: If the long table is not twice as long as
            ``paper`` or its import rows differ from the source columns
    """
    wide = paper.drop(columns=[PRODUCTION, DEFLATOR_US, PRICE], errors="ignore")
    varying = [col for cols in TRADE_COLUMNS.values() for col in cols]
    id_columns = [col for col in wide.columns if col not in varying]

    frames = []
    for direction, (quantity, value, price) in TRADE_COLUMNS.items():
        frame = wide[id_columns].copy()
        frame[TRADE] = direction.value
        frame[QUANTITY] = wide[quantity].to_numpy()
        frame[VALUE] = wide[value].to_numpy()
        frame[PRICE_TRADE] = wide[price].to_numpy()
        frames.append(frame)

    long = pd.concat(frames, ignore_index=True)

    check_row_count(len(long), 2 * len(paper), "long trade table", ReshapeIntegrityError)
    _check_import_rows(long, paper)

    return long


def _check_import_rows(long: pd.DataFrame, paper: pd.DataFrame) -> None:
    imports = long[long[TRADE] == TradeDirection.IMPORT.value]
    for long_column, wide_column in ((QUANTITY, IMPORT_QUANTITY), (PRICE_TRADE, IMPORT_PRICE)):
        same = np.array_equal(
            imports[long_column].to_numpy(dtype=float),
            paper[wide_column].to_numpy(dtype=float),
            equal_nan=True,
        )
        if not same:
            raise ReshapeIntegrityError(
                f"Import rows of the long trade table differ from '{wide_column}'"
            )


def eu_aggregate(paper: pd.DataFrame) -> pd.DataFrame:
    """
    Sum volumes and average prices over the EU, per item and year.

    Missing values are zero-filled first, so a country without a price pulls
    the average price down. This mirrors the consumption zero-filling and is
    kept as a known simplification. Rows with an unknown (missing) item form
    their own group, so every country row is counted.

    Returns:
        Long table keyed by ``Year``, ``Item`` and ``Element`` with
        ``Quantity`` and ``Price`` columns
    """
    selection = paper[AGGREGATE_SELECTION].copy()
    value_columns = AGGREGATE_SELECTION[2:]
    selection[value_columns] = selection[value_columns].fillna(0)

    aggregated = (
        selection.groupby([ITEM, YEAR], observed=True, sort=True, dropna=False)
        .agg(**{
            CONSUMPTION: (CONSUMPTION, "sum"),
            PRODUCTION: (PRODUCTION, "sum"),
            IMPORT_QUANTITY: (IMPORT_QUANTITY, "sum"),
            EXPORT_QUANTITY: (EXPORT_QUANTITY, "sum"),
            PRICE: (PRICE, "mean"),
            IMPORT_PRICE: (IMPORT_PRICE, "mean"),
            EXPORT_PRICE: (EXPORT_PRICE, "mean"),
        })
        .reset_index()
    )

    frames = []
    for element, (quantity, price) in AGGREGATE_COLUMNS.items():
        frames.append(pd.DataFrame({
            YEAR: aggregated[YEAR].to_numpy(),
            ITEM: aggregated[ITEM],
            ELEMENT: element.value,
            QUANTITY: aggregated[quantity].to_numpy(),
            PRICE: aggregated[price].to_numpy(),
        }))

    return pd.concat(frames, ignore_index=True)


class TradeReshaper(DataProcessor):
    """
    Reshaping processor.

    Produces the long trade table and the EU aggregate table from the paper
    table with prices.
    """

    def __init__(self, name: Optional[str] = None):
        """Initialize trade reshaper."""
        super().__init__(name or "TradeReshaper")

    def process(
        self,
        data: Union[pd.DataFrame, Dict[str, pd.DataFrame]],
        parameters: Optional[Dict[str, Any]] = None
    ) -> ProcessingResult:
        """
        Build the long tables.

        Returns:
            ProcessingResult with ``"trade"`` and ``"aggregate"`` tables
        """
        trade = trade_to_long(data)
        self.logger.info(f"Long trade table: {len(trade)} rows from {len(data)} paper rows")

        aggregate = eu_aggregate(data)
        self.logger.info(f"EU aggregate: {len(aggregate)} rows")

        return self._make_result({"trade": trade, "aggregate": aggregate}, parameters)
