"""
Deflator base-year chaining.

The World Bank GDP deflator series is an annual inflation rate in percent.
Chaining it gives a price index equal to 1 in the base year: forward from
the base year the index compounds each year's inflation, backward from the
base year it divides out the following year's inflation.
"""

from typing import Any, Dict, Optional, Union

import numpy as np
import pandas as pd

from .base import DataProcessor, ProcessingError, ProcessingResult
from ..models import COUNTRY, DEFLATOR, DEFLATOR_BASE, DEFLATOR_US, YEAR
from ..utils.validation import DataValidator, ValidationResult


class DeflatorError(ProcessingError):
    """The deflator cannot be chained for a country."""
    pass


def chain_deflator(
    data: pd.DataFrame,
    base_year: int,
    deflator_column: str = DEFLATOR,
    output_column: str = DEFLATOR_BASE
) -> pd.DataFrame:
    """
    Chain annual deflator rates into an index pinned to 1 in ``base_year``.

    With ``d[t]`` the inflation rate of year ``t`` in percent::

        index[base] = 1
        index[t]    = index[t - 1] * (1 + d[t] / 100)    for t > base
        index[t]    = index[t + 1] / (1 + d[t + 1] / 100) for t < base

    Missing rates propagate: every year on the far side of a missing rate
    gets a missing index.

    Args:
        data: Rows of a single country
        base_year: Year where the index equals 1
        deflator_column: Column with the annual inflation rate
        output_column: Column receiving the index

    Returns:
        Copy of ``data`` sorted by year with the index column added

    Raises:
        DeflatorError: If ``data`` has no row for ``base_year``
    """
    result = data.sort_values(YEAR).copy()
    years = result[YEAR].to_numpy()

    if not (years == base_year).any():
        country = result[COUNTRY].iloc[0] if COUNTRY in result.columns and len(result) else "?"
        raise DeflatorError(f"No {base_year} deflator row for {country}")

    growth = 1 + result[deflator_column].to_numpy(dtype=float) / 100
    index = np.full(len(result), np.nan)

    after = years > base_year
    index[years == base_year] = 1.0
    index[after] = np.cumprod(growth[after])

    # Reverse scan: the first year at or before the base has no later rate
    # dividing it, so the rates used are those of the following years.
    up_to_base = years <= base_year
    later_growth = growth[up_to_base][1:]
    backward = 1 / np.cumprod(later_growth[::-1])[::-1]
    index[years < base_year] = backward

    result[output_column] = index
    return result


def chain_deflator_by_country(
    data: pd.DataFrame,
    base_year: int,
    deflator_column: str = DEFLATOR,
    output_column: str = DEFLATOR_BASE
) -> pd.DataFrame:
    """Apply :func:`chain_deflator` to every country independently."""
    chained = [
        chain_deflator(group, base_year, deflator_column, output_column)
        for _, group in data.groupby(COUNTRY, sort=True)
    ]
    if not chained:
        return data.assign(**{output_column: pd.Series(dtype=float)})
    return pd.concat(chained, ignore_index=True)


def numeraire_deflator(
    macro: pd.DataFrame,
    base_year: int,
    country: str = "United States"
) -> pd.DataFrame:
    """
    Chained deflator of the numeraire country.

    Returns:
        DataFrame with ``Year`` and ``DeflUS`` columns
    """
    rows = macro.loc[macro[COUNTRY] == country, [COUNTRY, YEAR, DEFLATOR]]
    if rows.empty:
        raise DeflatorError(f"Numeraire country '{country}' not found in macro table")

    chained = chain_deflator(rows, base_year, output_column=DEFLATOR_US)
    return chained[[YEAR, DEFLATOR_US]].reset_index(drop=True)


class DeflatorChainer(DataProcessor):
    """
    Deflator chaining processor.

    Adds ``DeflBase`` to a macro table, country by country.
    """

    def __init__(self, base_year: int = 2010, name: Optional[str] = None):
        """
        Initialize deflator chainer.

        Args:
            base_year: Year where every country's index equals 1
            name: Processor name
        """
        super().__init__(name or "DeflatorChainer")
        self.base_year = base_year

    def process(
        self,
        data: Union[pd.DataFrame, Dict[str, pd.DataFrame]],
        parameters: Optional[Dict[str, Any]] = None
    ) -> ProcessingResult:
        """Chain the deflator of every country in ``data``."""
        base_year = (parameters or {}).get("base_year", self.base_year)
        self.logger.info(f"Chaining deflators to base year {base_year}")

        chained = chain_deflator_by_country(data, base_year)
        return self._make_result(chained, parameters)

    def validate_input(
        self,
        data: Union[pd.DataFrame, Dict[str, pd.DataFrame]],
        parameters: Optional[Dict[str, Any]] = None
    ) -> ValidationResult:
        """Require a single table with country, year and deflator columns."""
        result = super().validate_input(data, parameters)

        if not isinstance(data, pd.DataFrame):
            result.add_error("Deflator chaining expects a single DataFrame")
            return result

        for column in (COUNTRY, YEAR, DEFLATOR):
            if column not in data.columns:
                result.add_error(f"Missing column: {column}")

        if result.is_valid:
            # the recurrence needs one row per country and year
            result.merge(DataValidator().validate_unique_keys(data, [COUNTRY, YEAR], "macro"))

        return result

    def validate_output(
        self,
        data: Union[pd.DataFrame, Dict[str, pd.DataFrame]],
        parameters: Optional[Dict[str, Any]] = None
    ) -> ValidationResult:
        """Every country's index must equal 1 in the base year."""
        result = super().validate_output(data, parameters)
        base_year = (parameters or {}).get("base_year", self.base_year)

        at_base = data.loc[data[YEAR] == base_year, DEFLATOR_BASE]
        if not np.allclose(at_base.to_numpy(dtype=float), 1.0):
            result.add_error(f"{DEFLATOR_BASE} differs from 1 in {base_year}")

        return result
