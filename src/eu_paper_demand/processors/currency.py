"""
Exchange rate normalization processor.

World Bank exchange rates are quoted in local currency units per USD. This
module expresses every EU country's rate in Euro terms so that GDP can be
converted with a single rate per country and year, handling three monetary
histories differently:

* countries that never adopted the Euro keep their own rate,
* Euro members before adoption convert their local currency rate with the
  irrevocable local currency to Euro conversion rate,
* Euro members after adoption have no rate of their own in the World Bank
  table and borrow the Euro area rate for the same year.
"""

from typing import Any, Dict, List, Optional, Union

import pandas as pd

from .base import DataProcessor, IntegrityError, ProcessingResult
from ..models import (
    COUNTRY, COUNTRY_RENAMES, EURO_START_YEAR, EXCH_LCU_TO_EURO, EXCH_RATE,
    EXCH_RATE_EURO, ISO2_WB_CODE, YEAR, ExchangeRateClass,
)
from ..utils.validation import ValidationResult, check_row_count


class PartitionIntegrityError(IntegrityError):
    """Exchange rate partitions do not add up to the macro table."""
    pass


def rename_countries(macro: pd.DataFrame) -> pd.DataFrame:
    """Align World Bank country names with the EU reference table."""
    renamed = macro.copy()
    renamed[COUNTRY] = renamed[COUNTRY].replace(COUNTRY_RENAMES)
    return renamed


def euro_area_exchange_rate(
    macro: pd.DataFrame,
    euro_area_name: str = "Euro area",
    start_year: int = 1999
) -> pd.DataFrame:
    """
    Extract the Euro to USD rate from the Euro area aggregate rows.

    Args:
        macro: Unfiltered World Bank macro table
        euro_area_name: Country name of the Euro area aggregate
        start_year: First year of the Euro

    Returns:
        DataFrame with ``Year`` and ``ExchReur`` columns, one row per year
    """
    euro_rows = macro[(macro[COUNTRY] == euro_area_name) & (macro[YEAR] >= start_year)]
    return (
        euro_rows[[YEAR, EXCH_RATE]]
        .rename(columns={EXCH_RATE: EXCH_RATE_EURO})
        .reset_index(drop=True)
    )


def partition_by_exchange_rate_class(
    macro: pd.DataFrame,
    countries: pd.DataFrame,
    missing_rate_after: int = 1993
) -> Dict[ExchangeRateClass, pd.DataFrame]:
    """
    Split the macro table by monetary history.

    A Euro member's row counts as post-adoption when its own exchange rate is
    missing after ``missing_rate_after``; the World Bank stops quoting a
    local currency rate once the Euro replaces it.

    Args:
        macro: EU macro table
        countries: EU country reference table
        missing_rate_after: Year after which a missing rate marks Euro use

    Returns:
        Dictionary of row-disjoint partitions keyed by ExchangeRateClass
    """
    non_euro_names = countries.loc[countries[EURO_START_YEAR] == 0, COUNTRY]
    euro_names = countries.loc[countries[EURO_START_YEAR] > 0, COUNTRY]

    is_non_euro = macro[COUNTRY].isin(non_euro_names)
    is_euro = macro[COUNTRY].isin(euro_names)
    uses_euro = (macro[YEAR] > missing_rate_after) & macro[EXCH_RATE].isna()

    return {
        ExchangeRateClass.NON_EURO: macro[is_non_euro],
        ExchangeRateClass.EURO_BEFORE: macro[is_euro & ~uses_euro],
        ExchangeRateClass.EURO_AFTER: macro[is_euro & uses_euro],
    }


def normalize_exchange_rates(
    macro: pd.DataFrame,
    countries: pd.DataFrame,
    euro_rates: pd.DataFrame,
    missing_rate_after: int = 1993
) -> pd.DataFrame:
    """
    Add the Euro-denominated exchange rate ``ExchReur`` to the macro table.

    ``macro`` must already carry ``ExchRLCUtoEuro``.

    Raises:
        PartitionIntegrityError: If the recombined table has a different
            number of rows than ``macro``
    """
    partitions = partition_by_exchange_rate_class(macro, countries, missing_rate_after)

    non_euro = partitions[ExchangeRateClass.NON_EURO].copy()
    non_euro[EXCH_RATE_EURO] = non_euro[EXCH_RATE]

    before = partitions[ExchangeRateClass.EURO_BEFORE].copy()
    before[EXCH_RATE_EURO] = before[EXCH_RATE] / before[EXCH_LCU_TO_EURO]

    after = partitions[ExchangeRateClass.EURO_AFTER].merge(euro_rates, on=YEAR, how="left")

    check_row_count(
        len(before) + len(after) + len(non_euro),
        len(macro),
        "exchange rate partitions",
        PartitionIntegrityError,
    )

    return pd.concat([before, after, non_euro], ignore_index=True)


def check_euro_start_years(
    macro: pd.DataFrame,
    countries: pd.DataFrame,
    missing_rate_after: int = 1993
) -> pd.DataFrame:
    """
    Compare the first missing exchange rate of each Euro member with its
    Euro adoption year.

    Returns:
        DataFrame with ``Country``, ``NA_ExchR_Year``, ``Euro_Start_Year``
        and ``diff``; a zero ``diff`` means both sources agree
    """
    missing = macro[(macro[YEAR] > missing_rate_after) & macro[EXCH_RATE].isna()]
    first_missing = (
        missing.groupby(COUNTRY, as_index=False)[YEAR]
        .min()
        .rename(columns={YEAR: "NA_ExchR_Year"})
    )

    euro_members = countries.loc[countries[EURO_START_YEAR] > 0, [COUNTRY, EURO_START_YEAR]]
    comparison = first_missing.merge(euro_members, on=COUNTRY)
    comparison["diff"] = comparison["NA_ExchR_Year"] - comparison[EURO_START_YEAR]
    return comparison


def countries_missing_exchange_rate(macro: pd.DataFrame, year: int) -> List[str]:
    """Countries without an exchange rate in the given year."""
    rows = macro[(macro[YEAR] == year) & macro[EXCH_RATE].isna()]
    return sorted(rows[COUNTRY].unique().tolist())


class EuroExchangeRateNormalizer(DataProcessor):
    """
    Exchange rate normalization processor.

    Expects a dictionary with the EU macro table under ``"macro"``, the EU
    country reference table under ``"countries"`` and, optionally, the
    unfiltered World Bank table under ``"reference"`` from which the Euro
    area rate is read (defaults to ``"macro"``).
    """

    REQUIRED_DATASETS = ["macro", "countries"]

    def __init__(
        self,
        euro_area_name: str = "Euro area",
        euro_area_start_year: int = 1999,
        missing_rate_after: int = 1993,
        name: Optional[str] = None
    ):
        """
        Initialize exchange rate normalizer.

        Args:
            euro_area_name: Country name of the Euro area aggregate rows
            euro_area_start_year: First year of the Euro area rate
            missing_rate_after: Year after which a missing rate marks Euro use
            name: Processor name
        """
        super().__init__(name or "EuroExchangeRateNormalizer")
        self.euro_area_name = euro_area_name
        self.euro_area_start_year = euro_area_start_year
        self.missing_rate_after = missing_rate_after

    def process(
        self,
        data: Union[pd.DataFrame, Dict[str, pd.DataFrame]],
        parameters: Optional[Dict[str, Any]] = None
    ) -> ProcessingResult:
        """
        Normalize exchange rates to a Euro basis.

        Returns:
            ProcessingResult with the macro table carrying ``ExchRLCUtoEuro``
            and ``ExchReur``
        """
        countries = data["countries"]
        macro = rename_countries(data["macro"])
        reference = data.get("reference", data["macro"])

        macro = macro.merge(countries[[ISO2_WB_CODE, EXCH_LCU_TO_EURO]], on=ISO2_WB_CODE)

        euro_rates = euro_area_exchange_rate(
            reference, self.euro_area_name, self.euro_area_start_year
        )

        partitions = partition_by_exchange_rate_class(macro, countries, self.missing_rate_after)
        sizes = {cls.value: len(part) for cls, part in partitions.items()}
        self.logger.info(f"Exchange rate partitions: {sizes}")

        normalized = normalize_exchange_rates(
            macro, countries, euro_rates, self.missing_rate_after
        )

        validation = ValidationResult(is_valid=True)
        validation.add_detail("partition_sizes", sizes)

        mismatches = check_euro_start_years(macro, countries, self.missing_rate_after)
        mismatches = mismatches[mismatches["diff"] != 0]
        for row in mismatches.itertuples(index=False):
            message = (
                f"{row.Country}: exchange rate missing from {row.NA_ExchR_Year}, "
                f"Euro adopted in {row.Euro_Start_Year}"
            )
            self.logger.warning(message)
            validation.add_warning(message)

        return self._make_result(normalized, parameters, validation)

    def validate_input(
        self,
        data: Union[pd.DataFrame, Dict[str, pd.DataFrame]],
        parameters: Optional[Dict[str, Any]] = None
    ) -> ValidationResult:
        """Validate input data for exchange rate normalization."""
        result = super().validate_input(data, parameters)

        if isinstance(data, dict):
            for dataset in self.REQUIRED_DATASETS:
                if dataset not in data:
                    result.add_error(f"Dataset '{dataset}' is required")
        else:
            result.add_error("Exchange rate normalization expects a dictionary of tables")

        return result

    def validate_output(
        self,
        data: Union[pd.DataFrame, Dict[str, pd.DataFrame]],
        parameters: Optional[Dict[str, Any]] = None
    ) -> ValidationResult:
        """Check that every row received a Euro exchange rate column."""
        result = super().validate_output(data, parameters)

        if EXCH_RATE_EURO not in data.columns:
            result.add_error(f"Column '{EXCH_RATE_EURO}' was not created")
        else:
            missing = int(data[EXCH_RATE_EURO].isna().sum())
            result.add_detail("missing_euro_rates", missing)
            if missing:
                result.add_warning(f"{missing} rows without a Euro exchange rate")

        return result
