"""
File-backed data sources.

The FAOSTAT and World Bank tables are pre-serialized data frames; the EU
country table is a small hand-maintained CSV. The reader is chosen from the
file suffix.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Union

import pandas as pd

from .base import (
    DataSource, DataSourceType, DatasetNotFoundError, SchemaError,
    UnsupportedFormatError,
)
from ..models import (
    COUNTRY, EURO_START_YEAR, EU_COUNTRY_COLUMNS, EXCH_LCU_TO_EURO,
    FAOST_CODE, ISO2_WB_CODE, MACRO_COLUMNS, PAPER_COLUMNS, EUCountry,
)


def read_table(path: Union[str, Path]) -> pd.DataFrame:
    """
    Read a serialized data frame, choosing the reader from the suffix.

    Supported: ``.pkl``/``.pickle``, ``.parquet`` and ``.csv``.
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if not path.exists():
        raise DatasetNotFoundError(f"Dataset not found: {path}")

    if suffix in ['.pkl', '.pickle']:
        data = pd.read_pickle(path)
    elif suffix == '.parquet':
        data = pd.read_parquet(path)
    elif suffix == '.csv':
        data = pd.read_csv(path)
    else:
        raise UnsupportedFormatError(f"Unsupported dataset format: {path.suffix}")

    if not isinstance(data, pd.DataFrame):
        raise UnsupportedFormatError(f"{path} does not hold a DataFrame")

    return data


class TabularFileSource(DataSource):
    """Data source reading one table from a file."""

    def __init__(self, source_type: DataSourceType, path: Union[str, Path]):
        """
        Initialize file data source.

        Args:
            source_type: Type of data source
            path: Path to the serialized table
        """
        super().__init__(source_type)
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def test_connection(self) -> bool:
        """Check the file exists."""
        return self._path.is_file()

    def get_dataset_info(self) -> Dict[str, Any]:
        """Get information about the dataset file."""
        info: Dict[str, Any] = {
            "source_type": self.source_type.value,
            "path": str(self._path),
            "exists": self._path.is_file(),
            "loaded": self.is_loaded,
            "required_columns": list(self.REQUIRED_COLUMNS),
        }
        if self.is_loaded:
            info["rows"] = len(self._data)
            info["columns"] = list(self._data.columns)
        return info

    def _load_impl(self) -> pd.DataFrame:
        return read_table(self._path)


class FAOSTATPaperSource(TabularFileSource):
    """FAOSTAT paper and paperboard production and trade table."""

    REQUIRED_COLUMNS = PAPER_COLUMNS

    def __init__(self, path: Union[str, Path]):
        super().__init__(DataSourceType.FAOSTAT, path)


class WorldBankMacroSource(TabularFileSource):
    """World Bank GDP, deflator, exchange rate and population table."""

    REQUIRED_COLUMNS = MACRO_COLUMNS

    def __init__(self, path: Union[str, Path]):
        super().__init__(DataSourceType.WORLD_BANK, path)


class EUCountryTable(TabularFileSource):
    """
    EU country reference table.

    Every row must describe a valid EUCountry: a Euro member needs a positive
    irrevocable conversion rate, and ``Euro_Start_Year`` is 0 for countries
    outside the Euro.
    """

    REQUIRED_COLUMNS = EU_COUNTRY_COLUMNS

    def __init__(self, path: Union[str, Path]):
        super().__init__(DataSourceType.EU_COUNTRIES, path)

    def _load_impl(self) -> pd.DataFrame:
        data = read_table(self._path)

        if EURO_START_YEAR in data.columns:
            if data[EURO_START_YEAR].isna().any():
                raise SchemaError(
                    f"{EURO_START_YEAR} must be set for every country (0 for non-Euro)",
                    self.source_type,
                )
            data[EURO_START_YEAR] = data[EURO_START_YEAR].astype(int)

        # missing columns are reported by the schema check after loading
        if set(EU_COUNTRY_COLUMNS) <= set(data.columns):
            self._check_countries(data)

        return data

    def _check_countries(self, data: pd.DataFrame) -> List[EUCountry]:
        """Build one EUCountry per row, raising SchemaError on an invalid row."""
        countries = []
        for row in data[EU_COUNTRY_COLUMNS].to_dict("records"):
            rate = row[EXCH_LCU_TO_EURO]
            try:
                countries.append(EUCountry(
                    name=row[COUNTRY],
                    faostat_code=int(row[FAOST_CODE]),
                    wb_code=str(row[ISO2_WB_CODE]),
                    lcu_to_euro=float(rate) if pd.notna(rate) else float("nan"),
                    euro_start_year=int(row[EURO_START_YEAR]),
                ))
            except ValueError as e:
                raise SchemaError(f"Invalid EU country row: {e}", self.source_type) from e

        self.logger.debug(
            f"{sum(c.is_euro_member for c in countries)} of {len(countries)} "
            f"EU countries use the Euro"
        )
        return countries
