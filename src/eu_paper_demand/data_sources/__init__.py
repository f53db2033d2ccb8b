"""
Loaders for the raw FAOSTAT, World Bank and EU reference datasets.
"""

from .base import (
    DataSource, DataSourceType, DataSourceError, DatasetNotFoundError,
    SchemaError, UnsupportedFormatError,
)
from .files import (
    TabularFileSource, FAOSTATPaperSource, WorldBankMacroSource,
    EUCountryTable, read_table,
)
from .factory import DataSourceFactory, DataSourceManager

__all__ = [
    "DataSource",
    "DataSourceType",
    "DataSourceError",
    "DatasetNotFoundError",
    "SchemaError",
    "UnsupportedFormatError",
    "TabularFileSource",
    "FAOSTATPaperSource",
    "WorldBankMacroSource",
    "EUCountryTable",
    "read_table",
    "DataSourceFactory",
    "DataSourceManager",
]
