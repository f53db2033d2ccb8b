"""
EU Paper Demand Data Cleaning

This package turns FAOSTAT paper and paperboard statistics and World Bank
macro indicators into real prices and apparent consumption of paper products
for EU countries, ready for demand estimation.
"""

__version__ = "0.1.0"
__author__ = "Research Team"

from .config import CleaningConfig, load_config
from .models import EUCountry, TradeDirection, AggregateElement
from .data_sources import (
    DataSource, FAOSTATPaperSource, WorldBankMacroSource, EUCountryTable,
    DataSourceManager
)
from .processors import (
    DataProcessor, EuroExchangeRateNormalizer, DeflatorChainer,
    PaperQuantityCalculator, TradeReshaper, PaperDemandPipeline
)
from .exporters import TableExporter, load_bundle

__all__ = [
    "CleaningConfig",
    "load_config",
    "EUCountry",
    "TradeDirection",
    "AggregateElement",
    "DataSource",
    "FAOSTATPaperSource",
    "WorldBankMacroSource",
    "EUCountryTable",
    "DataSourceManager",
    "DataProcessor",
    "EuroExchangeRateNormalizer",
    "DeflatorChainer",
    "PaperQuantityCalculator",
    "TradeReshaper",
    "PaperDemandPipeline",
    "TableExporter",
    "load_bundle",
]
