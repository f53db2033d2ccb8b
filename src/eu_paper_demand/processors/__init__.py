"""
Data processing stages of the paper demand cleaning pipeline.

This module provides processors that turn the raw FAOSTAT and World Bank
tables into real prices, apparent consumption and long-format trade tables.
"""

from .base import DataProcessor, ProcessingResult, ProcessingError, IntegrityError
from .currency import EuroExchangeRateNormalizer, PartitionIntegrityError
from .deflator import DeflatorChainer, DeflatorError, chain_deflator
from .derived import PaperQuantityCalculator
from .reshape import TradeReshaper, ReshapeIntegrityError
from .pipeline import PaperDemandPipeline

__all__ = [
    "DataProcessor",
    "ProcessingResult",
    "ProcessingError",
    "IntegrityError",
    "EuroExchangeRateNormalizer",
    "PartitionIntegrityError",
    "DeflatorChainer",
    "DeflatorError",
    "chain_deflator",
    "PaperQuantityCalculator",
    "TradeReshaper",
    "ReshapeIntegrityError",
    "PaperDemandPipeline",
]
