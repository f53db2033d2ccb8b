"""
Base interfaces and abstract classes for data sources.

This module defines the common interface that the raw dataset loaders
implement, together with the errors they raise.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from ..utils.logging import get_logger
from ..utils.validation import DataValidator

logger = get_logger(__name__)


class DataSourceType(str, Enum):
    """Types of data sources."""
    FAOSTAT = "faostat"
    WORLD_BANK = "world_bank"
    EU_COUNTRIES = "eu_countries"


@dataclass
class LoadMetadata:
    """Metadata for dataset loads."""
    source_type: DataSourceType
    path: Path
    timestamp: datetime = field(default_factory=datetime.now)
    execution_time: Optional[float] = None
    row_count: Optional[int] = None
    error_message: Optional[str] = None


class DataSourceError(Exception):
    """Base exception for data source errors."""

    def __init__(self, message: str, source_type: Optional[DataSourceType] = None):
        """Initialize error."""
        super().__init__(message)
        self.source_type = source_type
        self.timestamp = datetime.now()


class DatasetNotFoundError(DataSourceError):
    """Dataset file does not exist."""
    pass


class SchemaError(DataSourceError):
    """Dataset lacks required columns."""
    pass


class UnsupportedFormatError(DataSourceError):
    """Dataset file format cannot be read."""
    pass


class DataSource(ABC):
    """
    Abstract base class for all data sources.

    A data source loads one table once and keeps it for later calls.
    """

    REQUIRED_COLUMNS: List[str] = []

    def __init__(self, source_type: DataSourceType):
        """
        Initialize data source.

        Args:
            source_type: Type of data source
        """
        self.source_type = source_type
        self._data: Optional[pd.DataFrame] = None
        self.last_load: Optional[LoadMetadata] = None
        self.logger = get_logger(f"{__name__}.{self.__class__.__name__}")

    @abstractmethod
    def test_connection(self) -> bool:
        """Test if the dataset can be reached."""
        pass

    @abstractmethod
    def get_dataset_info(self) -> Dict[str, Any]:
        """Get information about the dataset."""
        pass

    @abstractmethod
    def _load_impl(self) -> pd.DataFrame:
        """Implementation-specific load."""
        pass

    def load(self, reload: bool = False) -> pd.DataFrame:
        """
        Load the dataset, validating its columns.

        Args:
            reload: Read the dataset again even if already loaded

        Returns:
            Copy of the loaded table

        Raises:
            SchemaError: If required columns are missing
        """
        if self._data is not None and not reload:
            return self._data.copy()

        start_time = time.time()
        metadata = LoadMetadata(source_type=self.source_type, path=self.path)

        try:
            data = self._load_impl()
            self._check_schema(data)
        except DataSourceError as e:
            metadata.error_message = str(e)
            self.last_load = metadata
            self.logger.error(f"Loading {self.source_type.value} failed: {e}")
            raise

        metadata.execution_time = time.time() - start_time
        metadata.row_count = len(data)
        self.last_load = metadata

        self.logger.info(
            f"Loaded {self.source_type.value} from {self.path} "
            f"({metadata.row_count} rows in {metadata.execution_time:.2f}s)"
        )

        self._data = data
        return data.copy()

    def _check_schema(self, data: pd.DataFrame) -> None:
        result = DataValidator().validate_required_columns(
            data, self.REQUIRED_COLUMNS, self.source_type.value
        )
        if not result.is_valid:
            raise SchemaError(result.errors[0], self.source_type)

    @property
    @abstractmethod
    def path(self) -> Path:
        """Location of the dataset."""
        pass

    @property
    def is_loaded(self) -> bool:
        """Check if the dataset is loaded."""
        return self._data is not None

    def clear(self) -> None:
        """Drop the loaded table."""
        self._data = None

    def __enter__(self):
        """Context manager entry."""
        self.load()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.clear()
