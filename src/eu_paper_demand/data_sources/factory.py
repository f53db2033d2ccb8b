"""
Data source factory and manager.

This module builds the three raw dataset sources from configuration and
manages them together, so the pipeline can load and release them as one.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from .base import DataSource, DataSourceType
from .files import EUCountryTable, FAOSTATPaperSource, WorldBankMacroSource
from ..config import CleaningConfig, InputConfig
from ..utils.logging import get_logger

logger = get_logger(__name__)


class DataSourceFactory:
    """Factory for creating the raw dataset sources."""

    @staticmethod
    def create_all_sources(config: InputConfig) -> Dict[DataSourceType, DataSource]:
        """
        Create every data source from input configuration.

        Args:
            config: Input configuration

        Returns:
            Dictionary of data sources keyed by type
        """
        return {
            DataSourceType.FAOSTAT: FAOSTATPaperSource(config.paper_path),
            DataSourceType.WORLD_BANK: WorldBankMacroSource(config.macro_path),
            DataSourceType.EU_COUNTRIES: EUCountryTable(config.countries_path),
        }


class DataSourceManager:
    """
    Manager for the raw dataset sources.

    Loading is all-or-nothing: the first source that fails to load stops the
    run.
    """

    def __init__(self, config: Optional[CleaningConfig] = None):
        """
        Initialize data source manager.

        Args:
            config: Cleaning configuration
        """
        self.config = config
        self._sources: Dict[DataSourceType, DataSource] = {}

    def add_source(self, source_type: DataSourceType, source: DataSource) -> None:
        """Add a data source to the manager."""
        self._sources[source_type] = source

    def get_source(self, source_type: DataSourceType) -> Optional[DataSource]:
        """Get a data source by type."""
        return self._sources.get(source_type)

    @property
    def paper(self) -> FAOSTATPaperSource:
        return self._sources[DataSourceType.FAOSTAT]

    @property
    def macro(self) -> WorldBankMacroSource:
        return self._sources[DataSourceType.WORLD_BANK]

    @property
    def countries(self) -> EUCountryTable:
        return self._sources[DataSourceType.EU_COUNTRIES]

    def load_all(self) -> None:
        """Load every data source."""
        for source in self._sources.values():
            source.load()

    def clear_all(self) -> None:
        """Release every loaded table."""
        for source in self._sources.values():
            source.clear()

    def test_all_connections(self) -> Dict[DataSourceType, bool]:
        """Test all data source connections."""
        return {
            source_type: source.test_connection()
            for source_type, source in self._sources.items()
        }

    def get_status(self) -> Dict[str, Any]:
        """Get status of all data sources."""
        status: Dict[str, Any] = {
            "sources": {},
            "total_sources": len(self._sources),
            "loaded_sources": sum(s.is_loaded for s in self._sources.values()),
        }

        for source_type, source in self._sources.items():
            status["sources"][source_type.value] = {
                "loaded": source.is_loaded,
                "path": str(source.path),
                "class": source.__class__.__name__,
            }

        return status

    def __enter__(self):
        """Context manager entry."""
        self.load_all()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.clear_all()

    @classmethod
    def from_config(cls, config: CleaningConfig) -> DataSourceManager:
        """
        Create data source manager from configuration.

        Args:
            config: Cleaning configuration

        Returns:
            Configured DataSourceManager instance
        """
        manager = cls(config)

        sources = DataSourceFactory.create_all_sources(config.input)
        for source_type, source in sources.items():
            manager.add_source(source_type, source)

        logger.debug(f"Created {len(sources)} data sources")
        return manager
