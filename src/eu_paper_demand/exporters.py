"""
Export of the cleaned tables.

The cleaned tables are written together as one pickle bundle, a dictionary
of data frames that the demand estimation scripts load in one call. Each
table can additionally be written to its own CSV or parquet file.
"""

from typing import Dict, List, Union
from pathlib import Path
import pickle

import pandas as pd

from .utils.logging import get_logger

logger = get_logger(__name__)


class TableExporter:
    """
    Export cleaned tables to disk.
    """

    def __init__(self, output_directory: Union[str, Path]):
        """
        Initialize table exporter.

        Args:
            output_directory: Base directory for output files
        """
        self.output_directory = Path(output_directory)
        self.output_directory.mkdir(parents=True, exist_ok=True)

    def export_bundle(
        self,
        tables: Dict[str, pd.DataFrame],
        filename: str
    ) -> Path:
        """
        Write all tables to a single pickle file.

        Args:
            tables: Tables keyed by name
            filename: Bundle file name inside the output directory

        Returns:
            Path of the bundle
        """
        bundle_file = self.output_directory / filename
        with open(bundle_file, 'wb') as f:
            pickle.dump(tables, f)

        logger.info(f"Saved {sorted(tables)} to {bundle_file}")
        return bundle_file

    def export_tables(
        self,
        tables: Dict[str, pd.DataFrame],
        formats: List[str]
    ) -> List[str]:
        """
        Write each table to its own file.

        Args:
            tables: Tables keyed by name, the name becomes the file stem
            formats: Any of 'csv' and 'parquet'

        Returns:
            List of created file paths
        """
        created_files = []

        for name, table in tables.items():
            if "csv" in formats:
                csv_file = self.output_directory / f"{name}.csv"
                table.to_csv(csv_file, index=False)
                created_files.append(str(csv_file))

            if "parquet" in formats:
                parquet_file = self.output_directory / f"{name}.parquet"
                table.to_parquet(parquet_file, index=False)
                created_files.append(str(parquet_file))

        logger.info(f"Exported {len(created_files)} table files to {self.output_directory}")
        return created_files


def load_bundle(path: Union[str, Path]) -> Dict[str, pd.DataFrame]:
    """Read a bundle written by :meth:`TableExporter.export_bundle`."""
    with open(path, 'rb') as f:
        return pickle.load(f)
