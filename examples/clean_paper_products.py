#!/usr/bin/env python3
"""
Paper Products Cleaning Example

This script runs the cleaning workflow on the raw FAOSTAT and World Bank
tables, prints a short summary of each cleaned table and writes the bundle.
"""

import sys
from pathlib import Path

from eu_paper_demand import CleaningConfig, PaperDemandPipeline
from eu_paper_demand.processors import ProcessingError
from eu_paper_demand.utils import setup_logging


def summarize(tables) -> None:
    """Print the size and span of each cleaned table."""
    for name, table in tables.items():
        years = f"{table['Year'].min()}-{table['Year'].max()}"
        print(f"  {name:<15} {len(table):>6} rows, years {years}")

    aggregate = tables["eu_aggregate"]
    latest = aggregate[
        (aggregate["Year"] == aggregate["Year"].max())
        & (aggregate["Element"] == "Consumption")
    ]
    print("\nEU consumption in the latest year:")
    for _, row in latest.iterrows():
        print(f"  {row['Item']:<30} {row['Quantity']:>14,.0f}")


def main() -> int:
    raw_directory = Path(sys.argv[1]) if len(sys.argv) > 1 else Path("rawdata")

    config = CleaningConfig(
        input={"raw_directory": raw_directory},
        output={"export_tables": True, "output_formats": ["csv"]},
    )
    setup_logging(config.logging)

    pipeline = PaperDemandPipeline(config)

    connections = pipeline.data_source_manager.test_all_connections()
    missing = [source.value for source, ok in connections.items() if not ok]
    if missing:
        print(f"Raw datasets not found in {raw_directory}: {missing}")
        return 1

    try:
        result = pipeline.run()
    except ProcessingError as e:
        print(f"Cleaning failed: {e}")
        return 1

    print(f"Cleaning finished in {result.metadata.execution_time:.1f}s")
    summarize(result.data)
    print(f"\nBundle written to {config.output.bundle_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
