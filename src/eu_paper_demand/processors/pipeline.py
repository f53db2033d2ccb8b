"""
Paper demand cleaning pipeline.

This module runs the cleaning workflow end to end: load the FAOSTAT, World
Bank and EU reference tables, select EU countries, normalize exchange rates,
chain deflators, compute GDP in constant USD, apparent consumption and real
prices, reshape trade to long format, aggregate over the EU and save the
cleaned tables.
"""

from typing import Any, Dict, Optional, Union
from pathlib import Path
from datetime import datetime

import pandas as pd

from .base import DataProcessor, ProcessingResult
from .currency import EuroExchangeRateNormalizer, countries_missing_exchange_rate
from .deflator import DeflatorChainer, numeraire_deflator
from .derived import PaperQuantityCalculator, gdp_constant_usd
from .reshape import TradeReshaper
from ..config import CleaningConfig
from ..data_sources import DataSourceManager
from ..exporters import TableExporter
from ..models import (
    COUNTRY, FAOST_CODE, GDP_CONSTANT_USD, ISO2_WB_CODE, ITEM,
    PAPER_PRODUCTS_COLUMNS, YEAR,
)
from ..utils.validation import ValidationResult


RAW_DATASETS = ["paper", "macro", "countries"]
BUNDLE_TABLES = ["paper_products", "paper_trade", "macro"]


class PaperDemandPipeline(DataProcessor):
    """
    Main cleaning pipeline orchestrator.

    The pipeline loads its own data through a DataSourceManager unless a
    dictionary of raw tables (``"paper"``, ``"macro"``, ``"countries"``) is
    passed to :meth:`process`.
    """

    def __init__(
        self,
        config: Optional[CleaningConfig] = None,
        data_source_manager: Optional[DataSourceManager] = None,
        name: Optional[str] = None
    ):
        """
        Initialize cleaning pipeline.

        Args:
            config: Cleaning configuration (defaults to ``CleaningConfig()``)
            data_source_manager: Data source manager (will create if None)
            name: Pipeline name
        """
        super().__init__(name or "PaperDemandPipeline")
        self.config = config or CleaningConfig()

        if data_source_manager:
            self.data_source_manager = data_source_manager
        else:
            self.data_source_manager = DataSourceManager.from_config(self.config)

        self._initialize_processors()

        self._intermediate_results: Dict[str, Any] = {}

    def _initialize_processors(self) -> None:
        """Initialize all data processors."""
        processing = self.config.processing

        self.exchange_rate_normalizer = EuroExchangeRateNormalizer(
            euro_area_name=processing.euro_area_name,
            euro_area_start_year=processing.euro_area_start_year,
            missing_rate_after=processing.euro_missing_rate_after
        )

        self.deflator_chainer = DeflatorChainer(base_year=processing.base_year)

        self.quantity_calculator = PaperQuantityCalculator(
            price_scale=processing.price_scale,
            zero_fill_missing=processing.zero_fill_missing
        )

        self.trade_reshaper = TradeReshaper()

    def process(
        self,
        data: Union[pd.DataFrame, Dict[str, pd.DataFrame], None] = None,
        parameters: Optional[Dict[str, Any]] = None
    ) -> ProcessingResult:
        """
        Run the cleaning steps.

        Args:
            data: Raw tables, or None/empty to load them from the data sources
            parameters: Pipeline parameters (recorded in the metadata)

        Returns:
            ProcessingResult with ``paper_products``, ``paper_trade``,
            ``macro`` and ``eu_aggregate`` tables
        """
        operation_id = self._generate_operation_id()
        self.logger.info(f"Starting cleaning pipeline {operation_id}")

        if isinstance(data, dict) and data:
            raw_data = data
        else:
            raw_data = self._step_1_load_raw_data()

        eu_data = self._step_2_select_eu(raw_data)
        macro = self._step_3_clean_macro(eu_data, raw_data["macro"])
        numeraire = self._step_4_numeraire_deflator(raw_data["macro"])
        paper = self._step_5_paper_quantities(eu_data["paper"], macro, numeraire)
        reshaped = self._step_6_reshape(paper)

        final_data = {
            "paper_products": self._final_paper_products(paper),
            "paper_trade": reshaped["trade"],
            "macro": macro,
            "eu_aggregate": reshaped["aggregate"],
        }

        self.logger.info(f"Cleaning pipeline {operation_id} completed successfully")
        return self._make_result(final_data, parameters)

    def _step_1_load_raw_data(self) -> Dict[str, pd.DataFrame]:
        """Step 1: Load the three raw tables."""
        self.logger.info("Step 1: Loading raw data")

        with self.data_source_manager as sources:
            raw_data = {
                "paper": sources.paper.load(),
                "macro": sources.macro.load(),
                "countries": sources.countries.load(),
            }

        self._intermediate_results["raw_data"] = raw_data
        return raw_data

    def _step_2_select_eu(self, raw_data: Dict[str, pd.DataFrame]) -> Dict[str, pd.DataFrame]:
        """Step 2: Keep EU countries in the paper and macro tables."""
        self.logger.info("Step 2: Selecting EU countries")

        countries = raw_data["countries"]
        paper = raw_data["paper"]
        macro = raw_data["macro"]

        eu_data = {
            "countries": countries,
            "paper": paper[paper[FAOST_CODE].isin(countries[FAOST_CODE])].reset_index(drop=True),
            "macro": macro[macro[ISO2_WB_CODE].isin(countries[ISO2_WB_CODE])].reset_index(drop=True),
        }

        self.logger.info(
            f"Step 2 completed: {len(eu_data['paper'])} paper rows, "
            f"{len(eu_data['macro'])} macro rows for {len(countries)} countries"
        )
        return eu_data

    def _step_3_clean_macro(
        self,
        eu_data: Dict[str, pd.DataFrame],
        reference: pd.DataFrame
    ) -> pd.DataFrame:
        """
        Step 3: Euro exchange rates, chained deflator and GDP in constant USD.
        """
        self.logger.info("Step 3: Cleaning macro data")
        base_year = self.config.processing.base_year

        missing = countries_missing_exchange_rate(
            eu_data["macro"], self.config.processing.exchange_rate_check_year
        )
        if missing:
            self.logger.info(
                f"No exchange rate in {self.config.processing.exchange_rate_check_year} "
                f"for {missing}"
            )

        normalized = self.exchange_rate_normalizer.process_with_validation(
            {"macro": eu_data["macro"], "countries": eu_data["countries"], "reference": reference}
        )

        chained = self.deflator_chainer.process_with_validation(
            normalized.data, {"base_year": base_year}
        )

        macro = chained.data
        macro[GDP_CONSTANT_USD] = gdp_constant_usd(macro, base_year)
        macro = macro.sort_values([COUNTRY, YEAR]).reset_index(drop=True)

        self._intermediate_results["macro"] = macro
        return macro

    def _step_4_numeraire_deflator(self, reference: pd.DataFrame) -> pd.DataFrame:
        """Step 4: Chained deflator of the numeraire country."""
        processing = self.config.processing
        self.logger.info(f"Step 4: Chaining the {processing.numeraire_country} deflator")

        return numeraire_deflator(reference, processing.base_year, processing.numeraire_country)

    def _step_5_paper_quantities(
        self,
        paper: pd.DataFrame,
        macro: pd.DataFrame,
        numeraire: pd.DataFrame
    ) -> pd.DataFrame:
        """Step 5: Apparent consumption, GDP and prices on the paper table."""
        self.logger.info("Step 5: Computing consumption and prices")

        result = self.quantity_calculator.process_with_validation(
            {"paper": paper, "macro": macro, "numeraire": numeraire}
        )

        self._intermediate_results["paper"] = result.data
        return result.data

    def _step_6_reshape(self, paper: pd.DataFrame) -> Dict[str, pd.DataFrame]:
        """Step 6: Long trade table and EU aggregate."""
        self.logger.info("Step 6: Reshaping trade and aggregating over the EU")

        result = self.trade_reshaper.process_with_validation(paper)
        return result.data

    def _final_paper_products(self, paper: pd.DataFrame) -> pd.DataFrame:
        """Keep consumption, prices and GDP, sorted by item, country and year."""
        return (
            paper[PAPER_PRODUCTS_COLUMNS]
            .sort_values([ITEM, COUNTRY, YEAR])
            .reset_index(drop=True)
        )

    def validate_output(
        self,
        data: Union[pd.DataFrame, Dict[str, pd.DataFrame]],
        parameters: Optional[Dict[str, Any]] = None
    ) -> ValidationResult:
        """Check that every bundle table was produced."""
        result = super().validate_output(data, parameters)

        for table in BUNDLE_TABLES:
            if table not in data:
                result.add_error(f"Table '{table}' was not produced")

        return result

    def save(self, result: ProcessingResult) -> Path:
        """
        Save the bundle, and the individual tables if configured.

        Returns:
            Path of the bundle
        """
        output = self.config.output
        exporter = TableExporter(output.output_directory)

        bundle = {name: result.data[name] for name in BUNDLE_TABLES}
        bundle_path = exporter.export_bundle(bundle, output.bundle_file)

        if output.export_tables:
            exporter.export_tables(result.data, output.output_formats)

        return bundle_path

    def run(self, data: Optional[Dict[str, pd.DataFrame]] = None, save: bool = True) -> ProcessingResult:
        """
        Run the complete cleaning pipeline.

        This is the main entry point for the one-off cleaning run.

        Args:
            data: Raw tables; loaded from the configured files when None
            save: Whether to write the output bundle

        Returns:
            ProcessingResult with the cleaned tables
        """
        result = self.process_with_validation(
            data=data if data is not None else {},
            parameters={"started": datetime.now().isoformat()},
            validate_input=data is not None,
            validate_output=True
        )

        if save:
            self.save(result)

        return result

    def get_pipeline_status(self) -> Dict[str, Any]:
        """Get current pipeline status and intermediate results."""
        return {
            "config": self.config.model_dump(mode="json"),
            "data_sources": self.data_source_manager.get_status(),
            "intermediate_results_available": list(self._intermediate_results.keys()),
            "processors": {
                "exchange_rate_normalizer": self.exchange_rate_normalizer.get_info(),
                "deflator_chainer": self.deflator_chainer.get_info(),
                "quantity_calculator": self.quantity_calculator.get_info(),
                "trade_reshaper": self.trade_reshaper.get_info(),
            }
        }

    def validate_input(
        self,
        data: Union[pd.DataFrame, Dict[str, pd.DataFrame]],
        parameters: Optional[Dict[str, Any]] = None
    ) -> ValidationResult:
        """Validate raw tables passed in directly."""
        result = super().validate_input(data, parameters)

        if isinstance(data, dict):
            for dataset in RAW_DATASETS:
                if dataset not in data:
                    result.add_error(f"Dataset '{dataset}' is required")

        return result
