"""
Configuration management for the EU paper demand cleaning pipeline.

This module provides configuration management using pydantic-settings for
validation, type checking, and environment variable integration. Defaults
reproduce the fixed paths and constants of the cleaning run.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Union

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class InputConfig(BaseSettings):
    """Locations of the raw datasets."""

    raw_directory: Path = Field(
        default=Path("./rawdata"),
        description="Directory holding the raw datasets"
    )

    paper_file: str = Field(
        default="paper_and_paperboard.pkl",
        description="FAOSTAT paper and paperboard production and trade table"
    )

    macro_file: str = Field(
        default="gdp_deflator_exchange_rate_population.pkl",
        description="World Bank GDP, deflator, exchange rate and population table"
    )

    countries_file: str = Field(
        default="EUCountries.csv",
        description="EU country reference table"
    )

    model_config = SettingsConfigDict(env_prefix="INPUT_")

    @property
    def paper_path(self) -> Path:
        return self.raw_directory / self.paper_file

    @property
    def macro_path(self) -> Path:
        return self.raw_directory / self.macro_file

    @property
    def countries_path(self) -> Path:
        return self.raw_directory / self.countries_file


class ProcessingConfig(BaseSettings):
    """Configuration for data processing parameters."""

    base_year: int = Field(
        default=2010,
        ge=1960,
        le=2100,
        description="Base year for constant GDP and the price deflator"
    )

    euro_area_name: str = Field(
        default="Euro area",
        description="World Bank aggregate carrying the Euro to USD rate"
    )

    euro_area_start_year: int = Field(
        default=1999,
        description="First year of the Euro area exchange rate"
    )

    euro_missing_rate_after: int = Field(
        default=1993,
        description="Missing exchange rates of Euro members after this year mark Euro use"
    )

    numeraire_country: str = Field(
        default="United States",
        description="Country whose deflator converts prices to constant USD"
    )

    price_scale: float = Field(
        default=1000.0,
        gt=0,
        description="Multiplier applied to deflated unit values"
    )

    zero_fill_missing: bool = Field(
        default=True,
        description="Treat missing production and trade values as zero"
    )

    exchange_rate_check_year: int = Field(
        default=2005,
        description="Year used to report countries without an exchange rate"
    )

    model_config = SettingsConfigDict(env_prefix="PROC_")


class OutputConfig(BaseSettings):
    """Configuration for output generation."""

    output_directory: Path = Field(
        default=Path("./enddata"),
        description="Directory for output files"
    )

    bundle_file: str = Field(
        default="EU27 paper products demand.pkl",
        description="Bundle holding the cleaned tables"
    )

    export_tables: bool = Field(
        default=False,
        description="Also write each table to its own file"
    )

    output_formats: List[str] = Field(
        default=["csv"],
        description="Formats of the per-table files"
    )

    model_config = SettingsConfigDict(env_prefix="OUTPUT_")

    @field_validator("output_formats")
    @classmethod
    def validate_output_formats(cls, v):
        """Only csv and parquet tables are written."""
        invalid = set(v) - {"csv", "parquet"}
        if invalid:
            raise ValueError(f"Unsupported output formats: {sorted(invalid)}")
        return v

    @property
    def bundle_path(self) -> Path:
        return self.output_directory / self.bundle_file


class LoggingConfig(BaseSettings):
    """Logging configuration."""

    level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Logging level"
    )

    format: str = Field(
        default="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
        description="Log message format"
    )

    file_path: Optional[Path] = Field(
        default=None,
        description="Path to log file (None for console only)"
    )

    rotation_size: str = Field(
        default="10MB",
        description="Log file rotation size"
    )

    retention_days: int = Field(
        default=30,
        ge=1,
        le=365,
        description="Number of rotated log files to keep"
    )

    model_config = SettingsConfigDict(env_prefix="LOG_")


class CleaningConfig(BaseSettings):
    """
    Main configuration class for the paper demand cleaning pipeline.

    This class aggregates all configuration sections. Every value has a
    default, so a bare ``CleaningConfig()`` describes the standard run.
    """

    project_name: str = Field(
        default="eu-paper-demand",
        description="Project name for identification"
    )

    input: InputConfig = Field(
        default_factory=InputConfig,
        description="Raw dataset locations"
    )

    processing: ProcessingConfig = Field(
        default_factory=ProcessingConfig,
        description="Data processing parameters"
    )

    output: OutputConfig = Field(
        default_factory=OutputConfig,
        description="Output generation settings"
    )

    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging configuration"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    @classmethod
    def from_file(cls, config_path: Union[str, Path]) -> CleaningConfig:
        """Load configuration from a file."""
        config_path = Path(config_path)

        if config_path.suffix.lower() == '.json':
            import json
            with open(config_path, 'r') as f:
                config_data = json.load(f)
        elif config_path.suffix.lower() in ['.yaml', '.yml']:
            import yaml
            with open(config_path, 'r') as f:
                config_data = yaml.safe_load(f)
        else:
            raise ValueError(f"Unsupported config file format: {config_path.suffix}")

        return cls(**config_data)

    def save_to_file(self, config_path: Union[str, Path]) -> None:
        """Save configuration to a file."""
        config_path = Path(config_path)
        config_path.parent.mkdir(parents=True, exist_ok=True)

        if config_path.suffix.lower() == '.json':
            with open(config_path, 'w') as f:
                f.write(self.model_dump_json(indent=2))
        elif config_path.suffix.lower() in ['.yaml', '.yml']:
            import yaml
            with open(config_path, 'w') as f:
                yaml.safe_dump(self.model_dump(mode="json"), f, default_flow_style=False)
        else:
            raise ValueError(f"Unsupported config file format: {config_path.suffix}")


def load_config(
    config_path: Optional[Union[str, Path]] = None,
    **overrides
) -> CleaningConfig:
    """
    Load configuration with optional file and overrides.

    Args:
        config_path: Path to configuration file (optional)
        **overrides: Configuration overrides

    Returns:
        CleaningConfig instance
    """
    if config_path:
        config = CleaningConfig.from_file(config_path)
        if overrides:
            config_dict = config.model_dump()
            config_dict.update(overrides)
            config = CleaningConfig(**config_dict)
        return config
    else:
        return CleaningConfig(**overrides)
