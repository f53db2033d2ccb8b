"""
Data validation utilities for ensuring data quality and consistency.

This module provides the validation result container shared by data sources
and processors, and the row-count checks that guard the pipeline's reshapes
and recombinations.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Type

import pandas as pd


@dataclass
class ValidationResult:
    """
    Result of a data validation check.

    Attributes:
        is_valid: Whether validation passed
        errors: List of error messages
        warnings: List of warning messages
        details: Additional validation details
    """
    is_valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    details: Dict[str, Any] = field(default_factory=dict)

    def add_error(self, message: str) -> None:
        """Add an error message."""
        self.errors.append(message)
        self.is_valid = False

    def add_warning(self, message: str) -> None:
        """Add a warning message."""
        self.warnings.append(message)

    def add_detail(self, key: str, value: Any) -> None:
        """Add a detail."""
        self.details[key] = value

    def merge(self, other: ValidationResult) -> ValidationResult:
        """Fold another result into this one."""
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)
        self.details.update(other.details)
        if not other.is_valid:
            self.is_valid = False
        return self


class DataValidator:
    """
    Validator for the tabular datasets flowing through the pipeline.

    Each method returns a ValidationResult rather than raising, so callers
    decide whether a failed check is fatal.
    """

    def validate_required_columns(
        self,
        data: pd.DataFrame,
        required: Iterable[str],
        name: str = "dataset"
    ) -> ValidationResult:
        """Check that all required columns are present."""
        result = ValidationResult(is_valid=True)

        missing = [col for col in required if col not in data.columns]
        if missing:
            result.add_error(f"{name}: Missing columns: {missing}")

        result.add_detail("columns", len(data.columns))
        return result

    def validate_unique_keys(
        self,
        data: pd.DataFrame,
        keys: List[str],
        name: str = "dataset"
    ) -> ValidationResult:
        """Check that the key columns identify rows uniquely."""
        result = ValidationResult(is_valid=True)

        duplicated = data.duplicated(subset=keys, keep=False)
        n_duplicated = int(duplicated.sum())
        if n_duplicated:
            result.add_error(f"{name}: {n_duplicated} rows share a {keys} key")

        result.add_detail("duplicated_keys", n_duplicated)
        return result

    def validate_row_count(
        self,
        actual: int,
        expected: int,
        name: str = "dataset"
    ) -> ValidationResult:
        """Compare a row count with its expected value."""
        result = ValidationResult(is_valid=True)

        if actual != expected:
            result.add_error(f"{name}: Expected {expected} rows, found {actual}")

        result.add_detail("rows", actual)
        result.add_detail("expected_rows", expected)
        return result

    def validate_missing_values(
        self,
        data: pd.DataFrame,
        columns: Optional[List[str]] = None,
        name: str = "dataset"
    ) -> ValidationResult:
        """
        Report missing values.

        Missing values are expected in raw FAOSTAT and World Bank tables, so
        they only produce warnings.
        """
        result = ValidationResult(is_valid=True)

        subset = data[columns] if columns else data
        missing_by_column = subset.isna().sum()
        total_missing = int(missing_by_column.sum())

        result.add_detail("missing_values", total_missing)
        if total_missing:
            columns_with_missing = missing_by_column[missing_by_column > 0].to_dict()
            result.add_warning(f"{name}: Missing values by column: {columns_with_missing}")

        return result


def check_row_count(
    actual: int,
    expected: int,
    name: str,
    error_class: Type[Exception]
) -> None:
    """
    Raise ``error_class`` when a row count differs from its expected value.

    Args:
        actual: Observed number of rows
        expected: Required number of rows
        name: Name of the checked table for the error message
        error_class: Exception type to raise on mismatch
    """
    result = DataValidator().validate_row_count(actual, expected, name)
    if not result.is_valid:
        raise error_class(result.errors[0])
