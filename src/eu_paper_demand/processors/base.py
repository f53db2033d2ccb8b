"""
Base classes for data processors.

This module defines the common interface and functionality for all data
processors, so the pipeline can run its stages the same way and keep a
history of what each stage did.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union

import pandas as pd
from pydantic import BaseModel, ConfigDict

from ..utils.logging import get_logger
from ..utils.validation import ValidationResult

logger = get_logger(__name__)


class ProcessingStatus(str, Enum):
    """Status of a processing operation."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class ProcessingMetadata:
    """Metadata for processing operations."""
    processor_name: str
    operation_id: str
    parameters: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)
    execution_time: Optional[float] = None
    rows_processed: Optional[int] = None
    error_message: Optional[str] = None


class ProcessingResult(BaseModel):
    """
    Result of a data processing operation.

    Attributes:
        data: Processed data as DataFrame or dictionary of DataFrames
        metadata: Processing metadata
        status: Processing status
        validation: Data validation results
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    data: Union[pd.DataFrame, Dict[str, pd.DataFrame]]
    metadata: ProcessingMetadata
    status: ProcessingStatus = ProcessingStatus.COMPLETED
    validation: Optional[ValidationResult] = None

    @property
    def is_success(self) -> bool:
        """Check if processing was successful."""
        return self.status == ProcessingStatus.COMPLETED

    @property
    def has_validation_errors(self) -> bool:
        """Check if there are validation errors."""
        return self.validation is not None and not self.validation.is_valid


class ProcessingError(Exception):
    """Base exception for processing errors."""

    def __init__(
        self,
        message: str,
        processor_name: Optional[str] = None,
        operation_id: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        """Initialize processing error."""
        super().__init__(message)
        self.processor_name = processor_name
        self.operation_id = operation_id
        self.original_error = original_error
        self.timestamp = datetime.now()


class IntegrityError(ProcessingError):
    """A table lost or gained rows where its size must be conserved."""
    pass


class DataProcessor(ABC):
    """
    Abstract base class for all data processors.

    This class defines the common interface that all data processors must
    implement, ensuring consistency across the pipeline stages.
    """

    def __init__(self, name: Optional[str] = None):
        """
        Initialize data processor.

        Args:
            name: Processor name (defaults to class name)
        """
        self.name = name or self.__class__.__name__
        self.logger = get_logger(f"{__name__}.{self.name}")
        self._processing_history: List[ProcessingMetadata] = []

    @abstractmethod
    def process(
        self,
        data: Union[pd.DataFrame, Dict[str, pd.DataFrame]],
        parameters: Optional[Dict[str, Any]] = None
    ) -> ProcessingResult:
        """
        Process data according to the processor's logic.

        Args:
            data: Input data to process
            parameters: Processing parameters

        Returns:
            ProcessingResult with processed data and metadata
        """
        pass

    def process_with_validation(
        self,
        data: Union[pd.DataFrame, Dict[str, pd.DataFrame]],
        parameters: Optional[Dict[str, Any]] = None,
        validate_input: bool = True,
        validate_output: bool = True
    ) -> ProcessingResult:
        """
        Process data with optional input/output validation.

        Processing errors raised by ``process`` propagate unchanged; any other
        exception is wrapped in a ProcessingError.

        Args:
            data: Input data to process
            parameters: Processing parameters
            validate_input: Whether to validate input data
            validate_output: Whether to validate output data

        Returns:
            ProcessingResult with validation information
        """
        operation_id = self._generate_operation_id()
        start_time = time.time()

        metadata = ProcessingMetadata(
            processor_name=self.name,
            operation_id=operation_id,
            parameters=parameters or {}
        )

        try:
            self.logger.info(f"Starting processing operation {operation_id}")

            if validate_input:
                input_validation = self.validate_input(data, parameters)
                if not input_validation.is_valid:
                    raise ProcessingError(
                        f"Input validation failed: {input_validation.errors}",
                        self.name,
                        operation_id
                    )
                for warning in input_validation.warnings:
                    self.logger.warning(warning)

            result = self.process(data, parameters)

            execution_time = time.time() - start_time
            metadata.execution_time = execution_time
            metadata.rows_processed = _count_rows(result.data)
            result.metadata = metadata

            if validate_output:
                output_validation = self.validate_output(result.data, parameters)
                if result.validation is not None:
                    output_validation = result.validation.merge(output_validation)
                result.validation = output_validation

                if not output_validation.is_valid:
                    result.status = ProcessingStatus.FAILED
                    self.logger.warning(
                        f"Output validation failed for {operation_id}: {output_validation.errors}"
                    )

            self._processing_history.append(metadata)

            self.logger.info(
                f"Processing operation {operation_id} completed in {execution_time:.2f}s "
                f"({metadata.rows_processed} rows)"
            )

            return result

        except ProcessingError as e:
            metadata.execution_time = time.time() - start_time
            metadata.error_message = str(e)
            self._processing_history.append(metadata)

            self.logger.error(f"Processing operation {operation_id} failed: {e}")
            raise

        except Exception as e:
            metadata.execution_time = time.time() - start_time
            metadata.error_message = str(e)
            self._processing_history.append(metadata)

            self.logger.error(f"Processing operation {operation_id} failed: {e}")

            raise ProcessingError(
                f"Processing failed: {e}",
                self.name,
                operation_id,
                e
            ) from e

    def validate_input(
        self,
        data: Union[pd.DataFrame, Dict[str, pd.DataFrame]],
        parameters: Optional[Dict[str, Any]] = None
    ) -> ValidationResult:
        """
        Validate input data.

        Args:
            data: Input data to validate
            parameters: Processing parameters

        Returns:
            ValidationResult
        """
        result = ValidationResult(is_valid=True)

        if isinstance(data, pd.DataFrame):
            if data.empty:
                result.add_error("Input DataFrame is empty")
        elif isinstance(data, dict):
            if not data:
                result.add_error("Input data dictionary is empty")

            for name, df in data.items():
                if not isinstance(df, pd.DataFrame):
                    result.add_error(f"Dataset '{name}' is not a DataFrame")
                elif df.empty:
                    result.add_warning(f"Dataset '{name}' is empty")
        else:
            result.add_error(f"Unsupported data type: {type(data)}")

        return result

    def validate_output(
        self,
        data: Union[pd.DataFrame, Dict[str, pd.DataFrame]],
        parameters: Optional[Dict[str, Any]] = None
    ) -> ValidationResult:
        """
        Validate output data.

        Args:
            data: Output data to validate
            parameters: Processing parameters

        Returns:
            ValidationResult
        """
        return DataProcessor.validate_input(self, data, parameters)

    def get_processing_history(self) -> List[ProcessingMetadata]:
        """Get processing operation history."""
        return self._processing_history.copy()

    def clear_history(self) -> None:
        """Clear processing history."""
        self._processing_history.clear()

    def get_info(self) -> Dict[str, Any]:
        """Get processor information."""
        return {
            "name": self.name,
            "class": self.__class__.__name__,
            "total_operations": len(self._processing_history),
            "successful_operations": sum(
                1 for m in self._processing_history if m.error_message is None
            ),
            "failed_operations": sum(
                1 for m in self._processing_history if m.error_message is not None
            )
        }

    def _make_result(
        self,
        data: Union[pd.DataFrame, Dict[str, pd.DataFrame]],
        parameters: Optional[Dict[str, Any]] = None,
        validation: Optional[ValidationResult] = None
    ) -> ProcessingResult:
        """Wrap processed data in a completed ProcessingResult."""
        metadata = ProcessingMetadata(
            processor_name=self.name,
            operation_id=self._generate_operation_id(),
            parameters=parameters or {}
        )

        return ProcessingResult(
            data=data,
            metadata=metadata,
            status=ProcessingStatus.COMPLETED,
            validation=validation
        )

    def _generate_operation_id(self) -> str:
        """Generate unique operation identifier."""
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
        return f"{self.name}_{timestamp}"

    def __repr__(self) -> str:
        """String representation."""
        return f"{self.__class__.__name__}(name='{self.name}')"


def _count_rows(data: Union[pd.DataFrame, Dict[str, pd.DataFrame]]) -> Optional[int]:
    if isinstance(data, pd.DataFrame):
        return len(data)
    if isinstance(data, dict):
        return sum(len(df) for df in data.values() if isinstance(df, pd.DataFrame))
    return None
