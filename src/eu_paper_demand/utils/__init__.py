"""
Utility modules for the EU paper demand cleaning pipeline.
"""

from .logging import setup_logging, get_logger
from .validation import DataValidator, ValidationResult, check_row_count

__all__ = [
    "setup_logging",
    "get_logger",
    "DataValidator",
    "ValidationResult",
    "check_row_count",
]
