"""
app/validators package marker.
"""

from app.validators.csv_validator import (
    CSVRowValidator,
    canonical_month,
    is_completely_empty_row,
    parse_decimal,
    parse_int,
)
from app.validators.duplicate_detector import DuplicateDetector, duplicate_key

__all__ = [
    "CSVRowValidator",
    "DuplicateDetector",
    "canonical_month",
    "duplicate_key",
    "is_completely_empty_row",
    "parse_decimal",
    "parse_int",
]
