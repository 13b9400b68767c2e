"""
Input validation utilities for the command-line driver.

Checks the arguments that reach the pipeline from outside (file paths,
worker counts, dates) before any data is loaded.
"""

from datetime import date
from pathlib import Path


class ValidationError(ValueError):
    """Raised when input validation fails."""
    pass


def validate_file_path(file_path: str, field_name: str = "file_path", must_exist: bool = False) -> str:
    """
    Validate a file path.

    Args:
        file_path: The file path to validate
        field_name: Name of the field (for error messages)
        must_exist: Whether the file must already exist

    Returns:
        The validated file path (stripped of whitespace)

    Raises:
        ValidationError: If validation fails

    Examples:
        >>> validate_file_path("/data/orders.csv")
        '/data/orders.csv'
        >>> validate_file_path("../../../etc/passwd")  # doctest: +SKIP
        ValidationError: file_path contains path traversal characters
    """
    if not file_path or not isinstance(file_path, str):
        raise ValidationError(f"{field_name} must be a non-empty string")

    file_path = file_path.strip()

    if not file_path:
        raise ValidationError(f"{field_name} cannot be empty or whitespace-only")

    if ".." in file_path:
        raise ValidationError(f"{field_name} contains path traversal characters (..)")

    if "\x00" in file_path:
        raise ValidationError(f"{field_name} contains null bytes")

    if "*" in file_path or "?" in file_path:
        raise ValidationError(f"{field_name} contains wildcards (* or ?)")

    if len(file_path) > 4096:  # Linux PATH_MAX
        raise ValidationError(f"{field_name} exceeds maximum length of 4096 characters")

    if must_exist:
        if not Path(file_path).is_file():
            raise ValidationError(f"{field_name} does not exist: {file_path}")

    return file_path


def validate_workers(workers: int, field_name: str = "workers", max_workers: int = 64) -> int:
    """
    Validate a worker count.

    Raises:
        ValidationError: If not an integer in [1, max_workers]
    """
    if not isinstance(workers, int) or isinstance(workers, bool):
        raise ValidationError(f"{field_name} must be an integer, got {type(workers).__name__}")

    if workers < 1:
        raise ValidationError(f"{field_name} must be a positive integer, got {workers}")

    if workers > max_workers:
        raise ValidationError(f"{field_name} exceeds maximum of {max_workers}")

    return workers


def validate_analysis_date(value: str | None, field_name: str = "analysis_date") -> date | None:
    """
    Parse an ISO date (YYYY-MM-DD); None passes through.

    Raises:
        ValidationError: If the value is not an ISO date
    """
    if value is None:
        return None
    try:
        return date.fromisoformat(value.strip())
    except (AttributeError, ValueError):
        raise ValidationError(f"{field_name} must be an ISO date (YYYY-MM-DD), got {value!r}")
