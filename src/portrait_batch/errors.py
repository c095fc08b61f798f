"""Error hierarchy for portrait-batch.

Errors fall into three tiers:
- Fatal setup errors (output directory collisions, unreadable working
  directory) abort the whole run
- Skippable file errors drop a single source file from the batch
- Job failures are not exceptions at all; they come back as a failed
  ``JobResult`` from the FFmpeg runner
"""

from __future__ import annotations

from enum import Enum


class ErrorCategory(str, Enum):
    """Categories of errors for handling decisions."""

    VALIDATION = "validation"  # Bad input for one file - skip it
    CONFIGURATION = "configuration"  # Output layout unusable - abort
    RESOURCE = "resource"  # Filesystem resource unavailable - abort
    INTERNAL = "internal"  # Bug in code


class PortraitBatchError(Exception):
    """Base exception for portrait-batch errors.

    Attributes:
        message: Human-readable error message
        category: Error category for handling
        context: Additional context information
        fatal: Whether the error must stop the whole batch
    """

    category: ErrorCategory = ErrorCategory.INTERNAL
    fatal: bool = True

    def __init__(self, message: str, context: dict | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            return f"{self.message} (context: {self.context})"
        return self.message


class ConfigurationError(PortraitBatchError):
    """Output layout cannot be used.

    Examples: an output directory path is occupied by a regular file.
    """

    category = ErrorCategory.CONFIGURATION


class ResourceError(PortraitBatchError):
    """Filesystem resource unavailable.

    Examples: output directory cannot be created, working directory
    cannot be listed.
    """

    category = ErrorCategory.RESOURCE


class NameDerivationError(PortraitBatchError):
    """A usable base name could not be derived for a source file.

    Only the offending file is skipped; the batch continues.
    """

    category = ErrorCategory.VALIDATION
    fatal = False


def format_error_for_display(error: Exception) -> str:
    """Format an error message for user display.

    Args:
        error: Error to format

    Returns:
        Human-readable error message
    """
    if isinstance(error, PortraitBatchError):
        category = error.category.value
        base_message = error.message

        if error.context:
            context_str = ", ".join(f"{k}={v}" for k, v in error.context.items())
            return f"[{category}] {base_message} ({context_str})"

        return f"[{category}] {base_message}"

    return f"[error] {type(error).__name__}: {error}"
