"""Derivation of vacuum status signals from raw status values.

Nothing here holds state: every signal is recomputed from the latest raw
``state`` and ``error_code`` values, so the functions can be tested without
any I/O.
"""

from dataclasses import dataclass

from .constants import CLEANING_LABELS, STATE_LABELS
from .models import CHARGER_OFFLINE, CHARGING_ERROR, ErrorInfo


@dataclass(frozen=True)
class DerivedStatus:
    """Semantic label and the signals derived from it."""

    label: str
    charging: bool
    cleaning: bool
    error: ErrorInfo | None


def state_label(code: int) -> str:
    """Map a raw state code to its semantic label."""
    return STATE_LABELS.get(code, f"unknown-{code}")


def map_error_code(code: int) -> ErrorInfo | None:
    """Map a raw error_code to an ErrorInfo, or None when code is 0."""
    if code == 0:
        return None
    return ErrorInfo(code=code, message=f"Unknown error {code}")


def error_for_label(label: str, current_error: ErrorInfo | None) -> ErrorInfo | None:
    """Resolve the error signal for ``label``.

    Args:
        label: Semantic state label
        current_error: Current value of the mapped ``error`` property

    Returns:
        The error to publish, or None to clear the signal
    """
    if label == "error":
        return current_error
    if label == "charging-error":
        return CHARGING_ERROR
    if label == "charger-offline":
        return CHARGER_OFFLINE
    return None


def derive_status(label: str, current_error: ErrorInfo | None = None) -> DerivedStatus:
    """Compute charging, cleaning and error signals for a semantic label."""
    return DerivedStatus(
        label=label,
        charging=label == "charging",
        cleaning=label in CLEANING_LABELS,
        error=error_for_label(label, current_error),
    )


def derive_from_raw(state_code: int, error_code: int = 0) -> DerivedStatus:
    """Convenience wrapper taking raw ``state`` and ``error_code`` values."""
    return derive_status(state_label(state_code), map_error_code(error_code))
