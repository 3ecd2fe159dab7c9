"""Self-checks for the wardrobe storage and the garment classifier."""

from .checks import CheckOutcome, check_classifier, check_storage, run_all_checks

__all__ = ["CheckOutcome", "check_classifier", "check_storage", "run_all_checks"]
