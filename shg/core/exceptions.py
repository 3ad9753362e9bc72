"""Error taxonomy shared by the ledger services.

ValidationError   - input rejected before anything is written.
NotFoundError     - a referenced member/transaction does not exist.
StoreError        - the database read or write itself failed.
DataIntegrityWarning - stored data is inconsistent but computation can go on.
"""
import logging
import warnings


class ValidationError(Exception):
    """Raised when an operation is rejected before any write."""
    pass


class NotFoundError(ValidationError):
    """Raised when a referenced record does not exist."""
    pass


class StoreError(Exception):
    """Raised when the underlying store fails to read or write.

    Financial writes are never retried automatically.
    """
    pass


class DataIntegrityWarning(UserWarning):
    """Orphaned repayment, unknown member reference and similar anomalies."""
    pass


def report_integrity_issue(logger: logging.Logger, message: str) -> None:
    """Log an integrity anomaly and emit it as a DataIntegrityWarning."""
    logger.warning(message)
    warnings.warn(message, DataIntegrityWarning, stacklevel=3)
