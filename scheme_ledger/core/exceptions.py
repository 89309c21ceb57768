"""
Error taxonomy for the savings ledger.

Every failure in the ledger core is deterministic for a given input, so there
is no retryable error class: callers either passed bad numbers or loaded a
corrupt record.
"""


class SchemeLedgerError(Exception):
    """Base class for all ledger errors."""

    code = "scheme_ledger_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInputError(SchemeLedgerError):
    """A numeric or structural precondition on caller input was violated."""

    code = "invalid_input"


class InvalidEnrollmentError(SchemeLedgerError):
    """An enrollment record is internally inconsistent (e.g. tenure <= 0)."""

    code = "invalid_enrollment"
