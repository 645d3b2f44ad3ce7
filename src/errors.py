from enum import Enum
from typing import Optional


class LedgerErrorKind(Enum):
    INVALID_AMOUNT = "invalid_amount"
    ACCOUNT_LOCKED = "account_locked"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    DUPLICATE_TRANSACTION_ID = "duplicate_transaction_id"
    ACCOUNT_NOT_FOUND = "account_not_found"
    TRANSACTION_NOT_FOUND = "transaction_not_found"
    CLIENT_MISMATCH = "client_mismatch"
    CANNOT_DISPUTE_WITHDRAWAL = "cannot_dispute_withdrawal"
    ALREADY_DISPUTED = "already_disputed"
    NOT_DISPUTED = "not_disputed"
    ALREADY_CHARGED_BACK = "already_charged_back"


class LedgerError(Exception):
    """
    Base exception for a rejected transaction.

    A rejection leaves the ledger exactly as it was before the attempt.
    """

    kind: LedgerErrorKind

    def __init__(self, message: str, client_id: Optional[int] = None, transaction_id: Optional[int] = None):
        super().__init__(message)
        self.client_id = client_id
        self.transaction_id = transaction_id


class InvalidAmountError(LedgerError):
    """Raised when a deposit or withdrawal amount is not strictly positive."""
    kind = LedgerErrorKind.INVALID_AMOUNT


class AccountLockedError(LedgerError):
    """Raised when a deposit or withdrawal targets a locked account."""
    kind = LedgerErrorKind.ACCOUNT_LOCKED


class InsufficientFundsError(LedgerError):
    """Raised when a withdrawal exceeds the available balance."""
    kind = LedgerErrorKind.INSUFFICIENT_FUNDS


class DuplicateTransactionIdError(LedgerError):
    """Raised when a transaction id has already been recorded."""
    kind = LedgerErrorKind.DUPLICATE_TRANSACTION_ID


class AccountNotFoundError(LedgerError):
    kind = LedgerErrorKind.ACCOUNT_NOT_FOUND


class TransactionNotFoundError(LedgerError):
    kind = LedgerErrorKind.TRANSACTION_NOT_FOUND


class ClientMismatchError(LedgerError):
    """Raised when a dispute names a client other than the one that owns the transaction."""
    kind = LedgerErrorKind.CLIENT_MISMATCH


class CannotDisputeWithdrawalError(LedgerError):
    kind = LedgerErrorKind.CANNOT_DISPUTE_WITHDRAWAL


class AlreadyDisputedError(LedgerError):
    kind = LedgerErrorKind.ALREADY_DISPUTED


class NotDisputedError(LedgerError):
    kind = LedgerErrorKind.NOT_DISPUTED


class AlreadyChargedBackError(LedgerError):
    kind = LedgerErrorKind.ALREADY_CHARGED_BACK


class FatalLedgerError(Exception):
    """A ledger rejection that the configured error policy treats as fatal."""

    def __init__(self, cause: LedgerError):
        super().__init__(f"{cause.kind.value}: {cause}")
        self.cause = cause


class TransactionFormatError(Exception):
    """Raised when the transaction source contains a row that cannot be decoded."""

    def __init__(self, message: str, line_number: Optional[int] = None):
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
        self.line_number = line_number


class MalformedRowError(TransactionFormatError):
    pass


class AmountNotSpecifiedError(TransactionFormatError):
    pass


class AmountUnexpectedError(TransactionFormatError):
    pass
