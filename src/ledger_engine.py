import dataclasses
import threading
from decimal import Context, Decimal, DivisionByZero, Inexact, InvalidOperation, Overflow, localcontext

from errors import (
    AccountLockedError,
    AccountNotFoundError,
    AlreadyChargedBackError,
    AlreadyDisputedError,
    CannotDisputeWithdrawalError,
    ClientMismatchError,
    DuplicateTransactionIdError,
    InsufficientFundsError,
    InvalidAmountError,
    NotDisputedError,
    TransactionNotFoundError,
)
from ledger_store import LedgerStore
from models import (
    ClientAccount,
    DisputeStatus,
    DisputeTransaction,
    StandardTransaction,
    Transaction,
    TransactionType,
)

# Balance arithmetic must be exact; any rounding or overflow rejects the transaction.
BALANCE_CONTEXT = Context(prec=28, traps=[InvalidOperation, DivisionByZero, Overflow, Inexact])


class LedgerEngine:
    """
    Applies transactions one at a time against a LedgerStore.

    apply() either lands every effect of a transaction or raises a LedgerError
    subclass and leaves balances, dispute statuses and locks untouched. All
    checks run before the first mutation.
    """

    def __init__(self, store: LedgerStore):
        self._store = store
        # One boundary around validate+apply; never split between the two phases.
        self._lock = threading.Lock()

    @property
    def store(self) -> LedgerStore:
        return self._store

    def apply(self, transaction: Transaction) -> None:
        with self._lock, localcontext(BALANCE_CONTEXT):
            if isinstance(transaction, StandardTransaction):
                self._apply_standard(transaction)
            else:
                self._apply_dispute_family(transaction)

    def _apply_standard(self, transaction: StandardTransaction) -> None:
        amount = transaction.amount
        if not amount.is_finite() or amount <= Decimal("0"):
            raise InvalidAmountError(
                f"Amount must be positive, got {amount}",
                client_id=transaction.client_id,
                transaction_id=transaction.transaction_id,
            )

        # Checked up front so a duplicate never moves a balance.
        if self._store.get_transaction(transaction.transaction_id) is not None:
            raise DuplicateTransactionIdError(
                f"Duplicate transaction id: {transaction.transaction_id}",
                client_id=transaction.client_id,
                transaction_id=transaction.transaction_id,
            )

        account = self._store.get_or_create_account(transaction.client_id)

        if account.locked:
            raise AccountLockedError(
                f"Account is locked for client id: {transaction.client_id}",
                client_id=transaction.client_id,
                transaction_id=transaction.transaction_id,
            )

        match transaction.transaction_type:
            case TransactionType.DEPOSIT:
                self._check_exact(account, transaction, amount, available_sign=1, held_sign=0)
                self._store.insert_transaction(dataclasses.replace(transaction, dispute_status=None))
                account.credit(amount)
            case TransactionType.WITHDRAWAL:
                if amount > account.available:
                    raise InsufficientFundsError(
                        f"Insufficient funds: available {account.available}, requested {amount}",
                        client_id=transaction.client_id,
                        transaction_id=transaction.transaction_id,
                    )
                self._check_exact(account, transaction, amount, available_sign=-1, held_sign=0)
                self._store.insert_transaction(dataclasses.replace(transaction, dispute_status=None))
                account.debit(amount)
            case _:
                raise ValueError(f"Not a deposit or withdrawal: {transaction.transaction_type.value}")

    def _apply_dispute_family(self, transaction: DisputeTransaction) -> None:
        # Locked accounts still accept disputes, resolves and chargebacks.
        account = self._store.get_account(transaction.client_id)
        if account is None:
            raise AccountNotFoundError(
                f"No account found with client id: {transaction.client_id}",
                client_id=transaction.client_id,
                transaction_id=transaction.transaction_id,
            )

        original = self._store.get_transaction(transaction.transaction_id)
        if original is None:
            raise TransactionNotFoundError(
                f"No transaction found with id: {transaction.transaction_id}",
                client_id=transaction.client_id,
                transaction_id=transaction.transaction_id,
            )

        if original.client_id != transaction.client_id:
            raise ClientMismatchError(
                f"Transaction {transaction.transaction_id} does not belong to client {transaction.client_id}",
                client_id=transaction.client_id,
                transaction_id=transaction.transaction_id,
            )

        # Disputing moves funds from available to held, which only makes sense for deposits.
        if original.transaction_type != TransactionType.DEPOSIT:
            raise CannotDisputeWithdrawalError(
                f"Cannot dispute {original.transaction_type.value} {transaction.transaction_id}",
                client_id=transaction.client_id,
                transaction_id=transaction.transaction_id,
            )

        match transaction.transaction_type:
            case TransactionType.DISPUTE:
                self._handle_dispute(account, original)
            case TransactionType.RESOLVE:
                self._handle_resolve(account, original)
            case TransactionType.CHARGEBACK:
                self._handle_chargeback(account, original)
            case _:
                raise ValueError(f"Not a dispute-family transaction: {transaction.transaction_type.value}")

    def _handle_dispute(self, account: ClientAccount, original: StandardTransaction) -> None:
        if original.dispute_status is not None:
            raise AlreadyDisputedError(
                f"Transaction {original.transaction_id} already disputed",
                client_id=original.client_id,
                transaction_id=original.transaction_id,
            )

        self._check_exact(account, original, original.amount, available_sign=-1, held_sign=1)

        # Available may go negative when the funds were already withdrawn.
        original.dispute_status = DisputeStatus.UNRESOLVED
        account.hold(original.amount)

    def _handle_resolve(self, account: ClientAccount, original: StandardTransaction) -> None:
        self._require_unresolved(original, "resolve")
        self._check_exact(account, original, original.amount, available_sign=1, held_sign=-1)

        original.dispute_status = None
        account.release_hold(original.amount)

    def _handle_chargeback(self, account: ClientAccount, original: StandardTransaction) -> None:
        self._require_unresolved(original, "chargeback")
        self._check_exact(account, original, original.amount, available_sign=0, held_sign=-1)

        original.dispute_status = DisputeStatus.CHARGED_BACK
        account.remove_held(original.amount)
        account.lock()

    @staticmethod
    def _require_unresolved(original: StandardTransaction, action: str) -> None:
        if original.dispute_status is None:
            raise NotDisputedError(
                f"Transaction {original.transaction_id} not disputed, cannot {action}",
                client_id=original.client_id,
                transaction_id=original.transaction_id,
            )
        if original.dispute_status == DisputeStatus.CHARGED_BACK:
            raise AlreadyChargedBackError(
                f"Transaction {original.transaction_id} already charged back, cannot {action}",
                client_id=original.client_id,
                transaction_id=original.transaction_id,
            )

    @staticmethod
    def _check_exact(account: ClientAccount, transaction: Transaction, amount: Decimal, available_sign: int, held_sign: int) -> None:
        """Raise InvalidAmountError if moving amount would round or overflow any balance."""
        try:
            available = account.available + available_sign * amount
            held = account.held + held_sign * amount
            available + held
        except ArithmeticError as e:
            raise InvalidAmountError(
                f"Amount {amount} cannot be applied exactly to client {account.client_id}: {type(e).__name__}",
                client_id=transaction.client_id,
                transaction_id=transaction.transaction_id,
            ) from e
