from typing import Dict, List, Optional, Protocol

from errors import DuplicateTransactionIdError
from models import ClientAccount, StandardTransaction


class LedgerStore(Protocol):
    """
    Keyed storage for client accounts and recorded deposits/withdrawals.
    Holds no business rules; LedgerEngine decides what may be written.
    """

    def get_or_create_account(self, client_id: int) -> ClientAccount:
        ...

    def get_account(self, client_id: int) -> Optional[ClientAccount]:
        ...

    def insert_transaction(self, transaction: StandardTransaction) -> None:
        """Record a transaction. Raises DuplicateTransactionIdError if the id is taken."""
        ...

    def get_transaction(self, transaction_id: int) -> Optional[StandardTransaction]:
        """Return the stored transaction itself, so its dispute status can be updated in place."""
        ...

    def all_accounts(self) -> List[ClientAccount]:
        ...


class InMemoryLedgerStore:
    """
    Dict-backed LedgerStore.
    Stores client accounts and transaction history for dispute lookups.
    """

    def __init__(self):
        self._accounts: Dict[int, ClientAccount] = {}
        self._transactions: Dict[int, StandardTransaction] = {}

    def get_or_create_account(self, client_id: int) -> ClientAccount:
        """Get existing account or create new one."""
        if client_id not in self._accounts:
            self._accounts[client_id] = ClientAccount(client_id=client_id)
        return self._accounts[client_id]

    def get_account(self, client_id: int) -> Optional[ClientAccount]:
        return self._accounts.get(client_id)

    def insert_transaction(self, transaction: StandardTransaction) -> None:
        """Store transaction for future dispute lookups."""
        if transaction.transaction_id in self._transactions:
            raise DuplicateTransactionIdError(
                f"Duplicate transaction id: {transaction.transaction_id}",
                client_id=transaction.client_id,
                transaction_id=transaction.transaction_id,
            )
        self._transactions[transaction.transaction_id] = transaction

    def get_transaction(self, transaction_id: int) -> Optional[StandardTransaction]:
        """Retrieve stored transaction by ID."""
        return self._transactions.get(transaction_id)

    def all_accounts(self) -> List[ClientAccount]:
        """Return all accounts (for final output)."""
        return list(self._accounts.values())
