import logging
from typing import Dict, Iterable, Optional

from config import EngineConfig
from csv_transactions import read_transactions
from errors import FatalLedgerError, LedgerError
from ledger_engine import LedgerEngine
from ledger_store import InMemoryLedgerStore, LedgerStore
from models import ClientAccount, ProcessingStats, Transaction

logger = logging.getLogger(__name__)


class PaymentsEngine:
    """
    Feeds transactions in arrival order to a LedgerEngine.
    Rejections are skipped unless the config marks their kind as fatal.
    """

    def __init__(self, config: Optional[EngineConfig] = None, store: Optional[LedgerStore] = None):
        self._config = config or EngineConfig()
        self._store = store if store is not None else InMemoryLedgerStore()
        self._ledger = LedgerEngine(self._store)
        self._stats = ProcessingStats()

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def process_file(self, filepath: str) -> Dict[int, ClientAccount]:
        """Process CSV file and return final account states."""
        logger.info(f"Processing transactions from {filepath}")
        return self.process_transactions(read_transactions(filepath))

    def process_transactions(self, transactions: Iterable[Transaction]) -> Dict[int, ClientAccount]:
        for transaction in transactions:
            self._process_transaction(transaction)

        logger.info(self._stats.summary())
        return self.get_accounts()

    def get_accounts(self) -> Dict[int, ClientAccount]:
        return {account.client_id: account for account in self._store.all_accounts()}

    def _process_transaction(self, transaction: Transaction) -> None:
        try:
            self._ledger.apply(transaction)
        except LedgerError as e:
            self._stats.record_rejection(e.kind)
            if self._config.is_fatal(e):
                logger.error(f"Aborting on {transaction}: {e}")
                raise FatalLedgerError(e) from e
            logger.info(f"Skipping {transaction}: {e}")
            return

        self._stats.record_applied()
