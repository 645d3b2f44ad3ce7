import threading
from collections import Counter
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Dict, Optional, Union


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"

    @property
    def is_standard(self) -> bool:
        return self in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL)


class DisputeStatus(Enum):
    UNRESOLVED = "unresolved"
    CHARGED_BACK = "charged_back"


@dataclass
class StandardTransaction:
    """A deposit or withdrawal. Only dispute_status changes after it is recorded."""

    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Decimal
    dispute_status: Optional[DisputeStatus] = None

    def __repr__(self) -> str:
        return f"StandardTransaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass
class DisputeTransaction:
    """A dispute, resolve or chargeback referencing an earlier deposit."""

    transaction_type: TransactionType
    client_id: int
    transaction_id: int

    def __repr__(self) -> str:
        return f"DisputeTransaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id})"


Transaction = Union[StandardTransaction, DisputeTransaction]


@dataclass
class ClientAccount:
    client_id: int
    available: Decimal = Decimal("0")
    held: Decimal = Decimal("0")
    locked: bool = False

    @property
    def total(self) -> Decimal:
        return self.available + self.held

    def credit(self, amount: Decimal) -> None:
        self.available += amount

    def debit(self, amount: Decimal) -> None:
        self.available -= amount

    def hold(self, amount: Decimal) -> None:
        self.available -= amount
        self.held += amount

    def release_hold(self, amount: Decimal) -> None:
        self.held -= amount
        self.available += amount

    def remove_held(self, amount: Decimal) -> None:
        self.held -= amount

    def lock(self) -> None:
        self.locked = True


class ProcessingStats:
    """Thread-safe counters for tracking processing statistics."""

    def __init__(self):
        self._lock = threading.Lock()
        self.applied = 0
        self._rejections: Counter = Counter()

    def record_applied(self):
        with self._lock:
            self.applied += 1

    def record_rejection(self, kind):
        with self._lock:
            self._rejections[kind] += 1

    @property
    def rejected(self) -> int:
        with self._lock:
            return sum(self._rejections.values())

    def rejections_by_kind(self) -> Dict:
        with self._lock:
            return dict(self._rejections)

    def summary(self) -> str:
        breakdown = ", ".join(
            f"{kind.value}={count}"
            for kind, count in sorted(self.rejections_by_kind().items(), key=lambda item: item[0].value)
        )
        line = f"Applied: {self.applied}, Rejected: {self.rejected}"
        if breakdown:
            line += f" ({breakdown})"
        return line
