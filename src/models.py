from dataclasses import dataclass, field
from decimal import Context, Decimal, MAX_PREC
from enum import Enum
from typing import Dict, Optional

MAX_CLIENT_ID = 0xFFFF
MAX_TRANSACTION_ID = 0xFFFFFFFF
MAX_AMOUNT = Decimal("1E64")

# Balance arithmetic is exact; amounts are bounded by MAX_AMOUNT.
BALANCE_CONTEXT = Context(prec=MAX_PREC)


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"


class EntryState(Enum):
    NORMAL = "normal"
    DISPUTED = "disputed"
    CHARGED_BACK = "charged_back"


class ErrorKind(Enum):
    ACCOUNT_FROZEN = "account_frozen"
    DUPLICATE_TRANSACTION_ID = "duplicate_transaction_id"
    INVALID_AMOUNT = "invalid_amount"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    UNKNOWN_TRANSACTION = "unknown_transaction"
    INVALID_STATE_TRANSITION = "invalid_state_transition"


@dataclass(frozen=True)
class TransactionRecord:
    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Decimal] = None

    def __post_init__(self):
        if not 0 <= self.client_id <= MAX_CLIENT_ID:
            raise ValueError(f"client id {self.client_id} out of range")
        if not 0 <= self.transaction_id <= MAX_TRANSACTION_ID:
            raise ValueError(f"transaction id {self.transaction_id} out of range")
        if self.amount is not None:
            if not self.amount.is_finite():
                raise ValueError(f"amount {self.amount} is not a finite number")
            if self.amount < 0:
                raise ValueError(f"amount {self.amount} is negative")
            if self.amount >= MAX_AMOUNT:
                raise ValueError(f"amount {self.amount} exceeds {MAX_AMOUNT}")

    def __repr__(self) -> str:
        return f"TransactionRecord({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass
class LedgerEntry:
    """A deposit or withdrawal kept in account history for later disputes."""

    transaction_type: TransactionType
    amount: Decimal
    state: EntryState = EntryState.NORMAL


@dataclass(frozen=True)
class TransactionError:
    """Why a record was rejected. Returned by apply(), never raised."""

    kind: ErrorKind
    client_id: int
    transaction_id: int

    def __str__(self) -> str:
        return f"{self.kind.value} (client={self.client_id}, tx={self.transaction_id})"


@dataclass
class Account:
    total: Decimal = Decimal("0")
    held: Decimal = Decimal("0")

    @property
    def available(self) -> Decimal:
        return BALANCE_CONTEXT.subtract(self.total, self.held)

    def credit(self, amount: Decimal) -> None:
        self.total = BALANCE_CONTEXT.add(self.total, amount)

    def debit(self, amount: Decimal) -> None:
        self.total = BALANCE_CONTEXT.subtract(self.total, amount)

    def hold(self, amount: Decimal) -> None:
        self.held = BALANCE_CONTEXT.add(self.held, amount)

    def release(self, amount: Decimal) -> None:
        self.held = BALANCE_CONTEXT.subtract(self.held, amount)

    def charge_back(self, amount: Decimal) -> None:
        self.release(amount)
        self.debit(amount)


@dataclass
class ProcessingStats:
    """Counters for one ingestion run."""

    applied: int = 0
    failed: int = 0
    skipped: int = 0
    failures_by_kind: Dict[ErrorKind, int] = field(default_factory=dict)

    def record_success(self) -> None:
        self.applied += 1

    def record_failure(self, error: TransactionError) -> None:
        self.failed += 1
        self.failures_by_kind[error.kind] = self.failures_by_kind.get(error.kind, 0) + 1

    def record_skipped(self) -> None:
        self.skipped += 1
