import logging
from decimal import Decimal
from typing import Dict, Optional

from models import (
    Account,
    EntryState,
    ErrorKind,
    LedgerEntry,
    TransactionError,
    TransactionRecord,
    TransactionType,
)

logger = logging.getLogger(__name__)


class AccountLedger:
    """
    Balances, transaction history and frozen flag for a single client.
    Every mutation goes through apply(); a rejected record leaves the ledger untouched.
    """

    def __init__(self, client_id: int):
        self.client_id = client_id
        self.account = Account()
        self.frozen = False
        self._history: Dict[int, LedgerEntry] = {}

    @property
    def available(self) -> Decimal:
        return self.account.available

    @property
    def held(self) -> Decimal:
        return self.account.held

    @property
    def total(self) -> Decimal:
        return self.account.total

    def get_entry(self, transaction_id: int) -> Optional[LedgerEntry]:
        """Retrieve a stored deposit or withdrawal by ID."""
        return self._history.get(transaction_id)

    def apply(self, record: TransactionRecord) -> Optional[TransactionError]:
        """
        Apply a single record to this account.

        Returns:
            None if the record was applied, otherwise a TransactionError
            describing why it was rejected.
        """
        if self.frozen:
            return self._error(ErrorKind.ACCOUNT_FROZEN, record)

        match record.transaction_type:
            case TransactionType.DEPOSIT:
                error = self._handle_deposit(record)
            case TransactionType.WITHDRAWAL:
                error = self._handle_withdrawal(record)
            case TransactionType.DISPUTE:
                error = self._handle_dispute(record)
            case TransactionType.RESOLVE:
                error = self._handle_resolve(record)
            case TransactionType.CHARGEBACK:
                error = self._handle_chargeback(record)

        if error is None:
            self._check_balances(record)
        return error

    def _handle_deposit(self, record: TransactionRecord) -> Optional[TransactionError]:
        error = self._validate_new_entry(record)
        if error is not None:
            return error

        self._history[record.transaction_id] = LedgerEntry(TransactionType.DEPOSIT, record.amount)
        self.account.credit(record.amount)
        return None

    def _handle_withdrawal(self, record: TransactionRecord) -> Optional[TransactionError]:
        error = self._validate_new_entry(record)
        if error is not None:
            return error

        if record.amount > self.account.available:
            return self._error(ErrorKind.INSUFFICIENT_FUNDS, record)

        self._history[record.transaction_id] = LedgerEntry(TransactionType.WITHDRAWAL, record.amount)
        self.account.debit(record.amount)
        return None

    def _handle_dispute(self, record: TransactionRecord) -> Optional[TransactionError]:
        entry = self._history.get(record.transaction_id)
        if entry is None:
            return self._error(ErrorKind.UNKNOWN_TRANSACTION, record)
        if entry.state != EntryState.NORMAL:
            return self._error(ErrorKind.INVALID_STATE_TRANSITION, record)

        # Disputed withdrawals are held the same way as deposits.
        entry.state = EntryState.DISPUTED
        self.account.hold(entry.amount)
        return None

    def _handle_resolve(self, record: TransactionRecord) -> Optional[TransactionError]:
        entry = self._history.get(record.transaction_id)
        if entry is None:
            return self._error(ErrorKind.UNKNOWN_TRANSACTION, record)
        if entry.state != EntryState.DISPUTED:
            return self._error(ErrorKind.INVALID_STATE_TRANSITION, record)

        entry.state = EntryState.NORMAL
        self.account.release(entry.amount)
        return None

    def _handle_chargeback(self, record: TransactionRecord) -> Optional[TransactionError]:
        entry = self._history.get(record.transaction_id)
        if entry is None:
            return self._error(ErrorKind.UNKNOWN_TRANSACTION, record)
        if entry.state != EntryState.DISPUTED:
            return self._error(ErrorKind.INVALID_STATE_TRANSITION, record)

        entry.state = EntryState.CHARGED_BACK
        self.account.charge_back(entry.amount)
        self.frozen = True
        logger.info(f"Client {self.client_id}: account frozen after chargeback of tx {record.transaction_id}")
        return None

    def _validate_new_entry(self, record: TransactionRecord) -> Optional[TransactionError]:
        """Checks shared by deposits and withdrawals: unused ID and a present, non-zero amount."""
        if record.transaction_id in self._history:
            return self._error(ErrorKind.DUPLICATE_TRANSACTION_ID, record)
        if record.amount is None or record.amount == 0:
            return self._error(ErrorKind.INVALID_AMOUNT, record)
        return None

    def _error(self, kind: ErrorKind, record: TransactionRecord) -> TransactionError:
        return TransactionError(kind=kind, client_id=self.client_id, transaction_id=record.transaction_id)

    def _check_balances(self, record: TransactionRecord) -> None:
        if self.account.held < 0 or self.account.held > self.account.total:
            logger.error(
                f"Client {self.client_id}: balances out of range after tx {record.transaction_id} "
                f"(held={self.account.held}, total={self.account.total})"
            )
