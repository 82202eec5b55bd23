from typing import Dict, Optional

from account_ledger import AccountLedger
from models import TransactionError, TransactionRecord


class LedgerRegistry:
    """
    Owns every client's AccountLedger and routes records to them.
    Accounts are created on first reference and kept for the life of the registry.
    """

    def __init__(self):
        self._accounts: Dict[int, AccountLedger] = {}

    def __len__(self) -> int:
        return len(self._accounts)

    def __contains__(self, client_id: int) -> bool:
        return client_id in self._accounts

    def get_or_create_account(self, client_id: int) -> AccountLedger:
        """Get existing account or create new one."""
        if client_id not in self._accounts:
            self._accounts[client_id] = AccountLedger(client_id)
        return self._accounts[client_id]

    def get_account(self, client_id: int) -> Optional[AccountLedger]:
        return self._accounts.get(client_id)

    def apply(self, record: TransactionRecord) -> Optional[TransactionError]:
        """
        Route a record to its client's account.
        The account is created even if the record is then rejected.
        """
        account = self.get_or_create_account(record.client_id)
        return account.apply(record)

    def get_all_accounts(self) -> Dict[int, AccountLedger]:
        """Return all accounts (for final output)."""
        return dict(self._accounts)
