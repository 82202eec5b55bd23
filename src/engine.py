import csv
import logging
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterable, Optional

from ledger_registry import LedgerRegistry
from models import ProcessingStats, TransactionRecord, TransactionType

logger = logging.getLogger(__name__)


class LedgerEngine:
    """
    Reads transaction records from CSV and applies them, in order, to a LedgerRegistry.
    Malformed rows and rejected records are logged and counted; neither stops the run.
    """

    def __init__(self, registry: Optional[LedgerRegistry] = None):
        self._registry = registry if registry is not None else LedgerRegistry()
        self._stats = ProcessingStats()

    @property
    def registry(self) -> LedgerRegistry:
        return self._registry

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def process_file(self, filepath: str) -> LedgerRegistry:
        """
        Process CSV file and return the registry holding final account states.
        Errors opening or reading the file propagate to the caller.
        """
        with open(filepath, "r", newline="", encoding="utf-8-sig") as f:
            self.process_rows(csv.DictReader(f))

        logger.info(
            f"Applied: {self._stats.applied}, "
            f"Rejected: {self._stats.failed}, "
            f"Skipped: {self._stats.skipped}"
        )
        return self._registry

    def process_rows(self, rows: Iterable[Dict[str, str]]) -> None:
        for row in rows:
            record = self._parse_row(row)
            if record is None:
                self._stats.record_skipped()
                continue

            error = self._registry.apply(record)
            if error is None:
                self._stats.record_success()
            else:
                self._stats.record_failure(error)
                logger.warning(f"Rejected {record}: {error}")

    def _parse_row(self, row: Dict[str, str]) -> Optional[TransactionRecord]:
        """Parse CSV row into TransactionRecord, or None if the row is malformed."""
        try:
            # Short rows leave missing columns as None; long rows put extras under a None key.
            normalized = {k.strip(): (v or "").strip() for k, v in row.items() if isinstance(k, str)}

            transaction_type = TransactionType(normalized["type"])
            client_id = self._parse_id(normalized["client"])
            transaction_id = self._parse_id(normalized["tx"])

            amount = None
            amount_str = normalized.get("amount", "")
            if amount_str:
                amount = Decimal(amount_str)

            return TransactionRecord(
                transaction_type=transaction_type,
                client_id=client_id,
                transaction_id=transaction_id,
                amount=amount,
            )
        except (KeyError, ValueError, InvalidOperation) as e:
            logger.warning(f"Failed to parse row {row}: {e!r}")
            return None

    @staticmethod
    def _parse_id(value: str) -> int:
        # Plain ASCII digits only: no sign, underscores or other scripts' digits.
        if not (value.isascii() and value.isdecimal()):
            raise ValueError(f"invalid id {value!r}")
        return int(value)
