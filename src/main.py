import csv
import sys
import logging
from decimal import Decimal, ROUND_HALF_EVEN, localcontext
from typing import Dict, List, Optional

from account_ledger import AccountLedger
from engine import LedgerEngine

logger = logging.getLogger(__name__)

REPORT_PRECISION = Decimal("0.0001")
REPORT_HEADER = "client,available,held,total,locked"


def format_decimal(value: Decimal) -> str:
    """Format decimal with exactly 4 decimal places."""
    with localcontext() as ctx:
        # Room for every integer digit plus the four fractional ones.
        ctx.prec = max(28, value.adjusted() + 6)
        return f"{value.quantize(REPORT_PRECISION, rounding=ROUND_HALF_EVEN):f}"


def format_report(accounts: Dict[int, AccountLedger]) -> List[str]:
    lines = [REPORT_HEADER]
    for client_id in sorted(accounts.keys()):
        account = accounts[client_id]
        lines.append(
            f"{client_id},"
            f"{format_decimal(account.available)},"
            f"{format_decimal(account.held)},"
            f"{format_decimal(account.total)},"
            f"{str(account.frozen).lower()}"
        )
    return lines


def main(argv: Optional[List[str]] = None) -> int:
    argv = sys.argv if argv is None else argv
    if len(argv) < 2:
        print("Usage: python main.py <input.csv>", file=sys.stderr)
        return 1

    filepath = argv[1]
    engine = LedgerEngine()
    try:
        registry = engine.process_file(filepath)
    except (OSError, UnicodeDecodeError, csv.Error) as e:
        logger.error(f"Cannot read {filepath}: {e}")
        return 1

    for line in format_report(registry.get_all_accounts()):
        print(line)
    return 0


def run() -> None:
    logging.basicConfig(
        level=logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )
    sys.exit(main())


if __name__ == "__main__":
    run()
