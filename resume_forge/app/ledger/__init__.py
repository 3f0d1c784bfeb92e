"""Credit ledger access.

`LedgerStore` is the only component allowed to change a credit balance.
Every balance mutation is a single conditional or relative UPDATE, so the
database serializes concurrent debits and credits for the same user.
"""

from .store import LedgerStore

__all__ = ["LedgerStore"]
