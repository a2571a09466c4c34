"""
Exceptions raised by the trip split ledger
"""
from __future__ import annotations
from typing import Optional

from models import SplitPolicy


class SplitLedgerError(Exception):
    """Base class for ledger errors"""


class ValidationError(SplitLedgerError, ValueError):
    """
    User-correctable inconsistency in a split (shares do not add up).
    Carries the numbers so a form can show them inline.
    """

    def __init__(
        self,
        message: str,
        policy: Optional[SplitPolicy] = None,
        expected: Optional[float] = None,
        actual: Optional[float] = None,
    ):
        super().__init__(message)
        self.message = message
        self.policy = policy
        self.expected = expected
        self.actual = actual

    def __str__(self) -> str:
        return self.message


class PersistenceError(SplitLedgerError):
    """The store could not read or write a key"""

    def __init__(self, key: str, message: str):
        super().__init__(f"{key}: {message}")
        self.key = key


class TransactionError(SplitLedgerError):
    """Unknown transaction id or a status change the ledger does not allow"""
