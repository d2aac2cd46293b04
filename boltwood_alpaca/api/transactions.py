"""
Server transaction ID sequencing for Alpaca responses.
"""

import itertools
import threading


class TransactionSequencer:
    """Issues strictly increasing ServerTransactionID values, starting at 1."""

    def __init__(self):
        self._counter = itertools.count(1)
        self._lock = threading.Lock()

    def next(self) -> int:
        """
        Get next server transaction ID (thread-safe).

        Returns:
            Incremented transaction ID.
        """
        with self._lock:
            return next(self._counter)
