"""Transactional scope for the lifecycle services.

A unit of work opens one database transaction, hands a ``Transaction``
handle to the callable it wraps, commits when the callable returns and
rolls back on any exception. Storage gateway calls take the handle as
their first argument, so the transaction in use is always explicit.

On PostgreSQL the outermost transaction runs at REPEATABLE READ: the
candidate set read for reviewer selection stays stable until commit and a
concurrent writer on the same rows loses with a serialization failure
(``django.db.OperationalError``). Retrying is left to the caller. SQLite
serialises writers on the whole database file.
"""

import time

import structlog
from django.conf import settings
from django.db import DEFAULT_DB_ALIAS, DatabaseError, connections, transaction

logger = structlog.get_logger(__name__)

DEFAULT_TIMEOUT = 30.0


class TransactionTimeout(DatabaseError):
    """The unit of work ran past its deadline and was rolled back."""


class Transaction:
    """Handle of an open unit of work."""

    def __init__(self, using: str, timeout: float):
        self._using = using
        self.timeout = timeout
        self.deadline = time.monotonic() + timeout

    @property
    def remaining(self) -> float:
        return self.deadline - time.monotonic()

    def check_deadline(self):
        if self.remaining <= 0:
            raise TransactionTimeout(f'transaction exceeded the {self.timeout:g}s timeout')

    @property
    def using(self) -> str:
        self.check_deadline()
        return self._using


def db_alias(tx: Transaction | None) -> str:
    """Database alias for a gateway call; no handle means a plain connection."""
    if tx is None:
        return DEFAULT_DB_ALIAS
    return tx.using


class UnitOfWork:
    def __init__(self, using: str = DEFAULT_DB_ALIAS, timeout: float | None = None):
        self.using = using
        if timeout is None:
            timeout = getattr(settings, 'REVIEWS_TRANSACTION_TIMEOUT', DEFAULT_TIMEOUT)
        self.timeout = timeout

    def within_transaction(self, fn, tx: Transaction | None = None):
        """
        Run ``fn(tx)`` inside a transaction and return its result.

        When ``tx`` is an already open handle it is reused and no new
        transaction is started.
        """
        if tx is not None:
            return fn(tx)

        connection = connections[self.using]
        outermost = not connection.in_atomic_block
        try:
            with transaction.atomic(using=self.using):
                handle = Transaction(self.using, self.timeout)
                self._configure_session(connection, handle, outermost)
                result = fn(handle)
                handle.check_deadline()
                return result
        except TransactionTimeout:
            logger.warning('transaction_timed_out', timeout=self.timeout)
            raise

    @staticmethod
    def _configure_session(connection, handle: Transaction, outermost: bool):
        if connection.vendor != 'postgresql':
            return
        with connection.cursor() as cursor:
            # Must be the first statement of the transaction.
            if outermost:
                cursor.execute('SET TRANSACTION ISOLATION LEVEL REPEATABLE READ')
            timeout_ms = max(int(handle.remaining * 1000), 1)
            cursor.execute(f'SET LOCAL statement_timeout = {timeout_ms}')
