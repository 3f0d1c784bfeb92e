import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from resume_forge.app.core.exceptions import InvalidInput, StorageUnavailable
from resume_forge.app.models.ledger import CreditLedger, utcnow
from resume_forge.app.models.payment_event import ProcessedPaymentEvent

log = logging.getLogger(__name__)

# Attempts made when two writers race to create the same ledger row.
_MAX_ATTEMPTS = 3


class LedgerStore:
    """Transactional access to per-user credit balances.

    Each public method runs in its own short transaction and never holds a
    transaction open across calls, so no lock outlives a single operation.

    Attributes:
        session_factory (sessionmaker): Factory for database sessions.

    """

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    @contextmanager
    def _session(self, operation: str) -> Iterator[Session]:
        """Run one transaction, translating database failures.

        Args:
            operation (str): Name of the ledger operation, for logging.

        Returns:
            Iterator[Session]: A session whose transaction commits on normal exit.

        Raises:
            IntegrityError: Re-raised unchanged so callers can detect row-creation races.
            StorageUnavailable: For any other SQLAlchemy failure.

        Notes:
            1. Commit on normal exit, roll back on any error.
            2. The session is always closed.

        """
        session = self.session_factory()
        try:
            yield session
            session.commit()
        except IntegrityError:
            session.rollback()
            raise
        except SQLAlchemyError as e:
            session.rollback()
            _msg = f"Ledger {operation} failed: {e!s}"
            log.exception(_msg)
            raise StorageUnavailable(
                "The credit ledger is temporarily unavailable. Please try again."
            ) from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    @staticmethod
    def _check_user_id(user_id: str) -> None:
        if not isinstance(user_id, str) or not user_id.strip():
            raise InvalidInput("A user id is required.")

    @staticmethod
    def _check_amount(amount: int, name: str) -> None:
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise InvalidInput(f"{name} must be a positive integer.")

    @staticmethod
    def _increment(session: Session, user_id: str, amount: int) -> None:
        """Add `amount` to a ledger, creating the row when it does not exist yet.

        Args:
            session (Session): The session of the enclosing transaction.
            user_id (str): The ledger owner.
            amount (int): Positive number of credits to add.

        Returns:
            None

        Raises:
            IntegrityError: If another transaction created the row concurrently.

        Notes:
            1. Issue a relative UPDATE so concurrent writers cannot lose increments.
            2. If no row matched, insert a new row holding `amount` and flush it.

        """
        result = session.execute(
            update(CreditLedger)
            .where(CreditLedger.user_id == user_id)
            .values(balance=CreditLedger.balance + amount, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 1:
            return
        session.add(CreditLedger(user_id=user_id, balance=amount))
        session.flush()

    def read(self, user_id: str) -> int:
        """Return the current balance of a user, creating an empty ledger if needed.

        Args:
            user_id (str): The ledger owner.

        Returns:
            int: The balance. 0 for a user that has never been seen.

        Raises:
            InvalidInput: If the user id is empty.
            StorageUnavailable: If the database cannot be reached.

        Notes:
            1. Select the balance for the user.
            2. If there is no row, insert one with a zero balance.
            3. If a concurrent request inserted the row first, retry the read.

        """
        self._check_user_id(user_id)
        for attempt in range(1, _MAX_ATTEMPTS + 1):
            try:
                with self._session("read") as session:
                    balance = session.execute(
                        select(CreditLedger.balance).where(CreditLedger.user_id == user_id)
                    ).scalar_one_or_none()
                    if balance is None:
                        _msg = f"Creating empty ledger for user {user_id}"
                        log.debug(_msg)
                        session.add(CreditLedger(user_id=user_id))
                        session.flush()
                        balance = 0
                return balance
            except IntegrityError:
                _msg = f"Ledger for user {user_id} created concurrently, retrying read (attempt {attempt})"
                log.debug(_msg)
        raise StorageUnavailable("Could not read the credit ledger. Please try again.")

    def try_debit(self, user_id: str, cost: int) -> bool:
        """Atomically take `cost` credits from a user if the balance covers it.

        Args:
            user_id (str): The ledger owner.
            cost (int): Positive number of credits to take.

        Returns:
            bool: True if the balance was decremented, False if it was too low
                (or no ledger exists), in which case nothing was written.

        Raises:
            InvalidInput: If the user id is empty or the cost is not positive.
            StorageUnavailable: If the database cannot be reached.

        Notes:
            1. A single UPDATE guarded by `balance >= cost` performs the check and the
               decrement together, so two debits against a balance of exactly `cost`
               cannot both succeed.

        """
        self._check_user_id(user_id)
        self._check_amount(cost, "Cost")
        with self._session("try_debit") as session:
            result = session.execute(
                update(CreditLedger)
                .where(CreditLedger.user_id == user_id, CreditLedger.balance >= cost)
                .values(balance=CreditLedger.balance - cost, updated_at=utcnow())
                .execution_options(synchronize_session=False)
            )
            debited = result.rowcount == 1

        if debited:
            _msg = f"Debited {cost} credit(s) from user {user_id}"
            log.info(_msg)
        else:
            _msg = f"Debit of {cost} credit(s) refused for user {user_id}: insufficient balance"
            log.info(_msg)
        return debited

    def credit(self, user_id: str, amount: int) -> None:
        """Atomically add credits to a user's balance.

        Args:
            user_id (str): The ledger owner.
            amount (int): Positive number of credits to add.

        Returns:
            None

        Raises:
            InvalidInput: If the user id is empty or the amount is not positive.
            StorageUnavailable: If the database cannot be reached.

        """
        self._check_user_id(user_id)
        self._check_amount(amount, "Amount")
        for attempt in range(1, _MAX_ATTEMPTS + 1):
            try:
                with self._session("credit") as session:
                    self._increment(session, user_id, amount)
            except IntegrityError:
                _msg = f"Ledger for user {user_id} created concurrently, retrying credit (attempt {attempt})"
                log.debug(_msg)
                continue
            _msg = f"Credited {amount} credit(s) to user {user_id}"
            log.info(_msg)
            return
        raise StorageUnavailable("Could not credit the ledger. Please try again.")

    def credit_for_event(self, user_id: str, amount: int, event_id: str) -> bool:
        """Credit a user exactly once for a given payment event.

        Args:
            user_id (str): The ledger owner.
            amount (int): Positive number of credits to add.
            event_id (str): Provider-assigned event identifier used as idempotency key.

        Returns:
            bool: True if the credit was applied now, False if this event id had
                already been applied (nothing was written).

        Raises:
            InvalidInput: If an argument is empty or the amount is not positive.
            StorageUnavailable: If the database cannot be reached.

        Notes:
            1. Insert the processed-event record first; a primary-key conflict means
               the event was already applied.
            2. Apply the increment in the same transaction, so the record and the
               credit become durable together or not at all.

        """
        self._check_user_id(user_id)
        self._check_amount(amount, "Amount")
        if not isinstance(event_id, str) or not event_id.strip():
            raise InvalidInput("An event id is required.")

        for attempt in range(1, _MAX_ATTEMPTS + 1):
            try:
                with self._session("credit_for_event") as session:
                    session.add(
                        ProcessedPaymentEvent(
                            event_id=event_id,
                            user_id=user_id,
                            credits_added=amount,
                        )
                    )
                    try:
                        session.flush()
                    except IntegrityError:
                        session.rollback()
                        _msg = f"Payment event {event_id} already applied, skipping"
                        log.info(_msg)
                        return False
                    self._increment(session, user_id, amount)
            except IntegrityError:
                _msg = f"Ledger for user {user_id} created concurrently, retrying event {event_id} (attempt {attempt})"
                log.debug(_msg)
                continue
            _msg = f"Credited {amount} credit(s) to user {user_id} for event {event_id}"
            log.info(_msg)
            return True
        raise StorageUnavailable("Could not apply the payment event. Please try again.")
